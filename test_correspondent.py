"""
Tests for the war correspondent, with the OpenAI client stubbed out.
"""

from types import SimpleNamespace

import pytest

from agents.correspondent import NO_REPORT, SERVICE_DOWN, NarrativeConfig, WarCorrespondent
from engine.map import iter_tiles, set_control
from engine.turn import NarrativeRequest
from engine.units import Faction, UnitType


class StubCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def stub_client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


@pytest.fixture
def briefing(make_grid, make_unit):
    tiles = make_grid()  # 48 tiles
    cells = [t.position for t in iter_tiles(tiles)]
    tiles = set_control(tiles, cells[:24], Faction.ENTENTE)
    tiles = set_control(tiles, cells[24:36], Faction.CENTRAL)
    return NarrativeRequest(
        turn=4,
        faction=Faction.CENTRAL,
        recent_events=("Strategic point captured by Triple Entente!", "--- Turn 4: Triple Entente (+35 PTS) ---"),
        units=(make_unit(UnitType.TANK, Faction.ENTENTE, 1, 1),),
        tiles=tiles,
    )


def test_report_is_returned(briefing):
    completions = StubCompletions(content="  Mud and glory at Ypres.  ")
    correspondent = WarCorrespondent(NarrativeConfig(model="gpt-4o-mini"), client=stub_client(completions))

    assert correspondent.write_report(briefing) == "Mud and glory at Ypres."
    assert len(completions.calls) == 1
    call = completions.calls[0]
    assert call["model"] == "gpt-4o-mini"
    assert call["messages"][0]["role"] == "system"
    assert "70 words" in call["messages"][0]["content"]


def test_prompt_describes_the_front(briefing):
    correspondent = WarCorrespondent(client=stub_client(StubCompletions(content="ok")))
    prompt = correspondent.build_prompt(briefing)

    assert "Central Powers" in prompt
    assert "Turn: 4" in prompt
    assert "Entente control: 50%" in prompt
    assert "Central Powers control: 25%" in prompt
    assert "Strategic point captured by Triple Entente!" in prompt


@pytest.mark.parametrize("content", ["", "   ", None])
def test_empty_reply_falls_back(briefing, content):
    correspondent = WarCorrespondent(client=stub_client(StubCompletions(content=content)))
    assert correspondent.write_report(briefing) == NO_REPORT


def test_service_failure_falls_back(briefing):
    completions = StubCompletions(error=ConnectionError("no route to host"))
    correspondent = WarCorrespondent(client=stub_client(completions))

    assert correspondent.write_report(briefing) == SERVICE_DOWN
    assert len(completions.calls) == 1


def test_model_from_environment(monkeypatch):
    monkeypatch.setenv("NARRATIVE_MODEL", "gpt-4.1")
    assert NarrativeConfig().model == "gpt-4.1"


def test_client_makes_a_single_attempt(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    correspondent = WarCorrespondent(NarrativeConfig(timeout=5.0))
    assert correspondent.client.max_retries == 0
    assert correspondent.client.timeout == 5.0
