"""
War correspondent using OpenAI (gpt-4o).

Writes a short dispatch at the end of every half-turn. The service is a
black box: any failure yields a fixed fallback line instead of an error.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Optional

from openai import OpenAI

from engine.territory import control_share
from engine.turn import NarrativeRequest
from engine.units import Faction

logger = logging.getLogger(__name__)

NO_REPORT = "The lines of communication have been cut."
SERVICE_DOWN = "The front remains in absolute silence."


@dataclass
class NarrativeConfig:
    """Configuration for the war correspondent."""
    model: str = field(default_factory=lambda: os.environ.get("NARRATIVE_MODEL", "gpt-4o"))
    temperature: float = 0.9
    max_tokens: int = 200
    word_limit: int = 70
    year: int = 1914
    timeout: float = 30.0
    max_retries: int = 0


class WarCorrespondent:
    """Front-line reporter for the battle."""

    def __init__(self, config: Optional[NarrativeConfig] = None, client=None):
        self.config = config or NarrativeConfig()
        # Uses OPENAI_API_KEY env var
        self.client = client or OpenAI(max_retries=self.config.max_retries, timeout=self.config.timeout)

    @property
    def system_prompt(self) -> str:
        return f"""You are a war correspondent on the Western Front in {self.config.year}.

You write short, atmospheric dispatches ("war reports") of at most {self.config.word_limit} words.
Style: martial and dramatic. Talk about ground gained or lost, the morale of the troops
and the prospect of victory or looming defeat. Reply with the dispatch text only."""

    def build_prompt(self, request: NarrativeRequest) -> str:
        share = control_share(request.tiles)
        events = ", ".join(request.recent_events) or "none"
        return (
            f"Write the war report for the faction: {request.faction.display_name}.\n"
            f"Turn: {request.turn}\n"
            f"State of the conquest:\n"
            f"- Entente control: {share[Faction.ENTENTE]}%\n"
            f"- Central Powers control: {share[Faction.CENTRAL]}%\n"
            f"- Units in the field: {len(request.units)}\n"
            f"- Recent events: {events}"
        )

    def write_report(self, request: NarrativeRequest) -> str:
        """Request one dispatch; no retries."""
        try:
            response = self.client.chat.completions.create(
                model=self.config.model,
                messages=[
                    {"role": "system", "content": self.system_prompt},
                    {"role": "user", "content": self.build_prompt(request)},
                ],
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
            )
            content = response.choices[0].message.content
        except Exception as e:
            logger.error(f"War correspondent error: {e}")
            return SERVICE_DOWN

        report = (content or "").strip()
        return report or NO_REPORT
