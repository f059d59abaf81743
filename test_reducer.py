"""
Tests for the action dispatcher.
"""

import random
from dataclasses import replace

import pytest

from engine import (
    ApplyNarrative, ClickTile, EndTurn, Recruit, ReturnToCampaign,
    Rules, ShowScreen, StartBattle, apply,
)
from engine.map import TerrainType, get_tile, set_control
from engine.state import Screen, check_invariants
from engine.units import Faction, UnitType


def test_initial_state(rules):
    state = rules.initial_state()
    assert state.screen == Screen.MENU
    assert dict(state.budget) == {Faction.ENTENTE: 60, Faction.CENTRAL: 100}
    assert state.logs == ("Operations started.",)
    assert state.news_report == "Awaiting orders from High Command."
    assert [t.id for t in state.territories] == ["flanders", "somme", "verdun", "tannenberg"]


def test_dice_and_map_use_separate_streams(catalog, config):
    rules = Rules(catalog, config, seed=3)
    assert rules.map_rng.getstate() == random.Random(3).getstate()
    assert rules.combat.rng.getstate() == random.Random(4).getstate()

    unseeded = Rules(catalog, config)
    assert unseeded.combat.rng.getstate() != unseeded.map_rng.getstate()


def test_screen_navigation(rules):
    state = rules.initial_state()
    state = apply(state, ShowScreen(Screen.INTRO), rules)
    assert state.screen == Screen.INTRO
    state = apply(state, ShowScreen(Screen.CAMPAIGN), rules)
    assert state.screen == Screen.CAMPAIGN

    assert apply(state, ShowScreen(Screen.PLAYING), rules) is state


def test_start_battle(rules):
    state = apply(rules.initial_state(), StartBattle("somme"), rules)

    assert state.screen == Screen.PLAYING
    assert state.active_territory.name == "Somme Valley"
    assert (state.turn, state.current_faction) == (1, Faction.ENTENTE)
    assert dict(state.budget) == {Faction.ENTENTE: 80, Faction.CENTRAL: 100}
    assert {u.id: u.position for u in state.units} == {"e1": (1, 1), "c1": (20, 13)}
    assert state.logs == ("Battle started at Somme Valley.",)
    assert state.victory is None
    assert check_invariants(state) == []


def test_start_unknown_territory(rules):
    state = rules.initial_state()
    assert apply(state, StartBattle("gallipoli"), rules) is state


def test_battle_actions_ignored_outside_battle(rules):
    state = rules.initial_state()
    assert apply(state, EndTurn(), rules) is state
    assert apply(state, ClickTile(1, 1), rules) is state


def test_select_own_unit_only(rules, make_grid, make_unit, make_state):
    own = make_unit(UnitType.INFANTRY, Faction.ENTENTE, 2, 2, unit_id="e1")
    enemy = make_unit(UnitType.INFANTRY, Faction.CENTRAL, 5, 2, unit_id="c1")
    state = make_state(make_grid(), [own, enemy])

    selected = apply(state, ClickTile(2, 2), rules)
    assert selected.selected_unit_id == "e1"

    enemy_click = apply(state, ClickTile(5, 2), rules)
    assert enemy_click.selected_unit_id is None


def test_move_captures_tile(rules, make_grid, make_unit, make_state):
    unit = make_unit(UnitType.INFANTRY, Faction.ENTENTE, 2, 2, unit_id="e1")
    state = make_state(make_grid(), [unit])

    state = apply(state, ClickTile(2, 2), rules)
    state = apply(state, ClickTile(4, 2), rules)

    moved = state.get_unit("e1")
    assert moved.position == (4, 2)
    assert moved.has_moved and not moved.has_attacked
    assert get_tile(state.tiles, 4, 2).control == Faction.ENTENTE
    assert state.selected_unit_id is None

    # A moved unit cannot move again this turn
    state = apply(state, ClickTile(4, 2), rules)
    assert apply(state, ClickTile(5, 2), rules).get_unit("e1").position == (4, 2)


def test_unreachable_click_clears_selection(rules, make_grid, make_unit, make_state):
    unit = make_unit(UnitType.INFANTRY, Faction.ENTENTE, 2, 2, unit_id="e1")
    state = apply(make_state(make_grid(), [unit]), ClickTile(2, 2), rules)

    state = apply(state, ClickTile(7, 5), rules)
    assert state.get_unit("e1").position == (2, 2)
    assert state.selected_unit_id is None


def test_strategic_point_capture(rules, make_grid, make_unit, make_state):
    tiles = make_grid(overrides={(3, 2): TerrainType.STRATEGIC_POINT})
    unit = make_unit(UnitType.INFANTRY, Faction.ENTENTE, 2, 2, unit_id="e1")
    state = apply(make_state(tiles, [unit]), ClickTile(2, 2), rules)

    state = apply(state, ClickTile(3, 2), rules)
    owned = [t for line in state.tiles for t in line if t.control == Faction.ENTENTE]
    assert len(owned) == 7
    assert state.logs[0] == "Strategic point captured by Triple Entente!"


def test_attack_and_victory(rules, make_grid, make_unit, make_state):
    attacker = make_unit(UnitType.STURMTRUPPEN, Faction.ENTENTE, 2, 2, unit_id="e1")
    defender = make_unit(UnitType.INFANTRY, Faction.CENTRAL, 3, 2, unit_id="c1", hp=1)
    state = apply(make_state(make_grid(), [attacker, defender]), ClickTile(2, 2), rules)

    state = apply(state, ClickTile(3, 2), rules)

    assert state.get_unit("c1") is None
    assert state.victory == Faction.ENTENTE
    assert state.logs[0] == "Victory for the Triple Entente."
    assert state.logs[1] == "Infantry of the Central Powers destroyed."
    assert state.logs[2].startswith("Triple Entente attacked.")
    assert state.selected_unit_id is None

    # Only returning to the campaign is possible now
    assert apply(state, EndTurn(), rules) is state
    assert apply(state, ClickTile(2, 2), rules) is state


def test_attack_out_of_range(rules, make_grid, make_unit, make_state):
    attacker = make_unit(UnitType.INFANTRY, Faction.ENTENTE, 2, 2, unit_id="e1", has_moved=True)
    defender = make_unit(UnitType.INFANTRY, Faction.CENTRAL, 6, 4, unit_id="c1")
    state = apply(make_state(make_grid(), [attacker, defender]), ClickTile(2, 2), rules)

    state = apply(state, ClickTile(6, 4), rules)
    assert state.get_unit("c1").hp == 12
    assert not state.get_unit("e1").has_attacked


def test_attack_after_moving(rules, make_grid, make_unit, make_state):
    attacker = make_unit(UnitType.TANK, Faction.ENTENTE, 2, 2, unit_id="e1")
    defender = make_unit(UnitType.INFANTRY, Faction.CENTRAL, 5, 2, unit_id="c1")
    state = make_state(make_grid(), [attacker, defender])

    state = apply(state, ClickTile(2, 2), rules)
    state = apply(state, ClickTile(4, 2), rules)
    state = apply(state, ClickTile(4, 2), rules)
    state = apply(state, ClickTile(5, 2), rules)

    assert state.get_unit("c1").hp < 12
    assert state.get_unit("e1").has_attacked
    assert state.victory is None


def test_recruit_at_headquarters(rules, make_grid, make_state):
    tiles = make_grid(overrides={(0, 0): TerrainType.HQ})
    state = make_state(tiles)

    state = apply(state, ClickTile(0, 0), rules)
    assert state.selected_tile == (0, 0)

    state = apply(state, Recruit(UnitType.INFANTRY), rules)
    recruit = state.unit_at(1, 0)
    assert recruit.faction == Faction.ENTENTE
    assert recruit.has_moved and recruit.has_attacked
    assert state.budget[Faction.ENTENTE] == 80 - 15
    assert state.selected_tile is None
    assert state.logs[0] == "Triple Entente recruited infantry."


def test_recruit_rejected(rules, make_grid, make_unit, make_state):
    tiles = make_grid(overrides={(0, 0): TerrainType.HQ})
    state = make_state(tiles)

    # Nothing selected
    assert apply(state, Recruit(UnitType.INFANTRY), rules) is state

    selected = apply(state, ClickTile(0, 0), rules)
    broke = selected.with_budget(Faction.ENTENTE, 10)
    assert apply(broke, Recruit(UnitType.INFANTRY), rules) is broke

    # Every neighbor of the headquarters is occupied
    blockers = [
        make_unit(UnitType.INFANTRY, Faction.ENTENTE, col, row)
        for col, row in [(1, 0), (0, 1), (1, 1)]
    ]
    crowded = replace(selected, units=tuple(blockers))
    assert apply(crowded, Recruit(UnitType.INFANTRY), rules) is crowded


def test_enemy_headquarters_not_selectable(rules, make_grid, make_state):
    tiles = make_grid(overrides={(7, 5): TerrainType.HQ})
    state = make_state(tiles)
    assert get_tile(state.tiles, 7, 5).control == Faction.CENTRAL

    state = apply(state, ClickTile(7, 5), rules)
    assert state.selected_tile is None


def test_end_turn(rules, make_grid, make_state):
    state = make_state(make_grid())
    new_state = apply(state, EndTurn(), rules)
    assert new_state.current_faction == Faction.CENTRAL
    assert new_state.budget[Faction.CENTRAL] == 120


def test_total_conquest(catalog, config, make_grid, make_unit, make_state):
    rules = Rules(catalog, replace(config, total_conquest_victory=True), seed=1)
    tiles = set_control(make_grid(width=2, height=1), [(0, 0)], Faction.ENTENTE)
    unit = make_unit(UnitType.INFANTRY, Faction.ENTENTE, 0, 0, unit_id="e1")
    state = apply(make_state(tiles, [unit]), ClickTile(0, 0), rules)

    state = apply(state, ClickTile(1, 0), rules)
    assert state.victory == Faction.ENTENTE


def test_return_to_campaign_marks_conquest(rules, catalog, make_grid, make_state):
    flanders = catalog.get_territory("flanders")
    state = make_state(
        make_grid(),
        victory=Faction.ENTENTE,
        active_territory=flanders,
        territories=tuple(catalog.territories),
    )

    state = apply(state, ReturnToCampaign(), rules)
    assert state.screen == Screen.CAMPAIGN
    assert state.units == ()
    assert state.victory is None
    assert {t.id: t.conquered for t in state.territories} == {
        "flanders": True, "somme": False, "verdun": False, "tannenberg": False,
    }


def test_lost_battle_conquers_nothing(rules, catalog, make_grid, make_state):
    state = make_state(
        make_grid(),
        victory=Faction.CENTRAL,
        active_territory=catalog.get_territory("verdun"),
        territories=tuple(catalog.territories),
    )
    state = apply(state, ReturnToCampaign(), rules)
    assert not any(t.conquered for t in state.territories)


def test_apply_narrative(rules):
    state = apply(rules.initial_state(), ApplyNarrative("Heavy shelling at dawn."), rules)
    assert state.news_report == "Heavy shelling at dawn."


def test_unknown_action(rules):
    with pytest.raises(TypeError):
        apply(rules.initial_state(), "advance", rules)


def test_invariants_hold_through_a_battle(rules):
    state = apply(rules.initial_state(), StartBattle("flanders"), rules)
    for _ in range(6):
        for unit in state.units:
            if unit.faction != state.current_faction:
                continue
            state = apply(state, ClickTile(*unit.position), rules)
            moves = [
                (col, row) for col in range(state.width) for row in range(state.height)
                if state.unit_at(col, row) is None
            ]
            state = apply(state, ClickTile(*moves[len(moves) // 2]), rules)
        state = apply(state, EndTurn(), rules)
        assert check_invariants(state) == []
    assert state.turn == 4
