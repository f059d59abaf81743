"""
Turn sequencing and economy.

The two factions alternate strictly. A full turn is one Entente half-turn
followed by one Central Powers half-turn; the turn counter advances when
play returns to the Entente. The faction about to act collects income from
the cities and strategic points it controls.
"""

import logging
from dataclasses import dataclass, replace

from .map import Grid, TerrainType, count_controlled
from .scenario import BattleConfig
from .state import GameState
from .units import Faction, Unit

logger = logging.getLogger(__name__)

# Faction that opens every turn cycle
FIRST_FACTION = Faction.ENTENTE


@dataclass(frozen=True)
class NarrativeRequest:
    """Snapshot handed to the war correspondent at the end of a half-turn."""
    turn: int
    faction: Faction
    recent_events: tuple[str, ...]
    units: tuple[Unit, ...]
    tiles: Grid


def compute_income(tiles: Grid, faction: Faction, config: BattleConfig) -> int:
    """Base income plus bonuses for controlled cities and strategic points."""
    cities = count_controlled(tiles, faction, TerrainType.CITY)
    strategic = count_controlled(tiles, faction, TerrainType.STRATEGIC_POINT)
    return (
        config.base_income
        + cities * config.city_income
        + strategic * config.strategic_income
    )


def next_faction(faction: Faction) -> Faction:
    return faction.opponent


def narrative_request(state: GameState, config: BattleConfig) -> NarrativeRequest:
    """Build the correspondent's briefing from the pre-switch state."""
    return NarrativeRequest(
        turn=state.turn,
        faction=next_faction(state.current_faction),
        recent_events=state.logs[:config.recent_events],
        units=state.units,
        tiles=state.tiles,
    )


def end_turn(state: GameState, config: BattleConfig) -> GameState:
    """
    Hand play to the other faction.

    Every unit on both sides has its action flags cleared, so the faction
    about to move always starts with fresh units.
    """
    incoming = next_faction(state.current_faction)
    new_cycle = incoming == FIRST_FACTION
    income = compute_income(state.tiles, incoming, config)

    new_state = replace(
        state,
        turn=state.turn + 1 if new_cycle else state.turn,
        current_faction=incoming,
        units=tuple(u.refreshed() for u in state.units),
    )
    new_state = new_state.with_budget(incoming, state.budget[incoming] + income)
    new_state = new_state.cleared_selection()
    new_state = new_state.with_log(
        f"--- Turn {new_state.turn}: {incoming.display_name} (+{income} PTS) ---"
    )

    logger.info(
        f"Turn {new_state.turn}: {incoming.display_name} to act, "
        f"income {income}, budget {new_state.budget[incoming]}"
    )
    return new_state
