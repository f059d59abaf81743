"""
Game reducer.

apply(state, action) validates an action against the current snapshot and
returns the next snapshot. Illegal actions (unreachable tiles, targets out
of range, recruiting without funds or space, anything after victory) return
the same state object unchanged and never raise.
"""

import logging
import random
from dataclasses import replace
from typing import Optional

from .actions import (
    Action, ApplyNarrative, ClickTile, EndTurn, Recruit,
    ReturnToCampaign, ShowScreen, StartBattle,
)
from .catalog import Catalog, Territory
from .combat import CombatResolver
from .hexgrid import neighbors
from .map import TerrainType, build_tiles, generate_terrain
from .movement import attackable_tiles, reachable_tiles
from .scenario import BattleConfig
from .state import GameState, Screen, frozen_budget
from .territory import conquest_victor, extinction_victor, occupy
from .turn import end_turn
from .units import create_unit

logger = logging.getLogger(__name__)

OPENING_LOG = "Operations started."
OPENING_NEWS = "Awaiting orders from High Command."

# Screens reachable through plain navigation; the battlefield needs StartBattle
NAVIGABLE_SCREENS = (Screen.MENU, Screen.INTRO, Screen.CAMPAIGN)


class Rules:
    """Everything the reducer needs besides the state: tables, config, dice."""

    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        config: Optional[BattleConfig] = None,
        seed: Optional[int] = None,
    ):
        self.catalog = catalog or Catalog()
        self.config = config or BattleConfig()
        self.map_rng = random.Random(seed)
        # Dice and map draws use separate streams
        self.combat = CombatResolver(self.catalog, rng_seed=None if seed is None else seed + 1)

    @property
    def human_faction(self):
        return self.config.opponent_faction.opponent

    def initial_state(self) -> GameState:
        """Title-screen state before any battle."""
        terrain = generate_terrain(self.config.width, self.config.height, self.map_rng)
        return GameState(
            tiles=build_tiles(terrain),
            logs=(OPENING_LOG,),
            news_report=OPENING_NEWS,
            screen=Screen.MENU,
            budget=frozen_budget(self.config.menu_budget),
            territories=tuple(self.catalog.territories),
        )

    def new_battle(self, state: GameState, territory: Territory) -> GameState:
        """Fresh battlefield in a campaign territory."""
        terrain = generate_terrain(self.config.width, self.config.height, self.map_rng)
        units = tuple(
            create_unit(
                self.catalog.unit_stats(start.unit_type),
                start.faction, start.col, start.row, unit_id=start.id,
            )
            for start in self.config.starting_units
        )
        logger.info(f"Battle started at {territory.name}")
        return replace(
            state,
            screen=Screen.PLAYING,
            active_territory=territory,
            turn=1,
            current_faction=self.config.opponent_faction.opponent,
            budget=frozen_budget(self.config.battle_budget),
            units=units,
            tiles=build_tiles(terrain),
            selected_unit_id=None,
            selected_tile=None,
            logs=(f"Battle started at {territory.name}.",),
            victory=None,
        )


def _reject(state: GameState, reason: str) -> GameState:
    logger.debug(f"Ignored action: {reason}")
    return state


def apply(state: GameState, action: Action, rules: Rules) -> GameState:
    """Apply a single action, returning the next state."""
    if isinstance(action, ApplyNarrative):
        return replace(state, news_report=action.report)
    if isinstance(action, ShowScreen):
        return _show_screen(state, action.screen)
    if isinstance(action, StartBattle):
        return _start_battle(state, action.territory_id, rules)
    if isinstance(action, ReturnToCampaign):
        return _return_to_campaign(state, rules)
    if isinstance(action, (ClickTile, Recruit, EndTurn)):
        if state.screen != Screen.PLAYING:
            return _reject(state, f"{type(action).__name__} outside of battle")
        if state.is_over:
            return _reject(state, f"{type(action).__name__} after victory")
        if isinstance(action, ClickTile):
            return _click_tile(state, action.col, action.row, rules)
        if isinstance(action, Recruit):
            return _recruit(state, action, rules)
        return end_turn(state, rules.config)
    raise TypeError(f"Unknown action: {action!r}")


def _show_screen(state: GameState, screen: Screen) -> GameState:
    if screen not in NAVIGABLE_SCREENS:
        return _reject(state, f"cannot navigate to {screen.value}")
    return replace(state, screen=screen)


def _start_battle(state: GameState, territory_id: str, rules: Rules) -> GameState:
    territory = next((t for t in state.territories if t.id == territory_id), None)
    if territory is None:
        return _reject(state, f"unknown territory {territory_id}")
    if not territory.unlocked:
        return _reject(state, f"territory {territory_id} is locked")
    return rules.new_battle(state, territory)


def _return_to_campaign(state: GameState, rules: Rules) -> GameState:
    """Discard the battle; a won battle marks its territory conquered."""
    if state.screen != Screen.PLAYING:
        return _reject(state, "not in battle")

    territories = state.territories
    territory = state.active_territory
    if territory and state.victory == rules.human_faction:
        territories = tuple(
            replace(t, conquered=True) if t.id == territory.id else t
            for t in territories
        )
        logger.info(f"{territory.name} conquered")

    return replace(
        state,
        screen=Screen.CAMPAIGN,
        territories=territories,
        active_territory=None,
        units=(),
        selected_unit_id=None,
        selected_tile=None,
        victory=None,
    )


def _click_tile(state: GameState, col: int, row: int, rules: Rules) -> GameState:
    """
    Handle a click on the battlefield.

    In order: select an own unit; select an own headquarters (recruitment);
    move the selected unit to a reachable tile; attack an enemy in range.
    Anything else clears the selection.
    """
    tile = state.tile(col, row)
    if tile is None:
        return _reject(state, f"click off the map at {(col, row)}")

    occupant = state.unit_at(col, row)
    faction = state.current_faction

    if occupant and occupant.faction == faction:
        return replace(state, selected_unit_id=occupant.id, selected_tile=None)

    if tile.terrain == TerrainType.HQ and tile.control == faction:
        return replace(state, selected_tile=(col, row), selected_unit_id=None)

    selected = state.selected_unit
    if selected:
        if (col, row) in reachable_tiles(state, selected.id, rules.catalog):
            return _move(state, selected.id, col, row, rules)

        if occupant and occupant.faction != faction:
            if (col, row) in attackable_tiles(state, selected.id):
                return _attack(state, selected.id, occupant.id, rules)

    return state.cleared_selection()


def _move(state: GameState, unit_id: str, col: int, row: int, rules: Rules) -> GameState:
    unit = state.get_unit(unit_id)
    units = tuple(u.moved_to(col, row) if u.id == unit_id else u for u in state.units)
    state = replace(state, units=units)

    state, sector_taken = occupy(state, col, row, unit.faction)
    if sector_taken:
        state = state.with_log(f"Strategic point captured by {unit.faction.display_name}!")
        logger.info(f"{unit.faction.display_name} captured the sector at {(col, row)}")

    if rules.config.total_conquest_victory:
        winner = conquest_victor(state.tiles)
        if winner:
            state = replace(state, victory=winner)
            state = state.with_log(f"Total conquest: {winner.display_name} holds the entire front.")

    return state.cleared_selection()


def _attack(state: GameState, attacker_id: str, defender_id: str, rules: Rules) -> GameState:
    attacker = state.get_unit(attacker_id)
    defender = state.get_unit(defender_id)

    state, report = rules.combat.resolve_attack(state, attacker_id, defender_id)
    state = state.with_log(
        f"{attacker.faction.display_name} attacked. {report.damage} casualties inflicted."
    )
    if report.killed:
        state = state.with_log(
            f"{defender.unit_type.value.replace('_', ' ').title()} of the "
            f"{defender.faction.display_name} destroyed."
        )

    winner = extinction_victor(state.units)
    if winner:
        state = replace(state, victory=winner)
        state = state.with_log(f"Victory for the {winner.display_name}.")
        logger.info(f"Victory: {winner.display_name}")

    return replace(state, selected_unit_id=None)


def _recruit(state: GameState, action: Recruit, rules: Rules) -> GameState:
    """Buy a unit and place it on the first free tile next to the selected HQ."""
    if state.selected_tile is None:
        return _reject(state, "recruit without a selected headquarters")

    faction = state.current_faction
    hq = state.tile(*state.selected_tile)
    if hq is None or hq.terrain != TerrainType.HQ or hq.control != faction:
        return _reject(state, "selected tile is not an own headquarters")

    stats = rules.catalog.unit_stats(action.unit_type)
    if state.budget[faction] < stats.cost:
        return _reject(state, f"{faction.value} cannot afford {action.unit_type.value}")

    spawn = next(
        (cell for cell in neighbors(hq.col, hq.row, state.width, state.height)
         if state.unit_at(*cell) is None),
        None,
    )
    if spawn is None:
        return _reject(state, "no free tile next to headquarters")

    recruit = create_unit(stats, faction, *spawn, spent=True)
    state = replace(state, units=state.units + (recruit,), selected_tile=None)
    state = state.with_budget(faction, state.budget[faction] - stats.cost)
    return state.with_log(
        f"{faction.display_name} recruited {action.unit_type.value.replace('_', ' ')}."
    )
