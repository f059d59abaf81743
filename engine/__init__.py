"""
Trench warfare engine for a two-faction WWI hex wargame.

Core modules:
- hexgrid: Even-row offset hex geometry
- catalog: Terrain, unit and campaign tables
- map: Tile grid and terrain generation
- units: Unit records
- movement: Reachable and attackable tiles
- combat: Attack resolution and veterancy
- territory: Capture rules and victory checks
- turn: Turn sequencing and income
- reducer: apply(state, action) dispatcher
- store: Serialized dispatch and snapshot subscriptions
"""

from .hexgrid import neighbors, distance, offset_to_cube, cells_in_range
from .catalog import Catalog, CatalogError, Territory, TerrainInfo, UnitStats
from .map import Tile, TerrainType, generate_terrain, build_tiles
from .units import Unit, UnitType, Faction, create_unit
from .movement import reachable_tiles, attackable_tiles
from .combat import CombatResolver, CombatReport
from .territory import capture_sector, extinction_victor, control_share
from .turn import end_turn, compute_income, NarrativeRequest
from .state import GameState, Screen, check_invariants
from .actions import (
    Action, ClickTile, Recruit, EndTurn, ApplyNarrative,
    ShowScreen, StartBattle, ReturnToCampaign,
)
from .scenario import BattleConfig, load_scenario
from .reducer import Rules, apply
from .store import GameStore
from .scheduler import Scheduler, AsyncioScheduler, ManualScheduler

__all__ = [
    # Geometry
    "neighbors", "distance", "offset_to_cube", "cells_in_range",
    # Catalog
    "Catalog", "CatalogError", "Territory", "TerrainInfo", "UnitStats",
    # Map
    "Tile", "TerrainType", "generate_terrain", "build_tiles",
    # Units
    "Unit", "UnitType", "Faction", "create_unit",
    # Rules
    "reachable_tiles", "attackable_tiles", "CombatResolver", "CombatReport",
    "capture_sector", "extinction_victor", "control_share",
    "end_turn", "compute_income", "NarrativeRequest",
    # State
    "GameState", "Screen", "check_invariants",
    "Action", "ClickTile", "Recruit", "EndTurn", "ApplyNarrative",
    "ShowScreen", "StartBattle", "ReturnToCampaign",
    "BattleConfig", "load_scenario", "Rules", "apply",
    "GameStore", "Scheduler", "AsyncioScheduler", "ManualScheduler",
]
