"""
Game state snapshot for the trench wargame.

GameState is immutable. Every mutation goes through the reducer and produces
a new snapshot with dataclasses.replace; units and tiles are tuples of frozen
records and budgets are read-only mappings, so no two snapshots share
anything that can be changed in place.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from .catalog import Territory
from .map import Grid, get_tile, grid_size
from .units import Faction, Unit, get_unit, unit_at


class Screen(Enum):
    MENU = "menu"
    INTRO = "intro"
    CAMPAIGN = "campaign"
    PLAYING = "playing"


def frozen_budget(budget: Mapping[Faction, int]) -> Mapping[Faction, int]:
    return MappingProxyType(dict(budget))


@dataclass(frozen=True)
class GameState:
    """Complete game state."""
    turn: int = 1
    current_faction: Faction = Faction.ENTENTE
    units: tuple[Unit, ...] = ()
    tiles: Grid = ()
    selected_unit_id: Optional[str] = None
    selected_tile: Optional[tuple[int, int]] = None
    logs: tuple[str, ...] = ()  # newest first
    victory: Optional[Faction] = None
    news_report: str = ""
    screen: Screen = Screen.MENU
    budget: Mapping[Faction, int] = field(default_factory=lambda: frozen_budget({f: 0 for f in Faction}))
    active_territory: Optional[Territory] = None
    territories: tuple[Territory, ...] = ()

    @property
    def width(self) -> int:
        return grid_size(self.tiles)[0]

    @property
    def height(self) -> int:
        return grid_size(self.tiles)[1]

    @property
    def is_over(self) -> bool:
        return self.victory is not None

    @property
    def selected_unit(self) -> Optional[Unit]:
        return get_unit(self.units, self.selected_unit_id)

    def tile(self, col: int, row: int):
        return get_tile(self.tiles, col, row)

    def unit_at(self, col: int, row: int) -> Optional[Unit]:
        return unit_at(self.units, col, row)

    def get_unit(self, unit_id: Optional[str]) -> Optional[Unit]:
        return get_unit(self.units, unit_id)

    # Copy-on-write helpers
    def with_log(self, *messages: str) -> "GameState":
        """Prepend messages to the log; the last argument ends up newest."""
        logs = self.logs
        for message in messages:
            logs = (message,) + logs
        return replace(self, logs=logs)

    def with_budget(self, faction: Faction, amount: int) -> "GameState":
        return replace(self, budget=frozen_budget({**self.budget, faction: amount}))

    def cleared_selection(self) -> "GameState":
        return replace(self, selected_unit_id=None, selected_tile=None)

    def to_dict(self) -> dict:
        return {
            "turn": self.turn,
            "current_faction": self.current_faction.value,
            "units": [u.to_dict() for u in self.units],
            "tiles": [[t.to_dict() for t in line] for line in self.tiles],
            "selected_unit_id": self.selected_unit_id,
            "selected_tile": list(self.selected_tile) if self.selected_tile else None,
            "logs": list(self.logs),
            "victory": self.victory.value if self.victory else None,
            "news_report": self.news_report,
            "screen": self.screen.value,
            "budget": {f.value: amount for f, amount in self.budget.items()},
            "active_territory": self.active_territory.to_dict() if self.active_territory else None,
            "territories": [t.to_dict() for t in self.territories],
        }


def check_invariants(state: GameState) -> list[str]:
    """
    List consistency problems in a snapshot; empty when the state is sound.

    Any problem reported here is an engine defect, not a runtime condition.
    """
    problems = []
    seen_positions: dict[tuple[int, int], str] = {}
    seen_ids: set[str] = set()

    for unit in state.units:
        if unit.id in seen_ids:
            problems.append(f"duplicate unit id {unit.id}")
        seen_ids.add(unit.id)
        if not unit.is_alive:
            problems.append(f"unit {unit.id} persists with hp {unit.hp}")
        if unit.hp > unit.max_hp:
            problems.append(f"unit {unit.id} hp {unit.hp} exceeds max {unit.max_hp}")
        if state.tile(unit.col, unit.row) is None:
            problems.append(f"unit {unit.id} off the map at {unit.position}")
        other = seen_positions.get(unit.position)
        if other:
            problems.append(f"units {other} and {unit.id} share {unit.position}")
        seen_positions[unit.position] = unit.id

    if state.selected_unit_id and state.selected_tile:
        problems.append("both a unit and a tile are selected")

    for row, line in enumerate(state.tiles):
        for col, tile in enumerate(line):
            if tile.position != (col, row):
                problems.append(f"tile {tile.position} stored at {(col, row)}")

    return problems
