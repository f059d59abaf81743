"""
Unit definitions for the trench wargame.

Units are immutable snapshots: every change produces a new Unit through
dataclasses.replace, so a GameState never shares mutable unit records with
the state it was derived from.
"""

import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .catalog import UnitStats


class Faction(Enum):
    ENTENTE = "entente"
    CENTRAL = "central"

    @property
    def display_name(self) -> str:
        return {
            Faction.ENTENTE: "Triple Entente",
            Faction.CENTRAL: "Central Powers",
        }[self]

    @property
    def opponent(self) -> "Faction":
        return Faction.CENTRAL if self == Faction.ENTENTE else Faction.ENTENTE


class UnitType(Enum):
    INFANTRY = "infantry"
    ARTILLERY = "artillery"
    CAVALRY = "cavalry"
    TANK = "tank"
    STURMTRUPPEN = "sturmtruppen"
    RECON = "recon"
    HEAVY_ARTILLERY = "heavy_artillery"


@dataclass(frozen=True)
class Unit:
    """A unit on the battlefield."""
    id: str
    unit_type: UnitType
    faction: Faction
    col: int
    row: int
    hp: int
    max_hp: int
    attack: int
    defense: int
    range: int
    move_range: int
    has_moved: bool = False
    has_attacked: bool = False
    experience: int = 0
    level: int = 1

    @property
    def position(self) -> tuple[int, int]:
        return (self.col, self.row)

    @property
    def is_alive(self) -> bool:
        return self.hp > 0

    def moved_to(self, col: int, row: int) -> "Unit":
        return replace(self, col=col, row=row, has_moved=True)

    def refreshed(self) -> "Unit":
        """Clear the per-turn action flags."""
        return replace(self, has_moved=False, has_attacked=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.unit_type.value,
            "faction": self.faction.value,
            "col": self.col,
            "row": self.row,
            "hp": self.hp,
            "max_hp": self.max_hp,
            "attack": self.attack,
            "defense": self.defense,
            "range": self.range,
            "move_range": self.move_range,
            "has_moved": self.has_moved,
            "has_attacked": self.has_attacked,
            "experience": self.experience,
            "level": self.level,
        }


def new_unit_id(faction: Faction) -> str:
    """Generate a unique unit id prefixed with the faction initial."""
    return f"{faction.value[0]}-{uuid.uuid4().hex[:8]}"


def create_unit(
    stats: "UnitStats",
    faction: Faction,
    col: int,
    row: int,
    unit_id: Optional[str] = None,
    spent: bool = False,
) -> Unit:
    """
    Create a fresh unit from catalog stats.

    Recruited units enter the field spent (already moved and attacked) and
    become active on the next turn refresh.
    """
    return Unit(
        id=unit_id or new_unit_id(faction),
        unit_type=stats.unit_type,
        faction=faction,
        col=col,
        row=row,
        hp=stats.hp,
        max_hp=stats.hp,
        attack=stats.attack,
        defense=stats.defense,
        range=stats.range,
        move_range=stats.move_range,
        has_moved=spent,
        has_attacked=spent,
    )


def unit_at(units: tuple[Unit, ...] | list[Unit], col: int, row: int) -> Optional[Unit]:
    """Get the unit standing on a tile, if any."""
    for unit in units:
        if unit.col == col and unit.row == row:
            return unit
    return None


def get_unit(units: tuple[Unit, ...] | list[Unit], unit_id: Optional[str]) -> Optional[Unit]:
    if unit_id is None:
        return None
    for unit in units:
        if unit.id == unit_id:
            return unit
    return None


def units_by_faction(units: tuple[Unit, ...] | list[Unit], faction: Faction) -> list[Unit]:
    return [u for u in units if u.faction == faction]
