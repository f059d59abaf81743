"""
Static terrain, unit and campaign tables.

Values are loaded from YAML under the data directory when present:
- schema/terrain.yaml: terrain defense bonus and move cost
- schema/units.yaml: recruitment cost and base stats per unit type
- campaign/territories.yaml: campaign sectors

Missing files fall back to the built-in tables below.
"""

import logging
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .map import TerrainType
from .units import UnitType

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Malformed catalog data."""


@dataclass(frozen=True)
class TerrainInfo:
    """Terrain type properties."""
    terrain: TerrainType
    defense_bonus: int  # added to the defender's base defense
    move_cost: int  # movement points to enter


@dataclass(frozen=True)
class UnitStats:
    """Recruitment cost and base stats of a unit type."""
    unit_type: UnitType
    cost: int
    hp: int
    attack: int
    defense: int
    range: int
    move_range: int


@dataclass(frozen=True)
class Territory:
    """Campaign sector a battle is fought in."""
    id: str
    name: str
    description: str
    difficulty: str  # "Easy", "Normal", "Hard", "Extreme"
    unlocked: bool = True
    conquered: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "difficulty": self.difficulty,
            "unlocked": self.unlocked,
            "conquered": self.conquered,
        }


DEFAULT_TERRAIN = {
    # terrain: (defense_bonus, move_cost)
    TerrainType.GRASS: (0, 1),
    TerrainType.MUD: (-1, 2),
    TerrainType.TRENCH: (3, 1),
    TerrainType.CITY: (2, 1),
    TerrainType.FOREST: (1, 2),
    TerrainType.HQ: (5, 1),
    TerrainType.STRATEGIC_POINT: (1, 1),
}

DEFAULT_UNITS = {
    # unit_type: (cost, hp, attack, defense, range, move_range)
    UnitType.INFANTRY: (15, 12, 4, 3, 1, 2),
    UnitType.RECON: (20, 8, 4, 2, 1, 5),
    UnitType.CAVALRY: (25, 10, 5, 2, 1, 4),
    UnitType.ARTILLERY: (30, 8, 7, 1, 3, 1),
    UnitType.STURMTRUPPEN: (35, 14, 9, 2, 1, 3),
    UnitType.TANK: (50, 20, 8, 6, 1, 2),
    UnitType.HEAVY_ARTILLERY: (60, 8, 10, 1, 4, 1),
}

# Experience needed for levels 1, 2, 3
VETERANCY_THRESHOLDS = [0, 15, 40]

DEFAULT_TERRITORIES = [
    Territory(
        id="flanders", name="Flanders Front",
        description="Marshy ground and deep trenches. The mud is your worst enemy.",
        difficulty="Easy",
    ),
    Territory(
        id="somme", name="Somme Valley",
        description="Wide plains, ideal ground for tanks and cavalry.",
        difficulty="Normal",
    ),
    Territory(
        id="verdun", name="Verdun Fortress",
        description="A brutal siege across wooded, fortified hills.",
        difficulty="Hard",
    ),
    Territory(
        id="tannenberg", name="Tannenberg Encirclement",
        description="Vast distances and enemy numerical superiority on the eastern front.",
        difficulty="Extreme",
    ),
]


class Catalog:
    """Lookup tables for terrain, units and campaign territories."""

    def __init__(self, data_path: Path | str = "data"):
        self.data_path = Path(data_path)
        self.terrain: dict[TerrainType, TerrainInfo] = {}
        self.units: dict[UnitType, UnitStats] = {}
        self.territories: list[Territory] = []
        self.veterancy_thresholds: list[int] = list(VETERANCY_THRESHOLDS)

        self._load_terrain_schema()
        self._load_unit_schema()
        self._load_territories()

    def _load_terrain_schema(self):
        """Load terrain modifiers from schema, falling back to defaults."""
        for terrain, (defense, cost) in DEFAULT_TERRAIN.items():
            self.terrain[terrain] = TerrainInfo(terrain, defense, cost)

        schema_path = self.data_path / "schema" / "terrain.yaml"
        if not schema_path.exists():
            return

        with open(schema_path) as f:
            schema = yaml.safe_load(f) or {}

        for terrain_id, info in schema.get("terrain_types", {}).items():
            try:
                terrain = TerrainType(terrain_id)
            except ValueError:
                raise CatalogError(f"Unknown terrain type in {schema_path}: {terrain_id}")
            base = self.terrain[terrain]
            move_cost = int(info.get("move_cost", base.move_cost))
            if move_cost <= 0:
                raise CatalogError(f"Move cost for {terrain_id} must be positive")
            self.terrain[terrain] = TerrainInfo(
                terrain=terrain,
                defense_bonus=int(info.get("defense", base.defense_bonus)),
                move_cost=move_cost,
            )

    def _load_unit_schema(self):
        """Load unit costs and base stats."""
        for unit_type, (cost, hp, attack, defense, rng, move) in DEFAULT_UNITS.items():
            self.units[unit_type] = UnitStats(unit_type, cost, hp, attack, defense, rng, move)

        schema_path = self.data_path / "schema" / "units.yaml"
        if not schema_path.exists():
            return

        with open(schema_path) as f:
            schema = yaml.safe_load(f) or {}

        for type_id, info in schema.get("unit_types", {}).items():
            try:
                unit_type = UnitType(type_id)
            except ValueError:
                raise CatalogError(f"Unknown unit type in {schema_path}: {type_id}")
            base = self.units[unit_type]
            stats = UnitStats(
                unit_type=unit_type,
                cost=int(info.get("cost", base.cost)),
                hp=int(info.get("hp", base.hp)),
                attack=int(info.get("attack", base.attack)),
                defense=int(info.get("defense", base.defense)),
                range=int(info.get("range", base.range)),
                move_range=int(info.get("move_range", base.move_range)),
            )
            if stats.cost <= 0 or stats.hp <= 0:
                raise CatalogError(f"Cost and hp for {type_id} must be positive")
            self.units[unit_type] = stats

        thresholds = schema.get("veterancy_thresholds")
        if thresholds:
            self.veterancy_thresholds = sorted(int(t) for t in thresholds)

    def _load_territories(self):
        """Load campaign sectors."""
        path = self.data_path / "campaign" / "territories.yaml"
        if not path.exists():
            self.territories = list(DEFAULT_TERRITORIES)
            return

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        for entry in data.get("territories", []):
            self.territories.append(Territory(
                id=entry["id"],
                name=entry.get("name", entry["id"]),
                description=entry.get("description", ""),
                difficulty=entry.get("difficulty", "Normal"),
                unlocked=entry.get("unlocked", True),
                conquered=entry.get("conquered", False),
            ))
        logger.debug(f"Loaded {len(self.territories)} territories from {path}")

    # Lookups
    def defense_bonus(self, terrain: TerrainType) -> int:
        return self.terrain[terrain].defense_bonus

    def move_cost(self, terrain: TerrainType) -> int:
        return self.terrain[terrain].move_cost

    def unit_stats(self, unit_type: UnitType) -> UnitStats:
        return self.units[unit_type]

    def unit_cost(self, unit_type: UnitType) -> int:
        return self.units[unit_type].cost

    def recruitment_options(self) -> list[UnitStats]:
        """Unit types ordered by cost, cheapest first."""
        return sorted(self.units.values(), key=lambda s: s.cost)

    def level_for_experience(self, experience: int) -> int:
        """Veterancy level: one level per threshold reached."""
        return sum(1 for t in self.veterancy_thresholds if experience >= t)

    def get_territory(self, territory_id: str) -> Optional[Territory]:
        for territory in self.territories:
            if territory.id == territory_id:
                return territory
        return None
