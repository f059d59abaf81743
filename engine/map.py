"""
Battlefield map for the trench wargame.

The map is a rectangular grid of hex tiles addressed by (col, row) in the
even-r offset layout (see hexgrid). Tiles are frozen; the grid is a tuple of
rows so a map can be shared between immutable game states.

Default battlefield: 22 columns x 15 rows, headquarters in opposite corners.
"""

import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Iterator, Optional

from .units import Faction


MAP_WIDTH = 22
MAP_HEIGHT = 15

# Fixed strategic points (col, row); independent of the random draw
STRATEGIC_POINTS = [(5, 7), (16, 7), (11, 3), (11, 11), (6, 3), (15, 12)]

# Columns closer than this to the horizontal center are no man's land
NO_MANS_LAND_HALF_WIDTH = 4


class TerrainType(Enum):
    GRASS = "grass"
    MUD = "mud"
    TRENCH = "trench"
    CITY = "city"
    FOREST = "forest"
    HQ = "hq"
    STRATEGIC_POINT = "strategic_point"


@dataclass(frozen=True)
class Tile:
    """Individual hex tile in the grid."""
    col: int
    row: int
    terrain: TerrainType
    control: Optional[Faction] = None

    @property
    def position(self) -> tuple[int, int]:
        return (self.col, self.row)

    def controlled_by(self, faction: Faction) -> "Tile":
        return replace(self, control=faction)

    def to_dict(self) -> dict:
        return {
            "col": self.col,
            "row": self.row,
            "terrain": self.terrain.value,
            "control": self.control.value if self.control else None,
        }


Grid = tuple[tuple[Tile, ...], ...]


def _draw_no_mans_land(roll: float) -> TerrainType:
    if roll < 0.65:
        return TerrainType.MUD
    elif roll < 0.85:
        return TerrainType.TRENCH
    return TerrainType.GRASS


def _draw_hinterland(roll: float) -> TerrainType:
    # Non-overlapping bands: forest 15%, city 5%, trench 4%
    if roll < 0.15:
        return TerrainType.FOREST
    elif roll < 0.20:
        return TerrainType.CITY
    elif roll < 0.24:
        return TerrainType.TRENCH
    return TerrainType.GRASS


def generate_terrain(
    width: int = MAP_WIDTH,
    height: int = MAP_HEIGHT,
    rng: Optional[random.Random] = None,
    strategic_points: Iterable[tuple[int, int]] = STRATEGIC_POINTS,
) -> list[list[TerrainType]]:
    """
    Generate the terrain layout for a fresh battle, indexed [row][col].

    Corners (0, 0) and (width-1, height-1) are headquarters. Strategic points
    are forced at fixed coordinates. The center band is biased toward mud and
    trenches; the flanks are mostly open ground with some forest and towns.
    """
    rng = rng or random.Random()
    strategic = set(strategic_points)
    terrain: list[list[TerrainType]] = []

    for row in range(height):
        line = []
        for col in range(width):
            if (col, row) in ((0, 0), (width - 1, height - 1)):
                kind = TerrainType.HQ
            elif (col, row) in strategic:
                kind = TerrainType.STRATEGIC_POINT
            else:
                roll = rng.random()
                if abs(col - width / 2) < NO_MANS_LAND_HALF_WIDTH:
                    kind = _draw_no_mans_land(roll)
                else:
                    kind = _draw_hinterland(roll)
            line.append(kind)
        terrain.append(line)

    return terrain


def build_tiles(terrain: list[list[TerrainType]]) -> Grid:
    """
    Build the tile grid from a terrain layout.

    Headquarters in column 0 belong to the Entente, any other headquarters to
    the Central Powers. Every other tile starts unowned.
    """
    rows = []
    for row, line in enumerate(terrain):
        tiles = []
        for col, kind in enumerate(line):
            control = None
            if kind == TerrainType.HQ:
                control = Faction.ENTENTE if col == 0 else Faction.CENTRAL
            tiles.append(Tile(col=col, row=row, terrain=kind, control=control))
        rows.append(tuple(tiles))
    return tuple(rows)


def grid_size(tiles: Grid) -> tuple[int, int]:
    """Return (width, height) of a tile grid."""
    if not tiles:
        return (0, 0)
    return (len(tiles[0]), len(tiles))


def get_tile(tiles: Grid, col: int, row: int) -> Optional[Tile]:
    """Get tile at coordinates, None when off the map."""
    if 0 <= row < len(tiles) and 0 <= col < len(tiles[row]):
        return tiles[row][col]
    return None


def iter_tiles(tiles: Grid) -> Iterator[Tile]:
    for line in tiles:
        yield from line


def set_control(tiles: Grid, cells: Iterable[tuple[int, int]], faction: Faction) -> Grid:
    """Return a new grid with control of the given cells set to faction."""
    targets = set(cells)
    return tuple(
        tuple(
            tile.controlled_by(faction) if tile.position in targets else tile
            for tile in line
        )
        for line in tiles
    )


def count_controlled(tiles: Grid, faction: Faction,
                     terrain: Optional[TerrainType] = None) -> int:
    """Count tiles controlled by a faction, optionally of one terrain type."""
    return sum(
        1 for tile in iter_tiles(tiles)
        if tile.control == faction and (terrain is None or tile.terrain == terrain)
    )


def get_stats(tiles: Grid) -> dict:
    """Get map statistics."""
    terrain_counts: dict[str, int] = {}
    control_counts = {f.value: 0 for f in Faction}
    control_counts["neutral"] = 0

    for tile in iter_tiles(tiles):
        terrain_counts[tile.terrain.value] = terrain_counts.get(tile.terrain.value, 0) + 1
        key = tile.control.value if tile.control else "neutral"
        control_counts[key] += 1

    width, height = grid_size(tiles)
    return {
        "total_tiles": width * height,
        "terrain_distribution": terrain_counts,
        "control_distribution": control_counts,
    }
