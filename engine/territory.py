"""
Territorial control and victory checks.

A unit that moves onto a tile takes control of it. Strategic points capture
a whole sector: the point and every adjacent tile change hands together.
"""

from dataclasses import replace
from typing import Iterable, Optional

from .hexgrid import neighbors
from .map import Grid, TerrainType, grid_size, iter_tiles, set_control
from .state import GameState
from .units import Faction, Unit


def sector_cells(col: int, row: int, width: int, height: int) -> list[tuple[int, int]]:
    """Cells captured along with a strategic point at (col, row)."""
    return [(col, row)] + neighbors(col, row, width, height)


def capture_tile(tiles: Grid, col: int, row: int, faction: Faction) -> Grid:
    return set_control(tiles, [(col, row)], faction)


def capture_sector(tiles: Grid, col: int, row: int, faction: Faction) -> Grid:
    """Set control of a strategic point and all its neighbors in one update."""
    width, height = grid_size(tiles)
    return set_control(tiles, sector_cells(col, row, width, height), faction)


def occupy(state: GameState, col: int, row: int, faction: Faction) -> tuple[GameState, bool]:
    """
    Apply the capture rule for a unit of faction arriving at (col, row).

    Returns the new state and whether a strategic sector was taken.
    """
    tile = state.tile(col, row)
    if tile.terrain == TerrainType.STRATEGIC_POINT:
        return replace(state, tiles=capture_sector(state.tiles, col, row, faction)), True
    return replace(state, tiles=capture_tile(state.tiles, col, row, faction)), False


def surviving_factions(units: Iterable[Unit]) -> set[Faction]:
    return {u.faction for u in units}


def extinction_victor(units: Iterable[Unit]) -> Optional[Faction]:
    """The only faction with units left, if exactly one remains."""
    factions = surviving_factions(units)
    if len(factions) == 1:
        return next(iter(factions))
    return None


def conquest_victor(tiles: Grid) -> Optional[Faction]:
    """The faction controlling every tile, if any."""
    owners = {tile.control for tile in iter_tiles(tiles)}
    if len(owners) == 1:
        return next(iter(owners))  # None when the map is entirely unowned
    return None


def control_share(tiles: Grid) -> dict[Faction, int]:
    """Rounded percentage of the map controlled by each faction."""
    width, height = grid_size(tiles)
    total = width * height
    if total == 0:
        return {f: 0 for f in Faction}
    counts = {f: 0 for f in Faction}
    for tile in iter_tiles(tiles):
        if tile.control is not None:
            counts[tile.control] += 1
    # Halves round up
    return {f: int(count / total * 100 + 0.5) for f, count in counts.items()}
