"""
Movement and targeting ranges.

Reachability is a minimum-cost-first expansion (Dijkstra) over the hex grid:
entering a tile costs its terrain move cost, and tiles holding any unit are
impassable.
"""

import heapq
from typing import Optional

from .catalog import Catalog
from .hexgrid import cells_in_range, neighbors
from .state import GameState


def movement_costs(state: GameState, unit_id: str,
                   catalog: Catalog) -> dict[tuple[int, int], int]:
    """
    Minimum movement cost to every tile the unit can reach this turn.

    The origin is not included. A unit that already moved reaches nothing.
    """
    unit = state.get_unit(unit_id)
    if not unit or unit.has_moved:
        return {}

    occupied = {u.position for u in state.units}
    start = unit.position
    best = {start: 0}
    settled: dict[tuple[int, int], int] = {}
    open_set = [(0, start)]

    while open_set:
        cost, current = heapq.heappop(open_set)
        if current in settled:
            continue
        settled[current] = cost

        for neighbor in neighbors(*current, state.width, state.height):
            if neighbor in settled or neighbor in occupied:
                continue
            tile = state.tile(*neighbor)
            new_cost = cost + catalog.move_cost(tile.terrain)
            if new_cost > unit.move_range:
                continue
            if new_cost < best.get(neighbor, new_cost + 1):
                best[neighbor] = new_cost
                heapq.heappush(open_set, (new_cost, neighbor))

    del settled[start]
    return settled


def reachable_tiles(state: GameState, unit_id: str,
                    catalog: Catalog) -> list[tuple[int, int]]:
    """Tiles the unit can move to this turn, in order of increasing cost."""
    return list(movement_costs(state, unit_id, catalog))


def attackable_tiles(state: GameState, unit_id: Optional[str]) -> list[tuple[int, int]]:
    """Tiles within the unit's combat range, regardless of occupancy."""
    unit = state.get_unit(unit_id)
    if not unit or unit.has_attacked:
        return []
    return cells_in_range(unit.col, unit.row, unit.range, state.width, state.height)
