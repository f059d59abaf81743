"""
Read-only projections of a GameState for a rendering client.
"""

from typing import Optional

from .catalog import Catalog
from .map import get_stats
from .movement import attackable_tiles, reachable_tiles
from .state import GameState
from .territory import control_share


def highlight_sets(state: GameState, catalog: Catalog) -> tuple[set, set]:
    """Reachable and attackable cells of the selected unit."""
    unit = state.selected_unit
    if unit is None:
        return set(), set()
    return (
        set(reachable_tiles(state, unit.id, catalog)),
        set(attackable_tiles(state, unit.id)),
    )


def tile_views(state: GameState, catalog: Catalog) -> list[list[dict]]:
    """Per-tile display data, indexed [row][col]."""
    reachable, attackable = highlight_sets(state, catalog)
    selected_unit = state.selected_unit
    selected_cell = selected_unit.position if selected_unit else state.selected_tile

    views = []
    for line in state.tiles:
        row_views = []
        for tile in line:
            unit = state.unit_at(tile.col, tile.row)
            row_views.append({
                **tile.to_dict(),
                "reachable": tile.position in reachable,
                "attackable": tile.position in attackable,
                "selected": tile.position == selected_cell,
                "unit": unit.to_dict() if unit else None,
            })
        views.append(row_views)
    return views


def unit_views(state: GameState) -> list[dict]:
    return [unit.to_dict() for unit in state.units]


def recruitment_view(state: GameState, catalog: Catalog) -> Optional[list[dict]]:
    """Recruitment menu when a headquarters is selected, else None."""
    if state.selected_tile is None:
        return None
    budget = state.budget[state.current_faction]
    return [
        {
            "unit_type": stats.unit_type.value,
            "cost": stats.cost,
            "affordable": stats.cost <= budget,
        }
        for stats in catalog.recruitment_options()
    ]


def battle_view(state: GameState, catalog: Catalog) -> dict:
    """Everything a client needs to draw the current screen."""
    view = {
        "screen": state.screen.value,
        "turn": state.turn,
        "current_faction": state.current_faction.value,
        "budget": {f.value: amount for f, amount in state.budget.items()},
        "logs": list(state.logs),
        "news_report": state.news_report,
        "victory": state.victory.value if state.victory else None,
        "territories": [t.to_dict() for t in state.territories],
        "active_territory": state.active_territory.to_dict() if state.active_territory else None,
    }
    if state.tiles:
        view.update({
            "tiles": tile_views(state, catalog),
            "units": unit_views(state),
            "selected_unit_id": state.selected_unit_id,
            "selected_tile": list(state.selected_tile) if state.selected_tile else None,
            "recruitment": recruitment_view(state, catalog),
            "control": {f.value: pct for f, pct in control_share(state.tiles).items()},
            "map_stats": get_stats(state.tiles),
        })
    return view
