"""
Shared fixtures for the engine tests.
"""

from dataclasses import replace
from pathlib import Path

import pytest

from engine import (
    Catalog, Rules, GameState, Screen, Faction, TerrainType,
    build_tiles, create_unit, load_scenario,
)
from engine.state import frozen_budget

DATA_PATH = Path(__file__).parent / "data"


@pytest.fixture
def catalog():
    return Catalog(DATA_PATH)


@pytest.fixture
def config():
    return load_scenario(DATA_PATH)


@pytest.fixture
def rules(catalog, config):
    return Rules(catalog, config, seed=1914)


@pytest.fixture
def make_grid():
    """Build a grid of one terrain, with optional {(col, row): terrain} overrides."""

    def _make(width=8, height=6, terrain=TerrainType.GRASS, overrides=None):
        layout = [[terrain] * width for _ in range(height)]
        for (col, row), kind in (overrides or {}).items():
            layout[row][col] = kind
        return build_tiles(layout)

    return _make


@pytest.fixture
def make_unit(catalog):
    """Create a unit from catalog stats, with optional field overrides."""

    def _make(unit_type, faction, col, row, unit_id=None, **changes):
        unit = create_unit(catalog.unit_stats(unit_type), faction, col, row, unit_id=unit_id)
        return replace(unit, **changes) if changes else unit

    return _make


@pytest.fixture
def make_state():
    """A battle in progress on the given tiles."""

    def _make(tiles, units=(), **changes):
        state = GameState(
            tiles=tiles,
            units=tuple(units),
            screen=Screen.PLAYING,
            budget=frozen_budget({Faction.ENTENTE: 80, Faction.CENTRAL: 100}),
            logs=("Battle started at Flanders Front.",),
        )
        return replace(state, **changes) if changes else state

    return _make
