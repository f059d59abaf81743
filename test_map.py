"""
Tests for terrain generation and the tile grid.
"""

import random

from engine.map import (
    MAP_HEIGHT, MAP_WIDTH, NO_MANS_LAND_HALF_WIDTH, STRATEGIC_POINTS,
    TerrainType, build_tiles, count_controlled, generate_terrain,
    get_stats, get_tile, grid_size, iter_tiles, set_control,
)
from engine.units import Faction


def test_generate_terrain_shape_and_fixed_tiles():
    terrain = generate_terrain(rng=random.Random(3))
    assert len(terrain) == MAP_HEIGHT
    assert all(len(line) == MAP_WIDTH for line in terrain)

    assert terrain[0][0] == TerrainType.HQ
    assert terrain[MAP_HEIGHT - 1][MAP_WIDTH - 1] == TerrainType.HQ
    for col, row in STRATEGIC_POINTS:
        assert terrain[row][col] == TerrainType.STRATEGIC_POINT


def test_generate_terrain_is_seeded():
    assert generate_terrain(rng=random.Random(42)) == generate_terrain(rng=random.Random(42))


def test_no_mans_land_and_flanks():
    fixed = set(STRATEGIC_POINTS) | {(0, 0), (MAP_WIDTH - 1, MAP_HEIGHT - 1)}
    center = {TerrainType.MUD, TerrainType.TRENCH, TerrainType.GRASS}
    flank = {TerrainType.FOREST, TerrainType.CITY, TerrainType.TRENCH, TerrainType.GRASS}

    for seed in range(10):
        terrain = generate_terrain(rng=random.Random(seed))
        for row, line in enumerate(terrain):
            for col, kind in enumerate(line):
                if (col, row) in fixed:
                    continue
                if abs(col - MAP_WIDTH / 2) < NO_MANS_LAND_HALF_WIDTH:
                    assert kind in center
                else:
                    assert kind in flank


def test_cities_are_generated():
    cities = 0
    for seed in range(20):
        terrain = generate_terrain(rng=random.Random(seed))
        cities += sum(line.count(TerrainType.CITY) for line in terrain)
    assert cities > 0


def test_build_tiles_assigns_headquarters():
    tiles = build_tiles(generate_terrain(rng=random.Random(0)))
    assert grid_size(tiles) == (MAP_WIDTH, MAP_HEIGHT)
    assert get_tile(tiles, 0, 0).control == Faction.ENTENTE
    assert get_tile(tiles, MAP_WIDTH - 1, MAP_HEIGHT - 1).control == Faction.CENTRAL

    owned = [t for t in iter_tiles(tiles) if t.control is not None]
    assert len(owned) == 2


def test_get_tile_out_of_bounds():
    tiles = build_tiles([[TerrainType.GRASS] * 3] * 2)
    assert get_tile(tiles, 3, 0) is None
    assert get_tile(tiles, -1, 0) is None
    assert get_tile(tiles, 2, 1).position == (2, 1)


def test_set_control_returns_new_grid():
    tiles = build_tiles([[TerrainType.GRASS] * 4] * 3)
    captured = set_control(tiles, [(1, 1), (2, 1)], Faction.CENTRAL)

    assert get_tile(tiles, 1, 1).control is None
    assert get_tile(captured, 1, 1).control == Faction.CENTRAL
    assert count_controlled(captured, Faction.CENTRAL) == 2
    assert count_controlled(captured, Faction.CENTRAL, TerrainType.CITY) == 0


def test_get_stats():
    tiles = build_tiles([
        [TerrainType.HQ, TerrainType.GRASS, TerrainType.CITY],
        [TerrainType.MUD, TerrainType.GRASS, TerrainType.HQ],
    ])
    stats = get_stats(tiles)
    assert stats["total_tiles"] == 6
    assert stats["terrain_distribution"]["grass"] == 2
    assert stats["control_distribution"] == {"entente": 1, "central": 1, "neutral": 4}
