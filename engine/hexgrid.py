"""
Hex grid geometry for the trench battlefield.

Tiles are stored as integer (col, row) offset coordinates in an "even-r"
horizontal layout: even rows are shoved half a hex to the right. Distances
are computed by converting to cube coordinates.
"""

# Neighbor offsets (dcol, drow) by row parity
EVEN_ROW_OFFSETS = [(1, 0), (1, -1), (0, -1), (-1, 0), (0, 1), (1, 1)]
ODD_ROW_OFFSETS = [(1, 0), (0, -1), (-1, -1), (-1, 0), (-1, 1), (0, 1)]


def in_bounds(col: int, row: int, width: int, height: int) -> bool:
    """Check if an offset coordinate lies on a width x height map."""
    return 0 <= col < width and 0 <= row < height


def neighbors(col: int, row: int, width: int, height: int) -> list[tuple[int, int]]:
    """Get adjacent cells, clipped to the map bounds (fewer than 6 at edges)."""
    offsets = EVEN_ROW_OFFSETS if row % 2 == 0 else ODD_ROW_OFFSETS
    result = []
    for dcol, drow in offsets:
        ncol, nrow = col + dcol, row + drow
        if in_bounds(ncol, nrow, width, height):
            result.append((ncol, nrow))
    return result


def offset_to_cube(col: int, row: int) -> tuple[int, int, int]:
    """Convert even-r offset coordinates to cube coordinates (q, r, s)."""
    q = col - (row + (row & 1)) // 2
    r = row
    return (q, r, -q - r)


def distance(a: tuple[int, int], b: tuple[int, int]) -> int:
    """Calculate distance in hexes between two offset coordinates."""
    aq, ar, as_ = offset_to_cube(*a)
    bq, br, bs = offset_to_cube(*b)
    return max(abs(aq - bq), abs(ar - br), abs(as_ - bs))


def cells_in_range(col: int, row: int, radius: int,
                   width: int, height: int) -> list[tuple[int, int]]:
    """
    Get all in-bounds cells within radius hexes of (col, row).

    Scans the bounding square and filters by hex distance, so the center
    itself is included.
    """
    cells = []
    for drow in range(-radius, radius + 1):
        for dcol in range(-radius, radius + 1):
            tcol, trow = col + dcol, row + drow
            if not in_bounds(tcol, trow, width, height):
                continue
            if distance((col, row), (tcol, trow)) <= radius:
                cells.append((tcol, trow))
    return cells
