"""Grid cell helpers shared by placement, resize and publish checks."""

from __future__ import annotations

from collections.abc import Iterable

from quillty.models.units import GridPosition, Unit


def rectangular_range(start: GridPosition, end: GridPosition) -> list[GridPosition]:
    """All positions in the rectangle spanned by two corners, inclusive, any order."""
    min_row, max_row = sorted((start.row, end.row))
    min_col, max_col = sorted((start.col, end.col))
    return [
        GridPosition(row=r, col=c)
        for r in range(min_row, max_row + 1)
        for c in range(min_col, max_col + 1)
    ]


def covered_cells(units: Iterable[Unit]) -> set[tuple[int, int]]:
    cells: set[tuple[int, int]] = set()
    for unit in units:
        cells.update(unit.cells())
    return cells


def is_out_of_bounds_position(position: GridPosition, grid_size: int) -> bool:
    return not (0 <= position.row < grid_size and 0 <= position.col < grid_size)


def is_out_of_bounds(unit: Unit, grid_size: int) -> bool:
    """True if any covered cell falls outside a grid_size x grid_size grid."""
    p, s = unit.position, unit.span
    return (
        p.row < 0
        or p.col < 0
        or p.row >= grid_size
        or p.col >= grid_size
        or p.row + s.rows > grid_size
        or p.col + s.cols > grid_size
    )


def units_out_of_bounds(units: Iterable[Unit], grid_size: int) -> list[Unit]:
    return [u for u in units if is_out_of_bounds(u, grid_size)]


def empty_cells(units: Iterable[Unit], grid_size: int) -> list[tuple[int, int]]:
    covered = covered_cells(units)
    return [
        (r, c)
        for r in range(grid_size)
        for c in range(grid_size)
        if (r, c) not in covered
    ]
