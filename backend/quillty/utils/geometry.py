"""Leaf-node geometry helpers. No engine imports."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np
from numpy.typing import NDArray
from shapely.geometry import Polygon, box
from shapely.ops import unary_union


def as_array(points: Sequence[tuple[float, float]]) -> NDArray[np.float64]:
    return np.asarray(points, dtype=np.float64).reshape(-1, 2)


def signed_area(points: NDArray[np.float64]) -> float:
    """Shoelace formula over a closed ring. Positive = CCW in y-up axes.

    The ring is closed implicitly; the last point need not repeat the first.
    """
    x = points[:, 0]
    y = points[:, 1]
    return float(0.5 * np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y))


def polygon_area(points: Sequence[tuple[float, float]]) -> float:
    return abs(signed_area(as_array(points)))


def bbox(points: NDArray[np.float64]) -> tuple[float, float, float, float]:
    """Compute (xmin, ymin, xmax, ymax) bounding box."""
    if len(points) == 0:
        return (0.0, 0.0, 0.0, 0.0)
    return (
        float(np.min(points[:, 0])),
        float(np.min(points[:, 1])),
        float(np.max(points[:, 0])),
        float(np.max(points[:, 1])),
    )


def within_bounds(
    points: NDArray[np.float64], width: float, height: float, tol: float = 1e-9
) -> bool:
    xmin, ymin, xmax, ymax = bbox(points)
    return xmin >= -tol and ymin >= -tol and xmax <= width + tol and ymax <= height + tol


def tiling_error(
    polygons: Iterable[Sequence[tuple[float, float]]],
    width: float,
    height: float,
) -> float:
    """How far a set of polygons is from exactly tiling the w x h rectangle.

    0.0 means: summed areas equal w*h (no overlap), the union equals the
    rectangle (no gaps), and nothing sticks out. Larger values are the
    total area discrepancy.
    """
    shapes = [Polygon(p) for p in polygons]
    target = box(0.0, 0.0, width, height)
    area_sum = sum(s.area for s in shapes)
    union = unary_union(shapes) if shapes else Polygon()
    return (
        abs(area_sum - target.area)
        + union.symmetric_difference(target).area
    )


def ring_coverage_error(
    polygons: Iterable[Sequence[tuple[float, float]]],
    outer: tuple[float, float, float, float],
    inner: tuple[float, float, float, float],
) -> float:
    """Like ``tiling_error`` but for the annulus between two (x0, y0, x1, y1) boxes."""
    shapes = [Polygon(p) for p in polygons]
    annulus = box(*outer).difference(box(*inner))
    area_sum = sum(s.area for s in shapes)
    union = unary_union(shapes) if shapes else Polygon()
    return abs(area_sum - annulus.area) + union.symmetric_difference(annulus).area
