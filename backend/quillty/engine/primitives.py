"""Geometry primitives: triangle vertex sets for each unit shape.

Pure functions of (orientation, width, height). Every function returns
triangles that exactly tile the width x height rectangle, with all
vertices inside [0, width] x [0, height]. Screen axes: y grows downward.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Triangle:
    """Three vertices tagged with the patch they color."""

    patch_id: str
    points: tuple[Point, Point, Point]

    def flat_points(self) -> list[float]:
        """[x0, y0, x1, y1, x2, y2] for polygon renderers."""
        return [c for p in self.points for c in (p.x, p.y)]

    def as_array(self) -> NDArray[np.float64]:
        return np.array([(p.x, p.y) for p in self.points], dtype=np.float64)

    def as_tuples(self) -> list[tuple[float, float]]:
        return [(p.x, p.y) for p in self.points]


def _tri(patch_id: str, *coords: tuple[float, float]) -> Triangle:
    a, b, c = (Point(x, y) for x, y in coords)
    return Triangle(patch_id, (a, b, c))


def square_triangles(width: float, height: float, patch_id: str = "fill") -> list[Triangle]:
    """Solid square as two triangles of one patch."""
    return [
        _tri(patch_id, (0, 0), (width, 0), (0, height)),
        _tri(patch_id, (width, 0), (width, height), (0, height)),
    ]


def hst_triangles(variant: str, width: float, height: float) -> list[Triangle]:
    """Half-square triangle: primary fills the corner named by ``variant``."""
    w, h = width, height
    if variant == "nw":
        # ◸ split along the top-right / bottom-left diagonal
        return [
            _tri("primary", (0, 0), (w, 0), (0, h)),
            _tri("secondary", (w, 0), (w, h), (0, h)),
        ]
    if variant == "ne":
        # ◹
        return [
            _tri("primary", (0, 0), (w, 0), (w, h)),
            _tri("secondary", (0, 0), (w, h), (0, h)),
        ]
    if variant == "sw":
        # ◺
        return [
            _tri("primary", (0, 0), (0, h), (w, h)),
            _tri("secondary", (0, 0), (w, 0), (w, h)),
        ]
    if variant == "se":
        # ◿
        return [
            _tri("primary", (w, 0), (w, h), (0, h)),
            _tri("secondary", (0, 0), (w, 0), (0, h)),
        ]
    raise ValueError(f"Unknown HST variant: {variant!r}")


def flying_geese_triangles(direction: str, width: float, height: float) -> list[Triangle]:
    """Goose triangle pointing toward ``direction`` plus two flanking sky triangles."""
    w, h = width, height
    if direction == "right":
        return [
            _tri("goose", (0, 0), (w, h / 2), (0, h)),
            _tri("sky1", (0, 0), (w, 0), (w, h / 2)),
            _tri("sky2", (0, h), (w, h / 2), (w, h)),
        ]
    if direction == "left":
        return [
            _tri("goose", (w, 0), (0, h / 2), (w, h)),
            _tri("sky1", (0, 0), (w, 0), (0, h / 2)),
            _tri("sky2", (0, h / 2), (w, h), (0, h)),
        ]
    if direction == "down":
        return [
            _tri("goose", (0, 0), (w / 2, h), (w, 0)),
            _tri("sky1", (0, 0), (0, h), (w / 2, h)),
            _tri("sky2", (w, 0), (w / 2, h), (w, h)),
        ]
    if direction == "up":
        return [
            _tri("goose", (0, h), (w / 2, 0), (w, h)),
            _tri("sky1", (0, 0), (w / 2, 0), (0, h)),
            _tri("sky2", (w / 2, 0), (w, 0), (w, h)),
        ]
    raise ValueError(f"Unknown flying geese direction: {direction!r}")


def qst_triangles(width: float, height: float) -> list[Triangle]:
    """Four triangles meeting at the center, one per side."""
    w, h = width, height
    cx, cy = w / 2, h / 2
    return [
        _tri("top", (0, 0), (w, 0), (cx, cy)),
        _tri("right", (w, 0), (w, h), (cx, cy)),
        _tri("bottom", (w, h), (0, h), (cx, cy)),
        _tri("left", (0, h), (0, 0), (cx, cy)),
    ]
