"""Border geometry: nested rectangular frames around the block grid.

Borders are stored innermost first. Geometry is computed outermost first:
the outer rectangle is the grid grown by the total border thickness, and
each ring shrinks the working rectangle by its own width for the next.

Every ring's patches exactly cover the annulus between its outer and
inner rectangles; seam lines are drawn on the patch boundaries.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Literal

from quillty.engine.config import DEFAULT_CONFIG, EngineConfig
from quillty.models.borders import BorderConfig, BorderSpec
from quillty.models.palette import Palette

logger = logging.getLogger(__name__)

Side = Literal["top", "bottom", "left", "right", "nw", "ne", "sw", "se"]
Point2 = tuple[float, float]


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def inset(self, amount: float) -> Rect:
        return Rect(self.x + amount, self.y + amount, self.width - 2 * amount, self.height - 2 * amount)

    def outset(self, amount: float) -> Rect:
        return self.inset(-amount)

    def bounds(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.right, self.bottom)

    def corners(self) -> list[Point2]:
        return [(self.x, self.y), (self.right, self.y), (self.right, self.bottom), (self.x, self.bottom)]


@dataclass(frozen=True)
class BorderPatch:
    """One filled region of a ring: a strip, trapezoid or cornerstone."""

    side: Side
    points: tuple[Point2, ...]
    role_id: str
    color: str

    def flat_points(self) -> list[float]:
        return [c for p in self.points for c in p]


@dataclass(frozen=True)
class SeamLine:
    x1: float
    y1: float
    x2: float
    y2: float


@dataclass
class BorderRing:
    border_id: str
    corner_style: str
    outer: Rect
    inner: Rect
    patches: list[BorderPatch] = field(default_factory=list)
    seams: list[SeamLine] = field(default_factory=list)


@dataclass
class BorderGeometry:
    outer: Rect
    rings: list[BorderRing]  # outermost first
    stroke_color: str
    stroke_width: float
    seam_color: str
    seam_width: float

    @property
    def total_thickness(self) -> float:
        return sum(r.inner.x - r.outer.x for r in self.rings)


def _rect_patch(side: Side, x: float, y: float, w: float, h: float, role_id: str, color: str) -> BorderPatch:
    return BorderPatch(side, ((x, y), (x + w, y), (x + w, y + h), (x, y + h)), role_id, color)


def _butted(o: Rect, i: Rect, bw: float, role: str, color: str) -> tuple[list[BorderPatch], list[SeamLine]]:
    # top and bottom run the full outer width; sides fill between them
    patches = [
        _rect_patch("top", o.x, o.y, o.width, bw, role, color),
        _rect_patch("bottom", o.x, o.bottom - bw, o.width, bw, role, color),
        _rect_patch("left", o.x, o.y + bw, bw, o.height - 2 * bw, role, color),
        _rect_patch("right", o.right - bw, o.y + bw, bw, o.height - 2 * bw, role, color),
    ]
    seams = [
        SeamLine(i.x, o.y, i.x, i.y),
        SeamLine(i.right, o.y, i.right, i.y),
        SeamLine(i.x, i.bottom, i.x, o.bottom),
        SeamLine(i.right, i.bottom, i.right, o.bottom),
    ]
    return patches, seams


def _mitered(o: Rect, i: Rect, role: str, color: str) -> tuple[list[BorderPatch], list[SeamLine]]:
    patches = [
        BorderPatch("top", ((o.x, o.y), (o.right, o.y), (i.right, i.y), (i.x, i.y)), role, color),
        BorderPatch("bottom", ((i.x, i.bottom), (i.right, i.bottom), (o.right, o.bottom), (o.x, o.bottom)), role, color),
        BorderPatch("left", ((o.x, o.y), (i.x, i.y), (i.x, i.bottom), (o.x, o.bottom)), role, color),
        BorderPatch("right", ((i.right, i.y), (o.right, o.y), (o.right, o.bottom), (i.right, i.bottom)), role, color),
    ]
    # 45 degree seams from each outer corner to its inner corner
    seams = [SeamLine(ox, oy, ix, iy) for (ox, oy), (ix, iy) in zip(o.corners(), i.corners())]
    return patches, seams


def _cornerstone(
    o: Rect, i: Rect, bw: float, role: str, color: str, cs_role: str, cs_color: str
) -> tuple[list[BorderPatch], list[SeamLine]]:
    patches = [
        _rect_patch("top", o.x + bw, o.y, o.width - 2 * bw, bw, role, color),
        _rect_patch("bottom", o.x + bw, o.bottom - bw, o.width - 2 * bw, bw, role, color),
        _rect_patch("left", o.x, o.y + bw, bw, o.height - 2 * bw, role, color),
        _rect_patch("right", o.right - bw, o.y + bw, bw, o.height - 2 * bw, role, color),
        _rect_patch("nw", o.x, o.y, bw, bw, cs_role, cs_color),
        _rect_patch("ne", o.right - bw, o.y, bw, bw, cs_role, cs_color),
        _rect_patch("sw", o.x, o.bottom - bw, bw, bw, cs_role, cs_color),
        _rect_patch("se", o.right - bw, o.bottom - bw, bw, bw, cs_role, cs_color),
    ]
    seams = [
        SeamLine(i.x, o.y, i.x, i.y),
        SeamLine(o.x, i.y, i.x, i.y),
        SeamLine(i.right, o.y, i.right, i.y),
        SeamLine(i.right, i.y, o.right, i.y),
        SeamLine(i.x, i.bottom, i.x, o.bottom),
        SeamLine(o.x, i.bottom, i.x, i.bottom),
        SeamLine(i.right, i.bottom, i.right, o.bottom),
        SeamLine(i.right, i.bottom, o.right, i.bottom),
    ]
    return patches, seams


def compute_ring(
    border: BorderSpec,
    outer: Rect,
    palette: Palette,
    pixels_per_inch: float,
    overrides: Mapping[str, str] | None = None,
    fallback_color: str = DEFAULT_CONFIG.fallback_color,
) -> BorderRing:
    """Geometry for a single ring whose outer edge is ``outer``."""
    bw = border.width_inches * pixels_per_inch
    inner = outer.inset(bw)
    role = border.fabric_role
    color = palette.resolve_color(role, overrides, fallback=fallback_color)

    if border.corner_style == "butted":
        patches, seams = _butted(outer, inner, bw, role, color)
    elif border.corner_style == "mitered":
        patches, seams = _mitered(outer, inner, role, color)
    elif border.corner_style == "cornerstone":
        cs_role = border.cornerstone_fabric_role or role
        cs_color = palette.resolve_color(cs_role, overrides, fallback=fallback_color)
        patches, seams = _cornerstone(outer, inner, bw, role, color, cs_role, cs_color)
    else:
        raise ValueError(f"Unknown corner style: {border.corner_style!r}")

    return BorderRing(border.id, border.corner_style, outer, inner, patches, seams)


def compute_border_geometry(
    borders: Sequence[BorderSpec],
    grid_rect: Rect,
    palette: Palette,
    pixels_per_inch: float = DEFAULT_CONFIG.pixels_per_inch,
    overrides: Mapping[str, str] | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> BorderGeometry:
    """Nested rings around ``grid_rect`` for ``borders`` given innermost first."""
    total = sum(b.width_inches for b in borders) * pixels_per_inch
    outer = grid_rect.outset(total)

    rings: list[BorderRing] = []
    working = outer
    for border in reversed(borders):
        ring = compute_ring(border, working, palette, pixels_per_inch, overrides, config.fallback_color)
        rings.append(ring)
        working = ring.inner

    logger.debug("Computed %d border rings, outer %s", len(rings), outer)
    return BorderGeometry(
        outer=outer,
        rings=rings,
        stroke_color=config.outer_stroke_color,
        stroke_width=config.outer_stroke_width,
        seam_color=config.seam_color,
        seam_width=config.seam_width,
    )


def render_border_config(
    border_config: BorderConfig | None,
    grid_rect: Rect,
    palette: Palette,
    pixels_per_inch: float = DEFAULT_CONFIG.pixels_per_inch,
    overrides: Mapping[str, str] | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> BorderGeometry | None:
    """None when borders are disabled or there are none."""
    if border_config is None or not border_config.enabled or not border_config.borders:
        return None
    return compute_border_geometry(
        border_config.borders, grid_rect, palette, pixels_per_inch, overrides, config
    )
