"""Write SVG markup for blocks, patterns, border rings and unit thumbnails."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any
from xml.sax.saxutils import escape, quoteattr

from quillty.engine.borders import BorderGeometry, Rect, render_border_config
from quillty.engine.bridge import get_unit_triangles_with_colors
from quillty.engine.config import DEFAULT_CONFIG, EngineConfig
from quillty.engine.definition import UnitDefinition
from quillty.models.block import Block
from quillty.models.borders import BorderConfig
from quillty.models.palette import Palette
from quillty.models.units import Unit
from quillty.pattern.models import Pattern
from quillty.pattern.render import render_pattern


def _fmt(value: float) -> str:
    # + 0.0 folds negative zero
    return f"{value + 0.0:g}"


def _points(flat: Sequence[float], dx: float = 0.0, dy: float = 0.0) -> str:
    return " ".join(
        f"{_fmt(flat[i] + dx)},{_fmt(flat[i + 1] + dy)}" for i in range(0, len(flat), 2)
    )


def serialize_svg(
    elements: list[dict[str, Any]],
    canvas_w: float = 24.0,
    canvas_h: float = 24.0,
    title: str = "",
    description: str = "",
    styles: dict[str, str] | None = None,
    view_box: str | None = None,
) -> str:
    """Generate SVG markup from element definitions (``tag`` plus attributes)."""
    box = view_box or f"0 0 {_fmt(canvas_w)} {_fmt(canvas_h)}"
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<svg viewBox="{box}" width="{_fmt(canvas_w)}" height="{_fmt(canvas_h)}"'
        f' xmlns="http://www.w3.org/2000/svg" role="img">',
    ]

    if title:
        lines.append(f"  <title>{escape(title)}</title>")
    if description:
        lines.append(f"  <desc>{escape(description)}</desc>")

    if styles:
        lines.append("  <style>")
        for selector, props in styles.items():
            lines.append(f"    {selector} {{ {props} }}")
        lines.append("  </style>")

    for elem in elements:
        tag = elem.get("tag", "path")
        attrs = {k: v for k, v in elem.items() if k != "tag"}
        attr_str = " ".join(f"{k}={quoteattr(str(v))}" for k, v in attrs.items())
        lines.append(f"  <{tag} {attr_str} />")

    lines.append("</svg>")
    return "\n".join(lines)


def unit_elements(
    units: Sequence[Unit],
    cell_size: float,
    palette: Palette,
    origin: tuple[float, float] = (0.0, 0.0),
    overrides: Mapping[str, str] | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[dict[str, Any]]:
    """One polygon per unit triangle, placed at the unit's grid cell."""
    ox, oy = origin
    elements = []
    for unit in units:
        dx = ox + unit.position.col * cell_size
        dy = oy + unit.position.row * cell_size
        for tri in get_unit_triangles_with_colors(
            unit, cell_size, palette, overrides, config.fallback_color
        ):
            elements.append({
                "tag": "polygon",
                "points": _points(tri.points, dx, dy),
                "fill": tri.color,
                "data-unit": unit.id,
                "data-patch": tri.patch_id,
            })
    return elements


def border_elements(geometry: BorderGeometry) -> list[dict[str, Any]]:
    elements: list[dict[str, Any]] = []
    for ring in geometry.rings:
        for patch in ring.patches:
            elements.append({
                "tag": "polygon",
                "points": _points(patch.flat_points()),
                "fill": patch.color,
                "data-border": ring.border_id,
            })
        for seam in ring.seams:
            elements.append({
                "tag": "line",
                "x1": _fmt(seam.x1),
                "y1": _fmt(seam.y1),
                "x2": _fmt(seam.x2),
                "y2": _fmt(seam.y2),
                "stroke": geometry.seam_color,
                "stroke-width": _fmt(geometry.seam_width),
            })
    o = geometry.outer
    elements.append({
        "tag": "rect",
        "x": _fmt(o.x),
        "y": _fmt(o.y),
        "width": _fmt(o.width),
        "height": _fmt(o.height),
        "fill": "none",
        "stroke": geometry.stroke_color,
        "stroke-width": _fmt(geometry.stroke_width),
    })
    return elements


def block_to_svg(
    units: Sequence[Unit],
    grid_size: int,
    cell_size: float,
    palette: Palette,
    border_config: BorderConfig | None = None,
    pixels_per_inch: float = DEFAULT_CONFIG.pixels_per_inch,
    overrides: Mapping[str, str] | None = None,
    title: str = "",
    config: EngineConfig = DEFAULT_CONFIG,
) -> str:
    """Render a block (and its borders, when enabled) as a standalone SVG."""
    grid_px = grid_size * cell_size
    thickness = 0.0
    if border_config is not None and border_config.enabled:
        thickness = border_config.total_width_inches * pixels_per_inch

    grid_rect = Rect(thickness, thickness, grid_px, grid_px)
    geometry = render_border_config(
        border_config, grid_rect, palette, pixels_per_inch, overrides, config
    )

    elements: list[dict[str, Any]] = []
    if geometry is not None:
        elements.extend(border_elements(geometry))
    elements.extend(
        unit_elements(units, cell_size, palette, (grid_rect.x, grid_rect.y), overrides, config)
    )

    side = grid_px + 2 * thickness
    return serialize_svg(elements, side, side, title=title)


def thumbnail_to_svg(definition: UnitDefinition, size: float = 24.0) -> str:
    """Picker icon for a unit type, scaled to ``size`` pixels high."""
    if definition.thumbnail is None:
        return serialize_svg([], size, size, title=definition.display_name)
    view_box = definition.thumbnail.view_box
    _, _, vb_w, vb_h = (float(v) for v in view_box.split())
    elements = [
        {"tag": "polygon", "points": path.points, "fill": path.fill}
        for path in definition.thumbnail.paths
    ]
    return serialize_svg(
        elements,
        canvas_w=size * vb_w / vb_h,
        canvas_h=size,
        title=definition.display_name,
        view_box=view_box,
    )


def pattern_to_svg(
    pattern: Pattern,
    blocks: Mapping[str, Block],
    block_px: float,
    pixels_per_inch: float = DEFAULT_CONFIG.pixels_per_inch,
    title: str = "",
    config: EngineConfig = DEFAULT_CONFIG,
) -> str:
    """Render a pattern's placed blocks and borders as a standalone SVG."""
    rendered = render_pattern(pattern, blocks, block_px, pixels_per_inch, config)
    elements: list[dict[str, Any]] = []
    if rendered.borders is not None:
        elements.extend(border_elements(rendered.borders))
    for instance, triangles in rendered.instances:
        for tri in triangles:
            elements.append({
                "tag": "polygon",
                "points": _points(tri.points),
                "fill": tri.color,
                "data-instance": instance.id,
                "data-patch": tri.patch_id,
            })
    return serialize_svg(elements, rendered.width, rendered.height, title=title or pattern.title)
