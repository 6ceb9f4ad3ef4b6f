"""Pattern rendering: block instances placed, transformed and colored.

Every instance draws its library block into one ``block_px`` square cell.
Rotation and flips turn the whole block about the cell center: flips
apply first, then a clockwise rotation in screen (y-down) axes. Border
rings wrap the instance grid through ``quillty.engine.borders``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace

import numpy as np
from numpy.typing import NDArray

from quillty.engine.borders import BorderGeometry, Rect, render_border_config
from quillty.engine.bridge import ColoredTriangle, get_unit_triangles_with_colors
from quillty.engine.config import DEFAULT_CONFIG, EngineConfig
from quillty.models.block import Block
from quillty.pattern.models import BlockInstance, Pattern

logger = logging.getLogger(__name__)


def instance_transform(instance: BlockInstance, size: float) -> NDArray[np.float64]:
    """3x3 affine matrix mapping block-local points into the transformed cell."""
    half = size / 2.0
    to_center = np.array([[1, 0, -half], [0, 1, -half], [0, 0, 1]], dtype=np.float64)
    back = np.array([[1, 0, half], [0, 1, half], [0, 0, 1]], dtype=np.float64)
    flip = np.diag([
        -1.0 if instance.flip_horizontal else 1.0,
        -1.0 if instance.flip_vertical else 1.0,
        1.0,
    ])
    theta = np.deg2rad(instance.rotation)
    # exact quarter turns, no float residue in cos/sin
    cos, sin = np.rint(np.cos(theta)), np.rint(np.sin(theta))
    rotate = np.array([[cos, -sin, 0], [sin, cos, 0], [0, 0, 1]], dtype=np.float64)
    return back @ rotate @ flip @ to_center


def transform_points(
    flat: list[float], matrix: NDArray[np.float64], dx: float = 0.0, dy: float = 0.0
) -> list[float]:
    points = np.asarray(flat, dtype=np.float64).reshape(-1, 2)
    homogeneous = np.hstack([points, np.ones((len(points), 1))])
    moved = (matrix @ homogeneous.T).T[:, :2] + (dx, dy)
    return [float(v) for v in moved.reshape(-1)]


def render_instance(
    instance: BlockInstance,
    block: Block,
    block_px: float,
    pattern: Pattern,
    origin: tuple[float, float] = (0.0, 0.0),
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[ColoredTriangle]:
    """Triangles of ``block`` in pattern pixel space for this placement.

    Colors come from the pattern palette with the instance's overrides on
    top, so a block looks the same wherever the pattern recolors it.
    """
    cell = block_px / block.grid_size
    matrix = instance_transform(instance, block_px)
    ox = origin[0] + instance.position.col * block_px
    oy = origin[1] + instance.position.row * block_px

    result = []
    for unit in block.units:
        local = np.array(
            [[1, 0, unit.position.col * cell], [0, 1, unit.position.row * cell], [0, 0, 1]],
            dtype=np.float64,
        )
        placed = matrix @ local
        for tri in get_unit_triangles_with_colors(
            unit, cell, pattern.palette, instance.palette_overrides, config.fallback_color
        ):
            result.append(replace(tri, points=transform_points(tri.points, placed, ox, oy)))
    return result


@dataclass(frozen=True)
class PatternRender:
    width: float
    height: float
    grid_rect: Rect
    instances: list[tuple[BlockInstance, list[ColoredTriangle]]]
    borders: BorderGeometry | None
    # Instances whose block was not supplied
    missing: list[BlockInstance]


def render_pattern(
    pattern: Pattern,
    blocks: Mapping[str, Block],
    block_px: float,
    pixels_per_inch: float = DEFAULT_CONFIG.pixels_per_inch,
    config: EngineConfig = DEFAULT_CONFIG,
) -> PatternRender:
    border_config = pattern.border_config
    thickness = 0.0
    if border_config is not None and border_config.enabled:
        thickness = border_config.total_width_inches * pixels_per_inch

    rows, cols = pattern.grid_size.rows, pattern.grid_size.cols
    grid_rect = Rect(thickness, thickness, cols * block_px, rows * block_px)
    borders = render_border_config(
        border_config, grid_rect, pattern.palette, pixels_per_inch, None, config
    )

    rendered = []
    missing = []
    for instance in pattern.block_instances:
        block = blocks.get(instance.block_id)
        if block is None:
            logger.warning("Block %s for instance %s not loaded", instance.block_id, instance.id)
            missing.append(instance)
            continue
        triangles = render_instance(
            instance, block, block_px, pattern, (grid_rect.x, grid_rect.y), config
        )
        rendered.append((instance, triangles))

    return PatternRender(
        width=grid_rect.width + 2 * thickness,
        height=grid_rect.height + 2 * thickness,
        grid_rect=grid_rect,
        instances=rendered,
        borders=borders,
        missing=missing,
    )
