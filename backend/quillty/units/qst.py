"""Quarter-square triangle: four triangles meeting at the cell center.

The shape is symmetric under rotation, so there is no variant. Rotating
or flipping permutes the four patch colors instead.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, ConfigDict

from quillty.engine.definition import (
    FixedSpan,
    PatchDefinition,
    PatchRoles,
    SvgPath,
    Thumbnail,
    UnitConfig,
    UnitDefinition,
)
from quillty.engine.primitives import Triangle, qst_triangles
from quillty.models.units import Span


class QstConfigRoles(BaseModel):
    model_config = ConfigDict(extra="forbid")

    top: str
    right: str
    bottom: str
    left: str


class QstConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    variant: Literal[None] = None
    patch_roles: QstConfigRoles


class QstDefinition(UnitDefinition):
    type_id = "qst"
    display_name = "Quarter-Square Triangle"
    category = "basic"
    description = "Four triangles meeting at the center, each independently colorable"

    default_span = Span(rows=1, cols=1)
    span_behavior = FixedSpan(Span(rows=1, cols=1))
    patches = (
        PatchDefinition("top", "Top"),
        PatchDefinition("right", "Right"),
        PatchDefinition("bottom", "Bottom"),
        PatchDefinition("left", "Left"),
    )

    config_schema = QstConfig
    thumbnail = Thumbnail(
        view_box="0 0 24 24",
        paths=(
            SvgPath("3,3 21,3 12,12", "currentColor"),
            SvgPath("21,3 21,21 12,12", "#E5E7EB"),
            SvgPath("21,21 3,21 12,12", "currentColor"),
            SvgPath("3,21 3,3 12,12", "#E5E7EB"),
        ),
    )
    placement_mode = "single_tap"
    supports_batch_placement = True

    def get_triangles(self, config: UnitConfig, width: float, height: float) -> list[Triangle]:
        return qst_triangles(width, height)

    def rotate_patch_roles(self, roles: Mapping[str, str]) -> PatchRoles:
        # clockwise: each side takes the color of the side before it
        return {
            "top": roles["left"],
            "right": roles["top"],
            "bottom": roles["right"],
            "left": roles["bottom"],
        }

    def flip_horizontal_patch_roles(self, roles: Mapping[str, str]) -> PatchRoles:
        return {
            "top": roles["top"],
            "right": roles["left"],
            "bottom": roles["bottom"],
            "left": roles["right"],
        }

    def flip_vertical_patch_roles(self, roles: Mapping[str, str]) -> PatchRoles:
        return {
            "top": roles["bottom"],
            "right": roles["right"],
            "bottom": roles["top"],
            "left": roles["left"],
        }
