"""Half-square triangle: one cell split on a diagonal into two patches.

The variant names the corner the primary triangle fills. Rotation and
flips are geometric: they change the variant, never the colors.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from quillty.engine.definition import (
    FixedSpan,
    PatchDefinition,
    SvgPath,
    Thumbnail,
    UnitConfig,
    UnitDefinition,
    VariantDefinition,
)
from quillty.engine.primitives import Triangle, hst_triangles
from quillty.models.units import HstVariant, Span

# 90 degrees clockwise
ROTATION_MAP: dict[str, str] = {"nw": "ne", "ne": "se", "se": "sw", "sw": "nw"}
FLIP_H_MAP: dict[str, str] = {"nw": "ne", "ne": "nw", "sw": "se", "se": "sw"}
FLIP_V_MAP: dict[str, str] = {"nw": "sw", "sw": "nw", "ne": "se", "se": "ne"}


class HstPatchRoles(BaseModel):
    model_config = ConfigDict(extra="forbid")

    primary: str
    secondary: str


class HstConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    variant: HstVariant
    patch_roles: HstPatchRoles


class HstDefinition(UnitDefinition):
    type_id = "hst"
    display_name = "Half-Square Triangle"
    category = "basic"
    description = "Two triangles in one cell, divided by a diagonal"

    default_span = Span(rows=1, cols=1)
    span_behavior = FixedSpan(Span(rows=1, cols=1))
    patches = (
        PatchDefinition("primary", "Primary"),
        PatchDefinition("secondary", "Secondary"),
    )

    variants = (
        VariantDefinition("nw", "Top-Left", "◸"),
        VariantDefinition("ne", "Top-Right", "◹"),
        VariantDefinition("sw", "Bottom-Left", "◺"),
        VariantDefinition("se", "Bottom-Right", "◿"),
    )
    default_variant = "nw"

    config_schema = HstConfig
    thumbnail = Thumbnail(
        view_box="0 0 24 24",
        paths=(
            SvgPath("3,3 21,3 3,21", "currentColor"),
            SvgPath("21,3 21,21 3,21", "#E5E7EB"),
        ),
    )
    placement_mode = "single_tap"
    supports_batch_placement = True

    def get_triangles(self, config: UnitConfig, width: float, height: float) -> list[Triangle]:
        return hst_triangles(config.variant or self.default_variant, width, height)

    def rotate_variant(self, current: str) -> str:
        return ROTATION_MAP[current]

    def flip_horizontal_variant(self, current: str) -> str:
        return FLIP_H_MAP[current]

    def flip_vertical_variant(self, current: str) -> str:
        return FLIP_V_MAP[current]
