"""Square: the simplest unit, one solid 1x1 patch.

Drawn as two triangles so it goes through the same polygon pipeline as
every other unit. Symmetric, so it has no rotation or flip behavior.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from quillty.engine.definition import (
    FixedSpan,
    PatchDefinition,
    SvgPath,
    Thumbnail,
    UnitConfig,
    UnitDefinition,
)
from quillty.engine.primitives import Triangle, square_triangles
from quillty.models.units import Span


class SquarePatchRoles(BaseModel):
    model_config = ConfigDict(extra="forbid")

    fill: str


class SquareConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    variant: Literal[None] = None
    patch_roles: SquarePatchRoles


class SquareDefinition(UnitDefinition):
    type_id = "square"
    display_name = "Square"
    category = "basic"
    description = "A solid square filling one grid cell"

    default_span = Span(rows=1, cols=1)
    span_behavior = FixedSpan(Span(rows=1, cols=1))
    patches = (PatchDefinition("fill", "Fill"),)

    config_schema = SquareConfig
    thumbnail = Thumbnail(
        view_box="0 0 24 24",
        paths=(SvgPath("3,3 21,3 21,21 3,21", "currentColor"),),
    )
    placement_mode = "single_tap"
    supports_batch_placement = True

    def get_triangles(self, config: UnitConfig, width: float, height: float) -> list[Triangle]:
        return square_triangles(width, height, patch_id="fill")
