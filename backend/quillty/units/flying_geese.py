"""Flying geese: a 2:1 unit with a center goose and two flanking skies.

Horizontal directions span 1x2, vertical directions 2x1. Flipping across
the axis the goose points along changes the direction; flipping across
the other axis leaves the direction and swaps the two sky colors.
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict

from quillty.engine.definition import (
    IsCellOccupied,
    PatchDefinition,
    PatchRoles,
    PlacementValidation,
    SvgPath,
    Thumbnail,
    UnitConfig,
    UnitDefinition,
    VariantDefinition,
    VariantDependentSpan,
)
from quillty.engine.primitives import Triangle, flying_geese_triangles
from quillty.models.units import FlyingGeeseDirection, GridPosition, Span

ROTATION_MAP: dict[str, str] = {"up": "right", "right": "down", "down": "left", "left": "up"}
FLIP_H_MAP: dict[str, str] = {"left": "right", "right": "left", "up": "up", "down": "down"}
FLIP_V_MAP: dict[str, str] = {"up": "down", "down": "up", "left": "left", "right": "right"}


def span_for_direction(direction: str) -> Span:
    if direction in ("left", "right"):
        return Span(rows=1, cols=2)
    return Span(rows=2, cols=1)


def _swap_skies(roles: Mapping[str, str]) -> PatchRoles:
    return {"goose": roles["goose"], "sky1": roles["sky2"], "sky2": roles["sky1"]}


class FlyingGeeseConfigRoles(BaseModel):
    model_config = ConfigDict(extra="forbid")

    goose: str
    sky1: str
    sky2: str


class FlyingGeeseConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    variant: FlyingGeeseDirection
    patch_roles: FlyingGeeseConfigRoles


class FlyingGeeseDefinition(UnitDefinition):
    type_id = "flying_geese"
    display_name = "Flying Geese"
    category = "compound"
    description = "A 2:1 ratio unit with a center triangle and two flanking triangles"

    default_span = Span(rows=1, cols=2)
    span_behavior = VariantDependentSpan(span_for_direction)
    patches = (
        PatchDefinition("goose", "Goose"),
        PatchDefinition("sky1", "Sky 1"),
        PatchDefinition("sky2", "Sky 2"),
    )

    variants = (
        VariantDefinition("right", "Right", "▶"),
        VariantDefinition("left", "Left", "◀"),
        VariantDefinition("down", "Down", "▼"),
        VariantDefinition("up", "Up", "▲"),
    )
    default_variant = "right"

    config_schema = FlyingGeeseConfig
    thumbnail = Thumbnail(
        view_box="0 0 48 24",
        paths=(
            SvgPath("3,3 45,12 3,21", "currentColor"),
            SvgPath("3,3 45,3 45,12", "#E5E7EB"),
            SvgPath("3,21 45,12 45,21", "#E5E7EB"),
        ),
    )
    placement_mode = "two_tap"
    supports_batch_placement = False
    wide_in_picker = True

    def get_triangles(self, config: UnitConfig, width: float, height: float) -> list[Triangle]:
        return flying_geese_triangles(config.variant or self.default_variant, width, height)

    def rotate_variant(self, current: str) -> str:
        return ROTATION_MAP[current]

    def flip_horizontal_variant(self, current: str) -> str:
        return FLIP_H_MAP[current]

    def flip_vertical_variant(self, current: str) -> str:
        return FLIP_V_MAP[current]

    def flip_horizontal_patch_roles(self, roles: Mapping[str, str]) -> PatchRoles:
        return _swap_skies(roles)

    def flip_vertical_patch_roles(self, roles: Mapping[str, str]) -> PatchRoles:
        return _swap_skies(roles)

    def validate_placement(
        self, position: GridPosition, grid_size: int, is_cell_occupied: IsCellOccupied
    ) -> PlacementValidation:
        """The first tap needs at least one free orthogonal neighbour for the second."""
        row, col = position.row, position.col
        candidates = [
            GridPosition(row=row - 1, col=col),
            GridPosition(row=row + 1, col=col),
            GridPosition(row=row, col=col - 1),
            GridPosition(row=row, col=col + 1),
        ]
        free = [
            adj
            for adj in candidates
            if 0 <= adj.row < grid_size and 0 <= adj.col < grid_size and not is_cell_occupied(adj)
        ]
        if not free:
            return PlacementValidation(
                valid=False, reason="No adjacent empty cells available for Flying Geese"
            )
        return PlacementValidation(valid=True, valid_adjacent_cells=free)


def direction_between(first: GridPosition, second: GridPosition) -> str | None:
    """Direction implied by a two-tap placement, or None if the cells are not adjacent.

    The goose points from the first tap toward the second.
    """
    dr, dc = second.row - first.row, second.col - first.col
    return {(0, 1): "right", (0, -1): "left", (1, 0): "down", (-1, 0): "up"}.get((dr, dc))
