"""UnitDefinition: the self-describing plugin interface for one unit type.

A definition carries everything the generic pipeline needs: span, patches,
variants, geometry, rotation/flip behavior, placement rules and UI
metadata. Adding a unit type = subclassing ``UnitDefinition`` and
registering an instance. The bridge and renderers never change.

Optional behaviors are plain attributes defaulting to ``None``; a subclass
opts in by defining a method of the same name.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel

from quillty.engine.primitives import Triangle
from quillty.models.units import GridPosition, Span

UnitCategory = Literal["basic", "compound", "advanced"]
PlacementMode = Literal["single_tap", "two_tap"]

PatchRoles = dict[str, str]
IsCellOccupied = Callable[[GridPosition], bool]


@dataclass(frozen=True)
class UnitConfig:
    """Generic per-instance data: optional variant plus patch id -> role id."""

    patch_roles: Mapping[str, str]
    variant: str | None = None

    def as_dict(self) -> dict:
        return {"variant": self.variant, "patch_roles": dict(self.patch_roles)}


@dataclass(frozen=True)
class PatchDefinition:
    id: str
    name: str
    default_role: str = "background"


@dataclass(frozen=True)
class VariantDefinition:
    id: str
    label: str
    symbol: str = ""


@dataclass(frozen=True)
class SvgPath:
    points: str  # SVG polygon "points" attribute
    fill: str


@dataclass(frozen=True)
class Thumbnail:
    view_box: str
    paths: tuple[SvgPath, ...]


@dataclass(frozen=True)
class FixedSpan:
    span: Span
    kind: Literal["fixed"] = "fixed"

    def span_for(self, variant: str | None) -> Span:
        return self.span


@dataclass(frozen=True)
class VariantDependentSpan:
    get_span: Callable[[str], Span]
    kind: Literal["variant_dependent"] = "variant_dependent"

    def span_for(self, variant: str | None) -> Span:
        return self.get_span(variant or "")


SpanBehavior = FixedSpan | VariantDependentSpan


@dataclass
class PlacementValidation:
    valid: bool
    reason: str | None = None
    # Two-tap units: cells the second tap may land on
    valid_adjacent_cells: list[GridPosition] = field(default_factory=list)


class UnitDefinition:
    """Base class for unit types. Subclasses set the class attributes and
    implement ``get_triangles``."""

    # Identity
    type_id: str = ""
    display_name: str = ""
    category: UnitCategory = "basic"
    description: str = ""

    # Geometry configuration
    default_span: Span = Span(rows=1, cols=1)
    span_behavior: SpanBehavior = FixedSpan(Span(rows=1, cols=1))
    patches: tuple[PatchDefinition, ...] = ()

    # Variants
    variants: tuple[VariantDefinition, ...] = ()
    default_variant: str | None = None

    # Validation & UI
    config_schema: type[BaseModel] | None = None
    thumbnail: Thumbnail | None = None
    placement_mode: PlacementMode = "single_tap"
    supports_batch_placement: bool = False
    wide_in_picker: bool = False

    # Optional transforms: variant -> variant
    rotate_variant: Callable[[str], str] | None = None
    flip_horizontal_variant: Callable[[str], str] | None = None
    flip_vertical_variant: Callable[[str], str] | None = None

    # Optional transforms by color permutation: roles -> roles
    rotate_patch_roles: Callable[[Mapping[str, str]], PatchRoles] | None = None
    flip_horizontal_patch_roles: Callable[[Mapping[str, str]], PatchRoles] | None = None
    flip_vertical_patch_roles: Callable[[Mapping[str, str]], PatchRoles] | None = None

    # Optional placement rule
    validate_placement: Callable[[GridPosition, int, IsCellOccupied], PlacementValidation] | None = None

    def get_triangles(self, config: UnitConfig, width: float, height: float) -> list[Triangle]:
        raise NotImplementedError

    # -- derived helpers -------------------------------------------------

    @property
    def patch_ids(self) -> list[str]:
        return [p.id for p in self.patches]

    @property
    def variant_ids(self) -> list[str]:
        return [v.id for v in self.variants]

    def span_for(self, variant: str | None = None) -> Span:
        return self.span_behavior.span_for(variant or self.default_variant)

    def default_patch_roles(self) -> PatchRoles:
        return {p.id: p.default_role for p in self.patches}

    def validate_config(self, config: UnitConfig) -> BaseModel | None:
        """Structural check against ``config_schema``; raises pydantic.ValidationError."""
        if self.config_schema is None:
            return None
        return self.config_schema.model_validate(config.as_dict())

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.type_id!r}>"
