"""Unit registry: runtime catalog of unit definitions keyed by type id.

Usage:
    registry = get_registry()
    registry.register(HstDefinition())
    registry.freeze()
    definition = registry.get_or_raise("hst")

Built-in definitions are registered by ``quillty.units.register_builtin_units``,
called once from ``quillty.bootstrap.init_engine`` before freezing.
"""

from __future__ import annotations

import logging

from quillty.engine.config import DEFAULT_CONFIG
from quillty.engine.definition import UnitCategory, UnitConfig, UnitDefinition
from quillty.utils.geometry import polygon_area, tiling_error, within_bounds

logger = logging.getLogger(__name__)


class UnitRegistryError(ValueError):
    """Programmer error in a unit definition or in registration order."""


class UnknownUnitTypeError(KeyError):
    def __init__(self, type_id: str, known: list[str]) -> None:
        self.type_id = type_id
        self.known = known
        super().__init__(
            f"Unknown unit type: {type_id!r}. "
            f"Registered types: {', '.join(known) or '(none)'}"
        )

    def __str__(self) -> str:
        return self.args[0]


class UnitRegistry:
    """Registry of unit definitions, in registration order."""

    def __init__(self) -> None:
        self._units: dict[str, UnitDefinition] = {}
        self._frozen = False

    def register(self, definition: UnitDefinition) -> None:
        if self._frozen:
            raise UnitRegistryError(
                f"UnitRegistry is frozen. Cannot register {definition.type_id!r}."
            )
        if definition.type_id in self._units:
            raise UnitRegistryError(f"Duplicate unit type ID: {definition.type_id}")
        _validate_definition(definition)
        self._units[definition.type_id] = definition
        logger.debug("Registered unit type %s (%s)", definition.type_id, definition.category)

    def freeze(self) -> None:
        self._frozen = True
        logger.info("Unit registry frozen with %d types", len(self._units))

    def unfreeze(self) -> None:
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def clear(self) -> None:
        self._units.clear()
        self._frozen = False

    def get(self, type_id: str) -> UnitDefinition | None:
        return self._units.get(type_id)

    def get_or_raise(self, type_id: str) -> UnitDefinition:
        definition = self._units.get(type_id)
        if definition is None:
            raise UnknownUnitTypeError(type_id, self.type_ids())
        return definition

    def all(self) -> list[UnitDefinition]:
        return list(self._units.values())

    def get_by_category(self, category: UnitCategory) -> list[UnitDefinition]:
        return [d for d in self._units.values() if d.category == category]

    def type_ids(self) -> list[str]:
        return list(self._units)

    def has(self, type_id: str) -> bool:
        return type_id in self._units

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._units

    def __len__(self) -> int:
        return len(self._units)

    @property
    def size(self) -> int:
        return len(self._units)


def _validate_definition(definition: UnitDefinition) -> None:
    type_id = definition.type_id
    if not type_id or not isinstance(type_id, str):
        raise UnitRegistryError("Unit definition must have a non-empty type_id string")
    if not definition.display_name:
        raise UnitRegistryError(f"Unit {type_id!r} must have a display_name")
    if not definition.patches:
        raise UnitRegistryError(f"Unit {type_id!r} must have at least one patch")
    if (
        not callable(getattr(definition, "get_triangles", None))
        or type(definition).get_triangles is UnitDefinition.get_triangles
    ):
        raise UnitRegistryError(f"Unit {type_id!r} must implement get_triangles()")

    variant_ids = definition.variant_ids
    if variant_ids:
        if not definition.default_variant:
            raise UnitRegistryError(f"Unit {type_id!r} has variants but no default_variant")
        if definition.default_variant not in variant_ids:
            raise UnitRegistryError(
                f"Unit {type_id!r} default_variant {definition.default_variant!r} "
                f"is not in variants: {', '.join(variant_ids)}"
            )

    _check_geometry(definition)


def _check_geometry(definition: UnitDefinition) -> None:
    """Every variant must tile its span rectangle, stay inside it and emit only known patches."""
    known = set(definition.patch_ids)
    roles = definition.default_patch_roles()
    for variant in definition.variant_ids or [None]:
        span = definition.span_for(variant)
        width, height = float(span.cols), float(span.rows)
        triangles = definition.get_triangles(UnitConfig(roles, variant), width, height)
        unknown = {t.patch_id for t in triangles} - known
        if unknown:
            raise UnitRegistryError(
                f"Unit {definition.type_id!r} emits undeclared patches: {sorted(unknown)}"
            )
        stray = [t.patch_id for t in triangles if not within_bounds(t.as_array(), width, height)]
        if stray:
            raise UnitRegistryError(
                f"Unit {definition.type_id!r} variant {variant!r} has vertices outside its span "
                f"in patches {sorted(set(stray))}"
            )
        polygons = [t.as_tuples() for t in triangles]
        area = sum(polygon_area(p) for p in polygons)
        if abs(area - width * height) > DEFAULT_CONFIG.tiling_tolerance:
            raise UnitRegistryError(
                f"Unit {definition.type_id!r} variant {variant!r} does not tile its span "
                f"(patch area {area:.3g}, span area {width * height:.3g})"
            )
        # equal area can still hide an overlap paired with a gap
        err = tiling_error(polygons, width, height)
        if err > DEFAULT_CONFIG.tiling_tolerance:
            raise UnitRegistryError(
                f"Unit {definition.type_id!r} variant {variant!r} does not tile its span "
                f"(area error {err:.3g})"
            )


# Module-level singleton
_registry = UnitRegistry()


def get_registry() -> UnitRegistry:
    return _registry
