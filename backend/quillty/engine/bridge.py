"""Unit config bridge: the one place that knows each unit record's fields.

Typed ``Unit`` records go in, the registry's generic ``UnitConfig``
(``variant`` plus ``patch_roles``) comes out, and generic results come back
as partial updates: plain dicts keyed by unit attribute name, suitable for
``merge_unit_fields`` and for recording in an ``update_unit`` operation.

Nothing outside this module switches on ``unit.type``.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from quillty.engine.config import DEFAULT_CONFIG
from quillty.engine.definition import UnitConfig, UnitDefinition
from quillty.engine.registry import get_registry
from quillty.models.palette import Palette
from quillty.models.units import (
    UNIT_ADAPTER,
    FlyingGeeseUnit,
    GridPosition,
    HstUnit,
    QstUnit,
    Span,
    SquareUnit,
    Unit,
    merge_unit_fields,
)

logger = logging.getLogger(__name__)

UnitUpdate = dict[str, Any]


@dataclass(frozen=True)
class ColoredTriangle:
    patch_id: str
    role_id: str | None
    points: list[float]  # flat [x0, y0, x1, y1, x2, y2]
    color: str


def _definition(type_id: str) -> UnitDefinition:
    return get_registry().get_or_raise(type_id)


# ---------------------------------------------------------------------------
# Unit -> UnitConfig
# ---------------------------------------------------------------------------

def to_unit_config(unit: Unit) -> UnitConfig:
    if isinstance(unit, SquareUnit):
        return UnitConfig(patch_roles={"fill": unit.fabric_role})
    if isinstance(unit, HstUnit):
        return UnitConfig(
            patch_roles={"primary": unit.fabric_role, "secondary": unit.secondary_fabric_role},
            variant=unit.variant,
        )
    if isinstance(unit, FlyingGeeseUnit):
        return UnitConfig(patch_roles=unit.patch_fabric_roles.model_dump(), variant=unit.direction)
    if isinstance(unit, QstUnit):
        return UnitConfig(patch_roles=unit.patch_fabric_roles.model_dump())
    raise TypeError(f"Not a unit record: {unit!r}")


# ---------------------------------------------------------------------------
# Generic config -> typed partial update
# ---------------------------------------------------------------------------

def _config_to_unit_update(
    unit_type: str,
    variant: str | None,
    patch_roles: Mapping[str, str] | None,
) -> UnitUpdate:
    update: UnitUpdate = {}
    if unit_type == "square":
        if patch_roles and "fill" in patch_roles:
            update["fabric_role"] = patch_roles["fill"]
    elif unit_type == "hst":
        if variant is not None:
            update["variant"] = variant
        if patch_roles:
            if "primary" in patch_roles:
                update["fabric_role"] = patch_roles["primary"]
            if "secondary" in patch_roles:
                update["secondary_fabric_role"] = patch_roles["secondary"]
    elif unit_type == "flying_geese":
        if variant is not None:
            update["direction"] = variant
            # span follows direction
            update["span"] = _definition("flying_geese").span_for(variant).model_dump()
        if patch_roles:
            update["patch_fabric_roles"] = {
                k: patch_roles[k] for k in ("goose", "sky1", "sky2") if k in patch_roles
            }
    elif unit_type == "qst":
        if patch_roles:
            update["patch_fabric_roles"] = {
                k: patch_roles[k] for k in ("top", "right", "bottom", "left") if k in patch_roles
            }
    return update


def patch_role_update(unit_type: str, patch_id: str, role_id: str) -> UnitUpdate:
    """Partial update that sets a single patch of a ``unit_type`` record."""
    return _config_to_unit_update(unit_type, None, {patch_id: role_id})


def capture_fields(unit: Unit, keys: Mapping[str, Any] | list[str]) -> UnitUpdate:
    """Current values of ``keys`` on ``unit``, in the same plain shape as an update."""
    captured: UnitUpdate = {}
    for key in keys:
        value = getattr(unit, key)
        captured[key] = value.model_dump() if isinstance(value, BaseModel) else value
    return captured


# ---------------------------------------------------------------------------
# Role queries
# ---------------------------------------------------------------------------

def get_all_role_ids(unit: Unit) -> list[str]:
    return list(to_unit_config(unit).patch_roles.values())


def unit_uses_role(unit: Unit, role_id: str) -> bool:
    return role_id in get_all_role_ids(unit)


# ---------------------------------------------------------------------------
# Rotate / flip
# ---------------------------------------------------------------------------

def apply_rotation(unit: Unit) -> UnitUpdate | None:
    """Rotate 90 degrees clockwise. None when the unit type does not rotate."""
    definition = _definition(unit.type)
    config = to_unit_config(unit)

    if definition.rotate_variant is not None and config.variant:
        return _config_to_unit_update(unit.type, definition.rotate_variant(config.variant), None)
    if definition.rotate_patch_roles is not None:
        return _config_to_unit_update(
            unit.type, None, definition.rotate_patch_roles(config.patch_roles)
        )
    return None


def _apply_flip(unit: Unit, axis: str) -> UnitUpdate | None:
    definition = _definition(unit.type)
    config = to_unit_config(unit)
    flip_variant = getattr(definition, f"flip_{axis}_variant")
    flip_roles = getattr(definition, f"flip_{axis}_patch_roles")

    if flip_variant is not None and config.variant:
        flipped = flip_variant(config.variant)
        if flipped != config.variant:
            # geometric flip; a color swap on top would flip twice
            return _config_to_unit_update(unit.type, flipped, None)
    if flip_roles is not None:
        return _config_to_unit_update(unit.type, None, flip_roles(config.patch_roles))
    return None


def apply_flip_horizontal(unit: Unit) -> UnitUpdate | None:
    return _apply_flip(unit, "horizontal")


def apply_flip_vertical(unit: Unit) -> UnitUpdate | None:
    return _apply_flip(unit, "vertical")


# ---------------------------------------------------------------------------
# Role assignment
# ---------------------------------------------------------------------------

def assign_patch_role(
    unit: Unit, role_id: str, patch_id: str | None = None
) -> tuple[UnitUpdate, UnitUpdate]:
    """(prev, next) updates for coloring one patch.

    An omitted or unknown ``patch_id`` targets the definition's first patch.
    """
    definition = _definition(unit.type)
    config = to_unit_config(unit)
    valid = definition.patch_ids
    target = patch_id if patch_id in valid else valid[0]

    new_roles = {**config.patch_roles, target: role_id}
    prev = _config_to_unit_update(unit.type, None, config.patch_roles)
    nxt = _config_to_unit_update(unit.type, None, new_roles)
    return prev, nxt


def replace_role(unit: Unit, old_role_id: str, new_role_id: str) -> UnitUpdate:
    """Repoint every patch using ``old_role_id``. Empty dict if none did."""
    config = to_unit_config(unit)
    if old_role_id not in config.patch_roles.values():
        return {}
    new_roles = {
        patch: new_role_id if role == old_role_id else role
        for patch, role in config.patch_roles.items()
    }
    return _config_to_unit_update(unit.type, None, new_roles)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def get_unit_triangles_with_colors(
    unit: Unit,
    cell_size: float,
    palette: Palette,
    overrides: Mapping[str, str] | None = None,
    fallback_color: str = DEFAULT_CONFIG.fallback_color,
) -> list[ColoredTriangle]:
    """Triangles in unit-local pixel space, each resolved to a fill color."""
    definition = _definition(unit.type)
    config = to_unit_config(unit)
    width = unit.span.cols * cell_size
    height = unit.span.rows * cell_size

    result = []
    for tri in definition.get_triangles(config, width, height):
        role_id = config.patch_roles.get(tri.patch_id)
        color = palette.resolve_color(role_id, overrides, fallback=fallback_color)
        result.append(ColoredTriangle(tri.patch_id, role_id, tri.flat_points(), color))
    return result


# ---------------------------------------------------------------------------
# Spans, creation, validation
# ---------------------------------------------------------------------------

def get_span_for_unit(type_id: str, variant: str | None = None) -> Span:
    return _definition(type_id).span_for(variant)


def normalize_span(unit: Unit) -> Unit:
    """Return ``unit`` with its span reset to what its definition computes."""
    expected = get_span_for_unit(unit.type, to_unit_config(unit).variant)
    if unit.span == expected:
        return unit
    logger.debug("Unit %s span %s corrected to %s", unit.id, unit.span, expected)
    return merge_unit_fields(unit, {"span": expected.model_dump()})


def create_unit(
    type_id: str,
    position: GridPosition,
    variant: str | None = None,
    patch_roles: Mapping[str, str] | None = None,
    unit_id: str | None = None,
) -> Unit:
    """New unit record with registry defaults for anything not given."""
    definition = _definition(type_id)
    if definition.variants:
        variant = variant or definition.default_variant
    else:
        variant = None
    roles = {**definition.default_patch_roles(), **(patch_roles or {})}

    data: dict[str, Any] = {
        "type": type_id,
        "id": unit_id or str(uuid.uuid4()),
        "position": position,
        "span": definition.span_for(variant).model_dump(),
        **_config_to_unit_update(type_id, variant, roles),
    }
    return UNIT_ADAPTER.validate_python(data)


def validate_unit_config(unit: Unit) -> bool:
    """Structural check of the unit's generic config against its definition schema."""
    definition = _definition(unit.type)
    try:
        definition.validate_config(to_unit_config(unit))
    except ValidationError as exc:
        logger.warning("Unit %s has an invalid %s config: %s", unit.id, unit.type, exc)
        return False
    return True
