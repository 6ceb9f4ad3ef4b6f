"""Invertible operations over a block document.

Every change to units, grid size, palette or borders is an ``Operation``:
a frozen record that can be applied to the document and inverted for undo.
Apply functions never mutate their input; they return new containers.

Unknown unit, role or border ids are treated as no-ops. The log is always
replayed against state it produced itself, so a miss means nothing to do.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter

from quillty.engine.bridge import patch_role_update, to_unit_config
from quillty.models.base import CamelModel
from quillty.models.borders import BorderConfig, BorderSpec
from quillty.models.palette import ColorRole, Palette
from quillty.models.units import Unit, merge_unit_fields
from quillty.utils.grid import is_out_of_bounds

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Unit operations
# ---------------------------------------------------------------------------

class AddUnitOperation(CamelModel):
    type: Literal["add_unit"] = "add_unit"
    unit: Unit
    # Insert position; None appends
    index: int | None = None


class RemoveUnitOperation(CamelModel):
    type: Literal["remove_unit"] = "remove_unit"
    unit: Unit
    # Position the unit held, so undo restores ordering
    index: int | None = None


class UpdateUnitOperation(CamelModel):
    type: Literal["update_unit"] = "update_unit"
    unit_id: str
    prev: dict[str, Any]
    next: dict[str, Any]


class ResizeGridOperation(CamelModel):
    type: Literal["resize_grid"] = "resize_grid"
    prev_size: int
    next_size: int
    # Units a shrink pushes out of bounds, with their original list positions
    removed_units: list[Unit] = Field(default_factory=list)
    removed_indices: list[int] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Palette operations
# ---------------------------------------------------------------------------

class UpdatePaletteOperation(CamelModel):
    type: Literal["update_palette"] = "update_palette"
    role_id: str
    prev_color: str
    next_color: str


class AddRoleOperation(CamelModel):
    type: Literal["add_role"] = "add_role"
    role: ColorRole
    index: int | None = None


class AffectedUnit(CamelModel):
    unit_id: str
    unit_type: str
    # patch id -> role id, only the patches that used the removed role
    prev_roles: dict[str, str]


class RemoveRoleOperation(CamelModel):
    type: Literal["remove_role"] = "remove_role"
    role: ColorRole
    index: int | None = None
    affected_units: list[AffectedUnit] = Field(default_factory=list)
    fallback_role_id: str | None = None


class RenameRoleOperation(CamelModel):
    type: Literal["rename_role"] = "rename_role"
    role_id: str
    prev_name: str
    next_name: str


# ---------------------------------------------------------------------------
# Border operations
# ---------------------------------------------------------------------------

class AddBorderOperation(CamelModel):
    type: Literal["add_border"] = "add_border"
    border: BorderSpec
    index: int | None = None
    # True when this add created the border config
    created_config: bool = False


class RemoveBorderOperation(CamelModel):
    type: Literal["remove_border"] = "remove_border"
    border: BorderSpec
    index: int | None = None
    # Drop the config entirely once it is empty again
    created_config: bool = False


class UpdateBorderOperation(CamelModel):
    type: Literal["update_border"] = "update_border"
    border_id: str
    prev: dict[str, Any]
    next: dict[str, Any]


class SetBordersEnabledOperation(CamelModel):
    type: Literal["set_borders_enabled"] = "set_borders_enabled"
    prev_enabled: bool
    next_enabled: bool


class ReorderBordersOperation(CamelModel):
    type: Literal["reorder_borders"] = "reorder_borders"
    from_index: int
    to_index: int


class BatchOperation(CamelModel):
    """Several operations recorded as one undo step."""

    type: Literal["batch"] = "batch"
    operations: list[Operation] = Field(default_factory=list)


Operation = Annotated[
    Union[
        AddUnitOperation,
        RemoveUnitOperation,
        UpdateUnitOperation,
        ResizeGridOperation,
        UpdatePaletteOperation,
        AddRoleOperation,
        RemoveRoleOperation,
        RenameRoleOperation,
        AddBorderOperation,
        RemoveBorderOperation,
        UpdateBorderOperation,
        SetBordersEnabledOperation,
        ReorderBordersOperation,
        BatchOperation,
    ],
    Field(discriminator="type"),
]

BatchOperation.model_rebuild()

OPERATION_ADAPTER: TypeAdapter[Operation] = TypeAdapter(Operation)


# ---------------------------------------------------------------------------
# Inversion
# ---------------------------------------------------------------------------

def invert_operation(op: Operation) -> Operation:
    if isinstance(op, AddUnitOperation):
        return RemoveUnitOperation(unit=op.unit, index=op.index)
    if isinstance(op, RemoveUnitOperation):
        return AddUnitOperation(unit=op.unit, index=op.index)
    if isinstance(op, UpdateUnitOperation):
        return UpdateUnitOperation(unit_id=op.unit_id, prev=op.next, next=op.prev)
    if isinstance(op, ResizeGridOperation):
        return ResizeGridOperation(
            prev_size=op.next_size,
            next_size=op.prev_size,
            removed_units=op.removed_units,
            removed_indices=op.removed_indices,
        )
    if isinstance(op, UpdatePaletteOperation):
        return UpdatePaletteOperation(
            role_id=op.role_id, prev_color=op.next_color, next_color=op.prev_color
        )
    if isinstance(op, AddRoleOperation):
        # undoing an add never touched any unit
        return RemoveRoleOperation(role=op.role, index=op.index, affected_units=[])
    if isinstance(op, RemoveRoleOperation):
        return _invert_remove_role(op)
    if isinstance(op, RenameRoleOperation):
        return RenameRoleOperation(role_id=op.role_id, prev_name=op.next_name, next_name=op.prev_name)
    if isinstance(op, AddBorderOperation):
        return RemoveBorderOperation(border=op.border, index=op.index, created_config=op.created_config)
    if isinstance(op, RemoveBorderOperation):
        return AddBorderOperation(border=op.border, index=op.index, created_config=op.created_config)
    if isinstance(op, UpdateBorderOperation):
        return UpdateBorderOperation(border_id=op.border_id, prev=op.next, next=op.prev)
    if isinstance(op, SetBordersEnabledOperation):
        return SetBordersEnabledOperation(prev_enabled=op.next_enabled, next_enabled=op.prev_enabled)
    if isinstance(op, ReorderBordersOperation):
        return ReorderBordersOperation(from_index=op.to_index, to_index=op.from_index)
    if isinstance(op, BatchOperation):
        return BatchOperation(operations=[invert_operation(o) for o in reversed(op.operations)])
    raise TypeError(f"Not an operation: {op!r}")


def _invert_remove_role(op: RemoveRoleOperation) -> BatchOperation:
    """Re-add the role, then point every affected patch back at it."""
    operations: list[Operation] = [AddRoleOperation(role=op.role, index=op.index)]
    for affected in op.affected_units:
        for patch_id, role_id in affected.prev_roles.items():
            fallback = op.fallback_role_id or role_id
            operations.append(
                UpdateUnitOperation(
                    unit_id=affected.unit_id,
                    prev=patch_role_update(affected.unit_type, patch_id, fallback),
                    next=patch_role_update(affected.unit_type, patch_id, role_id),
                )
            )
    return BatchOperation(operations=operations)


# ---------------------------------------------------------------------------
# Apply: units
# ---------------------------------------------------------------------------

def _insert(items: list, item: Any, index: int | None) -> list:
    result = list(items)
    if index is None or index >= len(result):
        result.append(item)
    else:
        result.insert(max(index, 0), item)
    return result


def apply_to_units(units: Sequence[Unit], op: Operation) -> list[Unit]:
    if isinstance(op, AddUnitOperation):
        if any(u.id == op.unit.id for u in units):
            logger.debug("add_unit: %s already present", op.unit.id)
            return list(units)
        return _insert(list(units), op.unit, op.index)

    if isinstance(op, RemoveUnitOperation):
        return [u for u in units if u.id != op.unit.id]

    if isinstance(op, UpdateUnitOperation):
        result = []
        found = False
        for unit in units:
            if unit.id == op.unit_id:
                unit = merge_unit_fields(unit, op.next)
                found = True
            result.append(unit)
        if not found:
            logger.debug("update_unit: unknown unit %s", op.unit_id)
        return result

    if isinstance(op, ResizeGridOperation):
        return _resize_units(units, op)

    if isinstance(op, BatchOperation):
        result = list(units)
        for member in op.operations:
            result = apply_to_units(result, member)
        return result

    return list(units)


def _resize_units(units: Sequence[Unit], op: ResizeGridOperation) -> list[Unit]:
    result = list(units)
    if op.next_size < op.prev_size:
        result = [u for u in result if not is_out_of_bounds(u, op.next_size)]
    elif op.next_size > op.prev_size and op.removed_units:
        # Undo of a shrink: put units back where they were
        present = {u.id for u in result}
        indices: list[int | None] = list(op.removed_indices)
        if len(indices) != len(op.removed_units):
            indices = [None] * len(op.removed_units)
        for index, unit in sorted(
            zip(indices, op.removed_units), key=lambda pair: (pair[0] is None, pair[0] or 0)
        ):
            if unit.id in present:
                continue
            result = _insert(result, unit, index)
            present.add(unit.id)
    return result


# ---------------------------------------------------------------------------
# Apply: palette, grid size, borders
# ---------------------------------------------------------------------------

def apply_to_palette(palette: Palette, op: Operation) -> Palette:
    if isinstance(op, UpdatePaletteOperation):
        if palette.get(op.role_id) is None:
            logger.debug("update_palette: unknown role %s", op.role_id)
            return palette
        roles = [
            r.model_copy(update={"color": op.next_color}) if r.id == op.role_id else r
            for r in palette.roles
        ]
        return Palette(roles=roles)

    if isinstance(op, AddRoleOperation):
        if palette.get(op.role.id) is not None:
            logger.debug("add_role: %s already present", op.role.id)
            return palette
        return Palette(roles=_insert(palette.roles, op.role, op.index))

    if isinstance(op, RemoveRoleOperation):
        return Palette(roles=[r for r in palette.roles if r.id != op.role.id])

    if isinstance(op, RenameRoleOperation):
        if palette.get(op.role_id) is None:
            logger.debug("rename_role: unknown role %s", op.role_id)
            return palette
        roles = [
            r.model_copy(update={"name": op.next_name}) if r.id == op.role_id else r
            for r in palette.roles
        ]
        return Palette(roles=roles)

    if isinstance(op, BatchOperation):
        for member in op.operations:
            palette = apply_to_palette(palette, member)
        return palette

    return palette


def apply_to_grid_size(size: int, op: Operation) -> int:
    if isinstance(op, ResizeGridOperation):
        return op.next_size
    if isinstance(op, BatchOperation):
        for member in op.operations:
            size = apply_to_grid_size(size, member)
    return size


def apply_to_border_config(config: BorderConfig | None, op: Operation) -> BorderConfig | None:
    if isinstance(op, AddBorderOperation):
        if config is None:
            return BorderConfig(enabled=True, borders=[op.border])
        if config.index_of(op.border.id) >= 0:
            return config
        return config.model_copy(update={"borders": _insert(config.borders, op.border, op.index)})

    if config is None:
        if isinstance(op, SetBordersEnabledOperation) and op.next_enabled:
            return BorderConfig(enabled=True, borders=[])
        if isinstance(op, BatchOperation):
            for member in op.operations:
                config = apply_to_border_config(config, member)
        return config

    if isinstance(op, RemoveBorderOperation):
        borders = [b for b in config.borders if b.id != op.border.id]
        if op.created_config and not borders:
            return None
        return config.model_copy(update={"borders": borders})

    if isinstance(op, UpdateBorderOperation):
        borders = [
            BorderSpec.model_validate({**b.model_dump(), **op.next}) if b.id == op.border_id else b
            for b in config.borders
        ]
        return config.model_copy(update={"borders": borders})

    if isinstance(op, SetBordersEnabledOperation):
        return config.model_copy(update={"enabled": op.next_enabled})

    if isinstance(op, ReorderBordersOperation):
        borders = list(config.borders)
        n = len(borders)
        if not (0 <= op.from_index < n and 0 <= op.to_index < n):
            return config
        moved = borders.pop(op.from_index)
        borders.insert(op.to_index, moved)
        return config.model_copy(update={"borders": borders})

    if isinstance(op, BatchOperation):
        for member in op.operations:
            config = apply_to_border_config(config, member)
        return config

    return config


@dataclass(frozen=True)
class DocumentState:
    """The four aggregates an operation can touch."""

    units: tuple[Unit, ...]
    palette: Palette
    grid_size: int
    border_config: BorderConfig | None = None


def apply_operation(state: DocumentState, op: Operation) -> DocumentState:
    return replace(
        state,
        units=tuple(apply_to_units(state.units, op)),
        palette=apply_to_palette(state.palette, op),
        grid_size=apply_to_grid_size(state.grid_size, op),
        border_config=apply_to_border_config(state.border_config, op),
    )


# ---------------------------------------------------------------------------
# Builders for operations that must capture state first
# ---------------------------------------------------------------------------

def build_resize_grid(units: Sequence[Unit], prev_size: int, next_size: int) -> ResizeGridOperation:
    """Capture the units a shrink would drop, so undo can restore them."""
    removed: list[Unit] = []
    indices: list[int] = []
    if next_size < prev_size:
        for i, unit in enumerate(units):
            if is_out_of_bounds(unit, next_size):
                removed.append(unit)
                indices.append(i)
    return ResizeGridOperation(
        prev_size=prev_size, next_size=next_size, removed_units=removed, removed_indices=indices
    )


def build_remove_role(
    units: Iterable[Unit], palette: Palette, role_id: str, fallback_role_id: str | None = None
) -> BatchOperation | None:
    """Remove a role and repoint every patch that used it at the fallback.

    The fallback defaults to the first remaining role. Returns None for an
    unknown role or when no other role is left to fall back to.
    """
    role = palette.get(role_id)
    if role is None:
        return None
    if fallback_role_id is None:
        remaining = [r.id for r in palette.roles if r.id != role_id]
        if not remaining:
            return None
        fallback_role_id = remaining[0]

    affected: list[AffectedUnit] = []
    updates: list[Operation] = []
    for unit in units:
        prev_roles = {
            patch: rid for patch, rid in to_unit_config(unit).patch_roles.items() if rid == role_id
        }
        if not prev_roles:
            continue
        affected.append(AffectedUnit(unit_id=unit.id, unit_type=unit.type, prev_roles=prev_roles))
        for patch_id in prev_roles:
            updates.append(
                UpdateUnitOperation(
                    unit_id=unit.id,
                    prev=patch_role_update(unit.type, patch_id, role_id),
                    next=patch_role_update(unit.type, patch_id, fallback_role_id),
                )
            )

    remove = RemoveRoleOperation(
        role=role,
        index=palette.index_of(role_id),
        affected_units=affected,
        fallback_role_id=fallback_role_id,
    )
    return BatchOperation(operations=[remove, *updates])
