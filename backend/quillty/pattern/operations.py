"""Invertible operations over a pattern document.

Block-instance and pattern-grid operations are defined here. Palette,
role and border edits reuse the block document's operation records and
their apply functions, since both documents own a palette and a border
stack of the same shape.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter

from quillty.history.operations import (
    AddBorderOperation,
    AddRoleOperation,
    RemoveBorderOperation,
    RemoveRoleOperation,
    RenameRoleOperation,
    ReorderBordersOperation,
    SetBordersEnabledOperation,
    UpdateBorderOperation,
    UpdatePaletteOperation,
    _insert,
    apply_to_border_config,
    apply_to_palette,
    invert_operation,
)
from quillty.models.base import CamelModel
from quillty.models.borders import BorderConfig
from quillty.models.palette import Palette
from quillty.models.units import GridPosition
from quillty.pattern.models import BlockInstance, QuiltGridSize

logger = logging.getLogger(__name__)


class AddBlockInstanceOperation(CamelModel):
    type: Literal["add_block_instance"] = "add_block_instance"
    instance: BlockInstance
    # Insert position; None appends
    index: int | None = None


class RemoveBlockInstanceOperation(CamelModel):
    type: Literal["remove_block_instance"] = "remove_block_instance"
    instance: BlockInstance
    index: int | None = None


class UpdateBlockInstanceOperation(CamelModel):
    type: Literal["update_block_instance"] = "update_block_instance"
    instance_id: str
    prev: dict[str, Any]
    next: dict[str, Any]


class ResizePatternGridOperation(CamelModel):
    """Change rows/cols, optionally shifting every instance first.

    Adding or removing a row at the top is a resize with ``row_shift`` of
    +1 or -1. Instances that land outside the new grid are dropped and kept
    here with their list positions; when ``restores`` is set (the inverse
    of a shrink) they are put back.
    """

    type: Literal["resize_pattern_grid"] = "resize_pattern_grid"
    prev_size: QuiltGridSize
    next_size: QuiltGridSize
    row_shift: int = 0
    col_shift: int = 0
    removed_instances: list[BlockInstance] = Field(default_factory=list)
    removed_indices: list[int] = Field(default_factory=list)
    restores: bool = False


class PatternBatchOperation(CamelModel):
    """Several pattern operations recorded as one undo step."""

    type: Literal["batch"] = "batch"
    operations: list[PatternOperation] = Field(default_factory=list)


PatternOperation = Annotated[
    Union[
        AddBlockInstanceOperation,
        RemoveBlockInstanceOperation,
        UpdateBlockInstanceOperation,
        ResizePatternGridOperation,
        UpdatePaletteOperation,
        AddRoleOperation,
        RemoveRoleOperation,
        RenameRoleOperation,
        AddBorderOperation,
        RemoveBorderOperation,
        UpdateBorderOperation,
        SetBordersEnabledOperation,
        ReorderBordersOperation,
        PatternBatchOperation,
    ],
    Field(discriminator="type"),
]

PatternBatchOperation.model_rebuild()

PATTERN_OPERATION_ADAPTER: TypeAdapter[PatternOperation] = TypeAdapter(PatternOperation)


# ---------------------------------------------------------------------------
# Inversion
# ---------------------------------------------------------------------------

def invert_pattern_operation(op: PatternOperation) -> PatternOperation:
    if isinstance(op, AddBlockInstanceOperation):
        return RemoveBlockInstanceOperation(instance=op.instance, index=op.index)
    if isinstance(op, RemoveBlockInstanceOperation):
        return AddBlockInstanceOperation(instance=op.instance, index=op.index)
    if isinstance(op, UpdateBlockInstanceOperation):
        return UpdateBlockInstanceOperation(instance_id=op.instance_id, prev=op.next, next=op.prev)
    if isinstance(op, ResizePatternGridOperation):
        return ResizePatternGridOperation(
            prev_size=op.next_size,
            next_size=op.prev_size,
            row_shift=-op.row_shift,
            col_shift=-op.col_shift,
            removed_instances=op.removed_instances,
            removed_indices=op.removed_indices,
            restores=not op.restores,
        )
    if isinstance(op, RemoveRoleOperation):
        # pattern role removals never repoint anything
        return AddRoleOperation(role=op.role, index=op.index)
    if isinstance(op, PatternBatchOperation):
        return PatternBatchOperation(
            operations=[invert_pattern_operation(o) for o in reversed(op.operations)]
        )
    return invert_operation(op)


# ---------------------------------------------------------------------------
# Apply
# ---------------------------------------------------------------------------

def _shift(instance: BlockInstance, rows: int, cols: int) -> BlockInstance:
    if not rows and not cols:
        return instance
    position = GridPosition(row=instance.position.row + rows, col=instance.position.col + cols)
    return instance.model_copy(update={"position": position})


def _resize_instances(
    instances: Sequence[BlockInstance], op: ResizePatternGridOperation
) -> list[BlockInstance]:
    result = [
        i
        for i in (_shift(i, op.row_shift, op.col_shift) for i in instances)
        if op.next_size.contains(i.position)
    ]
    if op.restores and op.removed_instances:
        present = {i.id for i in result}
        indices: list[int | None] = list(op.removed_indices)
        if len(indices) != len(op.removed_instances):
            indices = [None] * len(op.removed_instances)
        for index, instance in sorted(
            zip(indices, op.removed_instances), key=lambda pair: (pair[0] is None, pair[0] or 0)
        ):
            if instance.id in present:
                continue
            result = _insert(result, instance, index)
            present.add(instance.id)
    return result


def apply_to_instances(
    instances: Sequence[BlockInstance], op: PatternOperation
) -> list[BlockInstance]:
    if isinstance(op, AddBlockInstanceOperation):
        if any(i.id == op.instance.id for i in instances):
            logger.debug("add_block_instance: %s already present", op.instance.id)
            return list(instances)
        return _insert(list(instances), op.instance, op.index)

    if isinstance(op, RemoveBlockInstanceOperation):
        return [i for i in instances if i.id != op.instance.id]

    if isinstance(op, UpdateBlockInstanceOperation):
        result = []
        for instance in instances:
            if instance.id == op.instance_id:
                instance = BlockInstance.model_validate({**instance.model_dump(), **op.next})
            result.append(instance)
        return result

    if isinstance(op, ResizePatternGridOperation):
        return _resize_instances(instances, op)

    return list(instances)


@dataclass(frozen=True)
class PatternState:
    """The four aggregates a pattern operation can touch."""

    instances: tuple[BlockInstance, ...]
    palette: Palette
    grid_size: QuiltGridSize
    border_config: BorderConfig | None = None


def apply_pattern_operation(state: PatternState, op: PatternOperation) -> PatternState:
    if isinstance(op, PatternBatchOperation):
        for member in op.operations:
            state = apply_pattern_operation(state, member)
        return state
    grid_size = op.next_size if isinstance(op, ResizePatternGridOperation) else state.grid_size
    return replace(
        state,
        instances=tuple(apply_to_instances(state.instances, op)),
        palette=apply_to_palette(state.palette, op),
        grid_size=grid_size,
        border_config=apply_to_border_config(state.border_config, op),
    )


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def build_pattern_resize(
    instances: Sequence[BlockInstance],
    prev_size: QuiltGridSize,
    next_size: QuiltGridSize,
    row_shift: int = 0,
    col_shift: int = 0,
) -> ResizePatternGridOperation:
    """Capture the instances the resize would drop, so undo can restore them."""
    removed: list[BlockInstance] = []
    indices: list[int] = []
    for i, instance in enumerate(instances):
        if not next_size.contains(_shift(instance, row_shift, col_shift).position):
            removed.append(instance)
            indices.append(i)
    return ResizePatternGridOperation(
        prev_size=prev_size,
        next_size=next_size,
        row_shift=row_shift,
        col_shift=col_shift,
        removed_instances=removed,
        removed_indices=indices,
    )
