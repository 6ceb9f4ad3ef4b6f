"""PatternDesigner: the document store behind the pattern editor.

Owns one Pattern, its undo history and a cache of the library blocks its
instances reference. Mutators follow ``BlockDesigner``: one undo step each,
``ValueError`` for guard failures a user can trigger, False for edits aimed
at ids that do not exist.

Per-instance colors live in ``BlockInstance.palette_overrides``. Giving an
instance a color no palette role has yet also adds a palette role flagged
``is_variant_color`` so fabric totals see it; clearing the last override
that uses it removes that role again.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Sequence
from typing import Any

from quillty.calculations import quilt_size_with_borders
from quillty.engine.config import DEFAULT_CONFIG, EngineConfig
from quillty.history.operations import AddRoleOperation, RemoveRoleOperation
from quillty.models.block import Block
from quillty.models.borders import BorderConfig
from quillty.models.palette import ColorRole, Palette
from quillty.models.units import GridPosition
from quillty.pattern.models import (
    ROTATIONS,
    BlockInstance,
    Pattern,
    PhysicalSize,
    QuiltGridSize,
    Rotation,
    calculate_physical_size,
)
from quillty.pattern.operations import (
    AddBlockInstanceOperation,
    PatternBatchOperation,
    PatternOperation,
    PatternState,
    RemoveBlockInstanceOperation,
    UpdateBlockInstanceOperation,
    apply_pattern_operation,
    build_pattern_resize,
    invert_pattern_operation,
)
from quillty.pattern.render import PatternRender, render_pattern
from quillty.store import DocumentStore
from quillty.utils import grid

logger = logging.getLogger(__name__)

METADATA_FIELDS = ("title", "description", "hashtags", "difficulty", "category")


class PatternDesigner(DocumentStore):
    document_label = "A pattern"

    def __init__(
        self,
        pattern: Pattern,
        config: EngineConfig = DEFAULT_CONFIG,
        blocks: Iterable[Block] = (),
    ) -> None:
        super().__init__(config, invert=invert_pattern_operation)
        self._pattern = pattern
        self._blocks: dict[str, Block] = {b.id: b for b in blocks}

    # -- state -----------------------------------------------------------

    @property
    def pattern(self) -> Pattern:
        return self._pattern

    @property
    def instances(self) -> list[BlockInstance]:
        return list(self._pattern.block_instances)

    @property
    def palette(self) -> Palette:
        return self._pattern.palette

    @property
    def grid_size(self) -> QuiltGridSize:
        return self._pattern.grid_size

    @property
    def physical_size(self) -> PhysicalSize:
        return self._pattern.physical_size

    @property
    def border_config(self) -> BorderConfig | None:
        return self._pattern.border_config

    def _state(self) -> PatternState:
        p = self._pattern
        return PatternState(tuple(p.block_instances), p.palette, p.grid_size, p.border_config)

    def _apply(self, op: PatternOperation) -> None:
        state = apply_pattern_operation(self._state(), op)
        update: dict[str, Any] = {
            "block_instances": list(state.instances),
            "palette": state.palette,
            "grid_size": state.grid_size,
            "border_config": state.border_config,
        }
        if state.grid_size != self._pattern.grid_size:
            update["physical_size"] = calculate_physical_size(
                state.grid_size, self._pattern.physical_size.block_size_inches
            )
        self._pattern = self._pattern.model_copy(update=update)

    def _batch(self, operations: Sequence[PatternOperation]) -> PatternBatchOperation:
        return PatternBatchOperation(operations=list(operations))

    def _remove_role_operation(
        self, role_id: str, fallback_role_id: str | None
    ) -> RemoveRoleOperation | None:
        # block units keep their role ids; unknown ids render in the fallback color
        role = self.palette.get(role_id)
        if role is None:
            return None
        return RemoveRoleOperation(role=role, index=self.palette.index_of(role_id))

    def _commit_all(self, operations: list[PatternOperation]) -> None:
        if len(operations) == 1:
            self._commit(operations[0])
        elif operations:
            self._commit(self._batch(operations))

    def update_metadata(self, **changes: Any) -> None:
        """Title, description, hashtags, difficulty or category. Not undoable."""
        unknown = set(changes) - set(METADATA_FIELDS)
        if unknown:
            raise ValueError(f"Not pattern metadata: {sorted(unknown)}")
        self._pattern = Pattern.model_validate({**self._pattern.model_dump(), **changes})

    # -- block cache -----------------------------------------------------

    def cache_block(self, block: Block) -> None:
        self._blocks[block.id] = block

    def get_cached_block(self, block_id: str) -> Block | None:
        return self._blocks.get(block_id)

    def clear_block_cache(self) -> None:
        self._blocks.clear()

    # -- queries ---------------------------------------------------------

    def get_instance(self, instance_id: str) -> BlockInstance | None:
        for instance in self._pattern.block_instances:
            if instance.id == instance_id:
                return instance
        return None

    def instance_at(self, position: GridPosition) -> BlockInstance | None:
        for instance in self._pattern.block_instances:
            if instance.position == position:
                return instance
        return None

    def is_position_occupied(self, position: GridPosition) -> bool:
        return self.instance_at(position) is not None

    def empty_positions(self) -> list[GridPosition]:
        return [p for p in self.grid_size.positions() if not self.is_position_occupied(p)]

    def has_blocks_in_row(self, row: int) -> bool:
        return any(i.position.row == row for i in self._pattern.block_instances)

    def has_blocks_in_column(self, col: int) -> bool:
        return any(i.position.col == col for i in self._pattern.block_instances)

    def range_fill_positions(self, start: GridPosition, end: GridPosition) -> list[GridPosition]:
        """Cells of the rectangle between two corners that lie on the grid."""
        return [p for p in grid.rectangular_range(start, end) if self.grid_size.contains(p)]

    def variant_roles(self) -> list[ColorRole]:
        return [r for r in self.palette.roles if r.is_variant_color]

    def render(
        self, block_px: float, pixels_per_inch: float | None = None
    ) -> PatternRender:
        ppi = self.config.pixels_per_inch if pixels_per_inch is None else pixels_per_inch
        return render_pattern(self._pattern, self._blocks, block_px, ppi, self.config)

    def finished_size(self) -> tuple[float, float]:
        """(width, height) in inches including enabled borders."""
        size = self.physical_size
        return quilt_size_with_borders(size.width_inches, size.height_inches, self.border_config)

    # -- placement -------------------------------------------------------

    def _check_position(self, position: GridPosition) -> None:
        if not self.grid_size.contains(position):
            raise ValueError(
                f"Position ({position.row}, {position.col}) is outside the "
                f"{self.grid_size.rows}x{self.grid_size.cols} pattern grid"
            )

    def _placement_operations(
        self, placements: Iterable[tuple[str, GridPosition]], rotation: Rotation = 0
    ) -> tuple[list[PatternOperation], list[BlockInstance]]:
        """Add one instance per (block id, position), replacing whatever sits there."""
        if rotation not in ROTATIONS:
            raise ValueError(f"Rotation must be one of {ROTATIONS}, got {rotation!r}")
        placements = list(placements)
        for _, position in placements:
            self._check_position(position)

        occupants = {(i.position.row, i.position.col): i for i in self._pattern.block_instances}
        order = [i.id for i in self._pattern.block_instances]
        operations: list[PatternOperation] = []
        created: list[BlockInstance] = []
        for block_id, position in placements:
            key = (position.row, position.col)
            existing = occupants.get(key)
            if existing is not None:
                index = order.index(existing.id)
                operations.append(RemoveBlockInstanceOperation(instance=existing, index=index))
                order.remove(existing.id)
                created = [c for c in created if c.id != existing.id]
            instance = BlockInstance(
                id=str(uuid.uuid4()), block_id=block_id, position=position, rotation=rotation
            )
            operations.append(AddBlockInstanceOperation(instance=instance))
            occupants[key] = instance
            order.append(instance.id)
            created.append(instance)
        return operations, created

    def add_block_instance(
        self, block_id: str, position: GridPosition, rotation: Rotation = 0
    ) -> BlockInstance:
        """Place a block; an instance already on that cell is replaced in the same step."""
        operations, created = self._placement_operations([(block_id, position)], rotation)
        self._commit_all(operations)
        return created[0]

    def add_block_instances(
        self, block_id: str, positions: Iterable[GridPosition], rotation: Rotation = 0
    ) -> list[BlockInstance]:
        operations, created = self._placement_operations(
            ((block_id, p) for p in positions), rotation
        )
        if operations:
            self._commit(self._batch(operations))
        return created

    def fill_empty(self, block_id: str) -> list[BlockInstance]:
        """Place ``block_id`` on every empty cell, as one undo step."""
        return self.add_block_instances(block_id, self.empty_positions())

    def fill_alternating(self, first_block_id: str, second_block_id: str) -> list[BlockInstance]:
        """Checkerboard the whole grid, replacing every instance."""
        placements = [
            (first_block_id if (p.row + p.col) % 2 == 0 else second_block_id, p)
            for p in self.grid_size.positions()
        ]
        operations, created = self._placement_operations(placements)
        self._commit(self._batch(operations))
        return created

    def remove_block_instance(self, instance_id: str) -> bool:
        instance = self.get_instance(instance_id)
        if instance is None:
            return False
        index = [i.id for i in self._pattern.block_instances].index(instance_id)
        self._commit(RemoveBlockInstanceOperation(instance=instance, index=index))
        return True

    # -- instance edits --------------------------------------------------

    def update_block_instance(
        self,
        instance_id: str,
        rotation: Rotation | None = None,
        flip_horizontal: bool | None = None,
        flip_vertical: bool | None = None,
    ) -> bool:
        instance = self.get_instance(instance_id)
        if instance is None:
            return False
        if rotation is not None and rotation not in ROTATIONS:
            raise ValueError(f"Rotation must be one of {ROTATIONS}, got {rotation!r}")
        changes = {
            key: value
            for key, value in (
                ("rotation", rotation),
                ("flip_horizontal", flip_horizontal),
                ("flip_vertical", flip_vertical),
            )
            if value is not None and getattr(instance, key) != value
        }
        if not changes:
            return False
        prev = {key: getattr(instance, key) for key in changes}
        self._commit(UpdateBlockInstanceOperation(instance_id=instance_id, prev=prev, next=changes))
        return True

    def rotate_block_instance(self, instance_id: str) -> bool:
        """Quarter turn clockwise: 0, 90, 180, 270, back to 0."""
        instance = self.get_instance(instance_id)
        if instance is None:
            return False
        following = ROTATIONS[(ROTATIONS.index(instance.rotation) + 1) % len(ROTATIONS)]
        return self.update_block_instance(instance_id, rotation=following)

    def flip_block_instance_horizontal(self, instance_id: str) -> bool:
        instance = self.get_instance(instance_id)
        return instance is not None and self.update_block_instance(
            instance_id, flip_horizontal=not instance.flip_horizontal
        )

    def flip_block_instance_vertical(self, instance_id: str) -> bool:
        instance = self.get_instance(instance_id)
        return instance is not None and self.update_block_instance(
            instance_id, flip_vertical=not instance.flip_vertical
        )

    # -- per-instance colors ---------------------------------------------

    def _variant_role_for(self, color: str) -> ColorRole | None:
        for role in self.variant_roles():
            if role.color.lower() == color.lower():
                return role
        return None

    def _override_update(
        self, instance: BlockInstance, overrides: dict[str, str]
    ) -> UpdateBlockInstanceOperation:
        nxt = dict(overrides) or None
        # rejects malformed colors before anything is recorded
        BlockInstance.model_validate({**instance.model_dump(), "palette_overrides": nxt})
        return UpdateBlockInstanceOperation(
            instance_id=instance.id,
            prev={"palette_overrides": instance.palette_overrides},
            next={"palette_overrides": nxt},
        )

    def set_instance_color(self, instance_id: str, role_id: str, color: str) -> bool:
        """Recolor one role on one instance only.

        Setting a role back to its palette color clears the override.
        """
        instance = self.get_instance(instance_id)
        if instance is None:
            return False
        base = self.palette.get(role_id)
        if base is None:
            raise ValueError(f"Unknown color role: {role_id!r}")
        if base.color.lower() == color.lower():
            return self.clear_instance_color(instance_id, role_id)

        overrides = dict(instance.palette_overrides or {})
        if overrides.get(role_id, "").lower() == color.lower():
            return False
        overrides[role_id] = color
        operations: list[PatternOperation] = [self._override_update(instance, overrides)]

        if not any(r.color.lower() == color.lower() for r in self.palette.roles):
            if len(self.palette.roles) >= self.config.max_palette_roles:
                logger.info("Palette full, %s stays an unlisted override on %s", color, instance_id)
            else:
                variant = ColorRole(
                    id=self._next_role_id("variant", len(self.variant_roles()) + 1),
                    name=f"{base.name} variant",
                    color=color,
                    is_variant_color=True,
                )
                operations.append(AddRoleOperation(role=variant))

        self._commit_all(operations)
        return True

    def clear_instance_color(self, instance_id: str, role_id: str) -> bool:
        instance = self.get_instance(instance_id)
        if instance is None or role_id not in (instance.palette_overrides or {}):
            return False
        overrides = dict(instance.palette_overrides)
        color = overrides.pop(role_id)
        operations: list[PatternOperation] = [self._override_update(instance, overrides)]

        remaining = [
            c.lower()
            for i in self._pattern.block_instances
            for c in (overrides if i.id == instance_id else i.palette_overrides or {}).values()
        ]
        variant = self._variant_role_for(color)
        if variant is not None and color.lower() not in remaining:
            operations.append(
                RemoveRoleOperation(role=variant, index=self.palette.index_of(variant.id))
            )

        self._commit_all(operations)
        return True

    # -- grid ------------------------------------------------------------

    def _resize(
        self, rows: int, cols: int, row_shift: int = 0, col_shift: int = 0
    ) -> list[BlockInstance]:
        target = QuiltGridSize(rows=rows, cols=cols)
        op = build_pattern_resize(
            self._pattern.block_instances, self.grid_size, target, row_shift, col_shift
        )
        self._commit(op)
        return list(op.removed_instances)

    def _within_limits(self, size: int) -> bool:
        return self.config.min_pattern_grid_size <= size <= self.config.max_pattern_grid_size

    def add_row(self, at_start: bool = False) -> bool:
        """Grow by one row; at the top, every instance moves down one."""
        rows = self.grid_size.rows + 1
        if not self._within_limits(rows):
            return False
        self._resize(rows, self.grid_size.cols, row_shift=1 if at_start else 0)
        return True

    def remove_row(self, at_start: bool = False) -> bool:
        """Drop the last (or first) row and every instance in it."""
        rows = self.grid_size.rows - 1
        if not self._within_limits(rows):
            return False
        self._resize(rows, self.grid_size.cols, row_shift=-1 if at_start else 0)
        return True

    def add_column(self, at_start: bool = False) -> bool:
        cols = self.grid_size.cols + 1
        if not self._within_limits(cols):
            return False
        self._resize(self.grid_size.rows, cols, col_shift=1 if at_start else 0)
        return True

    def remove_column(self, at_start: bool = False) -> bool:
        cols = self.grid_size.cols - 1
        if not self._within_limits(cols):
            return False
        self._resize(self.grid_size.rows, cols, col_shift=-1 if at_start else 0)
        return True

    def resize_grid(self, rows: int, cols: int) -> list[BlockInstance]:
        """Resize from the bottom-right corner; returns the instances dropped."""
        if not (self._within_limits(rows) and self._within_limits(cols)):
            raise ValueError(
                f"Pattern grid must be between {self.config.min_pattern_grid_size} "
                f"and {self.config.max_pattern_grid_size} on each side, got {rows}x{cols}"
            )
        if (rows, cols) == (self.grid_size.rows, self.grid_size.cols):
            return []
        return self._resize(rows, cols)
