"""BlockDesigner: the document store behind the block editor.

Owns one Block plus its undo history. Every edit builds an operation,
applies it through ``quillty.history.operations`` and records it, so each
public mutator is exactly one undo step. Palette, border and undo edits
come from ``quillty.store.DocumentStore``.

Guard failures a user can trigger (grid size out of range, palette full,
removing the last role, too many borders, placing onto occupied cells)
raise ``ValueError``. Edits aimed at ids that do not exist return False.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from quillty.engine.bridge import (
    ColoredTriangle,
    apply_flip_horizontal,
    apply_flip_vertical,
    apply_rotation,
    assign_patch_role,
    capture_fields,
    create_unit,
    get_unit_triangles_with_colors,
    normalize_span,
    unit_uses_role,
)
from quillty.engine.config import DEFAULT_CONFIG, EngineConfig
from quillty.engine.registry import UnitRegistry, get_registry
from quillty.history.operations import (
    AddUnitOperation,
    BatchOperation,
    DocumentState,
    Operation,
    RemoveUnitOperation,
    UpdateUnitOperation,
    apply_operation,
    build_remove_role,
    build_resize_grid,
)
from quillty.models.block import Block
from quillty.models.borders import BorderConfig
from quillty.models.palette import Palette
from quillty.models.units import GridPosition, Unit, find_unit, merge_unit_fields
from quillty.store import DocumentStore
from quillty.units.flying_geese import direction_between
from quillty.utils import grid

logger = logging.getLogger(__name__)


class BlockDesigner(DocumentStore):
    document_label = "A block"

    def __init__(
        self,
        block: Block,
        config: EngineConfig = DEFAULT_CONFIG,
        registry: UnitRegistry | None = None,
    ) -> None:
        super().__init__(config)
        self.registry = registry if registry is not None else get_registry()
        units = [normalize_span(u) for u in block.units]
        self._block = block.model_copy(update={"units": units})

    # -- state -----------------------------------------------------------

    @property
    def block(self) -> Block:
        return self._block

    @property
    def units(self) -> list[Unit]:
        return list(self._block.units)

    @property
    def palette(self) -> Palette:
        return self._block.preview_palette

    @property
    def grid_size(self) -> int:
        return self._block.grid_size

    @property
    def border_config(self) -> BorderConfig | None:
        return self._block.border_config

    def _state(self) -> DocumentState:
        b = self._block
        return DocumentState(tuple(b.units), b.preview_palette, b.grid_size, b.border_config)

    def _apply(self, op: Operation) -> None:
        state = apply_operation(self._state(), op)
        self._block = self._block.model_copy(
            update={
                "units": list(state.units),
                "preview_palette": state.palette,
                "grid_size": state.grid_size,
                "border_config": state.border_config,
            }
        )

    def _remove_role_operation(
        self, role_id: str, fallback_role_id: str | None
    ) -> BatchOperation | None:
        return build_remove_role(self._block.units, self.palette, role_id, fallback_role_id)

    # -- queries ---------------------------------------------------------

    def get_unit(self, unit_id: str) -> Unit | None:
        return find_unit(self._block.units, unit_id)

    def unit_at(self, position: GridPosition) -> Unit | None:
        for unit in self._block.units:
            if (position.row, position.col) in unit.cells():
                return unit
        return None

    def is_cell_occupied(self, position: GridPosition) -> bool:
        return self.unit_at(position) is not None

    def empty_cells(self) -> list[GridPosition]:
        return [
            GridPosition(row=r, col=c)
            for r, c in grid.empty_cells(self._block.units, self.grid_size)
        ]

    def units_using_role(self, role_id: str) -> list[Unit]:
        return [u for u in self._block.units if unit_uses_role(u, role_id)]

    def valid_adjacent_cells(self, position: GridPosition) -> list[GridPosition]:
        """Free neighbours for the second tap of a two-tap placement."""
        definition = self.registry.get_or_raise("flying_geese")
        result = definition.validate_placement(position, self.grid_size, self.is_cell_occupied)
        return result.valid_adjacent_cells

    def render(
        self, cell_size: float, overrides: Mapping[str, str] | None = None
    ) -> list[tuple[Unit, list[ColoredTriangle]]]:
        """Every unit with its colored triangles in unit-local coordinates."""
        return [
            (
                unit,
                get_unit_triangles_with_colors(
                    unit, cell_size, self.palette, overrides, self.config.fallback_color
                ),
            )
            for unit in self._block.units
        ]

    # -- placement -------------------------------------------------------

    def _check_footprint(self, candidate: Unit, ignore_id: str | None = None) -> None:
        if grid.is_out_of_bounds(candidate, self.grid_size):
            raise ValueError(f"Unit does not fit the {self.grid_size}x{self.grid_size} grid")
        taken = grid.covered_cells(u for u in self._block.units if u.id != ignore_id)
        overlap = taken.intersection(candidate.cells())
        if overlap:
            raise ValueError(f"Cells already occupied: {sorted(overlap)}")

    def add_unit(
        self,
        type_id: str,
        position: GridPosition,
        variant: str | None = None,
        patch_roles: Mapping[str, str] | None = None,
        unit_id: str | None = None,
    ) -> Unit:
        unit = create_unit(type_id, position, variant, patch_roles, unit_id)
        self._check_footprint(unit)
        self._commit(AddUnitOperation(unit=unit))
        return unit

    def place_flying_geese(
        self,
        first: GridPosition,
        second: GridPosition,
        patch_roles: Mapping[str, str] | None = None,
    ) -> Unit:
        """Two-tap placement: the goose points from ``first`` toward ``second``."""
        definition = self.registry.get_or_raise("flying_geese")
        check = definition.validate_placement(first, self.grid_size, self.is_cell_occupied)
        if not check.valid:
            raise ValueError(check.reason)
        direction = direction_between(first, second)
        if direction is None or second not in check.valid_adjacent_cells:
            raise ValueError("Second cell must be an empty neighbour of the first")
        origin = GridPosition(row=min(first.row, second.row), col=min(first.col, second.col))
        return self.add_unit("flying_geese", origin, direction, patch_roles)

    def fill_range(
        self,
        type_id: str,
        start: GridPosition,
        end: GridPosition,
        variant: str | None = None,
        patch_roles: Mapping[str, str] | None = None,
    ) -> list[Unit]:
        """Place one unit on every empty cell of a rectangle, as one undo step."""
        definition = self.registry.get_or_raise(type_id)
        if not definition.supports_batch_placement:
            raise ValueError(f"{definition.display_name} cannot be placed over a range")
        created = [
            create_unit(type_id, pos, variant, patch_roles)
            for pos in grid.rectangular_range(start, end)
            if not grid.is_out_of_bounds_position(pos, self.grid_size)
            and not self.is_cell_occupied(pos)
        ]
        self.apply_batch([AddUnitOperation(unit=u) for u in created])
        return created

    def remove_unit(self, unit_id: str) -> bool:
        unit = self.get_unit(unit_id)
        if unit is None:
            return False
        index = [u.id for u in self._block.units].index(unit_id)
        self._commit(RemoveUnitOperation(unit=unit, index=index))
        return True

    # -- unit edits ------------------------------------------------------

    def _update_unit(self, unit: Unit, update: dict[str, Any] | None) -> bool:
        if not update:
            return False
        if "span" in update:
            candidate = merge_unit_fields(unit, update)
            try:
                self._check_footprint(candidate, ignore_id=unit.id)
            except ValueError as exc:
                logger.info("Unit %s not transformed: %s", unit.id, exc)
                return False
        prev = capture_fields(unit, update)
        self._commit(UpdateUnitOperation(unit_id=unit.id, prev=prev, next=update))
        return True

    def rotate_unit(self, unit_id: str) -> bool:
        unit = self.get_unit(unit_id)
        return unit is not None and self._update_unit(unit, apply_rotation(unit))

    def flip_unit_horizontal(self, unit_id: str) -> bool:
        unit = self.get_unit(unit_id)
        return unit is not None and self._update_unit(unit, apply_flip_horizontal(unit))

    def flip_unit_vertical(self, unit_id: str) -> bool:
        unit = self.get_unit(unit_id)
        return unit is not None and self._update_unit(unit, apply_flip_vertical(unit))

    def assign_patch_role(self, unit_id: str, role_id: str, patch_id: str | None = None) -> bool:
        unit = self.get_unit(unit_id)
        if unit is None:
            return False
        prev, nxt = assign_patch_role(unit, role_id, patch_id)
        if prev == nxt:
            return False
        self._commit(UpdateUnitOperation(unit_id=unit_id, prev=prev, next=nxt))
        return True

    # -- grid ------------------------------------------------------------

    def set_grid_size(self, size: int) -> list[Unit]:
        """Resize the grid; returns the units a shrink removed."""
        if not self.config.min_grid_size <= size <= self.config.max_grid_size:
            raise ValueError(
                f"Grid size must be between {self.config.min_grid_size} "
                f"and {self.config.max_grid_size}, got {size}"
            )
        if size == self.grid_size:
            return []
        op = build_resize_grid(self._block.units, self.grid_size, size)
        self._commit(op)
        return list(op.removed_units)
