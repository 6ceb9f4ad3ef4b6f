"""DocumentStore: undo plumbing plus the palette and border edits shared by
the block and pattern designers.

A subclass owns its document and supplies ``_apply`` (fold one operation
into the document), the ``palette`` and ``border_config`` views, and the
operation that removes a palette role. Everything here records exactly one
undo step per public mutator.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Sequence
from typing import Any

from quillty.engine.config import DEFAULT_CONFIG, EngineConfig
from quillty.history.operations import (
    AddBorderOperation,
    AddRoleOperation,
    BatchOperation,
    RemoveBorderOperation,
    RenameRoleOperation,
    ReorderBordersOperation,
    SetBordersEnabledOperation,
    UpdateBorderOperation,
    UpdatePaletteOperation,
    invert_operation,
)
from quillty.history.undo_manager import UndoHistory
from quillty.models.borders import BorderConfig, BorderSpec, CornerStyle
from quillty.models.palette import ADDITIONAL_ROLE_COLORS, ColorRole, Palette

logger = logging.getLogger(__name__)


class DocumentStore:
    # Used in user-facing guard messages
    document_label = "A document"

    def __init__(
        self,
        config: EngineConfig = DEFAULT_CONFIG,
        invert: Callable[[Any], Any] = invert_operation,
    ) -> None:
        self.config = config
        self._history = UndoHistory(max_size=config.max_history, invert=invert)

    # -- hooks -----------------------------------------------------------

    @property
    def palette(self) -> Palette:
        raise NotImplementedError

    @property
    def border_config(self) -> BorderConfig | None:
        raise NotImplementedError

    def _apply(self, op: Any) -> None:
        raise NotImplementedError

    def _batch(self, operations: Sequence[Any]) -> Any:
        return BatchOperation(operations=list(operations))

    def _remove_role_operation(self, role_id: str, fallback_role_id: str | None) -> Any | None:
        raise NotImplementedError

    # -- history ---------------------------------------------------------

    @property
    def history(self) -> UndoHistory:
        return self._history

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    def _commit(self, op: Any) -> None:
        self._apply(op)
        self._history = self._history.record(op)
        logger.debug("Recorded %s", op.type)

    def undo(self) -> bool:
        result = self._history.undo()
        if result is None:
            return False
        self._history, inverse = result
        self._apply(inverse)
        return True

    def redo(self) -> bool:
        result = self._history.redo()
        if result is None:
            return False
        self._history, op = result
        self._apply(op)
        return True

    def apply_batch(self, operations: Sequence[Any]) -> None:
        """Apply several operations as a single undo step."""
        if not operations:
            return
        self._commit(self._batch(operations))

    # -- palette ---------------------------------------------------------

    def _next_role_id(self, prefix: str, start: int) -> str:
        existing = set(self.palette.role_ids)
        new_id = f"{prefix}{start}"
        counter = start + 1
        while new_id in existing:
            new_id = f"{prefix}{counter}"
            counter += 1
        return new_id

    def update_role_color(self, role_id: str, color: str) -> bool:
        role = self.palette.get(role_id)
        if role is None or role.color == color:
            return False
        self._commit(
            UpdatePaletteOperation(role_id=role_id, prev_color=role.color, next_color=color)
        )
        return True

    def add_role(self, name: str | None = None, color: str | None = None) -> str:
        roles = self.palette.roles
        if len(roles) >= self.config.max_palette_roles:
            raise ValueError(f"Palette already has {self.config.max_palette_roles} roles")

        new_id = self._next_role_id("accent", len(roles) - 1)
        color_index = max(0, len(roles) - 4) % len(ADDITIONAL_ROLE_COLORS)
        role = ColorRole(
            id=new_id,
            name=name or f"Accent {len(roles) - 1}",
            color=color or ADDITIONAL_ROLE_COLORS[color_index],
        )
        self._commit(AddRoleOperation(role=role))
        return new_id

    def remove_role(self, role_id: str, fallback_role_id: str | None = None) -> bool:
        """Remove a role, repointing its users at the fallback (first remaining role)."""
        if len(self.palette.roles) <= self.config.min_palette_roles:
            raise ValueError("Cannot remove the last color role")
        if fallback_role_id is not None and (
            fallback_role_id == role_id or self.palette.get(fallback_role_id) is None
        ):
            raise ValueError(f"Invalid fallback role: {fallback_role_id!r}")
        op = self._remove_role_operation(role_id, fallback_role_id)
        if op is None:
            return False
        self._commit(op)
        return True

    def rename_role(self, role_id: str, name: str) -> bool:
        role = self.palette.get(role_id)
        if role is None or role.name == name:
            return False
        self._commit(RenameRoleOperation(role_id=role_id, prev_name=role.name, next_name=name))
        return True

    # -- borders ---------------------------------------------------------

    def add_border(
        self,
        width_inches: float,
        corner_style: CornerStyle = "butted",
        fabric_role: str = "background",
        cornerstone_fabric_role: str | None = None,
        border_id: str | None = None,
    ) -> BorderSpec:
        config = self.border_config
        count = len(config.borders) if config is not None else 0
        if count >= self.config.max_borders:
            raise ValueError(
                f"{self.document_label} can have at most {self.config.max_borders} borders"
            )
        border = BorderSpec(
            id=border_id or str(uuid.uuid4()),
            width_inches=width_inches,
            corner_style=corner_style,
            fabric_role=fabric_role,
            cornerstone_fabric_role=cornerstone_fabric_role,
        )
        self._commit(AddBorderOperation(border=border, index=count, created_config=config is None))
        return border

    def remove_border(self, border_id: str) -> bool:
        config = self.border_config
        index = config.index_of(border_id) if config is not None else -1
        if index < 0:
            return False
        self._commit(RemoveBorderOperation(border=config.borders[index], index=index))
        return True

    def update_border(self, border_id: str, **changes: Any) -> bool:
        config = self.border_config
        index = config.index_of(border_id) if config is not None else -1
        if index < 0 or not changes:
            return False
        border = config.borders[index]
        BorderSpec.model_validate({**border.model_dump(), **changes})
        prev = {key: getattr(border, key) for key in changes}
        self._commit(UpdateBorderOperation(border_id=border_id, prev=prev, next=dict(changes)))
        return True

    def set_borders_enabled(self, enabled: bool) -> bool:
        config = self.border_config
        current = config.enabled if config is not None else False
        if current == enabled:
            return False
        self._commit(SetBordersEnabledOperation(prev_enabled=current, next_enabled=enabled))
        return True

    def reorder_borders(self, from_index: int, to_index: int) -> bool:
        config = self.border_config
        n = len(config.borders) if config is not None else 0
        if from_index == to_index or not (0 <= from_index < n and 0 <= to_index < n):
            return False
        self._commit(ReorderBordersOperation(from_index=from_index, to_index=to_index))
        return True
