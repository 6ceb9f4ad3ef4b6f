"""Bounded undo/redo stacks of recorded operations.

``UndoHistory`` is immutable: every method returns a new history.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

from quillty.engine.config import DEFAULT_CONFIG
from quillty.history.operations import Operation, invert_operation


@dataclass(frozen=True)
class UndoHistory:
    undo_stack: tuple[Operation, ...] = ()
    redo_stack: tuple[Operation, ...] = ()
    max_size: int = DEFAULT_CONFIG.max_history
    # pattern documents record their own operation union
    invert: Callable[[Any], Any] = invert_operation

    def record(self, operation: Operation) -> UndoHistory:
        """Push ``operation``; clears redo and drops the oldest entry past ``max_size``.

        A ``max_size`` of zero or less disables undo entirely.
        """
        if self.max_size <= 0:
            return replace(self, undo_stack=(), redo_stack=())
        stack = (*self.undo_stack, operation)[-self.max_size:]
        return replace(self, undo_stack=stack, redo_stack=())

    def undo(self) -> tuple[UndoHistory, Operation] | None:
        """(new history, inverse operation to apply), or None if nothing to undo."""
        if not self.undo_stack:
            return None
        operation = self.undo_stack[-1]
        history = replace(
            self,
            undo_stack=self.undo_stack[:-1],
            redo_stack=(*self.redo_stack, operation),
        )
        return history, self.invert(operation)

    def redo(self) -> tuple[UndoHistory, Operation] | None:
        if not self.redo_stack:
            return None
        operation = self.redo_stack[-1]
        history = replace(
            self,
            undo_stack=(*self.undo_stack, operation),
            redo_stack=self.redo_stack[:-1],
        )
        return history, operation

    @property
    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    def clear(self) -> UndoHistory:
        return replace(self, undo_stack=(), redo_stack=())
