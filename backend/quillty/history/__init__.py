"""Operation log: invertible operations plus the undo/redo history."""

from quillty.history.operations import (
    OPERATION_ADAPTER,
    BatchOperation,
    DocumentState,
    Operation,
    apply_operation,
    build_remove_role,
    build_resize_grid,
    invert_operation,
)
from quillty.history.undo_manager import UndoHistory

__all__ = [
    "OPERATION_ADAPTER",
    "BatchOperation",
    "DocumentState",
    "Operation",
    "UndoHistory",
    "apply_operation",
    "build_remove_role",
    "build_resize_grid",
    "invert_operation",
]
