"""Pattern designer: a rows x cols quilt grid of transformed block instances."""

from quillty.pattern.designer import PatternDesigner
from quillty.pattern.models import (
    BlockInstance,
    Pattern,
    PhysicalSize,
    QuiltGridSize,
    Rotation,
    calculate_physical_size,
    create_pattern,
)
from quillty.pattern.operations import (
    PATTERN_OPERATION_ADAPTER,
    PatternOperation,
    PatternState,
    apply_pattern_operation,
    invert_pattern_operation,
)

__all__ = [
    "PATTERN_OPERATION_ADAPTER",
    "BlockInstance",
    "Pattern",
    "PatternDesigner",
    "PatternOperation",
    "PatternState",
    "PhysicalSize",
    "QuiltGridSize",
    "Rotation",
    "apply_pattern_operation",
    "calculate_physical_size",
    "create_pattern",
    "invert_pattern_operation",
]
