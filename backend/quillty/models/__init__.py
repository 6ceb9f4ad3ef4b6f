"""Domain records: units, palettes, borders, blocks."""

from quillty.models.block import Block, BlockStatus, PublishValidation
from quillty.models.borders import BorderConfig, BorderSpec, CornerStyle
from quillty.models.palette import DEFAULT_PALETTE, ColorRole, Palette
from quillty.models.units import (
    FlyingGeesePatchRoles,
    FlyingGeeseUnit,
    GridPosition,
    HstUnit,
    QstPatchRoles,
    QstUnit,
    Span,
    SquareUnit,
    Unit,
)

__all__ = [
    "Block",
    "BlockStatus",
    "PublishValidation",
    "BorderConfig",
    "BorderSpec",
    "CornerStyle",
    "DEFAULT_PALETTE",
    "ColorRole",
    "Palette",
    "FlyingGeesePatchRoles",
    "FlyingGeeseUnit",
    "GridPosition",
    "HstUnit",
    "QstPatchRoles",
    "QstUnit",
    "Span",
    "SquareUnit",
    "Unit",
]
