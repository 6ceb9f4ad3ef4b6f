"""Pattern document model: a rows x cols grid of block instances."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import Field

from quillty.engine.config import DEFAULT_CONFIG
from quillty.models.base import CamelModel
from quillty.models.borders import BorderConfig
from quillty.models.palette import DEFAULT_PALETTE, Palette
from quillty.models.units import GridPosition

Rotation = Literal[0, 90, 180, 270]
ROTATIONS: tuple[Rotation, ...] = (0, 90, 180, 270)

PatternStatus = Literal["draft", "published"]
PatternDifficulty = Literal["beginner", "intermediate", "advanced"]
PatternCategory = Literal["traditional", "modern", "art", "seasonal", "other"]

HexColor = Annotated[str, Field(pattern=r"^#[0-9A-Fa-f]{6}$")]

_GridDimension = Annotated[
    int,
    Field(ge=DEFAULT_CONFIG.min_pattern_grid_size, le=DEFAULT_CONFIG.max_pattern_grid_size),
]


class QuiltGridSize(CamelModel):
    rows: _GridDimension = DEFAULT_CONFIG.default_pattern_rows
    cols: _GridDimension = DEFAULT_CONFIG.default_pattern_cols

    def contains(self, position: GridPosition) -> bool:
        return 0 <= position.row < self.rows and 0 <= position.col < self.cols

    def positions(self) -> list[GridPosition]:
        """Every cell, row-major."""
        return [GridPosition(row=r, col=c) for r in range(self.rows) for c in range(self.cols)]

    @property
    def is_large(self) -> bool:
        """Past this size the editor warns that the canvas gets crowded."""
        threshold = DEFAULT_CONFIG.pattern_grid_warning_threshold
        return self.rows > threshold or self.cols > threshold


class PhysicalSize(CamelModel):
    width_inches: float = Field(gt=0)
    height_inches: float = Field(gt=0)
    block_size_inches: float = Field(gt=0)


def calculate_physical_size(
    grid_size: QuiltGridSize,
    block_size_inches: float = DEFAULT_CONFIG.default_block_size_inches,
) -> PhysicalSize:
    return PhysicalSize(
        width_inches=grid_size.cols * block_size_inches,
        height_inches=grid_size.rows * block_size_inches,
        block_size_inches=block_size_inches,
    )


class BlockInstance(CamelModel):
    """One placement of a library block on the pattern grid.

    ``palette_overrides`` maps a role id to the hex color this instance
    uses instead of the pattern palette's.
    """

    id: str
    block_id: str
    position: GridPosition
    rotation: Rotation = 0
    flip_horizontal: bool = False
    flip_vertical: bool = False
    palette_overrides: dict[str, HexColor] | None = None


class Pattern(CamelModel):
    id: str
    creator_id: str

    title: str = ""
    description: str | None = None
    hashtags: list[str] = Field(default_factory=list)
    difficulty: PatternDifficulty = "beginner"
    category: PatternCategory | None = None

    grid_size: QuiltGridSize = Field(default_factory=QuiltGridSize)
    physical_size: PhysicalSize = Field(
        default_factory=lambda: calculate_physical_size(QuiltGridSize())
    )
    palette: Palette = DEFAULT_PALETTE
    block_instances: list[BlockInstance] = Field(default_factory=list)
    border_config: BorderConfig | None = None

    # Owned by the publishing collaborator, never part of undo
    status: PatternStatus = "draft"
    is_premium: bool = False
    price_cents: int | None = Field(default=None, ge=0)
    published_at: str | None = None
    thumbnail_url: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


def create_pattern(
    pattern_id: str,
    creator_id: str,
    grid_size: QuiltGridSize | None = None,
    block_size_inches: float = DEFAULT_CONFIG.default_block_size_inches,
    palette: Palette = DEFAULT_PALETTE,
) -> Pattern:
    """Empty pattern whose physical size matches its grid."""
    grid_size = grid_size or QuiltGridSize()
    return Pattern(
        id=pattern_id,
        creator_id=creator_id,
        grid_size=grid_size,
        physical_size=calculate_physical_size(grid_size, block_size_inches),
        palette=palette,
    )
