"""Block document model."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from quillty.engine.config import DEFAULT_CONFIG
from quillty.models.base import CamelModel
from quillty.models.borders import BorderConfig
from quillty.models.palette import DEFAULT_PALETTE, Palette
from quillty.models.units import Unit

BlockStatus = Literal["draft", "published"]


class Block(CamelModel):
    id: str
    creator_id: str
    derived_from_block_id: str | None = None

    title: str = ""
    description: str | None = None
    hashtags: list[str] = Field(default_factory=list)

    grid_size: int = Field(
        default=DEFAULT_CONFIG.default_grid_size,
        ge=DEFAULT_CONFIG.min_grid_size,
        le=DEFAULT_CONFIG.max_grid_size,
    )
    units: list[Unit] = Field(default_factory=list)
    preview_palette: Palette = DEFAULT_PALETTE
    border_config: BorderConfig | None = None

    # Owned by the publishing collaborator, never part of undo
    status: BlockStatus = "draft"
    published_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class PublishValidation(CamelModel):
    valid: bool
    error: str | None = None
