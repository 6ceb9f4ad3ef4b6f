"""Storage shape of a block, read-time migration, and publish checks for
blocks and patterns.

The surrounding record (name, grid size, status, timestamps) belongs to
the storage layer; this module only owns ``designData`` and the rules
for reading old records back.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import Field

from quillty.models.base import CamelModel
from quillty.models.block import Block, PublishValidation
from quillty.models.borders import BorderConfig
from quillty.models.palette import DEFAULT_PALETTE, Palette
from quillty.models.units import UNIT_LIST_ADAPTER, Unit
from quillty.pattern.models import Pattern
from quillty.utils.grid import empty_cells

logger = logging.getLogger(__name__)

UNTITLED_BLOCK = "Untitled Block"
HASHTAG_RE = re.compile(r"#([A-Za-z0-9_]+)")
MIN_PRICE_CENTS = 99


class BlockDesignData(CamelModel):
    version: Literal[1] = 1
    units: list[Unit] = Field(default_factory=list)
    preview_palette: Palette = DEFAULT_PALETTE
    border_config: BorderConfig | None = None


class BlockPersistData(CamelModel):
    name: str
    description: str | None = None
    grid_size: int
    design_data: BlockDesignData
    piece_count: int


# ---------------------------------------------------------------------------
# Migration
# ---------------------------------------------------------------------------

def migrate_unit(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Rename the legacy ``partFabricRoles`` field to ``patchFabricRoles``."""
    data = dict(raw)
    if "partFabricRoles" in data and "patchFabricRoles" not in data:
        data["patchFabricRoles"] = data.pop("partFabricRoles")
        logger.debug("Migrated partFabricRoles on unit %s", data.get("id"))
    return data


def migrate_units(raw_units: list[Mapping[str, Any]]) -> list[Unit]:
    return UNIT_LIST_ADAPTER.validate_python([migrate_unit(u) for u in raw_units])


# ---------------------------------------------------------------------------
# Serialize / deserialize
# ---------------------------------------------------------------------------

def serialize_block(block: Block) -> BlockPersistData:
    design = BlockDesignData(
        units=block.units,
        preview_palette=block.preview_palette,
        border_config=block.border_config,
    )
    return BlockPersistData(
        name=block.title or UNTITLED_BLOCK,
        description=block.description,
        grid_size=block.grid_size,
        design_data=design,
        piece_count=len(block.units),
    )


def deserialize_block(record: Mapping[str, Any]) -> Block:
    """Build a Block from a stored row, repairing old or partial design data.

    Missing units default to empty, a missing palette to the four standard
    roles. Units stored under the legacy ``shapes`` key are accepted.
    """
    design = record.get("design_data") or {}
    raw_units = design.get("units")
    if raw_units is None:
        raw_units = design.get("shapes") or []
        if raw_units:
            logger.debug("Block %s: reading legacy 'shapes' key", record.get("id"))

    palette_data = design.get("previewPalette")
    palette = Palette.model_validate(palette_data) if palette_data else DEFAULT_PALETTE
    border_data = design.get("borderConfig")

    return Block(
        id=record["id"],
        creator_id=record["creator_id"],
        derived_from_block_id=record.get("derived_from_block_id"),
        title=record.get("name") or "",
        description=record.get("description"),
        hashtags=[],
        grid_size=record["grid_size"],
        units=migrate_units(raw_units),
        preview_palette=palette,
        border_config=BorderConfig.model_validate(border_data) if border_data else None,
        status=record.get("status", "draft"),
        published_at=record.get("published_at"),
        created_at=record.get("created_at"),
        updated_at=record.get("updated_at"),
    )


# ---------------------------------------------------------------------------
# Discovery and publishing
# ---------------------------------------------------------------------------

def extract_hashtags(text: str | None) -> list[str]:
    """Every lowercased ``#tag`` in order of appearance, repeats included.

    A tag stops at the first character that is not alphanumeric or ``_``.
    """
    if not text:
        return []
    return [match.group(1).lower() for match in HASHTAG_RE.finditer(text)]


def validate_for_publish(block: Block) -> PublishValidation:
    if not block.units:
        return PublishValidation(valid=False, error="Add at least one unit before publishing")

    remaining = len(empty_cells(block.units, block.grid_size))
    if remaining > 0:
        plural = "s" if remaining > 1 else ""
        return PublishValidation(
            valid=False,
            error=f"{remaining} empty cell{plural} remaining. Fill all cells to publish.",
        )
    return PublishValidation(valid=True)


def validate_pattern_for_publish(pattern: Pattern) -> PublishValidation:
    if not pattern.block_instances:
        return PublishValidation(valid=False, error="Add at least one block before publishing")

    remaining = pattern.grid_size.rows * pattern.grid_size.cols - len(
        {(i.position.row, i.position.col) for i in pattern.block_instances}
    )
    if remaining > 0:
        plural = "s" if remaining > 1 else ""
        return PublishValidation(
            valid=False,
            error=f"{remaining} empty cell{plural} remaining. Fill all cells to publish.",
        )
    price = pattern.price_cents
    if pattern.is_premium and (price is None or price < MIN_PRICE_CENTS):
        return PublishValidation(
            valid=False, error=f"Premium patterns need a price of at least {MIN_PRICE_CENTS} cents"
        )
    return PublishValidation(valid=True)
