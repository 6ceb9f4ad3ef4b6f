"""Shared test fixtures."""

from __future__ import annotations

import pytest

from quillty.bootstrap import init_engine
from quillty.config import Settings
from quillty.models.block import Block
from quillty.models.palette import ColorRole, Palette
from quillty.models.units import (
    FlyingGeesePatchRoles,
    FlyingGeeseUnit,
    GridPosition,
    HstUnit,
    QstPatchRoles,
    QstUnit,
    Span,
    SquareUnit,
)


SAMPLE_PALETTE = Palette(
    roles=[
        ColorRole(id="background", name="Background", color="#FFFFFF"),
        ColorRole(id="feature", name="Feature", color="#1E3A5F"),
        ColorRole(id="accent1", name="Accent 1", color="#8B4513"),
        ColorRole(id="accent2", name="Accent 2", color="#DAA520"),
    ]
)

SQUARE = SquareUnit(id="sq-1", position=GridPosition(row=0, col=0), fabric_role="feature")

HST = HstUnit(
    id="hst-1",
    position=GridPosition(row=0, col=1),
    variant="nw",
    fabric_role="feature",
    secondary_fabric_role="background",
)

FLYING_GEESE = FlyingGeeseUnit(
    id="fg-1",
    position=GridPosition(row=1, col=0),
    span=Span(rows=1, cols=2),
    direction="right",
    patch_fabric_roles=FlyingGeesePatchRoles(goose="feature", sky1="accent1", sky2="accent2"),
)

QST = QstUnit(
    id="qst-1",
    position=GridPosition(row=2, col=2),
    patch_fabric_roles=QstPatchRoles(
        top="feature", right="background", bottom="accent1", left="accent2"
    ),
)

SAMPLE_UNITS = [SQUARE, HST, FLYING_GEESE, QST]


@pytest.fixture(autouse=True, scope="session")
def engine():
    """Built-in units registered and the registry frozen, once per run."""
    return init_engine(Settings(quillty_log_level="warning"))


@pytest.fixture
def palette() -> Palette:
    return SAMPLE_PALETTE


@pytest.fixture
def sample_units() -> list:
    return list(SAMPLE_UNITS)


@pytest.fixture
def block() -> Block:
    return Block(
        id="block-1",
        creator_id="user-1",
        title="Sample",
        grid_size=3,
        units=list(SAMPLE_UNITS),
        preview_palette=SAMPLE_PALETTE,
    )


@pytest.fixture
def empty_block() -> Block:
    return Block(id="block-2", creator_id="user-1", grid_size=3, preview_palette=SAMPLE_PALETTE)
