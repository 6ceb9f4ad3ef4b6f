"""Unit records: one placed geometric primitive inside a block grid.

``Unit`` is a discriminated union on ``type``. Each variant keeps its own
named color-role fields; the registry never sees these directly, only the
generic config produced by ``quillty.engine.bridge``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from quillty.models.base import CamelModel

HstVariant = Literal["nw", "ne", "sw", "se"]
FlyingGeeseDirection = Literal["up", "down", "left", "right"]
UnitType = Literal["square", "hst", "flying_geese", "qst"]


class GridPosition(CamelModel):
    """Top-left cell of a unit, zero-indexed."""

    row: int
    col: int


class Span(CamelModel):
    rows: int = 1
    cols: int = 1


class _UnitBase(CamelModel):
    id: str
    position: GridPosition
    span: Span = Field(default_factory=Span)

    def cells(self) -> list[tuple[int, int]]:
        """Every (row, col) this unit covers."""
        return [
            (r, c)
            for r in range(self.position.row, self.position.row + self.span.rows)
            for c in range(self.position.col, self.position.col + self.span.cols)
        ]


class SquareUnit(_UnitBase):
    type: Literal["square"] = "square"
    fabric_role: str


class HstUnit(_UnitBase):
    type: Literal["hst"] = "hst"
    variant: HstVariant
    fabric_role: str  # primary triangle
    secondary_fabric_role: str


class FlyingGeesePatchRoles(CamelModel):
    goose: str
    sky1: str
    sky2: str


class FlyingGeeseUnit(_UnitBase):
    type: Literal["flying_geese"] = "flying_geese"
    direction: FlyingGeeseDirection
    patch_fabric_roles: FlyingGeesePatchRoles


class QstPatchRoles(CamelModel):
    top: str
    right: str
    bottom: str
    left: str


class QstUnit(_UnitBase):
    """Quarter-square triangle. No variant: the shape is 2-fold symmetric,
    so rotation and flips are color permutations."""

    type: Literal["qst"] = "qst"
    patch_fabric_roles: QstPatchRoles


Unit = Annotated[
    Union[SquareUnit, HstUnit, FlyingGeeseUnit, QstUnit],
    Field(discriminator="type"),
]

UNIT_ADAPTER: TypeAdapter[Unit] = TypeAdapter(Unit)
UNIT_LIST_ADAPTER: TypeAdapter[list[Unit]] = TypeAdapter(list[Unit])


def merge_unit_fields(unit: Unit, changes: Mapping[str, Any]) -> Unit:
    """Return a new unit with ``changes`` applied; ``unit`` is left untouched.

    Keys are attribute names. A mapping value aimed at a nested record
    (``patch_fabric_roles``) is merged into it, so a single patch can be
    updated without restating the others.
    """
    if not changes:
        return unit
    data = dict(unit)
    for key, value in changes.items():
        current = data.get(key)
        if isinstance(value, Mapping) and isinstance(current, BaseModel):
            value = {**dict(current), **value}
        data[key] = value
    return UNIT_ADAPTER.validate_python(data)


def find_unit(units: Iterable[Unit], unit_id: str) -> Unit | None:
    for unit in units:
        if unit.id == unit_id:
            return unit
    return None
