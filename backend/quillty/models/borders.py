"""Border ring specifications."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from quillty.models.base import CamelModel

CornerStyle = Literal["butted", "mitered", "cornerstone"]


class BorderSpec(CamelModel):
    id: str
    width_inches: float = Field(gt=0)
    corner_style: CornerStyle = "butted"
    fabric_role: str
    # Only meaningful for cornerstone corners; rendering falls back to fabric_role
    cornerstone_fabric_role: str | None = None


class BorderConfig(CamelModel):
    """Ordered rings, innermost first."""

    enabled: bool = True
    borders: list[BorderSpec] = Field(default_factory=list)

    @property
    def total_width_inches(self) -> float:
        return sum(b.width_inches for b in self.borders)

    def index_of(self, border_id: str) -> int:
        for i, border in enumerate(self.borders):
            if border.id == border_id:
                return i
        return -1
