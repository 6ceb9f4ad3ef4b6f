"""Color roles and palettes."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from pydantic import Field

from quillty.models.base import CamelModel

logger = logging.getLogger(__name__)

# Neutral gray used when a role id cannot be resolved.
FALLBACK_COLOR = "#CCCCCC"


class ColorRole(CamelModel):
    id: str
    name: str
    color: str  # hex, e.g. "#F5F5DC"
    # Set on roles auto-created from a per-instance override
    is_variant_color: bool | None = None


class Palette(CamelModel):
    """Ordered list of color roles. Role ids are unique."""

    roles: list[ColorRole] = Field(default_factory=list)

    def get(self, role_id: str) -> ColorRole | None:
        for role in self.roles:
            if role.id == role_id:
                return role
        return None

    def index_of(self, role_id: str) -> int:
        for i, role in enumerate(self.roles):
            if role.id == role_id:
                return i
        return -1

    @property
    def role_ids(self) -> list[str]:
        return [r.id for r in self.roles]

    def resolve_color(
        self,
        role_id: str | None,
        overrides: Mapping[str, str] | None = None,
        fallback: str = FALLBACK_COLOR,
    ) -> str:
        """Override map first, then the palette, then ``fallback``. Never raises."""
        if role_id is None:
            return fallback
        if overrides and overrides.get(role_id):
            return overrides[role_id]
        role = self.get(role_id)
        if role is None:
            logger.debug("Unresolved color role %r, using %s", role_id, fallback)
            return fallback
        return role.color


STANDARD_ROLE_IDS = ("background", "feature", "accent1", "accent2")

DEFAULT_PALETTE = Palette(
    roles=[
        ColorRole(id="background", name="Background", color="#F5F5DC"),
        ColorRole(id="feature", name="Feature", color="#2C3E50"),
        ColorRole(id="accent1", name="Accent 1", color="#8B4513"),
        ColorRole(id="accent2", name="Accent 2", color="#DAA520"),
    ]
)

# Colors handed out to roles added beyond the standard four.
ADDITIONAL_ROLE_COLORS = (
    "#C0392B",
    "#27AE60",
    "#8E44AD",
    "#2980B9",
    "#D35400",
    "#16A085",
    "#7F8C8D",
    "#F39C12",
)
