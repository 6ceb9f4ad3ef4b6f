"""Shared pydantic base for stored records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Frozen model with camelCase aliases for the storage shape.

    Attributes stay snake_case in Python; ``model_dump(by_alias=True)``
    produces the keys the storage record uses (``fabricRole``,
    ``patchFabricRoles``, ``previewPalette``...).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )
