"""Built-in unit definitions.

Nothing registers on import; ``register_builtin_units`` is called once at
startup (see ``quillty.bootstrap.init_engine``) before the registry is frozen.
"""

from __future__ import annotations

import logging

from quillty.engine.definition import UnitDefinition
from quillty.engine.registry import UnitRegistry, get_registry
from quillty.units.flying_geese import FlyingGeeseDefinition
from quillty.units.hst import HstDefinition
from quillty.units.qst import QstDefinition
from quillty.units.square import SquareDefinition

logger = logging.getLogger(__name__)


def builtin_units() -> list[UnitDefinition]:
    return [SquareDefinition(), HstDefinition(), FlyingGeeseDefinition(), QstDefinition()]


def register_builtin_units(registry: UnitRegistry | None = None) -> UnitRegistry:
    """Register every built-in definition not already present."""
    if registry is None:
        registry = get_registry()
    for definition in builtin_units():
        if definition.type_id not in registry:
            registry.register(definition)
    logger.debug("Built-in units registered: %s", ", ".join(registry.type_ids()))
    return registry
