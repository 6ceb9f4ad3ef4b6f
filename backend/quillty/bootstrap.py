"""Engine startup: logging, built-in unit registration, registry freeze."""

from __future__ import annotations

import logging

from dotenv import load_dotenv

from quillty.config import Settings
from quillty.engine.registry import UnitRegistry, get_registry
from quillty.units import register_builtin_units

logger = logging.getLogger(__name__)


def init_engine(settings: Settings | None = None, registry: UnitRegistry | None = None) -> UnitRegistry:
    """Prepare the unit registry for use. Safe to call more than once."""
    if registry is None:
        registry = get_registry()
    if registry.frozen:
        return registry

    if settings is None:
        load_dotenv()
        settings = Settings()

    logging.basicConfig(
        level=getattr(logging, settings.quillty_log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    register_builtin_units(registry)
    registry.freeze()
    logger.info("Quillty engine ready (%s): %s", settings.quillty_env, ", ".join(registry.type_ids()))
    return registry
