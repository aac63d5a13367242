"""
Engine selection by declared name.

Built-in engines are always available. Third-party engines are published
under the ``aibridge.engines`` entry-point group, pointing at an Engine
subclass:

    [project.entry-points."aibridge.engines"]
    acme = "acme_ai.engine:AcmeEngine"

Resolution happens when the composition root builds the orchestrator; the
chosen engine instance is then passed in explicitly. Nothing here is cached.
"""

from __future__ import annotations

import logging
from importlib.metadata import entry_points
from typing import Any, Mapping

from aibridge.engines.base import Engine
from aibridge.engines.litellm_engine import (
    AnthropicEngine,
    GenericAIEngine,
    MistralEngine,
    OllamaEngine,
    OpenAIEngine,
    TranslationEngine,
)

logger = logging.getLogger(__name__)

ENGINE_GROUP = "aibridge.engines"

BUILTIN_ENGINES: tuple[type[Engine], ...] = (
    GenericAIEngine,
    OpenAIEngine,
    AnthropicEngine,
    MistralEngine,
    OllamaEngine,
    TranslationEngine,
)


def _plugin_engines(group: str) -> list[type[Engine]]:
    engines: list[type[Engine]] = []
    for ep in entry_points(group=group):
        try:
            engine_class = ep.load()
        except Exception as e:
            logger.warning(f"Failed to load engine plugin '{ep.name}': {e}")
            continue

        if not (isinstance(engine_class, type) and issubclass(engine_class, Engine)):
            logger.warning(f"Entry point '{ep.name}' is not an Engine subclass; skipping")
            continue
        engines.append(engine_class)
    return engines


def available_engines(group: str = ENGINE_GROUP) -> dict[str, type[Engine]]:
    """
    Map declared engine names to engine classes.

    Built-ins come first; a plugin declaring a built-in's name is ignored
    with a warning.
    """
    engines: dict[str, type[Engine]] = {cls.engine_name: cls for cls in BUILTIN_ENGINES}
    for engine_class in _plugin_engines(group):
        name = engine_class.engine_name
        if name in engines:
            logger.warning(
                f"Engine plugin {engine_class.__name__} declares name '{name}' "
                f"already taken by {engines[name].__name__}; ignoring it"
            )
            continue
        engines[name] = engine_class
    return engines


def resolve_engine_class(name: str, group: str = ENGINE_GROUP) -> type[Engine] | None:
    """Return the engine class declaring ``name``, or None if nothing matches."""
    return available_engines(group).get(name)


def create_engine(
    name: str,
    config: Mapping[str, Any],
    group: str = ENGINE_GROUP,
) -> Engine | None:
    """
    Resolve ``name`` and build the engine from ``config``.

    Returns:
        The engine, or None when no engine declares that name.
    """
    engine_class = resolve_engine_class(name, group)
    if engine_class is None:
        logger.warning(f"No engine named '{name}' is available")
        return None
    logger.debug(f"Selected engine '{name}' ({engine_class.__name__})")
    return engine_class.from_config(config)
