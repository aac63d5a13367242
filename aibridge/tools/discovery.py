"""
Discovery of third-party tool providers via entry points.

A package exposes tools to aibridge by declaring, in its own packaging
metadata:

    [project.entry-points."aibridge.tool_providers"]
    tickets = "mypackage.tools:TicketTools"

The entry point may name a ToolProvider subclass or any zero-argument
factory returning a ToolProvider instance. Discovery runs once, when the
composition root builds the orchestrator.
"""

from __future__ import annotations

import logging
from importlib.metadata import entry_points

from aibridge.tools.base import ToolProvider

logger = logging.getLogger(__name__)

TOOL_PROVIDER_GROUP = "aibridge.tool_providers"


def discover_tool_providers(group: str = TOOL_PROVIDER_GROUP) -> list[ToolProvider]:
    """
    Instantiate every tool provider published under ``group``.

    Entry points that fail to load, fail to instantiate, or produce
    something that is not a ToolProvider are logged and skipped; one broken
    plugin must not take the whole integration down.

    Returns:
        Provider instances in entry-point order.
    """
    providers: list[ToolProvider] = []
    for ep in entry_points(group=group):
        try:
            factory = ep.load()
            provider = factory()
        except Exception as e:
            logger.warning(f"Failed to load tool provider '{ep.name}': {e}")
            continue

        if not isinstance(provider, ToolProvider):
            logger.warning(
                f"Entry point '{ep.name}' produced {type(provider).__name__}, "
                f"not a ToolProvider; skipping"
            )
            continue

        logger.debug(f"Discovered tool provider '{ep.name}' ({provider.provider_name})")
        providers.append(provider)

    return providers
