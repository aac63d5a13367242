"""
Tool Integration Layer.

Host functions exposed to the model: provider interfaces, the registry that
resolves and executes model-issued calls, the built-in object tools, and
entry-point discovery for third-party providers.
"""

from aibridge.tools.base import (
    ContextAwareToolProvider,
    ContextObject,
    ToolDescriptor,
    ToolParameter,
    ToolProvider,
)
from aibridge.tools.registry import ToolRegistry

__all__ = [
    "ContextAwareToolProvider",
    "ContextObject",
    "ToolDescriptor",
    "ToolParameter",
    "ToolProvider",
    "ToolRegistry",
]
