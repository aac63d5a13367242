"""
Tool registry: name → descriptor lookup plus execution of model-issued calls.

Tool faults never escape resolve_and_execute(). Unknown names, unparseable
arguments and exceptions raised by a tool all come back as result text, so
the model sees what went wrong and can answer anyway instead of the whole
conversation failing.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Iterable, Iterator

from aibridge.errors import DuplicateToolNameError, ToolExecutionError
from aibridge.messages import ToolInvocationRequest
from aibridge.tools.base import ToolDescriptor, ToolParameter

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Registry of tools available to one conversation."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolDescriptor] = {}
        self._sources: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        name: str,
        target: Callable[..., Any],
        description: str = "",
        parameters: Iterable[ToolParameter] = (),
        source: str = "explicit",
    ) -> ToolDescriptor:
        """
        Register a callable under ``name``.

        Registering the same target under the same name again replaces the
        entry. A different target under a taken name is a configuration error.

        Raises:
            DuplicateToolNameError: If ``name`` is taken by another target.
        """
        descriptor = ToolDescriptor(
            name=name,
            description=description,
            target=target,
            parameters=list(parameters),
        )
        return self.add(descriptor, source=source)

    def add(self, descriptor: ToolDescriptor, source: str = "explicit") -> ToolDescriptor:
        """Register a prebuilt descriptor. Same rules as register()."""
        existing = self._tools.get(descriptor.name)
        if existing is not None and existing.target != descriptor.target:
            raise DuplicateToolNameError(
                descriptor.name, self._sources.get(descriptor.name, ""), source
            )
        self._tools[descriptor.name] = descriptor
        self._sources[descriptor.name] = source
        return descriptor

    @classmethod
    def assemble(cls, *sources: tuple[str, Iterable[ToolDescriptor]]) -> "ToolRegistry":
        """
        Build one registry from several labelled descriptor sources.

        Unlike register(), any repeated name is rejected, even within a single
        source: two providers exporting the same tool name is always a
        deployment mistake.

        Args:
            sources: ``(label, descriptors)`` pairs, e.g. ``("builtin", [...])``

        Raises:
            DuplicateToolNameError: On any name collision.
        """
        registry = cls()
        for label, descriptors in sources:
            for descriptor in descriptors:
                if descriptor.name in registry._tools:
                    raise DuplicateToolNameError(
                        descriptor.name, registry._sources[descriptor.name], label
                    )
                registry.add(descriptor, source=label)
        return registry

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def descriptors(self) -> list[ToolDescriptor]:
        return list(self._tools.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools.values())

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def resolve_and_execute(self, request: ToolInvocationRequest) -> str:
        """
        Execute one model-issued tool call and return its result as text.

        Never raises for tool faults; every failure mode is reported to the
        model as an error string.
        """
        descriptor = self._tools.get(request.name)
        if descriptor is None:
            logger.warning(f"Model requested unknown tool '{request.name}'")
            return f"Error: Unknown tool '{request.name}'"

        try:
            arguments = request.parsed_arguments()
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Invalid arguments for tool '{request.name}': {e}")
            return f"Error: Invalid arguments for tool '{request.name}': {e}"

        missing = [p for p in descriptor.required_parameters() if p not in arguments]
        if missing:
            logger.warning(f"Tool '{request.name}' called without {missing}")
            return (
                f"Error: Missing required parameter(s) for tool '{request.name}': "
                f"{', '.join(missing)}"
            )

        logger.debug(f"Calling tool '{request.name}' with {arguments}")
        try:
            result = descriptor.target(**arguments)
        except Exception as e:
            error = ToolExecutionError(request.name, e)
            logger.warning(str(error))
            return str(error)

        return "" if result is None else str(result)
