"""
Base class for backend engines.

An engine turns a conversation into the next model turn. It knows how to
talk to one kind of backend; it knows nothing about retries, history
sanitizing or tool execution, which the orchestrator layers on top.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Mapping

from aibridge.messages import Message, ToolInvocationRequest
from aibridge.tools.base import ToolDescriptor


class Engine(ABC):
    """
    Abstract base class for engines.

    Subclasses declare ``engine_name``, the string configuration uses to
    select them. Failures must surface as BackendUnavailableError (could not
    reach the backend, timed out, non-2xx) or MalformedResponseError (got an
    answer that makes no sense); the retry layer treats both as retryable.
    """

    engine_name: ClassVar[str]
    supports_tools: ClassVar[bool] = True

    @classmethod
    @abstractmethod
    def from_config(cls, config: Mapping[str, Any]) -> "Engine":
        """
        Build an engine from a configuration mapping.

        Recognised keys include ``url``, ``api_key`` and ``model``; missing
        keys fall back to the engine's own defaults and unknown keys are
        ignored.
        """

    @abstractmethod
    def get_completion(self, message: str, system_instruction: str = "") -> str:
        """Single-shot completion of ``message``, optionally under a system instruction."""

    @abstractmethod
    def get_next_turn(
        self,
        history: list[Message],
        tools: list[ToolDescriptor],
    ) -> str | list[ToolInvocationRequest]:
        """
        Produce the next assistant turn for ``history``.

        Returns:
            The final text, or a non-empty list of tool invocation requests
            in the order the model issued them. Engines without tool support
            always return text.
        """

    def __repr__(self) -> str:
        return f"<{type(self).__name__} engine_name={self.engine_name!r}>"
