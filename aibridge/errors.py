"""
Exception hierarchy for aibridge.

Everything raised on purpose by this package derives from AIBridgeError so
host applications can catch the whole family with one clause. Tool faults are
the only failures recovered locally (they are turned into result text for the
model); everything else propagates to the caller.
"""

from __future__ import annotations

from typing import Any


class AIBridgeError(Exception):
    """Base class for all aibridge errors."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class InvalidConfigurationError(AIBridgeError):
    """Invalid setup: bad retry bounds, unknown instruction, etc."""


class DuplicateToolNameError(InvalidConfigurationError):
    """Two different tools were registered under the same name."""

    def __init__(self, name: str, first_source: str = "", second_source: str = ""):
        detail = ""
        if first_source or second_source:
            detail = f" (registered by {first_source or '?'} and {second_source or '?'})"
        super().__init__(f"Duplicate tool name '{name}'{detail}")
        self.name = name


class EngineError(AIBridgeError):
    """Base class for failures reported by an engine adapter."""


class BackendUnavailableError(EngineError):
    """The backend could not be reached: connection, timeout, or non-2xx status."""


class MalformedResponseError(EngineError):
    """The backend answered, but with something that could not be interpreted."""


class EngineUnavailableError(AIBridgeError):
    """No engine is configured, so a conversation cannot run."""


class ServiceUnavailableError(AIBridgeError):
    """All retry attempts around a backend call were exhausted."""

    def __init__(self, context: str, attempts: int, cause: Exception | None = None):
        super().__init__(
            f"{context}: Unable to establish a connection to the AI service "
            f"after {attempts} attempt(s).",
            cause=cause,
        )
        self.context = context
        self.attempts = attempts


class ToolExecutionError(AIBridgeError):
    """A tool's target raised. Converted to result text, never propagated."""

    def __init__(self, tool_name: str, cause: Exception):
        super().__init__(f"Error executing tool '{tool_name}': {cause}", cause=cause)
        self.tool_name = tool_name


class ToolLoopExceededError(AIBridgeError):
    """The model kept requesting tools past the configured round limit.

    ``history`` holds the caller-visible transcript up to the point of
    failure so the host can inspect what the model asked for.
    """

    def __init__(self, rounds: int, history: list[dict[str, Any]]):
        super().__init__(
            f"Model still requested tools after {rounds} round(s); giving up"
        )
        self.rounds = rounds
        self.history = history
