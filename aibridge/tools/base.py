"""
Base classes for tool providers.

A tool is a host function the model may call mid-conversation. Providers
group related tools and hand them to the registry as ToolDescriptors;
context-aware providers additionally receive the host object the current
conversation is about.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, runtime_checkable

from pydantic import BaseModel, Field


class ToolParameter(BaseModel):
    """One named argument of a tool."""

    name: str
    type: str = Field(default="string", description="JSON-schema type tag")
    description: str = ""
    required: bool = True


@dataclass
class ToolDescriptor:
    """
    Everything the model and the registry need to know about one tool.

    The schema half (name, description, parameters) is sent to the model;
    ``target`` is the bound callable the registry invokes with the decoded
    arguments as keyword arguments.
    """

    name: str
    description: str
    target: Callable[..., Any]
    parameters: list[ToolParameter] = field(default_factory=list)

    def required_parameters(self) -> list[str]:
        return [p.name for p in self.parameters if p.required]

    def to_openai_schema(self) -> dict[str, Any]:
        """
        Tool definition in the OpenAI function format that LiteLLM expects:

            {"type": "function", "function": {"name": ..., "description": ..., "parameters": ...}}
        """
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": {
                        p.name: {"type": p.type, "description": p.description}
                        for p in self.parameters
                    },
                    "required": self.required_parameters(),
                },
            },
        }


class ToolProvider(ABC):
    """
    Abstract base class for tool providers.

    Subclasses return the tools they expose; the registry takes care of
    schema export and execution.
    """

    @property
    def provider_name(self) -> str:
        """Label used in duplicate-name diagnostics."""
        return type(self).__name__

    @abstractmethod
    def get_tools(self) -> list[ToolDescriptor]:
        """
        List the tools this provider exposes.

        Returns:
            Descriptors whose targets are bound to this provider.
        """


class ContextAwareToolProvider(ABC):
    """
    Mixin for providers whose tools operate on a host object.

    The orchestrator calls set_context() at the start of every conversation
    turn, with None when the turn has no object. Providers must not keep a
    previous turn's object around after that.

    A provider instance is shared by concurrent calls. Keep the object in a
    ``contextvars.ContextVar`` (see ObjectTools): each call runs in its own
    context copy, so a value set there is only visible to that call.
    """

    @abstractmethod
    def set_context(self, context_object: ContextObject | None) -> None:
        """Set (or clear, with None) the host object for the current turn."""


@runtime_checkable
class ContextObject(Protocol):
    """Read-only view of the host object a conversation is about."""

    @property
    def name(self) -> str: ...

    @property
    def key(self) -> int | str: ...

    @property
    def object_class(self) -> str: ...

    @property
    def state(self) -> str | None: ...

    @property
    def state_label(self) -> str | None: ...

    @property
    def transitions(self) -> list[str]: ...

    def get(self, attribute: str) -> Any: ...

    def get_label(self, attribute: str) -> str: ...
