"""
Conversation data model shared by engines, tools and the orchestrator.

Callers exchange plain dicts (the "transport" form: role/content pairs plus
optional tool-call fields). Internally the orchestrator works with validated
Message objects and hands engines the chat-completions wire shape that
LiteLLM accepts.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, Field, model_validator


class Role(str, Enum):
    """Conversation roles. Closed set."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ToolInvocationRequest(BaseModel):
    """A model's request to call one tool.

    ``arguments`` stays a serialized JSON string until the registry executes
    the call; the model may produce garbage and that is the registry's
    problem to report, not the engine's.
    """

    id: str = Field(..., description="Backend-assigned call id, echoed back in the tool result")
    name: str = Field(..., description="Name of the tool to invoke")
    arguments: str = Field(default="{}", description="JSON-encoded argument object")

    def parsed_arguments(self) -> dict[str, Any]:
        """Decode the argument payload.

        Raises:
            ValueError: If the payload is not valid JSON or not an object.
        """
        if not self.arguments.strip():
            return {}
        decoded = json.loads(self.arguments)
        if not isinstance(decoded, dict):
            raise ValueError(
                f"Tool arguments must be a JSON object, got {type(decoded).__name__}"
            )
        return decoded

    @classmethod
    def from_transport(cls, entry: Mapping[str, Any]) -> "ToolInvocationRequest":
        """Accept both the flat transport form and the chat-completions wire form.

            {"id": ..., "name": ..., "arguments": "..."}
            {"id": ..., "type": "function", "function": {"name": ..., "arguments": ...}}
        """
        if not isinstance(entry, Mapping):
            raise TypeError(f"Tool call must be a mapping, got {type(entry).__name__}")
        function = entry.get("function")
        if isinstance(function, Mapping):
            name = function.get("name")
            arguments = function.get("arguments")
        else:
            name = entry.get("name")
            arguments = entry.get("arguments")
        if isinstance(arguments, Mapping):
            arguments = json.dumps(arguments)
        return cls(id=entry.get("id"), name=name, arguments=arguments or "{}")

    def to_transport(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "arguments": self.arguments}


class Message(BaseModel):
    """One conversation entry."""

    role: Role
    content: str = ""
    tool_call_id: str | None = None
    tool_calls: list[ToolInvocationRequest] | None = None

    @model_validator(mode="after")
    def _check_tool_fields(self) -> "Message":
        if self.tool_call_id is not None and self.role is not Role.TOOL:
            raise ValueError("tool_call_id is only allowed on tool messages")
        if self.tool_calls is not None:
            if self.role is not Role.ASSISTANT:
                raise ValueError("tool_calls are only allowed on assistant messages")
            if not self.tool_calls:
                raise ValueError("tool_calls must not be empty when present")
        return self

    # -- constructors ------------------------------------------------------

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(role=Role.ASSISTANT, content=content)

    @classmethod
    def tool_request(cls, calls: list[ToolInvocationRequest]) -> "Message":
        return cls(role=Role.ASSISTANT, content="", tool_calls=list(calls))

    @classmethod
    def tool_result(cls, call_id: str, content: str) -> "Message":
        return cls(role=Role.TOOL, content=content, tool_call_id=call_id)

    # -- conversions -------------------------------------------------------

    @classmethod
    def from_transport(cls, entry: Mapping[str, Any]) -> "Message":
        """Build a Message from a caller-supplied dict.

        Raises:
            ValueError: On an unknown role or inconsistent tool fields.
        """
        role = Role(entry["role"])
        calls = entry.get("tool_calls")
        return cls(
            role=role,
            content=entry.get("content") or "",
            tool_call_id=entry.get("tool_call_id"),
            tool_calls=[ToolInvocationRequest.from_transport(c) for c in calls] if calls else None,
        )

    def to_transport(self) -> dict[str, Any]:
        """Plain dict handed back to callers."""
        entry: dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.tool_call_id is not None:
            entry["tool_call_id"] = self.tool_call_id
        if self.tool_calls:
            entry["tool_calls"] = [c.to_transport() for c in self.tool_calls]
        return entry

    def to_openai_dict(self) -> dict[str, Any]:
        """Chat-completions wire shape (what LiteLLM expects)."""
        if self.tool_calls:
            return {
                "role": "assistant",
                "content": self.content or None,
                "tool_calls": [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {"name": call.name, "arguments": call.arguments},
                    }
                    for call in self.tool_calls
                ],
            }
        if self.role is Role.TOOL:
            return {
                "role": "tool",
                "tool_call_id": self.tool_call_id,
                "content": self.content,
            }
        return {"role": self.role.value, "content": self.content}
