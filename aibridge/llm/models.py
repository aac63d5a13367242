"""
Result models for the conversation orchestrator.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ToolCallRecord(BaseModel):
    """Record of one tool invocation made while answering."""

    call_id: str = Field(description="Backend-assigned tool call id")
    name: str = Field(description="Name of the tool that was called")
    arguments: str = Field(description="JSON argument payload as sent by the model")
    result: str = Field(description="Text returned to the model")


class ConversationResult(BaseModel):
    """
    Outcome of one continue_conversation() call.

    ``response`` is the final answer with any leading reasoning block removed.
    ``history`` is the caller-visible transcript: admitted caller entries,
    tool-call/tool-result pairs, and the final assistant turn with its raw
    (unstripped) text. Pass it back in as-is to continue the conversation.
    """

    response: str
    history: list[dict[str, Any]]
    tool_calls: list[ToolCallRecord] = Field(default_factory=list)
    rounds: int = Field(default=0, description="Engine calls that returned tool requests")

    def as_dict(self) -> dict[str, Any]:
        return {"response": self.response, "history": self.history}
