"""
Built-in tools that let the model read the host object of the current turn.

All tools are read-only. Without a context object they answer with a fixed
sentence instead of failing, so the model can tell the user it has nothing
to look at.

The object is held in a ContextVar, not on the instance. One ObjectTools is
shared by every call of an orchestrator, and each call runs in its own copy
of the context, so overlapping conversations never see each other's object.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from datetime import datetime

from aibridge.tools.base import (
    ContextAwareToolProvider,
    ContextObject,
    ToolDescriptor,
    ToolParameter,
    ToolProvider,
)

logger = logging.getLogger(__name__)

NO_CONTEXT = "No object in context"
NO_STATE = "Object has no lifecycle state"
NO_TRANSITIONS = "No transitions available"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class ObjectTools(ToolProvider, ContextAwareToolProvider):
    """Read-only accessors for the context object, plus the current time."""

    def __init__(self) -> None:
        self._context: ContextVar[ContextObject | None] = ContextVar(
            f"aibridge_object_tools_{id(self)}", default=None
        )

    @property
    def context(self) -> ContextObject | None:
        """Object of the call running in the current context."""
        return self._context.get()

    def set_context(self, context_object: ContextObject | None) -> None:
        self._context.set(context_object)

    # ------------------------------------------------------------------
    # Tool targets
    # ------------------------------------------------------------------

    def get_current_datetime(self) -> str:
        return datetime.now().strftime(DATETIME_FORMAT)

    def get_object_name(self) -> str:
        context = self.context
        if context is None:
            return NO_CONTEXT
        return str(context.name)

    def get_object_id(self) -> int | str:
        context = self.context
        if context is None:
            return 0
        return context.key

    def get_object_class(self) -> str:
        context = self.context
        if context is None:
            return NO_CONTEXT
        return str(context.object_class)

    def get_attribute(self, attribute_code: str) -> str:
        context = self.context
        if context is None:
            return NO_CONTEXT
        try:
            value = context.get(attribute_code)
        except Exception as e:
            logger.debug(f"Attribute '{attribute_code}' lookup failed: {e}")
            return f"Attribute '{attribute_code}' not found or not accessible"
        return "" if value is None else str(value)

    def get_attribute_label(self, attribute_code: str) -> str:
        context = self.context
        if context is None:
            return NO_CONTEXT
        try:
            return str(context.get_label(attribute_code))
        except Exception as e:
            logger.debug(f"Label lookup for '{attribute_code}' failed: {e}")
            return f"Attribute '{attribute_code}' not found"

    def get_state(self) -> str:
        context = self.context
        if context is None:
            return NO_CONTEXT
        return context.state or NO_STATE

    def get_state_label(self) -> str:
        context = self.context
        if context is None:
            return NO_CONTEXT
        return context.state_label or NO_STATE

    def get_available_transitions(self) -> str:
        context = self.context
        if context is None:
            return NO_CONTEXT
        transitions = list(context.transitions or [])
        if not transitions:
            return NO_TRANSITIONS
        return ", ".join(transitions)

    # ------------------------------------------------------------------
    # Provider interface
    # ------------------------------------------------------------------

    def get_tools(self) -> list[ToolDescriptor]:
        attribute_code = ToolParameter(
            name="attribute_code",
            type="string",
            description='The attribute code to read (e.g. "title", "description", "status")',
        )
        return [
            ToolDescriptor(
                name="get_object_name",
                description="Get the friendly name of the current object. No parameters required.",
                target=self.get_object_name,
            ),
            ToolDescriptor(
                name="get_object_id",
                description="Get the unique ID of the current object. No parameters required.",
                target=self.get_object_id,
            ),
            ToolDescriptor(
                name="get_object_class",
                description="Get the class name (type) of the current object. No parameters required.",
                target=self.get_object_class,
            ),
            ToolDescriptor(
                name="get_attribute",
                description="Get the value of one attribute of the current object.",
                target=self.get_attribute,
                parameters=[attribute_code],
            ),
            ToolDescriptor(
                name="get_attribute_label",
                description="Get the human-readable label of an attribute.",
                target=self.get_attribute_label,
                parameters=[attribute_code],
            ),
            ToolDescriptor(
                name="get_state",
                description='Get the lifecycle state code (e.g. "new", "assigned", "resolved"). '
                            "No parameters required.",
                target=self.get_state,
            ),
            ToolDescriptor(
                name="get_state_label",
                description="Get the human-readable lifecycle state label. No parameters required.",
                target=self.get_state_label,
            ),
            ToolDescriptor(
                name="get_available_transitions",
                description="List the state transitions available from the current state. "
                            "No parameters required.",
                target=self.get_available_transitions,
            ),
            ToolDescriptor(
                name="get_current_datetime",
                description="Get the current server date and time. No parameters required.",
                target=self.get_current_datetime,
            ),
        ]
