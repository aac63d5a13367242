"""
Unit tests for the built-in ObjectTools provider.
"""

import contextvars
import re
from datetime import datetime

import pytest

from aibridge.tools.base import ContextObject
from aibridge.tools.builtin import ObjectTools


class FakeTicket:
    """Minimal host object satisfying the ContextObject protocol."""

    def __init__(self, state="assigned", state_label="Assigned", transitions=("ev_resolve", "ev_reassign")):
        self._attributes = {"title": "Printer on fire", "priority": 1, "agent_id": None}
        self._labels = {"title": "Title", "priority": "Priority"}
        self._state = state
        self._state_label = state_label
        self._transitions = list(transitions)

    @property
    def name(self):
        return "R-000042"

    @property
    def key(self):
        return 42

    @property
    def object_class(self):
        return "UserRequest"

    @property
    def state(self):
        return self._state

    @property
    def state_label(self):
        return self._state_label

    @property
    def transitions(self):
        return self._transitions

    def get(self, attribute):
        return self._attributes[attribute]

    def get_label(self, attribute):
        return self._labels[attribute]


@pytest.fixture
def tools():
    return ObjectTools()


@pytest.fixture
def ticket_tools(tools):
    tools.set_context(FakeTicket())
    return tools


class TestWithoutContext:
    """Every object tool answers politely when there is no object."""

    @pytest.mark.parametrize("method", [
        "get_object_name",
        "get_object_class",
        "get_state",
        "get_state_label",
        "get_available_transitions",
    ])
    def test_no_object_message(self, tools, method):
        assert getattr(tools, method)() == "No object in context"

    def test_attribute_tools(self, tools):
        assert tools.get_attribute("title") == "No object in context"
        assert tools.get_attribute_label("title") == "No object in context"

    def test_object_id_is_zero(self, tools):
        assert tools.get_object_id() == 0

    def test_datetime_needs_no_context(self, tools):
        value = tools.get_current_datetime()
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", value)
        datetime.strptime(value, "%Y-%m-%d %H:%M:%S")


class TestWithContext:
    """Tools read the context object."""

    def test_fake_satisfies_protocol(self):
        assert isinstance(FakeTicket(), ContextObject)

    def test_identity(self, ticket_tools):
        assert ticket_tools.get_object_name() == "R-000042"
        assert ticket_tools.get_object_id() == 42
        assert ticket_tools.get_object_class() == "UserRequest"

    def test_attribute_value(self, ticket_tools):
        assert ticket_tools.get_attribute("title") == "Printer on fire"
        assert ticket_tools.get_attribute("priority") == "1"
        assert ticket_tools.get_attribute("agent_id") == ""

    def test_missing_attribute(self, ticket_tools):
        assert ticket_tools.get_attribute("nope") == "Attribute 'nope' not found or not accessible"
        assert ticket_tools.get_attribute_label("nope") == "Attribute 'nope' not found"

    def test_attribute_label(self, ticket_tools):
        assert ticket_tools.get_attribute_label("title") == "Title"

    def test_state(self, ticket_tools):
        assert ticket_tools.get_state() == "assigned"
        assert ticket_tools.get_state_label() == "Assigned"

    def test_transitions_joined(self, ticket_tools):
        assert ticket_tools.get_available_transitions() == "ev_resolve, ev_reassign"

    def test_no_lifecycle(self, tools):
        tools.set_context(FakeTicket(state="", state_label=None, transitions=()))
        assert tools.get_state() == "Object has no lifecycle state"
        assert tools.get_state_label() == "Object has no lifecycle state"
        assert tools.get_available_transitions() == "No transitions available"

    def test_clearing_context(self, ticket_tools):
        ticket_tools.set_context(None)
        assert ticket_tools.get_object_name() == "No object in context"

    def test_context_set_in_a_copied_context_stays_there(self, tools):
        def run_with_ticket():
            tools.set_context(FakeTicket())
            return tools.get_object_name()

        assert contextvars.copy_context().run(run_with_ticket) == "R-000042"
        assert tools.get_object_name() == "No object in context"


class TestDescriptors:
    def test_exposes_all_tools(self, tools):
        names = {t.name for t in tools.get_tools()}
        assert names == {
            "get_object_name",
            "get_object_id",
            "get_object_class",
            "get_attribute",
            "get_attribute_label",
            "get_state",
            "get_state_label",
            "get_available_transitions",
            "get_current_datetime",
        }

    def test_attribute_tool_requires_code(self, tools):
        by_name = {t.name: t for t in tools.get_tools()}
        assert by_name["get_attribute"].required_parameters() == ["attribute_code"]
        assert by_name["get_state"].required_parameters() == []

    def test_targets_are_bound_to_provider(self, ticket_tools):
        by_name = {t.name: t for t in ticket_tools.get_tools()}
        assert by_name["get_object_name"].target() == "R-000042"
