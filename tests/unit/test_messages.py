"""
Unit tests for the conversation data model.
"""

import pytest
from pydantic import ValidationError

from aibridge.messages import Message, Role, ToolInvocationRequest


class TestToolInvocationRequest:

    def test_parsed_arguments(self):
        request = ToolInvocationRequest(id="c1", name="t", arguments='{"a": 1}')
        assert request.parsed_arguments() == {"a": 1}

    def test_blank_arguments_are_empty(self):
        assert ToolInvocationRequest(id="c1", name="t", arguments="  ").parsed_arguments() == {}

    def test_non_object_rejected(self):
        with pytest.raises(ValueError, match="JSON object"):
            ToolInvocationRequest(id="c1", name="t", arguments='"text"').parsed_arguments()


class TestMessageValidation:

    def test_tool_call_id_only_on_tool_messages(self):
        with pytest.raises(ValidationError):
            Message(role=Role.USER, content="x", tool_call_id="c1")

    def test_tool_calls_only_on_assistant_messages(self):
        call = ToolInvocationRequest(id="c1", name="t")
        with pytest.raises(ValidationError):
            Message(role=Role.USER, tool_calls=[call])

    def test_empty_tool_calls_rejected(self):
        with pytest.raises(ValidationError):
            Message(role=Role.ASSISTANT, tool_calls=[])


class TestTransportForm:

    def test_from_transport_plain(self):
        message = Message.from_transport({"role": "user", "content": "Hi"})
        assert message.role is Role.USER
        assert message.content == "Hi"

    def test_unknown_role(self):
        with pytest.raises(ValueError):
            Message.from_transport({"role": "moderator", "content": "Hi"})

    def test_tool_request_transport(self):
        entry = {
            "role": "assistant",
            "content": "",
            "tool_calls": [{"id": "c1", "name": "get_state", "arguments": "{}"}],
        }
        message = Message.from_transport(entry)

        assert message.tool_calls[0].name == "get_state"
        assert message.to_transport() == entry

    def test_tool_request_wire_form(self):
        message = Message.from_transport({
            "role": "assistant",
            "content": None,
            "tool_calls": [{
                "id": "c1",
                "type": "function",
                "function": {"name": "get_attribute", "arguments": {"attribute_code": "title"}},
            }],
        })

        call = message.tool_calls[0]
        assert (call.id, call.name) == ("c1", "get_attribute")
        assert call.parsed_arguments() == {"attribute_code": "title"}

    def test_tool_call_missing_name_rejected(self):
        with pytest.raises(ValidationError):
            ToolInvocationRequest.from_transport({"id": "c1", "type": "function", "function": {}})

    def test_tool_result_transport(self):
        message = Message.tool_result("c1", "assigned")
        assert message.to_transport() == {"role": "tool", "content": "assigned", "tool_call_id": "c1"}

    def test_plain_transport_has_no_tool_fields(self):
        assert Message.assistant("ok").to_transport() == {"role": "assistant", "content": "ok"}
