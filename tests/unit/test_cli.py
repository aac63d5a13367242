"""
Tests for the aibridge CLI.

Parser-level tests plus command tests with the orchestrator factory
patched out, so nothing talks to a backend.
"""

import sys
from unittest.mock import MagicMock, patch

import pytest

from aibridge.__main__ import cmd_ask, cmd_chat, cmd_config, cmd_test, create_parser, main
from aibridge.config.settings import EngineSettings, Settings
from aibridge.errors import ServiceUnavailableError
from aibridge.llm.models import ConversationResult


@pytest.fixture
def settings():
    return Settings(engine=EngineSettings(name="GenericAI", api_key="sk-abcdefghijkl"))


@pytest.fixture
def orchestrator():
    orch = MagicMock()
    with patch("aibridge.__main__.LLMComponents") as factory:
        factory.return_value.create_orchestrator.return_value = orch
        yield orch


class TestParser:
    """Parser-level tests."""

    def test_config_command(self):
        args = create_parser().parse_args(["config"])
        assert args.command == "config"

    def test_test_command_default_message(self):
        args = create_parser().parse_args(["test"])
        assert args.message

    def test_ask_with_instruction(self):
        args = create_parser().parse_args(
            ["ask", "Hello", "--instruction", "translate", "--language", "DE DE"]
        )
        assert args.message == "Hello"
        assert args.instruction == "translate"
        assert args.language == "DE DE"

    def test_ask_system_and_instruction_are_exclusive(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["ask", "Hello", "--system", "x", "--instruction", "y"])

    def test_chat_no_tools(self):
        args = create_parser().parse_args(["chat", "--no-tools"])
        assert args.no_tools is True

    def test_invalid_log_level(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--log-level", "LOUD", "config"])


class TestConfigCommand:

    def test_api_key_obfuscated(self, settings, capsys):
        assert cmd_config(settings) == 0

        out = capsys.readouterr().out
        assert "sk-ab..." in out
        assert "sk-abcdefghijkl" not in out
        assert "GenericAI" in out


class TestTestCommand:

    def test_success(self, settings, orchestrator, capsys):
        orchestrator.get_completion.return_value = "OK"
        args = create_parser().parse_args(["test"])

        assert cmd_test(args, settings) == 0
        assert "OK" in capsys.readouterr().out

    def test_failure_shows_message(self, settings, orchestrator, capsys):
        orchestrator.get_completion.side_effect = ServiceUnavailableError("GetCompletion", 3)
        args = create_parser().parse_args(["test"])

        assert cmd_test(args, settings) == 1
        assert "Unable to establish a connection" in capsys.readouterr().err

    def test_missing_engine(self, settings, orchestrator):
        orchestrator.engine = None
        args = create_parser().parse_args(["test"])

        assert cmd_test(args, settings) == 1


class TestAskCommand:

    def test_plain_question(self, settings, orchestrator, capsys):
        orchestrator.get_completion.return_value = "42"
        args = create_parser().parse_args(["ask", "Meaning of life?", "--system", "Be terse"])

        assert cmd_ask(args, settings) == 0
        orchestrator.get_completion.assert_called_once_with("Meaning of life?", "Be terse")
        assert capsys.readouterr().out.strip() == "42"

    def test_named_instruction(self, settings, orchestrator):
        orchestrator.perform_system_instruction.return_value = "Hallo"
        args = create_parser().parse_args(["ask", "Hello", "--instruction", "translate", "--language", "DE DE"])

        assert cmd_ask(args, settings) == 0
        orchestrator.perform_system_instruction.assert_called_once_with(
            "Hello", "translate", language="DE DE"
        )


class TestChatCommand:

    def test_history_round_trip(self, settings, orchestrator, monkeypatch, capsys):
        first = ConversationResult(
            response="Hi!",
            history=[{"role": "user", "content": "Hello"}, {"role": "assistant", "content": "Hi!"}],
        )
        second = ConversationResult(response="Bye!", history=[])
        orchestrator.continue_conversation.side_effect = [first, second]
        inputs = iter(["Hello", "Bye", ""])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(inputs))
        args = create_parser().parse_args(["chat", "--no-tools"])

        assert cmd_chat(args, settings) == 0

        second_history = orchestrator.continue_conversation.call_args_list[1].args[0]
        assert second_history == [
            {"role": "user", "content": "Hello"},
            {"role": "assistant", "content": "Hi!"},
            {"role": "user", "content": "Bye"},
        ]
        assert orchestrator.continue_conversation.call_args_list[1].kwargs["tools"] == []
        out = capsys.readouterr().out
        assert "ai> Hi!" in out
        assert "ai> Bye!" in out


class TestMain:

    def test_no_command_prints_help(self, monkeypatch, tmp_path, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(sys, "argv", ["aibridge"])

        with patch("aibridge.__main__.setup_logging"):
            assert main() == 0
        assert "usage:" in capsys.readouterr().out
