"""
aibridge CLI entry point.

Diagnostic and interactive commands: show the (obfuscated) configuration,
list engines, test connectivity, ask one-off questions, and chat.
"""

import argparse
import sys
import traceback
from pathlib import Path

from aibridge import __version__
from aibridge.config.logging import get_logger, setup_logging
from aibridge.config.settings import Settings, load_settings
from aibridge.engines.discovery import available_engines
from aibridge.errors import AIBridgeError
from aibridge.llm.components import LLMComponents

DEFAULT_TEST_MESSAGE = "Reply with the single word OK."


def create_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        prog="aibridge",
        description="Talk to the configured LLM backend: diagnostics, one-off questions and chat",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"aibridge {__version__}",
    )

    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to .env file (default: .env in current directory)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override logging level from config",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "config",
        help="Show current configuration (API key obfuscated)",
    )

    subparsers.add_parser(
        "engines",
        help="List available engine names (built-in and plugins)",
    )

    test_parser = subparsers.add_parser(
        "test",
        help="Send a short completion request to check connectivity",
    )
    test_parser.add_argument(
        "message",
        nargs="?",
        default=DEFAULT_TEST_MESSAGE,
        help="Message to send (default: a one-word reply request)",
    )

    ask_parser = subparsers.add_parser(
        "ask",
        help="Ask a single question",
    )
    ask_parser.add_argument("message", help="Question or text to send")
    ask_group = ask_parser.add_mutually_exclusive_group()
    ask_group.add_argument(
        "--system",
        default=None,
        help="System instruction text for this request",
    )
    ask_group.add_argument(
        "--instruction",
        default=None,
        help="Named system instruction, e.g. 'default', 'translate', 'improveText'",
    )
    ask_parser.add_argument(
        "--language",
        default=None,
        help="Target locale for --instruction translate, e.g. 'DE DE'",
    )

    chat_parser = subparsers.add_parser(
        "chat",
        help="Interactive multi-turn conversation (tools enabled)",
    )
    chat_parser.add_argument(
        "--system",
        default=None,
        help="System instruction for the whole conversation",
    )
    chat_parser.add_argument(
        "--no-tools",
        action="store_true",
        help="Disable all tools for this conversation",
    )

    return parser


def cmd_config(settings: Settings) -> int:
    """Show current configuration."""
    logger = get_logger(__name__)

    logger.info("Current Configuration:")
    print("\n=== aibridge Configuration ===\n")
    print(f"Environment: {settings.environment}")
    print(f"Log Level: {settings.log_level}")
    print(f"Log File: {settings.log_file or 'None (console only)'}")
    print(f"\nEngine: {settings.engine.name}")
    for key, value in settings.engine.obfuscated().items():
        print(f"  {key}: {value}")
    print(f"\nRetry: {settings.retry.max_attempts} attempt(s), "
          f"backoff {settings.retry.base_delay}s doubling up to {settings.retry.max_delay}s")
    print(f"\nMax Tool Rounds: {settings.conversation.max_tool_rounds}")
    print(f"Languages: {', '.join(settings.conversation.languages)}")
    print(f"Whitelisted System Messages: {len(settings.conversation.allowed_system_messages)}")
    print(f"Custom System Prompts: {', '.join(settings.conversation.system_prompts) or 'None'}")
    print(f"\nBuilt-in Tools: {settings.tools.include_builtin}")
    print(f"Tool Provider Discovery: {settings.tools.discover_providers}")

    return 0


def cmd_engines(settings: Settings) -> int:
    """List engine names; mark the configured one."""
    for name, engine_class in sorted(available_engines().items()):
        marker = "*" if name == settings.engine.name else " "
        print(f"{marker} {name:<14} {engine_class.__module__}.{engine_class.__name__}")
    return 0


def cmd_test(args, settings: Settings) -> int:
    """
    Connectivity test through get_completion().

    Prints the model's answer, or the failure message and a trace.
    """
    logger = get_logger(__name__)
    orchestrator = LLMComponents(settings).create_orchestrator()

    if orchestrator.engine is None:
        print(f"No engine named '{settings.engine.name}' is available.", file=sys.stderr)
        return 1

    logger.info(f"Testing {settings.engine.name} with {args.message!r}")
    try:
        answer = orchestrator.get_completion(args.message)
    except AIBridgeError as e:
        print(f"\nConnection test FAILED: {e}", file=sys.stderr)
        traceback.print_exc()
        return 1

    print(f"\nConnection test OK ({settings.engine.name})")
    print(answer)
    return 0


def cmd_ask(args, settings: Settings) -> int:
    """Ask a single question."""
    orchestrator = LLMComponents(settings).create_orchestrator()

    try:
        if args.instruction:
            answer = orchestrator.perform_system_instruction(
                args.message, args.instruction, language=args.language
            )
        else:
            answer = orchestrator.get_completion(args.message, args.system or "")
    except AIBridgeError as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 1

    print(answer)
    return 0


def cmd_chat(args, settings: Settings) -> int:
    """
    Interactive conversation.

    The CLI owns the history, exactly like a host application would: it
    sends it in, stores what comes back, and sends that in next turn.
    """
    orchestrator = LLMComponents(settings).create_orchestrator()
    tools = [] if args.no_tools else None
    history: list[dict] = []

    print("aibridge chat - empty line or Ctrl-D to quit\n")
    while True:
        try:
            line = input("you> ").strip()
        except EOFError:
            print()
            break
        if not line:
            break

        history.append({"role": "user", "content": line})
        try:
            result = orchestrator.continue_conversation(
                history, system_override=args.system, tools=tools
            )
        except AIBridgeError as e:
            print(f"\nError: {e}", file=sys.stderr)
            history.pop()
            if orchestrator.engine is None:
                return 1
            continue

        for call in result.tool_calls:
            print(f"  [tool] {call.name}({call.arguments}) -> {call.result}")
        print(f"ai> {result.response}\n")
        history = list(result.history)

    return 0


def main() -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    # Load settings
    try:
        settings = load_settings(env_file=args.env_file)
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    # Override log level if specified
    if args.log_level:
        settings.log_level = args.log_level

    setup_logging(settings)

    # Execute command
    try:
        if args.command == "config":
            return cmd_config(settings)
        elif args.command == "engines":
            return cmd_engines(settings)
        elif args.command == "test":
            return cmd_test(args, settings)
        elif args.command == "ask":
            return cmd_ask(args, settings)
        elif args.command == "chat":
            return cmd_chat(args, settings)
        else:
            # Default: show help
            parser.print_help()
            return 0
    except AIBridgeError as e:
        # Setup failures such as duplicate tool names across providers
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
