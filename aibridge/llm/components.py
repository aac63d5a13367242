"""
Component factory for the conversation layer.

Centralises the construction of engines, retry policy, tool providers and
the orchestrator from settings, so the CLI, tests and host applications
wire things the same way.
"""

from __future__ import annotations

import logging
from typing import Iterable

from aibridge.config.settings import Settings
from aibridge.engines.base import Engine
from aibridge.engines.discovery import create_engine
from aibridge.llm.orchestrator import ConversationOrchestrator
from aibridge.llm.retry import RetryExecutor
from aibridge.tools.base import ToolDescriptor, ToolProvider
from aibridge.tools.discovery import discover_tool_providers

logger = logging.getLogger(__name__)

_UNSET = object()


class LLMComponents:
    """
    Factory for building conversation components from settings.

    Example::

        factory = LLMComponents(settings)
        orchestrator = factory.create_orchestrator()
        result = orchestrator.continue_conversation([{"role": "user", "content": "Hi"}])
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def create_engine(self) -> Engine | None:
        """Resolve the configured engine name; None (with a warning) if nothing matches."""
        engine_settings = self.settings.engine
        return create_engine(engine_settings.name, engine_settings.as_engine_config())

    def create_retry_executor(self) -> RetryExecutor:
        retry = self.settings.retry
        return RetryExecutor(
            max_attempts=retry.max_attempts,
            base_delay=retry.base_delay,
            max_delay=retry.max_delay,
        )

    def create_tool_providers(self) -> list[ToolProvider]:
        """Providers discovered through entry points, if discovery is enabled."""
        if not self.settings.tools.discover_providers:
            return []
        return discover_tool_providers()

    def create_orchestrator(
        self,
        engine: Engine | None | object = _UNSET,
        extra_providers: Iterable[ToolProvider] = (),
        tools: Iterable[ToolDescriptor] = (),
    ) -> ConversationOrchestrator:
        """
        Build a ConversationOrchestrator.

        Args:
            engine: Engine to use; resolved from settings when omitted.
                    Pass None explicitly to build an engine-less orchestrator.
            extra_providers: Explicitly registered providers, added before discovered ones
            tools: Explicitly registered loose tools
        """
        if engine is _UNSET:
            engine = self.create_engine()

        conversation = self.settings.conversation
        return ConversationOrchestrator(
            engine,
            tool_providers=[*extra_providers, *self.create_tool_providers()],
            tools=tools,
            retry=self.create_retry_executor(),
            system_instructions=conversation.system_prompts,
            allowed_system_messages=conversation.allowed_system_messages,
            languages=conversation.languages,
            max_tool_rounds=conversation.max_tool_rounds,
            include_builtin_tools=self.settings.tools.include_builtin,
        )
