"""
Engines backed by LiteLLM.

LiteLLM speaks every vendor's wire protocol; the classes here only map
configuration onto LiteLLM call arguments and LiteLLM responses onto
aibridge types. Each backend variant is a subclass that differs in its
declared name, LiteLLM provider prefix and defaults.

The model string tells LiteLLM which provider to route to, e.g.
``anthropic/claude-3-5-sonnet-20241022`` or ``ollama_chat/llama3.1``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, ClassVar, Mapping

from litellm import completion

from aibridge.engines.base import Engine
from aibridge.errors import BackendUnavailableError, MalformedResponseError
from aibridge.messages import Message, Role, ToolInvocationRequest
from aibridge.tools.base import ToolDescriptor

logger = logging.getLogger(__name__)


class LiteLLMEngine(Engine):
    """
    Chat-completions engine over ``litellm.completion``.

    Args:
        model: Model name, with or without the provider prefix
        api_key: Provider API key (empty: let LiteLLM read the provider's env var)
        url: Endpoint base URL, passed to LiteLLM as ``api_base``
        temperature: Sampling temperature
        max_tokens: Maximum tokens in the response
        timeout: Seconds per request; a timeout is reported as BackendUnavailableError
    """

    engine_name: ClassVar[str] = "LiteLLM"
    provider_prefix: ClassVar[str] = ""
    default_model: ClassVar[str] = "openai/gpt-4o-mini"
    default_url: ClassVar[str | None] = None

    CONFIG_KEYS: ClassVar[tuple[str, ...]] = (
        "model",
        "api_key",
        "url",
        "temperature",
        "max_tokens",
        "timeout",
    )

    def __init__(
        self,
        model: str | None = None,
        api_key: str = "",
        url: str | None = None,
        temperature: float = 0.4,
        max_tokens: int = 1024,
        timeout: float = 60.0,
    ):
        self.model = model or self.default_model
        self.api_key = api_key
        self.url = url or self.default_url
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "LiteLLMEngine":
        kwargs = {key: config[key] for key in cls.CONFIG_KEYS if config.get(key) is not None}
        return cls(**kwargs)

    @property
    def model_id(self) -> str:
        """Model string as LiteLLM expects it, provider prefix included."""
        if not self.provider_prefix or self.model.startswith(self.provider_prefix):
            return self.model
        return f"{self.provider_prefix}{self.model}"

    # ------------------------------------------------------------------
    # Engine interface
    # ------------------------------------------------------------------

    def get_completion(self, message: str, system_instruction: str = "") -> str:
        messages = []
        if system_instruction:
            messages.append(Message.system(system_instruction))
        messages.append(Message.user(message))

        assistant_message = self._request(messages, tools=[])
        return assistant_message.content or ""

    def get_next_turn(
        self,
        history: list[Message],
        tools: list[ToolDescriptor],
    ) -> str | list[ToolInvocationRequest]:
        offered = tools if self.supports_tools else []
        assistant_message = self._request(history, tools=offered)

        raw_calls = getattr(assistant_message, "tool_calls", None)
        if raw_calls and offered:
            return [self._to_request(raw) for raw in raw_calls]
        return assistant_message.content or ""

    # ------------------------------------------------------------------
    # LiteLLM plumbing
    # ------------------------------------------------------------------

    def _call_kwargs(self, messages: list[Message], tools: list[ToolDescriptor]) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self.model_id,
            "messages": [m.to_openai_dict() for m in messages],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "timeout": self.timeout,
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.url:
            kwargs["api_base"] = self.url
        # Only send tool definitions when there are some; several providers
        # reject an empty list
        if tools:
            kwargs["tools"] = [t.to_openai_schema() for t in tools]
        return kwargs

    def _request(self, messages: list[Message], tools: list[ToolDescriptor]) -> Any:
        """Run one completion call and return the assistant message object."""
        kwargs = self._call_kwargs(messages, tools)
        logger.debug(
            f"{self.engine_name}: calling {kwargs['model']} with "
            f"{len(messages)} message(s), {len(tools)} tool(s)"
        )
        try:
            response = completion(**kwargs)
        except Exception as e:
            raise BackendUnavailableError(
                f"{self.engine_name} request to {kwargs['model']} failed: {e}", cause=e
            ) from e

        choices = getattr(response, "choices", None)
        if not choices:
            raise MalformedResponseError(f"{self.engine_name}: response contains no choices")

        assistant_message = getattr(choices[0], "message", None)
        if assistant_message is None:
            raise MalformedResponseError(f"{self.engine_name}: response choice has no message")

        role = getattr(assistant_message, "role", None) or Role.ASSISTANT.value
        if role != Role.ASSISTANT.value:
            raise MalformedResponseError(
                f"{self.engine_name}: expected an assistant message, got role {role!r}"
            )
        return assistant_message

    def _to_request(self, raw_call: Any) -> ToolInvocationRequest:
        function = getattr(raw_call, "function", None)
        call_id = getattr(raw_call, "id", None)
        name = getattr(function, "name", None) if function is not None else None
        if not call_id or not name:
            raise MalformedResponseError(
                f"{self.engine_name}: tool call without id or function name"
            )

        arguments = getattr(function, "arguments", None)
        if arguments is None:
            arguments = "{}"
        elif not isinstance(arguments, str):
            arguments = json.dumps(arguments)
        return ToolInvocationRequest(id=call_id, name=name, arguments=arguments)


class OpenAIEngine(LiteLLMEngine):
    """OpenAI's hosted API."""

    engine_name = "OpenAI"
    provider_prefix = "openai/"
    default_model = "gpt-4o-mini"


class GenericAIEngine(LiteLLMEngine):
    """Any OpenAI-compatible chat-completions endpoint (LocalAI, vLLM, LM Studio, ...)."""

    engine_name = "GenericAI"
    provider_prefix = "openai/"
    default_model = "gpt-3.5-turbo"
    default_url = "https://api.openai.com/v1"


class AnthropicEngine(LiteLLMEngine):
    """Anthropic's Messages API."""

    engine_name = "AnthropicAI"
    provider_prefix = "anthropic/"
    default_model = "claude-3-5-sonnet-20241022"


class MistralEngine(LiteLLMEngine):
    """Mistral's hosted API."""

    engine_name = "MistralAI"
    provider_prefix = "mistral/"
    default_model = "mistral-large-latest"


class OllamaEngine(LiteLLMEngine):
    """A local or remote Ollama server."""

    engine_name = "OllamaAI"
    provider_prefix = "ollama_chat/"
    default_model = "llama3.1"
    default_url = "http://localhost:11434"


class TranslationEngine(LiteLLMEngine):
    """
    Translation-only engine.

    Every request, whatever instruction the caller passes, is answered with
    a translation of the input into ``target_language``. Tools are never
    offered to the model.
    """

    engine_name = "Translator"
    supports_tools = False
    default_model = "openai/gpt-4o-mini"

    CONFIG_KEYS = LiteLLMEngine.CONFIG_KEYS + ("target_language",)

    TRANSLATOR_INSTRUCTION = (
        "You are a professional translator. Translate the user's text into "
        "{language}. Keep formatting and placeholders intact and reply with "
        "the translation only."
    )

    def __init__(self, target_language: str = "EN US", **kwargs: Any):
        super().__init__(**kwargs)
        self.target_language = target_language

    @property
    def instruction(self) -> str:
        return self.TRANSLATOR_INSTRUCTION.format(language=self.target_language)

    def get_completion(self, message: str, system_instruction: str = "") -> str:
        return super().get_completion(message, self.instruction)

    def get_next_turn(
        self,
        history: list[Message],
        tools: list[ToolDescriptor],
    ) -> str | list[ToolInvocationRequest]:
        last_user = next((m for m in reversed(history) if m.role is Role.USER), None)
        if last_user is None:
            return ""
        return self.get_completion(last_user.content)
