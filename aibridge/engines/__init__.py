"""
Backend engines.

Each engine adapts one kind of LLM backend to the Engine interface; the
built-in ones go through LiteLLM.
"""

from aibridge.engines.base import Engine
from aibridge.engines.discovery import available_engines, create_engine, resolve_engine_class
from aibridge.engines.litellm_engine import (
    AnthropicEngine,
    GenericAIEngine,
    LiteLLMEngine,
    MistralEngine,
    OllamaEngine,
    OpenAIEngine,
    TranslationEngine,
)

__all__ = [
    "AnthropicEngine",
    "Engine",
    "GenericAIEngine",
    "LiteLLMEngine",
    "MistralEngine",
    "OllamaEngine",
    "OpenAIEngine",
    "TranslationEngine",
    "available_engines",
    "create_engine",
    "resolve_engine_class",
]
