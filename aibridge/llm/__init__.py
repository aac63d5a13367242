"""
Conversation Orchestration Layer.

Everything between the host application and the engine:

    caller history → HistorySanitizer → Engine (via RetryExecutor)
                                           ↕
                                      ToolRegistry
                                           ↓
                        strip_reasoning_block() → ConversationResult

Key responsibilities:
- Give the model exactly one official system message, whatever the caller sends
- Retry flaky backends with exponential backoff
- Run the bounded tool-call loop
- Return the answer plus a history the caller can store and send back
"""

from aibridge.llm.components import LLMComponents
from aibridge.llm.models import ConversationResult, ToolCallRecord
from aibridge.llm.orchestrator import (
    DEFAULT_SYSTEM_INSTRUCTIONS,
    MAX_TOOL_ROUNDS_DEFAULT,
    MAX_TOOL_ROUNDS_HARD_CAP,
    ConversationOrchestrator,
)
from aibridge.llm.postprocess import clean_json, is_valid_result, strip_reasoning_block
from aibridge.llm.retry import RetryExecutor, execute_with_retry
from aibridge.llm.sanitizer import HistorySanitizer, SanitizedHistory, sanitize_history

__all__ = [
    "DEFAULT_SYSTEM_INSTRUCTIONS",
    "MAX_TOOL_ROUNDS_DEFAULT",
    "MAX_TOOL_ROUNDS_HARD_CAP",
    "ConversationOrchestrator",
    "ConversationResult",
    "HistorySanitizer",
    "LLMComponents",
    "RetryExecutor",
    "SanitizedHistory",
    "ToolCallRecord",
    "clean_json",
    "execute_with_retry",
    "is_valid_result",
    "sanitize_history",
    "strip_reasoning_block",
]
