"""Helpers applied to raw model output before it reaches the caller."""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

logger = logging.getLogger(__name__)

# One <think>...</think> block at the very start of the text, plus the
# whitespace separating it from the answer
_LEADING_REASONING = re.compile(r"\A<think>.*?</think>\s*", re.IGNORECASE | re.DOTALL)

_JSON_FENCE = re.compile(r"\A```json\n(.*?)\n```\Z", re.DOTALL)


def strip_reasoning_block(text: str) -> str:
    """
    Remove a leading reasoning block from model output.

    Only a block starting at position 0 is removed, and only one. Text that
    does not begin with the opening tag, or whose block is never closed, is
    returned unchanged. Repeat calls are stable unless the answer itself
    opens with another block: a second block stacked right after the first
    is left for the next call.
    """
    return _LEADING_REASONING.sub("", text, count=1)


def clean_json(raw: str) -> str:
    """Unwrap a ```json fenced block; anything else is returned as is."""
    match = _JSON_FENCE.match(raw)
    if match is None:
        logger.debug("clean_json: no fence found, returning input unchanged")
        return raw
    return match.group(1)


def is_valid_result(valid_results: Mapping[str, Any], key: str, value: Any) -> bool:
    """Check a model-proposed ``value`` against the allowed value for ``key``."""
    logger.debug(f"is_valid_result: checking {key} => {value}")
    return key in valid_results and valid_results[key] == value
