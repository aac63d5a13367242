"""
History sanitizing: the defense against forged system messages.

Caller-supplied histories come from untrusted places (browser sessions,
stored tickets, other services). A system-role entry in such a history
could override the application's instructions, so the sanitizer rebuilds
the engine input from scratch:

1. The official system message (override or configured default) goes first,
   exactly once.
2. Caller system entries equal to the official content are dropped silently;
   the official one is already there.
3. Other caller system entries survive only if they exactly match an entry
   of the whitelist. Everything else is dropped and logged.
4. User, assistant and tool entries pass through unchanged, except tool
   results whose tool_call_id answers no admitted assistant tool request
   earlier in the history. Those are dropped and logged; backends reject
   unpaired tool messages.
5. Entries with an unknown role, or without role/content, are dropped and
   logged.

The caller's list and dicts are never modified.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from aibridge.messages import Message, Role

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 50


def _preview(content: Any) -> str:
    text = str(content)
    if len(text) <= PREVIEW_LENGTH:
        return text
    return text[:PREVIEW_LENGTH] + "..."


@dataclass
class SanitizedHistory:
    """Result of one sanitizing pass."""

    messages: list[Message]
    """Engine input, official system message first."""

    visible: list[dict[str, Any]] = field(default_factory=list)
    """Admitted caller entries in input order (copies), for the returned history."""

    rejected: int = 0


class HistorySanitizer:
    """
    Builds verified engine input from an untrusted history.

    Args:
        default_instruction: Official system content used when a call gives no override
        allowed_system_messages: Configured whitelist of caller system messages
    """

    def __init__(
        self,
        default_instruction: str,
        allowed_system_messages: Iterable[str] | None = None,
    ):
        self.default_instruction = default_instruction
        self.allowed_system_messages = list(allowed_system_messages or [])

    def sanitize(
        self,
        history: Sequence[Mapping[str, Any]],
        system_override: str | None = None,
        allowed_system_messages: Iterable[str] | None = None,
    ) -> SanitizedHistory:
        """
        Sanitize ``history``.

        Args:
            history: Caller entries in transport form
            system_override: Official system content for this call (None: use the default)
            allowed_system_messages: Whitelist for this call (None: use the configured one)
        """
        official = self.default_instruction if system_override is None else system_override
        allowed = set(
            self.allowed_system_messages
            if allowed_system_messages is None
            else allowed_system_messages
        )

        result = SanitizedHistory(messages=[Message.system(official)])
        open_call_ids: set[str] = set()

        for index, entry in enumerate(history):
            if not isinstance(entry, Mapping) or "role" not in entry or "content" not in entry:
                logger.warning(f"Dropping history entry #{index}: missing role or content")
                result.rejected += 1
                continue

            try:
                message = Message.from_transport(entry)
            except (ValueError, TypeError) as e:
                logger.warning(
                    f"Dropping history entry #{index} with invalid role "
                    f"{entry.get('role')!r}: {e}"
                )
                result.rejected += 1
                continue

            if message.role is Role.SYSTEM:
                if message.content == official:
                    continue
                if message.content not in allowed:
                    logger.warning(
                        f"Rejected system message not on the whitelist: "
                        f"'{_preview(message.content)}'"
                    )
                    result.rejected += 1
                    continue

            if message.role is Role.TOOL:
                if message.tool_call_id not in open_call_ids:
                    logger.warning(
                        f"Dropping history entry #{index}: tool result for unknown "
                        f"call {message.tool_call_id!r}"
                    )
                    result.rejected += 1
                    continue
                open_call_ids.discard(message.tool_call_id)

            if message.tool_calls:
                open_call_ids.update(call.id for call in message.tool_calls)

            result.messages.append(message)
            result.visible.append(dict(entry))

        return result


def sanitize_history(
    history: Sequence[Mapping[str, Any]],
    official_instruction: str,
    allowed_system_messages: Iterable[str] | None = None,
) -> SanitizedHistory:
    """One-off sanitizing without keeping a HistorySanitizer around."""
    return HistorySanitizer(official_instruction, allowed_system_messages).sanitize(history)
