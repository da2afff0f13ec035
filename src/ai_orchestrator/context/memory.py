"""Conversation window management."""

from ai_orchestrator.context.models import Message
from ai_orchestrator.utils.providers.base import ChatMessage


def trim_messages(messages: list[Message], max_messages: int) -> list[Message]:
    """
    Apply the rolling window to a message history.

    When the history is longer than `max_messages`, keep the first system
    message (if any) plus the most recent non-system messages, so the
    result never exceeds `max_messages`. Shorter histories are returned
    unchanged. This is a pure window; nothing is summarized.
    """
    if max_messages < 1:
        raise ValueError("max_messages must be at least 1")
    if len(messages) <= max_messages:
        return list(messages)

    system_message = next((m for m in messages if m.role == "system"), None)
    others = [m for m in messages if m.role != "system"]

    keep = max_messages - (1 if system_message else 0)
    recent = others[-keep:] if keep > 0 else []

    return [system_message, *recent] if system_message else recent


def to_chat_messages(messages: list[Message]) -> list[ChatMessage]:
    """Convert stored messages into provider messages."""
    return [ChatMessage(role=m.role, content=m.content) for m in messages]
