"""Conversation state and window management."""

from ai_orchestrator.context.manager import (
    ChatConfig,
    ConversationChunk,
    ConversationManager,
    SendMessageOptions,
    create_conversation_manager,
)
from ai_orchestrator.context.memory import to_chat_messages, trim_messages
from ai_orchestrator.context.models import Conversation, Message, MessageMetadata

__all__ = [
    "ChatConfig",
    "Conversation",
    "ConversationChunk",
    "ConversationManager",
    "Message",
    "MessageMetadata",
    "SendMessageOptions",
    "create_conversation_manager",
    "to_chat_messages",
    "trim_messages",
]
