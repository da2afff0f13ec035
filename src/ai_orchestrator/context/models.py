"""Conversation data models."""

from datetime import datetime, timezone
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


class MessageMetadata(BaseModel):
    """Provenance of an assistant message."""

    model: str | None = None
    provider: str | None = None
    tokens: int | None = None
    sources: list[dict[str, Any]] | None = None


class Message(BaseModel):
    """A single stored conversation message."""

    id: str = Field(default_factory=_new_id)
    role: Literal["user", "assistant", "system"]
    content: str
    created_at: datetime = Field(default_factory=_now)
    metadata: MessageMetadata | None = None


class Conversation(BaseModel):
    """
    One conversation and its message history.

    Owned by a ConversationManager; mutate it only through the manager.
    """

    id: str = Field(default_factory=_new_id)
    title: str | None = None
    messages: list[Message] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    def touch(self) -> None:
        self.updated_at = _now()

    @property
    def message_count(self) -> int:
        return len(self.messages)
