"""Conversation manager: in-process multi-turn chat state over the router."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, AsyncIterator

from ai_orchestrator.context.memory import to_chat_messages, trim_messages
from ai_orchestrator.context.models import Conversation, Message, MessageMetadata
from ai_orchestrator.core.exceptions import ConversationNotFoundError
from ai_orchestrator.utils.logging import get_logger
from ai_orchestrator.utils.providers.base import CompletionOptions

if TYPE_CHECKING:
    from ai_orchestrator.config.settings import Settings
    from ai_orchestrator.core.router import Router


logger = get_logger(__name__)


@dataclass(frozen=True)
class ChatConfig:
    max_messages: int = 50
    temperature: float = 0.7
    system_prompt: str | None = None
    model: str | None = None
    provider: str | None = None
    max_tokens: int | None = None

    def __post_init__(self) -> None:
        if self.max_messages < 1:
            raise ValueError("max_messages must be at least 1")

    @classmethod
    def from_settings(cls, settings: "Settings", **overrides: Any) -> "ChatConfig":
        values: dict[str, Any] = {
            "max_messages": settings.chat_max_messages,
            "temperature": settings.chat_temperature,
            "system_prompt": settings.chat_system_prompt,
        }
        values.update(overrides)
        return cls(**values)


@dataclass(frozen=True)
class SendMessageOptions:
    """Per-message overrides of the chat config."""

    temperature: float | None = None
    max_tokens: int | None = None


@dataclass(frozen=True)
class ConversationChunk:
    """
    One item of a streamed reply.

    Content chunks have done=False. The last item has done=True, an empty
    chunk and the stored assistant message.
    """

    chunk: str
    done: bool = False
    message: Message | None = None


class ConversationManager:
    """
    Owns conversations by id and mediates every mutation.

    State is process-local and unsynchronized: callers must serialize
    operations on the same conversation id (e.g. one queue per id).
    Independent conversations may be used concurrently.
    """

    def __init__(self, router: "Router", config: ChatConfig | None = None):
        self.router = router
        self.config = config or ChatConfig()
        self._conversations: dict[str, Conversation] = {}

    def create_conversation(
        self, conversation_id: str | None = None, title: str | None = None
    ) -> Conversation:
        """Create and store a conversation, seeded with the system prompt if configured."""
        conversation = (
            Conversation(id=conversation_id, title=title)
            if conversation_id
            else Conversation(title=title)
        )

        if self.config.system_prompt:
            conversation.messages.append(
                Message(role="system", content=self.config.system_prompt)
            )

        self._conversations[conversation.id] = conversation
        logger.info("Conversation created", conversation_id=conversation.id)
        return conversation

    def get_conversation(self, conversation_id: str) -> Conversation | None:
        return self._conversations.get(conversation_id)

    def get_all_conversations(self) -> list[Conversation]:
        return list(self._conversations.values())

    def delete_conversation(self, conversation_id: str) -> bool:
        """Forget a conversation. Returns whether it existed."""
        deleted = self._conversations.pop(conversation_id, None) is not None
        if deleted:
            logger.info("Conversation deleted", conversation_id=conversation_id)
        return deleted

    def _require(self, conversation_id: str) -> Conversation:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    def _completion_options(self, options: SendMessageOptions | None) -> CompletionOptions:
        options = options or SendMessageOptions()
        return CompletionOptions(
            model=self.config.model,
            provider=self.config.provider,
            temperature=(
                options.temperature if options.temperature is not None else self.config.temperature
            ),
            max_tokens=(
                options.max_tokens if options.max_tokens is not None else self.config.max_tokens
            ),
        )

    def _finalize(self, conversation: Conversation, reply: Message) -> None:
        """Append the assistant reply, then apply the window."""
        conversation.messages.append(reply)
        conversation.touch()

        before = len(conversation.messages)
        conversation.messages = trim_messages(conversation.messages, self.config.max_messages)
        if len(conversation.messages) < before:
            logger.debug(
                "Conversation trimmed",
                conversation_id=conversation.id,
                dropped=before - len(conversation.messages),
            )

    def _discard(self, conversation: Conversation, message: Message) -> None:
        """Drop a user turn whose request never produced a reply."""
        conversation.messages = [m for m in conversation.messages if m is not message]
        logger.debug("Unanswered message discarded", conversation_id=conversation.id)

    async def send_message(
        self,
        conversation_id: str,
        content: str,
        options: SendMessageOptions | None = None,
    ) -> Message:
        """
        Send a user message and store the assistant's reply.

        If the router fails, the user message is removed again and the
        error is re-raised, so the history never holds an unanswered turn.

        Raises:
            ConversationNotFoundError: Unknown conversation id
        """
        conversation = self._require(conversation_id)
        user_message = Message(role="user", content=content)
        conversation.messages.append(user_message)

        try:
            result = await self.router.complete(
                to_chat_messages(conversation.messages), self._completion_options(options)
            )
        except BaseException:
            self._discard(conversation, user_message)
            raise

        reply = Message(
            role="assistant",
            content=result.content,
            metadata=MessageMetadata(
                model=result.model,
                provider=result.provider,
                tokens=result.usage.total_tokens,
            ),
        )
        self._finalize(conversation, reply)
        return reply

    async def stream_message(
        self,
        conversation_id: str,
        content: str,
        options: SendMessageOptions | None = None,
    ) -> AsyncIterator[ConversationChunk]:
        """
        Stream the assistant's reply.

        The reply is stored, and the window applied, only once the router
        signals completion. A stream that fails or is abandoned before
        then leaves the history as it was before the call.
        """
        conversation = self._require(conversation_id)
        user_message = Message(role="user", content=content)
        conversation.messages.append(user_message)

        buffer: list[str] = []
        finalized = False
        stream = self.router.stream(
            to_chat_messages(conversation.messages), self._completion_options(options)
        )
        try:
            async for chunk in stream:
                if not chunk.done:
                    buffer.append(chunk.content)
                    yield ConversationChunk(chunk=chunk.content)
                    continue

                reply = Message(
                    role="assistant",
                    content="".join(buffer),
                    metadata=MessageMetadata(model=chunk.model, provider=chunk.provider),
                )
                self._finalize(conversation, reply)
                finalized = True
                yield ConversationChunk(chunk="", done=True, message=reply)
        finally:
            await stream.aclose()
            if not finalized:
                self._discard(conversation, user_message)


def create_conversation_manager(
    router: "Router", config: ChatConfig | None = None
) -> ConversationManager:
    """Create a conversation manager."""
    return ConversationManager(router, config)
