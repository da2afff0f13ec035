"""Base interface for LLM providers."""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import AsyncIterator, Literal

from pydantic import BaseModel, ConfigDict

from ai_orchestrator.config.models import PROVIDER_PROFILES, ProviderDescriptor
from ai_orchestrator.core.exceptions import EmbeddingNotSupportedError, ModelNotAllowedError


Role = Literal["system", "user", "assistant", "function"]


class ChatMessage(BaseModel):
    """A single message sent to a provider. Order within a sequence is dialogue order."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    name: str | None = None


class CompletionOptions(BaseModel):
    """Per-request options. Absent fields fall back to router/provider defaults."""

    model: str | None = None
    provider: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    stop: list[str] | None = None
    stream: bool = False
    timeout: float | None = None  # seconds


@dataclass(frozen=True)
class TokenUsage:
    """Token accounting for one completion."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def of(
        cls,
        prompt_tokens: int | None,
        completion_tokens: int | None,
        total_tokens: int | None = None,
    ) -> "TokenUsage":
        prompt = prompt_tokens or 0
        completion = completion_tokens or 0
        return cls(
            prompt_tokens=prompt,
            completion_tokens=completion,
            total_tokens=total_tokens or (prompt + completion),
        )


@dataclass(frozen=True)
class CompletionResult:
    """Unified response from any LLM provider."""

    content: str
    provider: str
    model: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    finish_reason: str = "stop"


@dataclass(frozen=True)
class StreamChunk:
    """
    One incremental fragment of a streamed completion.

    A stream is terminated by exactly one chunk with done=True and no
    content; that chunk names the provider and model that produced it.
    """

    content: str = ""
    done: bool = False
    provider: str | None = None
    model: str | None = None


@dataclass(frozen=True)
class EmbeddingResult:
    """Vector embedding of one text."""

    embedding: list[float]
    provider: str
    model: str


class BaseLLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    Each adapter normalizes one backend's request/response/streaming shape
    so the router depends only on this interface.
    """

    def __init__(self, descriptor: ProviderDescriptor):
        self.descriptor = descriptor

    @property
    def name(self) -> str:
        """Registry name of this provider (e.g. 'openai')."""
        return self.descriptor.name

    @property
    def supports_embeddings(self) -> bool:
        return False

    def resolve_model(self, model: str | None) -> str:
        """Pick the requested model or the default, enforcing the allow-list."""
        resolved = model or self.descriptor.default_model
        if not self.descriptor.allows_model(resolved):
            raise ModelNotAllowedError(self.name, resolved)
        return resolved

    @abstractmethod
    async def complete(
        self,
        messages: list[ChatMessage],
        options: CompletionOptions,
    ) -> CompletionResult:
        """
        Call the backend and get a complete response.

        Args:
            messages: Dialogue so far, in order
            options: Sampling and model options

        Returns:
            CompletionResult with content, usage and finish reason
        """
        ...

    @abstractmethod
    def stream(
        self,
        messages: list[ChatMessage],
        options: CompletionOptions,
    ) -> AsyncIterator[str]:
        """
        Stream the response.

        Yields:
            Response text fragments in generation order
        """
        ...

    async def embed(self, text: str, model: str | None = None) -> EmbeddingResult:
        """Embed one text. Providers without embeddings raise."""
        raise EmbeddingNotSupportedError(
            f"Provider {self.name} does not support embeddings", provider=self.name
        )

    async def embed_many(
        self, texts: list[str], model: str | None = None
    ) -> list[EmbeddingResult]:
        """Embed several texts, preserving input order."""
        return list(await asyncio.gather(*(self.embed(text, model) for text in texts)))

    def embedding_model(self, model: str | None) -> str:
        """Requested embedding model or the profile default."""
        if model:
            return model
        profile = PROVIDER_PROFILES.get(self.descriptor.kind)
        return profile.default_embedding_model if profile else ""

    async def aclose(self) -> None:
        """Release network resources held by the adapter."""
        return None
