"""Pytest fixtures for testing."""

import asyncio
from typing import Any, AsyncIterator, Callable

import pytest

from ai_orchestrator.config.models import ProviderDescriptor, RouterConfig
from ai_orchestrator.config.settings import Settings
from ai_orchestrator.core.router import Router
from ai_orchestrator.rag.models import Document, SearchResult
from ai_orchestrator.utils.providers.base import (
    BaseLLMProvider,
    ChatMessage,
    CompletionOptions,
    CompletionResult,
    EmbeddingResult,
    TokenUsage,
)


Reply = str | Exception


class ScriptedProvider(BaseLLMProvider):
    """
    Provider that replays a script of replies.

    Each call consumes the next reply; the last one repeats once the
    script runs out. A reply that is an exception is raised instead.
    """

    def __init__(
        self,
        name: str,
        replies: list[Reply] | None = None,
        *,
        delay: float = 0.0,
        chunk_size: int = 3,
        fail_stream_after: int | None = None,
        embed_fn: Callable[[str], list[float]] | None = None,
        **descriptor_fields: Any,
    ):
        descriptor_fields.setdefault("default_model", f"{name}-model")
        super().__init__(ProviderDescriptor(name=name, **descriptor_fields))
        self.replies: list[Reply] = list(replies or ["ok"])
        self.delay = delay
        self.chunk_size = chunk_size
        self.fail_stream_after = fail_stream_after
        self.embed_fn = embed_fn
        self.calls: list[tuple[list[ChatMessage], CompletionOptions]] = []
        self.embedded: list[str] = []

    @property
    def supports_embeddings(self) -> bool:
        return self.embed_fn is not None

    def _next_reply(self) -> str:
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def complete(
        self, messages: list[ChatMessage], options: CompletionOptions
    ) -> CompletionResult:
        self.calls.append((list(messages), options))
        if self.delay:
            await asyncio.sleep(self.delay)
        content = self._next_reply()
        return CompletionResult(
            content=content,
            provider=self.name,
            model=self.resolve_model(options.model),
            usage=TokenUsage.of(len(messages), len(content.split())),
        )

    async def stream(
        self, messages: list[ChatMessage], options: CompletionOptions
    ) -> AsyncIterator[str]:
        self.calls.append((list(messages), options))
        if self.delay:
            await asyncio.sleep(self.delay)
        content = self._next_reply()
        for index in range(0, len(content), self.chunk_size):
            if self.fail_stream_after is not None and index // self.chunk_size >= self.fail_stream_after:
                raise ConnectionError("stream dropped")
            yield content[index : index + self.chunk_size]

    async def embed(self, text: str, model: str | None = None) -> EmbeddingResult:
        if self.embed_fn is None:
            return await super().embed(text, model)
        self.embedded.append(text)
        return EmbeddingResult(
            embedding=self.embed_fn(text), provider=self.name, model=model or "embed-model"
        )


class StaticRetriever:
    """Retriever returning a fixed ranked list."""

    def __init__(self, results: list[SearchResult] | None = None):
        self.results = list(results or [])
        self.queries: list[str] = []
        self.added: list[Document] = []

    async def retrieve(self, query: str) -> list[SearchResult]:
        self.queries.append(query)
        return list(self.results)

    async def add_documents(self, documents: list[Document]) -> None:
        self.added.extend(documents)


def make_result(doc_id: str, content: str, score: float, **metadata: Any) -> SearchResult:
    return SearchResult(
        document=Document(id=doc_id, content=content, metadata=metadata or None),
        score=score,
    )


def fast_config(**overrides: Any) -> RouterConfig:
    """Router config without backoff waits."""
    values: dict[str, Any] = {
        "default_provider": "primary",
        "fallback_providers": ("secondary",),
        "max_retries": 2,
        "timeout": 5.0,
        "retry_backoff_base": 0.0,
        "retry_backoff_max": 0.0,
    }
    values.update(overrides)
    return RouterConfig(**values)


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        _env_file=None,
        openai_api_key="test-openai-key",
        anthropic_api_key="test-anthropic-key",
        google_ai_api_key="",
        log_level="DEBUG",
    )


@pytest.fixture
def scripted_provider() -> Callable[..., ScriptedProvider]:
    """Factory for scripted providers."""
    return ScriptedProvider


@pytest.fixture
def make_router() -> Callable[..., Router]:
    """Build a router over the given providers with no backoff."""

    def _make(*providers: BaseLLMProvider, **config: Any) -> Router:
        return Router(providers, fast_config(**config))

    return _make


@pytest.fixture
def static_retriever() -> StaticRetriever:
    return StaticRetriever()
