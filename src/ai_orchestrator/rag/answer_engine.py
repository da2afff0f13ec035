"""Retrieval-augmented answering with citations and confidence."""

import json
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, AsyncIterator

from ai_orchestrator.config.prompts import (
    RAG_NO_CONTEXT,
    RAG_SOURCE_DELIMITER,
    RAG_SYSTEM_PROMPT,
    RAG_USER_PROMPT,
)
from ai_orchestrator.rag.models import AnswerChunk, AnswerResult, Document, SearchResult
from ai_orchestrator.rag.retriever import Retriever
from ai_orchestrator.utils.logging import get_logger
from ai_orchestrator.utils.providers.base import ChatMessage, CompletionOptions

if TYPE_CHECKING:
    from ai_orchestrator.config.settings import Settings
    from ai_orchestrator.core.router import Router


logger = get_logger(__name__)


def build_context(sources: list[SearchResult]) -> str:
    """
    Render sources as numbered context blocks.

    Format per source: `[n] content`, followed by `\\nMetadata: <json>`
    when the document has metadata. Blocks are joined by a `---` rule.
    """
    if not sources:
        return RAG_NO_CONTEXT

    blocks = []
    for index, source in enumerate(sources, start=1):
        block = f"[{index}] {source.document.content}"
        if source.document.metadata:
            block += f"\nMetadata: {json.dumps(source.document.metadata, default=str)}"
        blocks.append(block)
    return RAG_SOURCE_DELIMITER.join(blocks)


def calculate_confidence(sources: list[SearchResult]) -> float:
    """Mean source score clamped to [0, 1]; 0 without sources or on a non-finite mean."""
    if not sources:
        return 0.0
    average = sum(source.score for source in sources) / len(sources)
    if not math.isfinite(average):
        return 0.0
    return min(max(average, 0.0), 1.0)


@dataclass(frozen=True)
class AnswerEngineConfig:
    system_prompt: str = RAG_SYSTEM_PROMPT
    include_sources_in_prompt: bool = True
    max_sources: int = 5

    def __post_init__(self) -> None:
        if self.max_sources < 0:
            raise ValueError("max_sources must not be negative")

    @classmethod
    def from_settings(cls, settings: "Settings", **overrides: Any) -> "AnswerEngineConfig":
        values: dict[str, Any] = {"max_sources": settings.rag_max_sources}
        values.update(overrides)
        return cls(**values)


class AnswerEngine:
    """
    Answers questions from retrieved context.

    The retriever is expected to rank results; the engine only keeps the
    first `max_sources` and never re-ranks. The model is always called,
    even when nothing was retrieved.
    """

    def __init__(
        self,
        retriever: Retriever,
        router: "Router",
        config: AnswerEngineConfig | None = None,
    ):
        self.retriever = retriever
        self.router = router
        self.config = config or AnswerEngineConfig()

    async def _prepare(self, question: str) -> tuple[list[SearchResult], list[ChatMessage]]:
        results = await self.retriever.retrieve(question)
        sources = list(results[: self.config.max_sources])
        logger.info("Retrieved sources", retrieved=len(results), used=len(sources))

        if self.config.include_sources_in_prompt:
            prompt = RAG_USER_PROMPT.format(context=build_context(sources), question=question)
        else:
            prompt = question

        messages = [
            ChatMessage(role="system", content=self.config.system_prompt),
            ChatMessage(role="user", content=prompt),
        ]
        return sources, messages

    async def answer(
        self, question: str, options: CompletionOptions | None = None
    ) -> AnswerResult:
        sources, messages = await self._prepare(question)
        result = await self.router.complete(messages, options)
        return AnswerResult(
            answer=result.content,
            sources=sources,
            confidence=calculate_confidence(sources),
        )

    async def stream_answer(
        self, question: str, options: CompletionOptions | None = None
    ) -> AsyncIterator[AnswerChunk]:
        """
        Stream the answer.

        Content arrives as done=False chunks; the terminal chunk carries
        the sources and confidence.
        """
        sources, messages = await self._prepare(question)
        async for chunk in self.router.stream(messages, options):
            if chunk.done:
                yield AnswerChunk(
                    chunk="",
                    done=True,
                    sources=sources,
                    confidence=calculate_confidence(sources),
                )
            else:
                yield AnswerChunk(chunk=chunk.content)

    async def add_documents(self, documents: list[Document]) -> None:
        await self.retriever.add_documents(documents)


def create_answer_engine(
    retriever: Retriever, router: "Router", config: AnswerEngineConfig | None = None
) -> AnswerEngine:
    """Create an answer engine instance."""
    return AnswerEngine(retriever, router, config)
