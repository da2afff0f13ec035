"""Retrieval and answer data models."""

from typing import Any

from pydantic import BaseModel, Field


class Document(BaseModel):
    """A unit of retrievable text. `embedding` is set once indexed."""

    id: str
    content: str
    metadata: dict[str, Any] | None = None
    embedding: list[float] | None = Field(default=None, repr=False)


class SearchResult(BaseModel):
    document: Document
    score: float


class AnswerResult(BaseModel):
    """Grounded answer with its sources and a confidence in [0, 1]."""

    answer: str
    sources: list[SearchResult] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class AnswerChunk(BaseModel):
    """
    One item of a streamed answer.

    Only the terminal chunk (done=True) carries sources and confidence.
    """

    chunk: str
    done: bool = False
    sources: list[SearchResult] | None = None
    confidence: float | None = None
