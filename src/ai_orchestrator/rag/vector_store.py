"""Vector stores for embedded documents."""

import math
from abc import ABC, abstractmethod

from ai_orchestrator.rag.models import Document, SearchResult


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """
    Cosine similarity of two vectors; 0.0 if either is all zeros.

    Raises:
        ValueError: If the vectors differ in length
    """
    if len(a) != len(b):
        raise ValueError("Vectors must have the same dimensions")

    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


class VectorStore(ABC):
    """Storage backend for embedded documents."""

    @abstractmethod
    async def add(self, documents: list[Document]) -> None:
        ...

    @abstractmethod
    async def search(self, query: list[float], top_k: int = 5) -> list[SearchResult]:
        """Nearest documents to `query`, highest score first."""
        ...

    @abstractmethod
    async def delete(self, ids: list[str]) -> None:
        ...

    @abstractmethod
    async def clear(self) -> None:
        ...


class MemoryVectorStore(VectorStore):
    """In-process vector store for development and testing."""

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}

    async def add(self, documents: list[Document]) -> None:
        for document in documents:
            if document.embedding is None:
                raise ValueError(f"Document {document.id} is missing embedding")
            self._documents[document.id] = document

    async def search(self, query: list[float], top_k: int = 5) -> list[SearchResult]:
        results = [
            SearchResult(document=document, score=cosine_similarity(query, document.embedding))
            for document in self._documents.values()
            if document.embedding is not None
        ]
        results.sort(key=lambda result: result.score, reverse=True)
        return results[:top_k]

    async def delete(self, ids: list[str]) -> None:
        for document_id in ids:
            self._documents.pop(document_id, None)

    async def clear(self) -> None:
        self._documents.clear()

    def get_all_documents(self) -> list[Document]:
        return list(self._documents.values())

    def __len__(self) -> int:
        return len(self._documents)
