"""Retrieval-augmented generation."""

from ai_orchestrator.rag.answer_engine import (
    AnswerEngine,
    AnswerEngineConfig,
    build_context,
    calculate_confidence,
    create_answer_engine,
)
from ai_orchestrator.rag.chunker import ChunkOptions, chunk_document, chunk_documents, chunk_text
from ai_orchestrator.rag.models import AnswerChunk, AnswerResult, Document, SearchResult
from ai_orchestrator.rag.retriever import EmbeddingRetriever, Retriever
from ai_orchestrator.rag.vector_store import MemoryVectorStore, VectorStore, cosine_similarity

__all__ = [
    "AnswerChunk",
    "AnswerEngine",
    "AnswerEngineConfig",
    "AnswerResult",
    "ChunkOptions",
    "Document",
    "EmbeddingRetriever",
    "MemoryVectorStore",
    "Retriever",
    "SearchResult",
    "VectorStore",
    "build_context",
    "calculate_confidence",
    "chunk_document",
    "chunk_documents",
    "chunk_text",
    "cosine_similarity",
    "create_answer_engine",
]
