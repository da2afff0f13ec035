"""Retrievers: the contract the answer engine consumes and an embedding-backed reference."""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ai_orchestrator.rag.chunker import ChunkOptions, chunk_documents
from ai_orchestrator.rag.models import Document, SearchResult
from ai_orchestrator.rag.vector_store import MemoryVectorStore, VectorStore
from ai_orchestrator.utils.logging import get_logger

if TYPE_CHECKING:
    from ai_orchestrator.config.settings import Settings
    from ai_orchestrator.core.router import Router


logger = get_logger(__name__)


@runtime_checkable
class Retriever(Protocol):
    """Anything that can rank documents for a query and accept new ones."""

    async def retrieve(self, query: str) -> list[SearchResult]:
        """Results for `query`, highest score first."""
        ...

    async def add_documents(self, documents: list[Document]) -> None:
        ...


class EmbeddingRetriever:
    """
    Chunks, embeds and stores documents; answers queries by vector search.

    Embeddings come from the router, so any embedding-capable provider
    works. Results scoring below `min_score` are dropped.
    """

    def __init__(
        self,
        router: "Router",
        vector_store: VectorStore | None = None,
        top_k: int = 5,
        min_score: float = 0.7,
        chunk_options: ChunkOptions | None = None,
        embedding_provider: str | None = None,
        embedding_model: str | None = None,
    ):
        self.router = router
        self.vector_store = vector_store or MemoryVectorStore()
        self.top_k = top_k
        self.min_score = min_score
        self.chunk_options = chunk_options or ChunkOptions()
        self.embedding_provider = embedding_provider
        self.embedding_model = embedding_model

    @classmethod
    def from_settings(
        cls,
        router: "Router",
        settings: "Settings",
        vector_store: VectorStore | None = None,
    ) -> "EmbeddingRetriever":
        return cls(
            router,
            vector_store=vector_store,
            top_k=settings.rag_top_k,
            min_score=settings.rag_min_score,
            chunk_options=ChunkOptions(
                chunk_size=settings.rag_chunk_size,
                chunk_overlap=settings.rag_chunk_overlap,
            ),
        )

    async def add_documents(self, documents: list[Document]) -> None:
        """Chunk and embed documents, then store the chunks."""
        chunks = chunk_documents(documents, self.chunk_options)
        if not chunks:
            return

        embeddings = await self.router.embed_many(
            [chunk.content for chunk in chunks],
            provider=self.embedding_provider,
            model=self.embedding_model,
        )
        embedded = [
            chunk.model_copy(update={"embedding": result.embedding})
            for chunk, result in zip(chunks, embeddings)
        ]
        await self.vector_store.add(embedded)
        logger.info("Documents indexed", documents=len(documents), chunks=len(embedded))

    async def retrieve(self, query: str) -> list[SearchResult]:
        query_embedding = await self.router.embed(
            query, provider=self.embedding_provider, model=self.embedding_model
        )
        results = await self.vector_store.search(query_embedding.embedding, self.top_k)
        relevant = [r for r in results if r.score >= self.min_score]
        logger.debug(
            "Retrieved documents",
            candidates=len(results),
            relevant=len(relevant),
            min_score=self.min_score,
        )
        return relevant

    async def delete_documents(self, ids: list[str]) -> None:
        await self.vector_store.delete(ids)

    async def clear(self) -> None:
        await self.vector_store.clear()
