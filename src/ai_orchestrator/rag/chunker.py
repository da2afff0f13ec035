"""Text chunking with separator-first splitting and overlap."""

from dataclasses import dataclass

from ai_orchestrator.rag.models import Document


DEFAULT_CHUNK_SIZE = 1000
DEFAULT_CHUNK_OVERLAP = 200


@dataclass(frozen=True)
class ChunkOptions:
    chunk_size: int = DEFAULT_CHUNK_SIZE
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP
    separator: str = "\n\n"


def _split_words(segment: str, chunk_size: int, chunks: list[str]) -> str:
    """
    Pack the words of an oversized segment into chunks.

    Returns the trailing partial chunk, which the caller keeps growing.
    A single word longer than `chunk_size` becomes its own chunk.
    """
    current = ""
    for word in segment.split(" "):
        if len(current) + len(word) + 1 <= chunk_size:
            current += (" " if current else "") + word
        else:
            if current:
                chunks.append(current.strip())
            current = word
    return current


def chunk_text(text: str, options: ChunkOptions | None = None) -> list[str]:
    """
    Split text into chunks of at most roughly `chunk_size` characters.

    Segments separated by `separator` are packed greedily; a segment that
    is larger than a chunk on its own is split on spaces. With a positive
    overlap every chunk after the first is prefixed with the last
    `chunk_overlap` characters of the previous chunk.
    """
    options = options or ChunkOptions()
    size, separator = options.chunk_size, options.separator

    chunks: list[str] = []
    current = ""

    for segment in text.split(separator):
        if len(current) + len(segment) + len(separator) <= size:
            current += (separator if current else "") + segment
            continue

        if current:
            chunks.append(current.strip())

        if len(segment) > size:
            current = _split_words(segment, size, chunks)
        else:
            current = segment

    if current.strip():
        chunks.append(current.strip())

    if options.chunk_overlap <= 0 or len(chunks) < 2:
        return chunks

    overlapped = [chunks[0]]
    for previous, chunk in zip(chunks, chunks[1:]):
        overlapped.append(f"{previous[-options.chunk_overlap:]} {chunk}")
    return overlapped


def chunk_document(document: Document, options: ChunkOptions | None = None) -> list[Document]:
    """Split a document into child documents that point back to it."""
    chunks = chunk_text(document.content, options)
    return [
        Document(
            id=f"{document.id}-chunk-{index}",
            content=chunk,
            metadata={
                **(document.metadata or {}),
                "parentId": document.id,
                "chunkIndex": index,
                "totalChunks": len(chunks),
            },
        )
        for index, chunk in enumerate(chunks)
    ]


def chunk_documents(
    documents: list[Document], options: ChunkOptions | None = None
) -> list[Document]:
    return [chunk for document in documents for chunk in chunk_document(document, options)]
