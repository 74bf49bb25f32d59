# infrastructure/memory_store.py
import asyncio
import logging
from typing import Dict, List, Optional

from core.interfaces import ICorpusStore
from core.domain import Document, DocumentChunk
from core.exceptions import EmbeddingFailure
from config import settings

logger = logging.getLogger(settings.LOGGER_NAME)

class InMemoryCorpusStore(ICorpusStore):
    """
    Process-lifetime corpus: document metadata map plus an append-only chunk list.

    - Single asyncio.Lock() guards every mutation and snapshot
    - _chunks keeps insertion order (ties in ranking rely on it)
    - The lock is only ever held for list/dict work, never across I/O
    - Construct one per corpus; there is no module-level instance
    """

    def __init__(self):
        self._documents: Dict[str, Document] = {}
        self._chunks: List[DocumentChunk] = []
        self._dimension: Optional[int] = None
        self._lock = asyncio.Lock()  # Protects all mutations

    @property
    def dimension(self) -> Optional[int]:
        return self._dimension

    def _check_dimensions(self, chunks: List[DocumentChunk]) -> Optional[int]:
        """Returns the dimension the corpus will have after appending chunks."""
        dimension = self._dimension
        for chunk in chunks:
            if chunk.embedding is None:
                continue
            if dimension is None:
                dimension = len(chunk.embedding)
            elif len(chunk.embedding) != dimension:
                raise EmbeddingFailure(
                    f"Chunk {chunk.id} has {len(chunk.embedding)}-dim embedding, "
                    f"corpus expects {dimension}"
                )
        return dimension

    async def commit_document(
        self,
        document: Document,
        chunks: List[DocumentChunk],
        replace_existing: bool = False
    ) -> int:
        """Record metadata (last write wins) and append chunks atomically."""
        async with self._lock:
            # Validate before touching state so a bad batch leaves no trace
            dimension = self._check_dimensions(chunks)

            if replace_existing:
                before = len(self._chunks)
                self._chunks = [c for c in self._chunks if c.document_id != document.id]
                removed = before - len(self._chunks)
                if removed:
                    logger.info(f"[Corpus] Replaced {removed} earlier chunks of document {document.id}")

            self._documents[document.id] = document
            self._chunks.extend(chunks)
            self._dimension = dimension

        return len(chunks)

    async def snapshot(self) -> List[DocumentChunk]:
        async with self._lock:
            return list(self._chunks)

    async def list_documents(self) -> List[Document]:
        async with self._lock:
            return list(self._documents.values())

    async def count(self) -> int:
        async with self._lock:
            return len(self._chunks)

    async def clear(self) -> None:
        async with self._lock:
            self._documents.clear()
            self._chunks = []
            self._dimension = None
        logger.info("[Corpus] Cleared all documents and chunks.")
