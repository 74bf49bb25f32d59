# core/interfaces.py
"""Core interfaces for the retrieval engine"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from core.domain import ChunkSearchResult, Document, DocumentChunk, IngestResult

# ============= Embedding Service Interface =============
class IEmbeddingService(ABC):
    """Interface for embedding generation (external provider capability)"""

    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        """
        Generate a fixed-length embedding for a single text.

        Raises:
            ProviderTransient: rate-limit / unavailable signal (retryable)
            EmbeddingFailure: anything that should not be retried
        """
        pass

# ============= Rate Limiter Interface =============
class IRateLimiter(ABC):
    """Policy object deciding when the next provider request may start."""

    @abstractmethod
    async def acquire(self) -> None:
        """Wait until a request slot is available."""
        pass

# ============= Corpus Store Interface =============
class ICorpusStore(ABC):
    """
    Interface for the chunk corpus and document metadata map.

    Documents and chunks are append-only; the only removal paths are
    replace-on-commit and a full clear().
    """

    @abstractmethod
    async def commit_document(
        self,
        document: Document,
        chunks: List[DocumentChunk],
        replace_existing: bool = False
    ) -> int:
        """
        Record metadata and append chunks in one atomic step.
        Returns the number of chunks appended.
        """
        pass

    @abstractmethod
    async def snapshot(self) -> List[DocumentChunk]:
        """Consistent view of the stored chunks, in insertion order."""
        pass

    @abstractmethod
    async def list_documents(self) -> List[Document]:
        """All documents in first-ingest order"""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Get total number of chunks"""
        pass

    @property
    @abstractmethod
    def dimension(self) -> Optional[int]:
        """Embedding length fixed by the first stored vector, None while empty."""
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Drop all documents and chunks"""
        pass

# ============= Service Layer Interfaces =============
class IDocumentIndex(ABC):
    """High-level ingest/retrieve operations"""

    @abstractmethod
    async def ingest(self, document: Document) -> IngestResult:
        """Chunk -> embed -> store. Never fails wholesale on isolated chunk errors."""
        pass

    @abstractmethod
    async def retrieve(
        self,
        query: str,
        k: Optional[int] = None,
        threshold: Optional[float] = None
    ) -> List[ChunkSearchResult]:
        """Top-k chunks above the relevance threshold, best first."""
        pass

    @abstractmethod
    async def list_documents(self) -> List[Document]:
        pass

    @abstractmethod
    async def get_status(self) -> Dict[str, Any]:
        """Get system status"""
        pass

    @abstractmethod
    async def reset(self) -> None:
        pass
