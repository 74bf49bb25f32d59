# core/domain.py
"""Domain models for the retrieval engine"""
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional

from core.enums import DocumentType, ErrorCode


@dataclass(frozen=True)
class Document:
    """A logical source unit. Content is immutable once ingested."""
    id: str
    title: str
    doc_type: DocumentType
    content: str
    date: Optional[str] = None

    def metadata(self) -> Dict[str, Any]:
        """Descriptive metadata only (what ListDocuments exposes)."""
        return {
            "id": self.id,
            "title": self.title,
            "doc_type": self.doc_type.value,
            "date": self.date,
        }


@dataclass
class DocumentChunk:
    """Domain model for document chunks"""
    id: str
    content: str
    document_id: str
    chunk_index: int
    start: int
    end: int
    metadata: Dict[str, Any] = field(default_factory=dict)
    embedding: Optional[List[float]] = None  # Vector of float numbers


@dataclass
class ChunkSearchResult:
    """Domain model for search results"""
    chunk: DocumentChunk
    score: float


@dataclass
class ChunkEmbeddingOutcome:
    """Per-chunk ingestion report entry: the chunk and, if it failed, why."""
    chunk: DocumentChunk
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class IngestResult:
    document_id: str
    chunks_inserted: int
    chunks_total: int
    outcomes: List[ChunkEmbeddingOutcome] = field(default_factory=list)

    @property
    def failed_chunks(self) -> List[ChunkEmbeddingOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def is_partial(self) -> bool:
        return self.chunks_inserted < self.chunks_total
