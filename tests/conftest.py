"""Shared pytest fixtures and embedding fakes for the retrieval engine tests."""

import asyncio
import math
import re
from typing import Callable, Dict, List, Optional, Sequence

import pytest
import pytest_asyncio

from core.domain import Document, DocumentChunk
from core.enums import DocumentType
from core.exceptions import EmbeddingFailure
from core.interfaces import IEmbeddingService
from infrastructure.memory_store import InMemoryCorpusStore
from services.document_index import DocumentIndex

VOCABULARY = [
    "contract", "breach", "damages", "statute", "limitation", "negligence",
    "court", "appeal", "tenant", "landlord", "lease", "employment",
]


class KeywordEmbeddingService(IEmbeddingService):
    """Bag-of-words over a fixed vocabulary: deterministic and easy to reason about."""

    def __init__(self, vocabulary: Sequence[str] = VOCABULARY):
        self.vocabulary = list(vocabulary)
        self.calls: List[str] = []

    async def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        words = re.findall(r"[a-z]+", text.lower())
        return [float(words.count(term)) for term in self.vocabulary]


class FakeEmbeddingService(IEmbeddingService):
    """
    Scripted embedder.

    vectors: exact text -> vector lookups
    default: fallback vector factory
    fail_when: predicate on text; matching calls raise EmbeddingFailure
    raises: exact text -> exception raised as-is
    delay: optional per-text delay (seconds) to shuffle completion order
    """

    def __init__(
        self,
        vectors: Optional[Dict[str, List[float]]] = None,
        default: Optional[Callable[[str], List[float]]] = None,
        fail_when: Optional[Callable[[str], bool]] = None,
        delay: Optional[Callable[[str], float]] = None,
        raises: Optional[Dict[str, Exception]] = None,
    ):
        self.vectors = vectors or {}
        self.default = default or (lambda text: [1.0, 0.0])
        self.fail_when = fail_when or (lambda text: False)
        self.delay = delay
        self.raises = raises or {}
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay is not None:
                await asyncio.sleep(self.delay(text))
            else:
                await asyncio.sleep(0)
            if text in self.raises:
                raise self.raises[text]
            if self.fail_when(text):
                raise EmbeddingFailure(f"provider rejected text of length {len(text)}")
            if text in self.vectors:
                return list(self.vectors[text])
            return list(self.default(text))
        finally:
            self.in_flight -= 1


def unit_vector_with_similarity(similarity: float) -> List[float]:
    """2-D unit vector whose cosine with [1, 0] equals `similarity`."""
    return [similarity, math.sqrt(max(0.0, 1.0 - similarity ** 2))]


def make_chunk(
    document_id: str,
    chunk_index: int,
    embedding: Optional[List[float]],
    content: Optional[str] = None,
) -> DocumentChunk:
    content = content or f"{document_id} chunk {chunk_index}"
    return DocumentChunk(
        id=f"{document_id}-chunk-{chunk_index}",
        content=content,
        document_id=document_id,
        chunk_index=chunk_index,
        start=0,
        end=len(content),
        metadata={"title": f"{document_id} (Part {chunk_index + 1})", "doc_type": "memo"},
        embedding=embedding,
    )


@pytest.fixture
def store() -> InMemoryCorpusStore:
    return InMemoryCorpusStore()


@pytest.fixture
def keyword_embedder() -> KeywordEmbeddingService:
    return KeywordEmbeddingService()


@pytest_asyncio.fixture
async def keyword_index(keyword_embedder, store) -> DocumentIndex:
    """Small chunks so short test documents still split into several pieces."""
    return DocumentIndex(
        embedding_service=keyword_embedder,
        store=store,
        chunk_size=60,
        chunk_overlap=10,
        relevance_threshold=0.3,
        default_top_k=5,
    )


@pytest.fixture
def contract_document() -> Document:
    return Document(
        id="doc-contract",
        title="Supply Agreement",
        doc_type=DocumentType.CONTRACT,
        date="2024-03-01",
        content=(
            "The supplier shall deliver goods under this contract. "
            "Any breach of contract entitles the buyer to damages. "
            "Damages for breach are limited to the contract price."
        ),
    )


@pytest.fixture
def statute_document() -> Document:
    return Document(
        id="doc-statute",
        title="Limitation Act",
        doc_type=DocumentType.STATUTE,
        date="1980-11-13",
        content=(
            "This statute sets the limitation period. An action in negligence "
            "must be brought within six years. The statute of limitation applies "
            "to every court of first instance and on appeal."
        ),
    )
