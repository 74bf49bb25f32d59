# services/document_index.py
import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

import numpy as np

from config import settings
from core.domain import (
    ChunkEmbeddingOutcome, ChunkSearchResult, Document, DocumentChunk, IngestResult
)
from core.enums import DocumentType, ErrorCode, ReingestPolicy
from core.exceptions import (
    EmbeddingFailure, InvalidConfiguration, InvalidDocument, RetrievalEngineError
)
from core.interfaces import ICorpusStore, IDocumentIndex, IEmbeddingService
from infrastructure.chunker import chunk_spans, validate_chunking
from infrastructure.similarity import cosine_similarities
from utils.common import generate_document_id, make_chunk_id, today_iso

logger = logging.getLogger(settings.LOGGER_NAME)


class DocumentIndex(IDocumentIndex):
    """
    Owns ingestion (chunk -> embed -> store) and retrieval
    (embed query -> score -> filter -> rank -> slice) over one corpus store.

    Chunk size, overlap and threshold are fixed per instance so everything in
    a corpus is chunked and judged the same way.
    """

    def __init__(
        self,
        embedding_service: IEmbeddingService,
        store: ICorpusStore,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        relevance_threshold: float = 0.3,
        default_top_k: int = 5,
        embedding_concurrency: int = 1,
        reingest_policy: Union[ReingestPolicy, str] = ReingestPolicy.APPEND,
    ):
        validate_chunking(chunk_size, chunk_overlap)
        self._validate_threshold(relevance_threshold)
        if default_top_k < 1:
            raise InvalidConfiguration(f"default_top_k must be at least 1, got {default_top_k}")
        if embedding_concurrency < 1:
            raise InvalidConfiguration(
                f"embedding_concurrency must be at least 1, got {embedding_concurrency}"
            )

        self.embedding_service = embedding_service
        self.store = store
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.relevance_threshold = relevance_threshold
        self.default_top_k = default_top_k
        self.embedding_concurrency = embedding_concurrency
        if isinstance(reingest_policy, ReingestPolicy):
            self.reingest_policy = reingest_policy
        else:
            self.reingest_policy = ReingestPolicy.from_string(reingest_policy)

    @staticmethod
    def _validate_threshold(threshold: float) -> None:
        if not -1.0 <= threshold <= 1.0:
            raise InvalidConfiguration(f"Relevance threshold must be within [-1, 1], got {threshold}")

    # ============= Ingestion =============

    def _prepare_document(self, document: Document) -> Document:
        """Boundary check: closed document type, non-empty title, id/date defaults."""
        if not document.title or not document.title.strip():
            raise InvalidDocument("Document title must not be empty")
        if document.content is None:
            raise InvalidDocument("Document content must be a string")

        return Document(
            id=document.id or generate_document_id(),
            title=document.title,
            doc_type=DocumentType.from_string(document.doc_type),
            content=document.content,
            date=document.date or today_iso(),
        )

    def _build_chunks(self, document: Document) -> List[DocumentChunk]:
        spans = chunk_spans(len(document.content), self.chunk_size, self.chunk_overlap)
        return [
            DocumentChunk(
                id=make_chunk_id(document.id, i),
                content=document.content[start:end],
                document_id=document.id,
                chunk_index=i,
                start=start,
                end=end,
                metadata={
                    "title": f"{document.title} (Part {i + 1})",
                    "document_title": document.title,
                    "doc_type": document.doc_type.value,
                    "date": document.date,
                },
            )
            for i, (start, end) in enumerate(spans)
        ]

    @staticmethod
    def _log_chunk_failure(chunk: DocumentChunk, error: Exception) -> None:
        logger.warning(
            f"Failed to embed chunk {chunk.chunk_index} "
            f"[{chunk.start}:{chunk.end}] of {chunk.document_id}: {error!r}"
        )

    async def _embed_chunk(self, chunk: DocumentChunk) -> ChunkEmbeddingOutcome:
        """Embeds one chunk; failures become a report entry instead of an exception."""
        try:
            embedding = await self.embedding_service.embed(chunk.content)
            expected = self.store.dimension
            if not embedding:
                raise EmbeddingFailure("Provider returned an empty vector")
            if expected is not None and len(embedding) != expected:
                raise EmbeddingFailure(
                    f"Provider returned {len(embedding)}-dim vector, corpus expects {expected}"
                )
        except RetrievalEngineError as e:
            self._log_chunk_failure(chunk, e)
            return ChunkEmbeddingOutcome(chunk=chunk, error=e.message, error_code=e.error_code)
        except Exception as e:
            # Providers used without the retry wrapper can raise anything
            self._log_chunk_failure(chunk, e)
            return ChunkEmbeddingOutcome(
                chunk=chunk, error=str(e) or type(e).__name__, error_code=ErrorCode.EMBEDDING_FAILED
            )

        chunk.embedding = list(embedding)
        return ChunkEmbeddingOutcome(chunk=chunk)

    async def _embed_all(self, chunks: List[DocumentChunk]) -> List[ChunkEmbeddingOutcome]:
        """
        Worker pool: N workers pull chunks from a queue. Outcomes are slotted by
        chunk_index so completion order never affects insertion order.
        """
        outcomes: List[Optional[ChunkEmbeddingOutcome]] = [None] * len(chunks)
        if not chunks:
            return []

        queue: asyncio.Queue = asyncio.Queue()
        for chunk in chunks:
            queue.put_nowait(chunk)

        async def worker() -> None:
            while True:
                try:
                    chunk = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                outcomes[chunk.chunk_index] = await self._embed_chunk(chunk)

        workers = min(self.embedding_concurrency, len(chunks))
        await asyncio.gather(*(worker() for _ in range(workers)))
        return outcomes  # type: ignore[return-value]

    def _check_batch_dimensions(self, outcomes: List[ChunkEmbeddingOutcome]) -> int:
        """
        Within one document, every vector must match the corpus dimension, or
        the first successful one while the corpus is still empty.
        Returns how many chunks were turned into failures.
        """
        expected = self.store.dimension
        dropped = 0
        for i, outcome in enumerate(outcomes):
            if not outcome.succeeded:
                continue
            size = len(outcome.chunk.embedding)
            if expected is None:
                expected = size
            elif size != expected:
                outcome.chunk.embedding = None
                outcomes[i] = ChunkEmbeddingOutcome(
                    chunk=outcome.chunk,
                    error=f"Provider returned {size}-dim vector, expected {expected}",
                    error_code=EmbeddingFailure.default_code,
                )
                logger.warning(f"Dropped chunk {outcome.chunk.id}: inconsistent embedding length")
                dropped += 1
        return dropped

    async def _commit(self, document: Document, outcomes: List[ChunkEmbeddingOutcome]) -> int:
        """
        Single locked commit. A concurrent first ingestion can fix the corpus
        dimension while this document is still embedding; chunks that no longer
        match are reported as failed and the rest are committed.
        """
        while True:
            embedded = [o.chunk for o in outcomes if o.succeeded]
            try:
                return await self.store.commit_document(
                    document,
                    embedded,
                    replace_existing=self.reingest_policy == ReingestPolicy.REPLACE,
                )
            except EmbeddingFailure:
                if not self._check_batch_dimensions(outcomes):
                    raise
                logger.warning(
                    f"Corpus dimension changed while embedding '{document.title}', "
                    f"retrying commit without mismatched chunks"
                )

    async def ingest(self, document: Document) -> IngestResult:
        document = self._prepare_document(document)
        chunks = self._build_chunks(document)
        logger.info(f"Chunking '{document.title}' ({document.id}) into {len(chunks)} chunks...")

        outcomes = await self._embed_all(chunks)
        self._check_batch_dimensions(outcomes)

        inserted = await self._commit(document, outcomes)

        result = IngestResult(
            document_id=document.id,
            chunks_inserted=inserted,
            chunks_total=len(chunks),
            outcomes=outcomes,
        )
        if result.is_partial:
            logger.warning(
                f"Partially ingested '{document.title}': {inserted}/{len(chunks)} chunks embedded"
            )
        else:
            logger.info(f"Ingested {inserted} chunks for '{document.title}'")
        return result

    # ============= Retrieval =============

    def _score(self, query_embedding: List[float], chunks: List[DocumentChunk]) -> List[float]:
        """Cosine score per chunk; chunks without an embedding score 0."""
        scores = [0.0] * len(chunks)
        positions = [i for i, c in enumerate(chunks) if c.embedding is not None]
        if not positions:
            return scores

        matrix = np.array([chunks[i].embedding for i in positions], dtype=np.float64)
        for i, score in zip(positions, cosine_similarities(query_embedding, matrix)):
            scores[i] = float(score)
        return scores

    async def retrieve(
        self,
        query: str,
        k: Optional[int] = None,
        threshold: Optional[float] = None
    ) -> List[ChunkSearchResult]:
        k = self.default_top_k if k is None else k
        threshold = self.relevance_threshold if threshold is None else threshold
        if k < 0:
            raise InvalidConfiguration(f"k must not be negative, got {k}")
        self._validate_threshold(threshold)

        chunks = await self.store.snapshot()
        if not chunks or k == 0:
            # No knowledge yet is a normal state, not an error
            return []

        logger.info(f"Retrieving context for query ({len(query)} chars), k={k}")
        query_embedding = await self.embedding_service.embed(query)

        expected = self.store.dimension
        if not query_embedding or (expected is not None and len(query_embedding) != expected):
            raise EmbeddingFailure(
                f"Query embedding has {len(query_embedding or [])} dims, corpus expects {expected}"
            )

        scored = [
            ChunkSearchResult(chunk=chunk, score=score)
            for chunk, score in zip(chunks, self._score(query_embedding, chunks))
        ]
        relevant = [r for r in scored if r.score > threshold]
        # list.sort is stable, reverse=True included: ties keep insertion order
        relevant.sort(key=lambda r: r.score, reverse=True)

        results = relevant[:k]
        logger.info(f"Found {len(results)} relevant chunks ({len(relevant)} above threshold).")
        return results

    # ============= Introspection =============

    async def list_documents(self) -> List[Document]:
        return await self.store.list_documents()

    async def get_status(self) -> Dict[str, Any]:
        documents = await self.store.list_documents()
        chunk_count = await self.store.count()
        return {
            "documents": len(documents),
            "chunks_available": chunk_count,
            "ready_for_queries": chunk_count > 0,
        }

    async def reset(self) -> None:
        await self.store.clear()
