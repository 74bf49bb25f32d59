# api/endpoints.py
"""
API endpoints for the retrieval engine.

No authentication: the engine sits behind the application that owns
users and sessions.
"""

from fastapi import APIRouter, HTTPException, Depends, Request

from config import settings
from core.domain import Document
from core.exceptions import EmbeddingFailure, InvalidConfiguration, InvalidDocument
from core.interfaces import IDocumentIndex
from api.schemas import (
    DocumentsListItem,
    DocumentsListResponse,
    FailedChunk,
    IngestRequest,
    IngestResponse,
    SearchRequest,
    SearchResponse,
    SearchResult,
    StatusResponse,
)
from services.context_builder import build_rag_context
from utils.common import make_snippet

router = APIRouter()


def get_document_index(request: Request) -> IDocumentIndex:
    """The index is built once at startup and kept on app.state."""
    document_index = getattr(request.app.state, "document_index", None)
    if document_index is None:
        raise HTTPException(status_code=503, detail="Document index is not initialized")
    return document_index


# ---------- Ingest ----------
@router.post("/documents", response_model=IngestResponse)
async def ingest_document(
    ingest_request: IngestRequest,
    document_index: IDocumentIndex = Depends(get_document_index),
) -> IngestResponse:
    document = Document(
        id=ingest_request.id or "",
        title=ingest_request.title,
        doc_type=ingest_request.doc_type,
        date=ingest_request.date,
        content=ingest_request.content,
    )
    try:
        result = await document_index.ingest(document)
    except (InvalidDocument, InvalidConfiguration) as e:
        raise HTTPException(status_code=422, detail=str(e))

    return IngestResponse(
        status="partial" if result.is_partial else "success",
        document_id=result.document_id,
        chunks_inserted=result.chunks_inserted,
        chunks_total=result.chunks_total,
        failed_chunks=[
            FailedChunk(
                chunk_index=o.chunk.chunk_index,
                start=o.chunk.start,
                end=o.chunk.end,
                error=o.error,
                error_code=o.error_code,
            )
            for o in result.failed_chunks
        ],
    )


# ---------- Documents ----------
@router.get("/documents", response_model=DocumentsListResponse)
async def list_documents(
    document_index: IDocumentIndex = Depends(get_document_index),
) -> DocumentsListResponse:
    documents = await document_index.list_documents()
    return DocumentsListResponse(
        documents=[
            DocumentsListItem(id=d.id, title=d.title, doc_type=d.doc_type, date=d.date)
            for d in documents
        ]
    )


# ---------- Search ----------
@router.post("/search", response_model=SearchResponse)
async def search_endpoint(
    search_request: SearchRequest,
    document_index: IDocumentIndex = Depends(get_document_index),
) -> SearchResponse:
    query = search_request.query.strip()
    if not 1 <= len(query) <= settings.MAX_QUERY_LENGTH:
        raise HTTPException(
            status_code=422,
            detail=f"Search query must be between 1 and {settings.MAX_QUERY_LENGTH} characters",
        )

    try:
        results = await document_index.retrieve(
            query, k=search_request.top_k, threshold=search_request.threshold
        )
    except InvalidConfiguration as e:
        raise HTTPException(status_code=422, detail=str(e))
    except EmbeddingFailure as e:
        raise HTTPException(status_code=502, detail=str(e))

    search_results = [
        SearchResult(
            chunk_id=r.chunk.id,
            document_id=r.chunk.document_id,
            chunk_index=r.chunk.chunk_index,
            title=r.chunk.metadata.get("title", r.chunk.document_id),
            doc_type=r.chunk.metadata.get("doc_type", ""),
            date=r.chunk.metadata.get("date"),
            content_snippet=make_snippet(r.chunk.content, settings.SNIPPET_LENGTH),
            similarity=r.score,
        )
        for r in results
    ]

    return SearchResponse(
        status="success",
        query=query,
        results=search_results,
        total_results=len(search_results),
        context=build_rag_context(results),
    )


# ---------- Status ----------
@router.get("/status", response_model=StatusResponse)
async def get_status(
    document_index: IDocumentIndex = Depends(get_document_index),
) -> StatusResponse:
    status = await document_index.get_status()
    return StatusResponse(**status)
