from pydantic import BaseModel, Field, field_validator
from typing import Optional, List

from core.enums import DocumentType, ErrorCode
from core.exceptions import InvalidDocument

class IngestRequest(BaseModel):
    id: Optional[str] = None
    title: str = Field(..., min_length=1)
    doc_type: DocumentType
    date: Optional[str] = None
    content: str

    @field_validator("doc_type", mode="before")
    @classmethod
    def normalize_doc_type(cls, v):
        if isinstance(v, str):
            try:
                return DocumentType.from_string(v)
            except InvalidDocument as e:
                raise ValueError(e.message)
        return v

class FailedChunk(BaseModel):
    chunk_index: int
    start: int
    end: int
    error: str
    error_code: Optional[ErrorCode] = None

class IngestResponse(BaseModel):
    status: str  # "success" or "partial"
    document_id: str
    chunks_inserted: int
    chunks_total: int
    failed_chunks: List[FailedChunk] = []

class DocumentsListItem(BaseModel):
    id: str
    title: str
    doc_type: DocumentType
    date: Optional[str] = None

class DocumentsListResponse(BaseModel):
    documents: List[DocumentsListItem]

class SearchRequest(BaseModel):
    query: str
    top_k: Optional[int] = Field(default=None, ge=0)
    threshold: Optional[float] = Field(default=None, ge=-1.0, le=1.0)

class SearchResult(BaseModel):
    chunk_id: str
    document_id: str
    chunk_index: int
    title: str
    doc_type: str
    date: Optional[str] = None
    content_snippet: str
    similarity: float

class SearchResponse(BaseModel):
    status: str
    query: str
    results: List[SearchResult]
    total_results: int
    context: str

class StatusResponse(BaseModel):
    documents: int = 0
    chunks_available: int = 0
    ready_for_queries: bool = False
