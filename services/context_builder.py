# services/context_builder.py
"""Turns ranked chunks into the context block handed to the answer model"""
from typing import List

from core.domain import ChunkSearchResult

NO_CONTEXT_MESSAGE = "No relevant documents found in the Knowledge Base."


def format_source(result: ChunkSearchResult) -> str:
    chunk = result.chunk
    title = chunk.metadata.get("title", chunk.document_id)
    doc_type = str(chunk.metadata.get("doc_type", "unknown")).upper()
    return f"[Source: {title} ({doc_type})] \n{chunk.content}"


def build_rag_context(results: List[ChunkSearchResult]) -> str:
    """Ranked order is preserved; the best match comes first."""
    if not results:
        return NO_CONTEXT_MESSAGE

    matches = "\n\n".join(format_source(r) for r in results)
    return f"<RAG_CONTEXT>\n{matches}\n</RAG_CONTEXT>"
