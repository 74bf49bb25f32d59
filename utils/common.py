"""Common utilities: path management and identifiers"""
import os
from datetime import date
from uuid import uuid4

# ⚠️ DO NOT import settings here - causes circular import with config.py


# ============= Path Management =============

def get_project_root() -> str:
    """Returns the absolute path to the project's root directory."""
    return os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))


def get_log_file_path() -> str:
    """Creates the log directory if it doesn't exist and returns the full log file path."""
    project_root = get_project_root()
    log_dir = os.path.join(project_root, 'log')

    if not os.path.exists(log_dir):
        os.makedirs(log_dir, exist_ok=True)

    return os.path.join(log_dir, 'retrieval_engine.log')


# ============= Identifiers =============

def generate_document_id() -> str:
    """Generates a fresh document ID for callers that don't assign one."""
    return str(uuid4())


def make_chunk_id(document_id: str, chunk_index: int) -> str:
    """Chunk IDs are derived from (document_id, chunk_index) so re-chunking is idempotent."""
    return f"{document_id}-chunk-{chunk_index}"


def today_iso() -> str:
    return date.today().isoformat()


def make_snippet(content: str, length: int) -> str:
    """Truncates content for display, marking the cut with an ellipsis."""
    return content[:length] + "..." if len(content) > length else content
