"""Shared enumerations used across the application."""
from enum import Enum


class DocumentType(str, Enum):
    """Closed set of legal document kinds accepted at ingestion."""
    CASE_LAW = "case_law"
    STATUTE = "statute"
    CONTRACT = "contract"
    MEMO = "memo"

    @staticmethod
    def from_string(value: str) -> 'DocumentType':
        """Accepts the enum value ('case_law'), its name ('CASE_LAW') or the hyphenated form ('case-law')."""
        from core.exceptions import InvalidDocument

        if isinstance(value, DocumentType):
            return value
        try:
            return DocumentType(str(value).strip().lower().replace("-", "_"))
        except ValueError:
            allowed = ", ".join(t.value for t in DocumentType)
            raise InvalidDocument(f"Unknown document type '{value}'. Allowed: {allowed}")


class ErrorCode(str, Enum):
    """Error codes carried by every engine error."""
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    INVALID_DOCUMENT = "INVALID_DOCUMENT"
    EMBEDDING_FAILED = "EMBEDDING_FAILED"
    RETRIES_EXHAUSTED = "RETRIES_EXHAUSTED"
    PROVIDER_TRANSIENT = "PROVIDER_TRANSIENT"


class ReingestPolicy(str, Enum):
    """What happens to existing chunks when a document id is ingested again."""
    APPEND = "append"    # Overwrite metadata, keep earlier chunks
    REPLACE = "replace"  # Drop earlier chunks for that id in the same commit

    @staticmethod
    def from_string(value: str) -> 'ReingestPolicy':
        from core.exceptions import InvalidConfiguration

        try:
            return ReingestPolicy(str(value).strip().lower())
        except ValueError:
            raise InvalidConfiguration(f"Unknown re-ingest policy '{value}'")
