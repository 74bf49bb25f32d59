"""Typed errors raised by the retrieval engine."""
from core.enums import ErrorCode


class RetrievalEngineError(Exception):
    """Base error; every engine failure carries an ErrorCode."""

    default_code = ErrorCode.EMBEDDING_FAILED

    def __init__(self, message: str, error_code: ErrorCode = None):
        self.message = message
        self.error_code = error_code or self.default_code
        super().__init__(message)

    def __str__(self):
        # Format used for logging and API error details
        return f"[{self.error_code.value}] {self.message}"


class InvalidConfiguration(RetrievalEngineError):
    """Chunker or index set up with nonsensical parameters (size <= overlap, k < 0, ...)."""
    default_code = ErrorCode.INVALID_CONFIGURATION


class InvalidDocument(RetrievalEngineError):
    """Document rejected at the ingestion boundary."""
    default_code = ErrorCode.INVALID_DOCUMENT


class EmbeddingFailure(RetrievalEngineError):
    """A single embedding call failed for good (non-transient, or retries exhausted)."""
    default_code = ErrorCode.EMBEDDING_FAILED


class ProviderTransient(RetrievalEngineError):
    """Rate limit / unavailable signal from the provider. Retried before escalating."""
    default_code = ErrorCode.PROVIDER_TRANSIENT
