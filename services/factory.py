from typing import Optional

from config import Settings, settings
from core.enums import ReingestPolicy
from core.exceptions import InvalidConfiguration
from core.interfaces import ICorpusStore, IDocumentIndex, IEmbeddingService, IRateLimiter
from infrastructure.gemini_embeddings import GeminiEmbeddingService
from infrastructure.memory_store import InMemoryCorpusStore
from infrastructure.rate_limiter import IntervalRateLimiter
from infrastructure.retrying_embedder import RetryingEmbeddingService
from services.document_index import DocumentIndex

# Provider functions for each component
def get_provider_embedding_service(config: Settings = settings) -> IEmbeddingService:
    """Create the raw embedding provider based on configuration."""
    provider = config.EMBEDDING_PROVIDER.lower()
    if provider == "gemini":
        return GeminiEmbeddingService(
            api_key=config.GEMINI_API_KEY,
            model_name=config.GEMINI_EMBEDDING_MODEL,
            base_url=config.GEMINI_BASE_URL,
            request_timeout=config.EMBEDDING_TIMEOUT_SEC,
        )
    if provider == "sentence_transformers":
        # Optional extra; pulls in torch, so only imported when selected
        from infrastructure.embedding_services import SentenceTransformerEmbedding
        return SentenceTransformerEmbedding(config.EMBEDDING_MODEL_NAME)
    raise InvalidConfiguration(f"Unknown embedding provider: {config.EMBEDDING_PROVIDER}")

def get_rate_limiter(config: Settings = settings) -> Optional[IRateLimiter]:
    if config.EMBEDDING_MIN_INTERVAL_MS <= 0:
        return None
    return IntervalRateLimiter(config.EMBEDDING_MIN_INTERVAL_MS / 1000.0)

def get_embedding_service(config: Settings = settings) -> IEmbeddingService:
    """Provider wrapped with retry/backoff, timeout and pacing."""
    return RetryingEmbeddingService(
        get_provider_embedding_service(config),
        max_retries=config.MAX_RETRIES,
        initial_backoff_ms=config.INITIAL_BACKOFF_MS,
        timeout_seconds=config.EMBEDDING_TIMEOUT_SEC,
        rate_limiter=get_rate_limiter(config),
    )

def get_corpus_store() -> ICorpusStore:
    return InMemoryCorpusStore()

def build_document_index(
    config: Settings = settings,
    embedding_service: Optional[IEmbeddingService] = None,
    store: Optional[ICorpusStore] = None,
) -> IDocumentIndex:
    """
    Construct-on-startup entry point. Each call returns an independent corpus;
    pass embedding_service/store to override individual components.
    """
    return DocumentIndex(
        embedding_service=embedding_service or get_embedding_service(config),
        store=store or get_corpus_store(),
        chunk_size=config.CHUNK_SIZE,
        chunk_overlap=config.CHUNK_OVERLAP,
        relevance_threshold=config.RELEVANCE_THRESHOLD,
        default_top_k=config.DEFAULT_TOP_K,
        embedding_concurrency=config.EMBEDDING_CONCURRENCY,
        reingest_policy=ReingestPolicy.from_string(config.REINGEST_POLICY),
    )
