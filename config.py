"""Retrieval engine configuration"""
from typing import Optional
from pydantic_settings import BaseSettings
from utils.common import get_log_file_path

class Settings(BaseSettings):
    """Application configuration"""

    # Logger configuration
    LOG_FILE_PATH: str = get_log_file_path()
    LOGGER_NAME: str = "lexai_retrieval"
    LOG_LEVEL: str = "INFO"
    LOG_MAX_BYTES: int = 5 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 5

    # Chunking
    CHUNK_SIZE: int = 1000
    CHUNK_OVERLAP: int = 200

    # Retrieval
    RELEVANCE_THRESHOLD: float = 0.3
    DEFAULT_TOP_K: int = 5
    MAX_QUERY_LENGTH: int = 2000
    SNIPPET_LENGTH: int = 300
    REINGEST_POLICY: str = "append"  # Options: append, replace

    # Embedding provider
    EMBEDDING_PROVIDER: str = "gemini"  # Options: gemini, sentence_transformers
    EMBEDDING_MODEL_NAME: str = "paraphrase-multilingual-mpnet-base-v2"
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_EMBEDDING_MODEL: str = "text-embedding-004"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"

    # Embedding call policy
    MAX_RETRIES: int = 3
    INITIAL_BACKOFF_MS: int = 1000  # Doubles per retry
    EMBEDDING_TIMEOUT_SEC: float = 30.0
    EMBEDDING_CONCURRENCY: int = 1  # 1 = sequential
    EMBEDDING_MIN_INTERVAL_MS: int = 200

    # App metadata
    APP_TITLE: str = "LexAI Retrieval Engine"
    APP_VERSION: str = "1.0.0"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
