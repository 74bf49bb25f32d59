# infrastructure/embedding_services.py
"""Local embedding generation with L2 normalization for consistent similarity scoring"""
import asyncio
import logging
import numpy as np
from typing import Dict, List
from sentence_transformers import SentenceTransformer

from core.interfaces import IEmbeddingService
from core.exceptions import EmbeddingFailure
from config import settings

logger = logging.getLogger(settings.LOGGER_NAME)

class SentenceTransformerEmbedding(IEmbeddingService):
    """
    In-process sentence transformer returning unit-length vectors.

    No network, so nothing here is transient: any failure is an
    EmbeddingFailure and the retry wrapper passes it straight through.
    """

    _models: Dict[str, SentenceTransformer] = {}  # One load per model name

    def __init__(self, model_name: str = "paraphrase-multilingual-mpnet-base-v2"):
        self.model_name = model_name
        self.model = self._load(model_name)

    @classmethod
    def _load(cls, model_name: str) -> SentenceTransformer:
        """Prefers the local cache; downloads only when the model is missing."""
        if model_name in cls._models:
            return cls._models[model_name]

        try:
            model = SentenceTransformer(model_name, local_files_only=True)
            logger.info(f"Loaded embedding model {model_name} from local cache.")
        except Exception as e:
            logger.warning(f"{model_name} not cached ({e}), downloading. This may take a while.")
            model = SentenceTransformer(model_name)
            logger.info(f"Downloaded embedding model {model_name}.")

        cls._models[model_name] = model
        return model

    @staticmethod
    def _l2_normalize(vector: np.ndarray) -> np.ndarray:
        norm = np.linalg.norm(vector)
        return vector if norm == 0 else vector / norm

    async def embed(self, text: str) -> List[float]:
        try:
            raw = await asyncio.to_thread(self.model.encode, text, convert_to_tensor=False)
        except Exception as e:
            raise EmbeddingFailure(f"{self.model_name} failed to encode text: {e}") from e

        return self._l2_normalize(np.asarray(raw, dtype="float32").reshape(-1)).tolist()
