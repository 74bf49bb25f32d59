# infrastructure/gemini_embeddings.py
"""Google Gemini embedding provider over the REST API"""
import logging
from typing import List, Optional

import httpx

from core.interfaces import IEmbeddingService
from core.exceptions import EmbeddingFailure, InvalidConfiguration, ProviderTransient
from config import settings

logger = logging.getLogger(settings.LOGGER_NAME)

# 429 Too Many Requests, 503 Service Unavailable
TRANSIENT_STATUS_CODES = {429, 503}


class GeminiEmbeddingService(IEmbeddingService):
    """
    Calls models/{model}:embedContent and returns embedding.values.

    Classifies failures so the retry wrapper can tell them apart:
    - 429 / 503 / quota messages / network errors -> ProviderTransient
    - any other non-2xx (bad input, auth) or malformed body -> EmbeddingFailure
    """

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = "text-embedding-004",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        client: Optional[httpx.AsyncClient] = None,
        request_timeout: float = 30.0,
    ):
        if not api_key:
            raise InvalidConfiguration(
                "GEMINI_API_KEY environment variable is required for Gemini embeddings"
            )
        self._api_key = api_key
        self.model_name = model_name
        self.base_url = base_url.rstrip("/")
        self._client = client
        self._request_timeout = request_timeout

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model_name}:embedContent"

    def _payload(self, text: str) -> dict:
        return {
            "model": f"models/{self.model_name}",
            "content": {"parts": [{"text": text}]},
        }

    async def _post(self, client: httpx.AsyncClient, text: str) -> httpx.Response:
        return await client.post(
            self.endpoint,
            headers={
                "x-goog-api-key": self._api_key,
                "Content-Type": "application/json",
            },
            json=self._payload(text),
            timeout=self._request_timeout,
        )

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.is_success:
            return

        body = response.text
        if response.status_code in TRANSIENT_STATUS_CODES or "quota" in body.lower():
            raise ProviderTransient(
                f"Gemini returned {response.status_code}: {body[:200]}"
            )
        raise EmbeddingFailure(f"Gemini returned {response.status_code}: {body[:200]}")

    async def embed(self, text: str) -> List[float]:
        try:
            if self._client is not None:
                response = await self._post(self._client, text)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._post(client, text)
        except httpx.TransportError as e:
            raise ProviderTransient(f"Network error calling Gemini: {e}") from e

        self._raise_for_status(response)

        try:
            values = response.json()["embedding"]["values"]
        except (ValueError, KeyError, TypeError) as e:
            raise EmbeddingFailure("Failed to generate embedding: malformed Gemini response") from e

        if not values:
            raise EmbeddingFailure("Failed to generate embedding: empty vector")
        return [float(v) for v in values]

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
