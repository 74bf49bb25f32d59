"""Tests for the Gemini embedding adapter against a mocked HTTP transport."""

import json

import httpx
import pytest

from core.exceptions import EmbeddingFailure, InvalidConfiguration, ProviderTransient
from infrastructure.gemini_embeddings import GeminiEmbeddingService


def _service(handler) -> GeminiEmbeddingService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeminiEmbeddingService(
        api_key="test-key",
        model_name="text-embedding-004",
        base_url="https://gemini.test/v1beta",
        client=client,
    )


class TestGeminiEmbeddingService:

    @pytest.mark.asyncio
    async def test_returns_embedding_values(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["key"] = request.headers.get("x-goog-api-key")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"embedding": {"values": [0.25, -0.5, 1]}})

        service = _service(handler)
        vector = await service.embed("A tenant may terminate the lease.")
        await service.aclose()

        assert vector == [0.25, -0.5, 1.0]
        assert seen["url"] == "https://gemini.test/v1beta/models/text-embedding-004:embedContent"
        assert seen["key"] == "test-key"
        assert seen["body"] == {
            "model": "models/text-embedding-004",
            "content": {"parts": [{"text": "A tenant may terminate the lease."}]},
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [429, 503])
    async def test_rate_limit_and_unavailable_are_transient(self, status):
        service = _service(lambda request: httpx.Response(status, text="slow down"))

        with pytest.raises(ProviderTransient):
            await service.embed("text")

    @pytest.mark.asyncio
    async def test_quota_message_is_transient(self):
        service = _service(
            lambda request: httpx.Response(400, text="Quota exceeded for embed requests")
        )

        with pytest.raises(ProviderTransient):
            await service.embed("text")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 403, 404, 500])
    async def test_other_errors_are_not_transient(self, status):
        service = _service(lambda request: httpx.Response(status, text="bad request"))

        with pytest.raises(EmbeddingFailure):
            await service.embed("text")

    @pytest.mark.asyncio
    async def test_network_errors_are_transient(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        service = _service(handler)

        with pytest.raises(ProviderTransient):
            await service.embed("text")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [{}, {"embedding": {}}, {"embedding": {"values": []}}, {"embedding": None}],
    )
    async def test_malformed_response_fails(self, payload):
        service = _service(lambda request: httpx.Response(200, json=payload))

        with pytest.raises(EmbeddingFailure):
            await service.embed("text")

    def test_missing_api_key_is_configuration_error(self):
        with pytest.raises(InvalidConfiguration):
            GeminiEmbeddingService(api_key=None)
