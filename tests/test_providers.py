"""Tests for the aiohttp-based embedding providers against a fake HTTP session."""

import asyncio
import json

import aiohttp
import pytest

from core.exceptions import (
    EmbeddingError,
    EmbeddingRateLimitError,
    EmbeddingResponseError,
    EmbeddingUnavailableError,
)
from providers.embeddings import OllamaEmbeddingProvider, OpenAICompatibleProvider


class FakeResponse:
    def __init__(self, status: int = 200, payload=None, body: str | None = None, headers=None):
        self.status = status
        self._payload = payload
        self._body = body if body is not None else json.dumps(payload)
        self.headers = headers or {}

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def text(self) -> str:
        return self._body

    async def json(self, content_type=None):
        if self._payload is None:
            raise ValueError("not json")
        return self._payload


class FakeSession:
    """Replays queued responses and records every request."""

    def __init__(self, responses: list, requests: list):
        self._responses = responses
        self._requests = requests

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    def _next(self, method: str, url: str, **kwargs):
        self._requests.append((method, url, kwargs))
        response = self._responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)


@pytest.fixture
def http(monkeypatch):
    """Queue of responses served to every aiohttp.ClientSession created."""

    class Recorder:
        def __init__(self):
            self.responses: list = []
            self.requests: list = []

    recorder = Recorder()
    monkeypatch.setattr(
        aiohttp, "ClientSession", lambda *args, **kwargs: FakeSession(recorder.responses, recorder.requests)
    )
    return recorder


class TestOllamaProvider:
    def setup_method(self):
        self.provider = OllamaEmbeddingProvider(base_url="http://ollama:11434/", batch_size=2)

    @pytest.mark.asyncio
    async def test_embed_batches_requests(self, http):
        http.responses = [
            FakeResponse(payload={"embeddings": [[1, 0], [0, 1]]}),
            FakeResponse(payload={"embeddings": [[0.5, 0.5]]}),
        ]

        vectors = await self.provider.embed(["a", "b", "c"])

        assert vectors == [[1.0, 0.0], [0.0, 1.0], [0.5, 0.5]]
        assert [r[1] for r in http.requests] == ["http://ollama:11434/api/embed"] * 2
        assert http.requests[0][2]["json"] == {"model": "mxbai-embed-large", "input": ["a", "b"]}
        assert self.provider.get_usage_stats()["embeddings_generated"] == 3

    @pytest.mark.asyncio
    async def test_rate_limit_carries_retry_after(self, http):
        http.responses = [FakeResponse(status=429, body="busy", headers={"Retry-After": "3"})]

        with pytest.raises(EmbeddingRateLimitError) as exc_info:
            await self.provider.embed(["a"])

        assert exc_info.value.retry_after == 3.0
        assert exc_info.value.transient

    @pytest.mark.asyncio
    async def test_unknown_model_is_unavailable(self, http):
        http.responses = [FakeResponse(status=404, body='{"error": "model not found"}')]

        with pytest.raises(EmbeddingUnavailableError):
            await self.provider.embed(["a"])

    @pytest.mark.asyncio
    async def test_server_error_is_transient(self, http):
        http.responses = [FakeResponse(status=503, body="overloaded")]

        with pytest.raises(EmbeddingError) as exc_info:
            await self.provider.embed(["a"])

        assert type(exc_info.value) is EmbeddingError
        assert exc_info.value.transient

    @pytest.mark.asyncio
    async def test_error_field_is_a_response_error(self, http):
        http.responses = [FakeResponse(payload={"error": "input too long"})]

        with pytest.raises(EmbeddingResponseError):
            await self.provider.embed(["a"])

    @pytest.mark.asyncio
    async def test_wrong_vector_count_is_a_response_error(self, http):
        http.responses = [FakeResponse(payload={"embeddings": [[1.0]]})]

        with pytest.raises(EmbeddingResponseError):
            await self.provider.embed(["a", "b"])

    @pytest.mark.asyncio
    async def test_connection_failures_are_classified(self, http):
        http.responses = [
            aiohttp.ClientConnectionError("connection refused"),
            asyncio.TimeoutError(),
        ]

        with pytest.raises(EmbeddingUnavailableError):
            await self.provider.embed(["a"])
        with pytest.raises(EmbeddingError) as exc_info:
            await self.provider.embed(["a"])
        assert exc_info.value.transient

    @pytest.mark.asyncio
    async def test_model_presence_matches_tags(self, http):
        tags = {"models": [{"name": "mxbai-embed-large:latest"}, {"name": "llama3:8b"}]}
        http.responses = [FakeResponse(payload=tags), FakeResponse(payload=tags)]

        assert await self.provider.is_available()
        assert await self.provider.is_model_available()

        other = OllamaEmbeddingProvider(model="nomic-embed-text")
        http.responses = [FakeResponse(payload=tags)]
        assert not await other.is_model_available()

    @pytest.mark.asyncio
    async def test_unreachable_server_is_not_available(self, http):
        http.responses = [aiohttp.ClientConnectionError("refused")]

        assert not await self.provider.is_available()

    def test_known_model_dimensions(self):
        assert self.provider.dims == 1024
        assert OllamaEmbeddingProvider(model="custom").dims is None


class TestOpenAICompatibleProvider:
    def setup_method(self):
        self.provider = OpenAICompatibleProvider(
            base_url="http://embed:8080", model="bge-small", api_key="token", batch_size=10
        )

    @pytest.mark.asyncio
    async def test_embed_orders_by_index(self, http):
        http.responses = [FakeResponse(payload={"data": [
            {"index": 1, "embedding": [0.0, 1.0]},
            {"index": 0, "embedding": [1.0, 0.0]},
        ]})]

        vectors = await self.provider.embed(["first", "second"])

        assert vectors == [[1.0, 0.0], [0.0, 1.0]]
        method, url, kwargs = http.requests[0]
        assert (method, url) == ("POST", "http://embed:8080/v1/embeddings")
        assert kwargs["headers"]["Authorization"] == "Bearer token"
        assert self.provider.dims == 2

    @pytest.mark.asyncio
    async def test_missing_data_field_is_a_response_error(self, http):
        http.responses = [FakeResponse(payload={"object": "list"})]

        with pytest.raises(EmbeddingResponseError):
            await self.provider.embed(["a"])

    @pytest.mark.asyncio
    async def test_client_error_status_is_a_response_error(self, http):
        http.responses = [FakeResponse(status=400, body="bad input")]

        with pytest.raises(EmbeddingResponseError):
            await self.provider.embed(["a"])

    @pytest.mark.asyncio
    async def test_model_listing(self, http):
        http.responses = [FakeResponse(payload={"data": [{"id": "bge-small"}]})]
        assert await self.provider.is_model_available()

        http.responses = [FakeResponse(payload={"data": [{"id": "other"}]})]
        assert not await self.provider.is_model_available()

        # Servers without a model listing are assumed to serve the configured model
        http.responses = [FakeResponse(status=404, body="not found")]
        assert await self.provider.is_model_available()
