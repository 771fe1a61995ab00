"""Tests for batching, retry and failure containment in EmbeddingService."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.exceptions import (
    EmbeddingError,
    EmbeddingRateLimitError,
    EmbeddingResponseError,
    EmbeddingUnavailableError,
)
from core.types import ReadinessStatus
from services import EmbeddingService

from .conftest import FakeEmbeddingProvider


def mock_provider(embed_side_effect=None, batch_size: int = 4) -> MagicMock:
    provider = MagicMock()
    provider.name = "mock"
    provider.model = "mock-model"
    provider.batch_size = batch_size
    provider.embed = AsyncMock(side_effect=embed_side_effect)
    provider.is_available = AsyncMock(return_value=True)
    provider.is_model_available = AsyncMock(return_value=True)
    return provider


class TestEmbeddingRetry:
    """Retry classification through the provider boundary."""

    @pytest.mark.asyncio
    async def test_transient_error_is_retried(self):
        provider = mock_provider([
            EmbeddingError("mock", "mock-model", "embed", "timeout"),
            [[1.0, 2.0]],
        ])
        service = EmbeddingService(provider, max_retries=3, retry_delay=0.0)

        vector = await service.embed_query("hello")

        assert vector == [1.0, 2.0]
        assert provider.embed.await_count == 2

    @pytest.mark.asyncio
    async def test_retries_are_bounded(self):
        provider = mock_provider(EmbeddingError("mock", "mock-model", "embed", "timeout"))
        service = EmbeddingService(provider, max_retries=2, retry_delay=0.0)

        with pytest.raises(EmbeddingError):
            await service.embed_query("hello")
        assert provider.embed.await_count == 3

    @pytest.mark.asyncio
    async def test_permanent_error_is_not_retried(self):
        provider = mock_provider(EmbeddingUnavailableError("mock", "mock-model", "embed", "down"))
        service = EmbeddingService(provider, max_retries=3, retry_delay=0.0)

        with pytest.raises(EmbeddingUnavailableError):
            await service.embed_query("hello")
        assert provider.embed.await_count == 1

    @pytest.mark.asyncio
    async def test_rate_limit_waits_for_retry_after(self, monkeypatch):
        delays: list[float] = []
        real_sleep = asyncio.sleep

        async def record_sleep(delay, *args, **kwargs):
            delays.append(delay)
            await real_sleep(0)

        monkeypatch.setattr("services.embedding_service.asyncio.sleep", record_sleep)
        provider = mock_provider([
            EmbeddingRateLimitError("mock", "mock-model", "embed", "slow down", retry_after=2.5),
            [[1.0]],
        ])
        service = EmbeddingService(provider, retry_delay=0.1)

        await service.embed_query("hello")

        assert delays == [2.5]

    @pytest.mark.asyncio
    async def test_malformed_response_is_rejected(self):
        provider = mock_provider([[[1.0], [2.0]]])
        service = EmbeddingService(provider, max_retries=0)

        with pytest.raises(EmbeddingResponseError):
            await service.embed_query("hello")


class TestEmbedTexts:
    """Batch splitting, containment and bounded concurrency."""

    @pytest.mark.asyncio
    async def test_texts_are_split_into_batches(self):
        provider = FakeEmbeddingProvider(batch_size=3)
        service = EmbeddingService(provider)

        result = await service.embed_texts([f"text {i}" for i in range(7)])

        assert [len(batch) for batch in provider.calls] == [3, 3, 1]
        assert result.failed == 0
        assert result.succeeded == 7
        assert all(vector is not None for vector in result.vectors)

    @pytest.mark.asyncio
    async def test_failed_batch_falls_back_to_single_texts(self):
        provider = FakeEmbeddingProvider(batch_size=4, fail_on="bad")
        service = EmbeddingService(provider, retry_delay=0.0)

        result = await service.embed_texts(["one", "two bad", "three", "four"])

        assert result.failed == 1
        assert result.vectors[1] is None
        assert result.vectors[0] is not None and result.vectors[3] is not None
        # One batch attempt, then one request per text
        assert [len(batch) for batch in provider.calls] == [4, 1, 1, 1, 1]

    @pytest.mark.asyncio
    async def test_empty_input_makes_no_calls(self):
        provider = FakeEmbeddingProvider()
        result = await EmbeddingService(provider).embed_texts([])

        assert result.vectors == []
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_in_flight_batches_are_bounded(self):
        in_flight = 0
        peak = 0

        async def slow_embed(texts):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return [[1.0, 0.0] for _ in texts]

        provider = mock_provider(slow_embed, batch_size=1)
        service = EmbeddingService(provider, max_concurrent_batches=2)

        result = await service.embed_texts([f"t{i}" for i in range(6)])

        assert result.succeeded == 6
        assert peak == 2

    @pytest.mark.asyncio
    async def test_dimension_change_is_rejected(self):
        provider = mock_provider([[[1.0, 0.0]], [[1.0, 0.0, 0.0]]])
        service = EmbeddingService(provider, max_retries=0)

        await service.embed_query("first")
        with pytest.raises(EmbeddingResponseError):
            await service.embed_query("second")


class TestReadiness:
    @pytest.mark.asyncio
    async def test_readiness_states(self):
        provider = FakeEmbeddingProvider()
        service = EmbeddingService(provider)
        assert await service.check_readiness() is ReadinessStatus.READY

        provider.model_available = False
        assert await service.check_readiness() is ReadinessStatus.MODEL_NOT_FOUND

        provider.available = False
        assert await service.check_readiness() is ReadinessStatus.SERVICE_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_probe_exception_means_unavailable(self):
        provider = mock_provider()
        provider.is_available = AsyncMock(side_effect=OSError("connection refused"))

        status = await EmbeddingService(provider).check_readiness()

        assert status is ReadinessStatus.SERVICE_UNAVAILABLE
