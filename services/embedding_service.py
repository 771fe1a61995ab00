"""Embedding service for RagIndex - batching, bounded concurrency and retry around an embedding provider."""

import asyncio
from dataclasses import dataclass, field

from loguru import logger

from core.exceptions import (
    EmbeddingRateLimitError,
    EmbeddingResponseError,
    is_transient,
)
from core.types import EmbeddingVector, ReadinessStatus
from interfaces.embedding_provider import EmbeddingProvider


@dataclass
class EmbeddingBatchResult:
    """Vectors aligned with the input texts; None marks a text that failed."""

    vectors: list[EmbeddingVector | None] = field(default_factory=list)
    failed: int = 0

    @property
    def succeeded(self) -> int:
        return len(self.vectors) - self.failed


class EmbeddingService:
    """Service that turns texts into vectors through an EmbeddingProvider.

    Texts are split into provider-sized batches. Batches run concurrently,
    bounded by a semaphore that callers may share across a whole indexing
    run. Transient failures are retried with linear backoff; a batch that
    still fails is retried one text at a time so only the offending texts
    are lost.
    """

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        embedding_batch_size: int | None = None,
        max_concurrent_batches: int = 3,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ):
        """Initialize embedding service.

        Args:
            embedding_provider: Embedding provider for vector generation
            embedding_batch_size: Number of texts per request (defaults to the provider's)
            max_concurrent_batches: Maximum number of concurrent embedding batches
            max_retries: Retries per request after the first attempt
            retry_delay: Base delay in seconds; attempt n waits n * retry_delay
        """
        self._embedding_provider = embedding_provider
        self._embedding_batch_size = embedding_batch_size or embedding_provider.batch_size
        self._max_concurrent_batches = max_concurrent_batches
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._dims: int | None = None

    @property
    def provider(self) -> EmbeddingProvider:
        return self._embedding_provider

    @property
    def max_concurrent_batches(self) -> int:
        return self._max_concurrent_batches

    def create_semaphore(self) -> asyncio.Semaphore:
        """Semaphore bounding in-flight batches; share one per indexing run."""
        return asyncio.Semaphore(self._max_concurrent_batches)

    async def check_readiness(self) -> ReadinessStatus:
        """Probe the provider: service reachable first, then the model."""
        provider = self._embedding_provider
        try:
            if not await provider.is_available():
                return ReadinessStatus.SERVICE_UNAVAILABLE
            if not await provider.is_model_available():
                return ReadinessStatus.MODEL_NOT_FOUND
        except Exception as e:
            logger.warning(f"Readiness probe for {provider.name} failed: {e}")
            return ReadinessStatus.SERVICE_UNAVAILABLE
        return ReadinessStatus.READY

    def describe_readiness(self, status: ReadinessStatus) -> str:
        """Human readable reason for a readiness status."""
        provider = self._embedding_provider
        if status is ReadinessStatus.SERVICE_UNAVAILABLE:
            return f"Embedding service '{provider.name}' is not reachable"
        if status is ReadinessStatus.MODEL_NOT_FOUND:
            return f"Model '{provider.model}' is not available on '{provider.name}'"
        return "ready"

    async def embed_query(self, text: str) -> EmbeddingVector:
        """Embed a single query text, retrying transient failures.

        Raises:
            EmbeddingError: If the text could not be embedded
        """
        vectors = await self._embed_with_retry([text])
        return vectors[0]

    async def embed_texts(
        self,
        texts: list[str],
        semaphore: asyncio.Semaphore | None = None,
    ) -> EmbeddingBatchResult:
        """Embed texts, containing failures to the texts that caused them.

        Args:
            texts: Texts to embed
            semaphore: Run-wide limit on in-flight batches; a private one is used if omitted

        Returns:
            EmbeddingBatchResult with one entry per input text
        """
        if not texts:
            return EmbeddingBatchResult()

        semaphore = semaphore or self.create_semaphore()
        size = self._embedding_batch_size
        batches = [(start, texts[start:start + size]) for start in range(0, len(texts), size)]
        logger.debug(f"Embedding {len(texts)} texts in {len(batches)} batches")

        result = EmbeddingBatchResult(vectors=[None] * len(texts))

        async def process_batch(start: int, batch: list[str]) -> None:
            async with semaphore:
                vectors = await self._embed_batch_contained(batch)
            for offset, vector in enumerate(vectors):
                result.vectors[start + offset] = vector
                if vector is None:
                    result.failed += 1

        await asyncio.gather(*(process_batch(start, batch) for start, batch in batches))
        return result

    async def _embed_batch_contained(self, batch: list[str]) -> list[EmbeddingVector | None]:
        """Embed a batch; on failure fall back to one request per text."""
        try:
            return list(await self._embed_with_retry(batch))
        except Exception as e:
            if len(batch) == 1:
                logger.warning(f"Embedding failed for 1 text: {e}")
                return [None]
            logger.warning(f"Batch of {len(batch)} texts failed ({e}); retrying individually")

        vectors: list[EmbeddingVector | None] = []
        for text in batch:
            try:
                vectors.append((await self._embed_with_retry([text]))[0])
            except Exception as e:
                logger.warning(f"Embedding failed for text of {len(text)} chars: {e}")
                vectors.append(None)
        return vectors

    async def _embed_with_retry(self, texts: list[str]) -> list[EmbeddingVector]:
        """Call the provider, retrying transient errors up to max_retries times."""
        attempt = 0
        while True:
            try:
                vectors = await self._embedding_provider.embed(texts)
                return self._check_vectors(texts, vectors)
            except Exception as e:
                if not is_transient(e) or attempt >= self._max_retries:
                    raise
                attempt += 1
                delay = self._retry_delay * attempt
                if isinstance(e, EmbeddingRateLimitError) and e.retry_after:
                    delay = max(delay, e.retry_after)
                logger.warning(
                    f"Transient embedding error, retry {attempt}/{self._max_retries} in {delay:.1f}s: {e}"
                )
                await asyncio.sleep(delay)

    def _check_vectors(self, texts: list[str], vectors: list[list[float]]) -> list[EmbeddingVector]:
        provider = self._embedding_provider
        if len(vectors) != len(texts):
            raise EmbeddingResponseError(
                provider.name, provider.model, "embed",
                f"Expected {len(texts)} embeddings, got {len(vectors)}",
            )
        for vector in vectors:
            if not vector:
                raise EmbeddingResponseError(provider.name, provider.model, "embed", "Empty embedding")
            if self._dims is None:
                self._dims = len(vector)
            elif len(vector) != self._dims:
                raise EmbeddingResponseError(
                    provider.name, provider.model, "embed",
                    f"Dimension mismatch: expected {self._dims}, got {len(vector)}",
                )
        return [list(vector) for vector in vectors]
