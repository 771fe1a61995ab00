"""HTTP helpers shared by the aiohttp-based embedding providers."""

import asyncio
from typing import Any

import aiohttp

from core.exceptions import (
    EmbeddingError,
    EmbeddingRateLimitError,
    EmbeddingResponseError,
    EmbeddingUnavailableError,
)


def error_for_status(
    provider: str, model: str, status: int, body: str, retry_after: str | None = None
) -> EmbeddingError:
    """Map a non-200 HTTP response to the matching embedding error."""
    reason = f"HTTP {status}: {body[:200]}"
    if status == 429:
        delay = None
        if retry_after:
            try:
                delay = float(retry_after)
            except ValueError:
                delay = None
        return EmbeddingRateLimitError(provider, model, "embed", reason, retry_after=delay)
    if status == 404:
        # Unknown model or wrong endpoint; retrying will not help.
        return EmbeddingUnavailableError(provider, model, "embed", reason)
    if status >= 500 or status == 408:
        return EmbeddingError(provider, model, "embed", reason)
    return EmbeddingResponseError(provider, model, "embed", reason)


def error_for_exception(provider: str, model: str, error: Exception) -> EmbeddingError:
    """Map a transport-level failure to the matching embedding error."""
    if isinstance(error, asyncio.TimeoutError):
        return EmbeddingError(provider, model, "embed", f"Request timed out: {error}", cause=error)
    if isinstance(error, aiohttp.ServerDisconnectedError):
        return EmbeddingError(provider, model, "embed", f"Server disconnected: {error}", cause=error)
    if isinstance(error, aiohttp.ClientConnectionError):
        return EmbeddingUnavailableError(
            provider, model, "embed", f"Cannot reach embedding service: {error}", cause=error
        )
    return EmbeddingError(provider, model, "embed", str(error), cause=error)


def check_embeddings(
    provider: str, model: str, embeddings: Any, expected: int
) -> list[list[float]]:
    """Validate the shape of a decoded embeddings payload."""
    if not isinstance(embeddings, list) or len(embeddings) != expected:
        count = len(embeddings) if isinstance(embeddings, list) else "no"
        raise EmbeddingResponseError(
            provider, model, "embed", f"Expected {expected} embeddings, got {count}"
        )

    vectors = []
    for vector in embeddings:
        if not isinstance(vector, list) or not vector:
            raise EmbeddingResponseError(provider, model, "embed", "Empty or malformed embedding vector")
        try:
            vectors.append([float(v) for v in vector])
        except (TypeError, ValueError) as e:
            raise EmbeddingResponseError(provider, model, "embed", f"Non-numeric embedding value: {e}")
    return vectors
