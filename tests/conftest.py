"""Shared fixtures and fake embedding providers for the test suite."""

import asyncio
import hashlib
import tempfile
from pathlib import Path

import pytest

from core.exceptions import EmbeddingResponseError, EmbeddingUnavailableError


def vector_for(text: str, dims: int = 8) -> list[float]:
    """Deterministic non-zero vector derived from the text's sha256."""
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return [(digest[i] - 127.5) / 127.5 for i in range(dims)]


class FakeEmbeddingProvider:
    """In-process provider with hash-derived vectors and scriptable failures."""

    def __init__(
        self,
        dims: int = 8,
        batch_size: int = 16,
        model: str = "fake-embed",
        available: bool = True,
        model_available: bool = True,
        fail_on: str | None = None,
        overrides: dict[str, list[float]] | None = None,
    ):
        self._dims = dims
        self._batch_size = batch_size
        self._model = model
        self.available = available
        self.model_available = model_available
        self.fail_on = fail_on
        self.overrides = dict(overrides or {})
        self.calls: list[list[str]] = []
        self.gate: asyncio.Event | None = None

    @property
    def name(self) -> str:
        return "fake"

    @property
    def model(self) -> str:
        return self._model

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def embedded_texts(self) -> list[str]:
        return [text for batch in self.calls for text in batch]

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        if self.gate is not None:
            await self.gate.wait()
        if not self.available:
            raise EmbeddingUnavailableError(self.name, self._model, "embed", "service down")
        if self.fail_on is not None and any(self.fail_on in text for text in texts):
            raise EmbeddingResponseError(self.name, self._model, "embed", "rejected input")
        return [self.overrides.get(text) or vector_for(text, self._dims) for text in texts]

    async def embed_single(self, text: str) -> list[float]:
        return (await self.embed([text]))[0]

    async def is_available(self) -> bool:
        return self.available

    async def is_model_available(self) -> bool:
        return self.model_available

    def get_model_info(self) -> dict:
        return {"provider": self.name, "model": self._model, "dimensions": self._dims}

    async def shutdown(self) -> None:
        pass


@pytest.fixture
def fake_provider():
    return FakeEmbeddingProvider()


@pytest.fixture
def project_dir():
    """Temporary project root."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)
