"""Ollama embedding provider implementation for RagIndex - local embeddings over the Ollama HTTP API."""

import asyncio
from typing import Any

import aiohttp
from loguru import logger

from core.exceptions import EmbeddingResponseError

from .http_utils import check_embeddings, error_for_exception, error_for_status


class OllamaEmbeddingProvider:
    """Embedding provider for a local Ollama server (`ollama serve`).

    Uses the batch endpoint `/api/embed` for embeddings and `/api/tags`
    for liveness and model presence checks.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "mxbai-embed-large",
        batch_size: int = 16,
        timeout: int = 60,
        max_text_length: int | None = None,
    ):
        """Initialize Ollama embedding provider.

        Args:
            base_url: Base URL of the Ollama server
            model: Embedding model served by Ollama
            batch_size: Maximum number of texts per request
            timeout: Request timeout in seconds
            max_text_length: Truncate texts to this many characters before sending
        """
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._batch_size = batch_size
        self._timeout = timeout
        self._max_text_length = max_text_length

        self._model_config = {
            "mxbai-embed-large": {"dims": 1024},
            "nomic-embed-text": {"dims": 768},
            "all-minilm": {"dims": 384},
        }

        self._usage_stats = {
            "requests_made": 0,
            "embeddings_generated": 0,
            "errors": 0,
        }

        logger.debug(f"Ollama provider initialized (base_url: {self._base_url}, model: {self._model})")

    @property
    def name(self) -> str:
        return "ollama"

    @property
    def model(self) -> str:
        return self._model

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def dims(self) -> int | None:
        base_name = self._model.split(":")[0]
        config = self._model_config.get(base_name)
        return config["dims"] if config else None

    @property
    def base_url(self) -> str:
        return self._base_url

    def _prepare(self, text: str) -> str:
        if self._max_text_length and len(text) > self._max_text_length:
            return text[: self._max_text_length]
        return text

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for texts, one `/api/embed` request per batch."""
        if not texts:
            return []

        all_embeddings: list[list[float]] = []
        for i in range(0, len(texts), self._batch_size):
            batch = [self._prepare(text) for text in texts[i:i + self._batch_size]]
            all_embeddings.extend(await self._embed_batch(batch))
        return all_embeddings

    async def _embed_batch(self, batch: list[str]) -> list[list[float]]:
        url = f"{self._base_url}/api/embed"
        payload = {"model": self._model, "input": batch}
        logger.debug(f"Requesting {len(batch)} embeddings from {url}")

        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self._timeout)) as session:
                async with session.post(url, json=payload) as response:
                    if response.status != 200:
                        body = await response.text()
                        raise error_for_status(
                            self.name, self._model, response.status, body,
                            response.headers.get("Retry-After"),
                        )
                    try:
                        data = await response.json(content_type=None)
                    except (aiohttp.ContentTypeError, ValueError) as e:
                        raise EmbeddingResponseError(
                            self.name, self._model, "embed", f"Response is not JSON: {e}"
                        )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._usage_stats["errors"] += 1
            raise error_for_exception(self.name, self._model, e) from e

        if not isinstance(data, dict):
            raise EmbeddingResponseError(self.name, self._model, "embed", "Unexpected response body")
        if "error" in data:
            raise EmbeddingResponseError(self.name, self._model, "embed", f"Ollama error: {data['error']}")

        embeddings = check_embeddings(self.name, self._model, data.get("embeddings"), len(batch))
        self._usage_stats["requests_made"] += 1
        self._usage_stats["embeddings_generated"] += len(embeddings)
        return embeddings

    async def embed_single(self, text: str) -> list[float]:
        embeddings = await self.embed([text])
        return embeddings[0]

    async def _list_models(self) -> list[str] | None:
        """Names reported by `/api/tags`, or None when the server is unreachable."""
        url = f"{self._base_url}/api/tags"
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=10)) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        logger.debug(f"Ollama tags endpoint returned {response.status}")
                        return None
                    data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.debug(f"Ollama not reachable at {self._base_url}: {e}")
            return None

        models = data.get("models", []) if isinstance(data, dict) else []
        names = []
        for entry in models:
            if isinstance(entry, dict):
                names.extend(str(entry[k]) for k in ("name", "model") if entry.get(k))
        return names

    async def is_available(self) -> bool:
        return await self._list_models() is not None

    async def is_model_available(self) -> bool:
        names = await self._list_models()
        if not names:
            return False
        return any(name == self._model or name.split(":")[0] == self._model for name in names)

    async def shutdown(self) -> None:
        """Sessions are per request; nothing to close."""
        logger.debug("Ollama embedding provider shutdown")

    def get_model_info(self) -> dict[str, Any]:
        return {
            "provider": self.name,
            "model": self.model,
            "dimensions": self.dims,
            "batch_size": self.batch_size,
            "base_url": self._base_url,
            "max_text_length": self._max_text_length,
        }

    def get_usage_stats(self) -> dict[str, Any]:
        return self._usage_stats.copy()
