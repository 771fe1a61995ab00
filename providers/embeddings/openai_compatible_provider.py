"""Generic OpenAI-compatible embedding provider for RagIndex (TEI, vLLM, LocalAI, ...)."""

import asyncio
from typing import Any

import aiohttp
from loguru import logger

from core.exceptions import EmbeddingResponseError

from .http_utils import check_embeddings, error_for_exception, error_for_status


class OpenAICompatibleProvider:
    """Embedding provider for any server implementing the OpenAI embeddings API."""

    def __init__(
        self,
        base_url: str,
        model: str,
        api_key: str | None = None,
        batch_size: int = 100,
        provider_name: str = "openai-compatible",
        timeout: int = 60,
        max_text_length: int | None = None,
    ):
        """Initialize OpenAI-compatible embedding provider.

        Args:
            base_url: Base URL for the embedding server (e.g., 'http://localhost:8080')
            model: Model name to use for embeddings
            api_key: Optional API key for authentication
            batch_size: Maximum batch size for API requests
            provider_name: Name for this provider instance
            timeout: Request timeout in seconds
            max_text_length: Truncate texts to this many characters before sending
        """
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._api_key = api_key
        self._batch_size = batch_size
        self._provider_name = provider_name
        self._timeout = timeout
        self._max_text_length = max_text_length

        # Detected from the first response
        self._dims: int | None = None

        logger.info(
            f"OpenAI-compatible provider initialized: {self._provider_name} "
            f"(base_url: {self._base_url}, model: {self._model})"
        )

    @property
    def name(self) -> str:
        return self._provider_name

    @property
    def model(self) -> str:
        return self._model

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def dims(self) -> int | None:
        return self._dims

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings using the `/v1/embeddings` endpoint.

        Args:
            texts: List of text strings to embed

        Returns:
            List of embedding vectors, in input order
        """
        if not texts:
            return []

        logger.debug(f"Generating embeddings for {len(texts)} texts using {self.model} at {self._base_url}")

        all_embeddings: list[list[float]] = []
        for i in range(0, len(texts), self._batch_size):
            batch = texts[i:i + self._batch_size]
            if self._max_text_length:
                batch = [text[: self._max_text_length] for text in batch]
            all_embeddings.extend(await self._embed_batch(batch))
        return all_embeddings

    async def _embed_batch(self, batch: list[str]) -> list[list[float]]:
        url = f"{self._base_url}/v1/embeddings"
        payload = {"model": self._model, "input": batch, "encoding_format": "float"}

        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self._timeout)) as session:
                async with session.post(url, headers=self._headers(), json=payload) as response:
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
            raise error_for_exception(self.name, self._model, e) from e

        if not isinstance(data, dict) or "data" not in data:
            raise EmbeddingResponseError(
                self.name, self._model, "embed", "Invalid response format: missing 'data' field"
            )

        items = data["data"]
        if not isinstance(items, list):
            raise EmbeddingResponseError(self.name, self._model, "embed", "'data' is not a list")
        if all(isinstance(item, dict) and "index" in item for item in items):
            items = sorted(items, key=lambda item: item["index"])
        raw = [item.get("embedding") if isinstance(item, dict) else None for item in items]
        embeddings = check_embeddings(self.name, self._model, raw, len(batch))

        if self._dims is None and embeddings:
            self._dims = len(embeddings[0])
            logger.info(f"Auto-detected embedding dimensions: {self._dims} for model {self._model}")
        return embeddings

    async def embed_single(self, text: str) -> list[float]:
        embeddings = await self.embed([text])
        return embeddings[0]

    async def _get_models(self) -> dict[str, Any] | None:
        url = f"{self._base_url}/v1/models"
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=10)) as session:
                async with session.get(url, headers=self._headers()) as response:
                    if response.status != 200:
                        logger.debug(f"Model listing at {url} returned {response.status}")
                        return {} if response.status < 500 else None
                    data = await response.json(content_type=None)
                    return data if isinstance(data, dict) else {}
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.debug(f"Embedding server not reachable at {self._base_url}: {e}")
            return None

    async def is_available(self) -> bool:
        return await self._get_models() is not None

    async def is_model_available(self) -> bool:
        data = await self._get_models()
        if data is None:
            return False
        entries = data.get("data")
        if not isinstance(entries, list):
            # Server does not list models; assume the configured one is served.
            return True
        ids = {entry.get("id") for entry in entries if isinstance(entry, dict)}
        return self._model in ids

    async def shutdown(self) -> None:
        logger.debug(f"{self._provider_name} embedding provider shutdown")

    def get_model_info(self) -> dict[str, Any]:
        return {
            "provider": self.name,
            "model": self.model,
            "dimensions": self._dims,
            "batch_size": self.batch_size,
            "base_url": self._base_url,
        }
