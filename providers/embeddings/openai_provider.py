"""OpenAI embedding provider implementation for RagIndex - concrete embedding provider using the OpenAI API."""

import os
from typing import Any

import openai
from loguru import logger

from core.exceptions import (
    ConfigurationError,
    EmbeddingError,
    EmbeddingRateLimitError,
    EmbeddingResponseError,
    EmbeddingUnavailableError,
)


class OpenAIEmbeddingProvider:
    """OpenAI embedding provider using text-embedding-3-small by default."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str = "text-embedding-3-small",
        batch_size: int = 100,
        timeout: int = 30,
        max_text_length: int | None = None,
    ):
        """Initialize OpenAI embedding provider.

        Args:
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)
            base_url: Base URL for OpenAI API (defaults to OPENAI_BASE_URL env var)
            model: Model name to use for embeddings
            batch_size: Maximum batch size for API requests
            timeout: Request timeout in seconds
            max_text_length: Truncate texts to this many characters before sending
        """
        self._api_key = api_key or os.getenv("OPENAI_API_KEY")
        self._base_url = base_url or os.getenv("OPENAI_BASE_URL")
        self._model = model
        self._batch_size = batch_size
        self._timeout = timeout
        self._max_text_length = max_text_length

        self._model_config = {
            "text-embedding-3-small": {"dims": 1536},
            "text-embedding-3-large": {"dims": 3072},
            "text-embedding-ada-002": {"dims": 1536},
        }

        self._usage_stats = {
            "requests_made": 0,
            "tokens_used": 0,
            "embeddings_generated": 0,
            "errors": 0,
        }

        self._client: openai.AsyncOpenAI | None = None
        self._initialize_client()

    def _initialize_client(self) -> None:
        """Initialize the OpenAI client."""
        if not self._api_key:
            raise ConfigurationError("embedding.api_key", None, "OpenAI API key is required")

        client_kwargs: dict[str, Any] = {
            "api_key": self._api_key,
            "timeout": self._timeout,
            # Retries are owned by the embedding service.
            "max_retries": 0,
        }
        if self._base_url:
            client_kwargs["base_url"] = self._base_url

        self._client = openai.AsyncOpenAI(**client_kwargs)
        logger.debug(f"OpenAI client initialized with base_url={self._base_url}, timeout={self._timeout}")

    @property
    def name(self) -> str:
        return "openai"

    @property
    def model(self) -> str:
        return self._model

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def dims(self) -> int:
        if self._model in self._model_config:
            return self._model_config[self._model]["dims"]
        return 1536

    @property
    def base_url(self) -> str:
        return self._base_url or "https://api.openai.com/v1"

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for a list of texts."""
        if not texts:
            return []

        all_embeddings: list[list[float]] = []
        for i in range(0, len(texts), self._batch_size):
            batch = texts[i:i + self._batch_size]
            if self._max_text_length:
                batch = [text[: self._max_text_length] for text in batch]
            all_embeddings.extend(await self._embed_batch_internal(batch))
        return all_embeddings

    async def _embed_batch_internal(self, texts: list[str]) -> list[list[float]]:
        """Embed one batch, translating SDK errors into embedding errors."""
        if self._client is None:
            raise EmbeddingUnavailableError(self.name, self._model, "embed", "OpenAI client not initialized")

        logger.debug(f"Generating embeddings for {len(texts)} texts")
        try:
            response = await self._client.embeddings.create(model=self._model, input=texts)
        except openai.RateLimitError as e:
            self._usage_stats["errors"] += 1
            raise EmbeddingRateLimitError(self.name, self._model, "embed", str(e), cause=e) from e
        except (openai.APITimeoutError, openai.InternalServerError) as e:
            self._usage_stats["errors"] += 1
            raise EmbeddingError(self.name, self._model, "embed", str(e), cause=e) from e
        except openai.APIConnectionError as e:
            self._usage_stats["errors"] += 1
            raise EmbeddingUnavailableError(self.name, self._model, "embed", str(e), cause=e) from e
        except (openai.AuthenticationError, openai.NotFoundError) as e:
            self._usage_stats["errors"] += 1
            raise EmbeddingUnavailableError(self.name, self._model, "embed", str(e), cause=e) from e
        except openai.APIStatusError as e:
            self._usage_stats["errors"] += 1
            raise EmbeddingResponseError(self.name, self._model, "embed", str(e), cause=e) from e

        data = sorted(response.data, key=lambda item: item.index)
        embeddings = [list(item.embedding) for item in data]
        if len(embeddings) != len(texts):
            raise EmbeddingResponseError(
                self.name, self._model, "embed",
                f"Expected {len(texts)} embeddings, got {len(embeddings)}",
            )

        self._usage_stats["requests_made"] += 1
        self._usage_stats["embeddings_generated"] += len(embeddings)
        if getattr(response, "usage", None):
            self._usage_stats["tokens_used"] += response.usage.total_tokens

        return embeddings

    async def embed_single(self, text: str) -> list[float]:
        embeddings = await self.embed([text])
        return embeddings[0]

    async def is_available(self) -> bool:
        """Check that the API answers with the configured credentials."""
        if self._client is None:
            return False
        try:
            await self._client.models.list()
            return True
        except openai.OpenAIError as e:
            logger.debug(f"OpenAI API not reachable: {e}")
            return False

    async def is_model_available(self) -> bool:
        if self._client is None:
            return False
        try:
            await self._client.models.retrieve(self._model)
            return True
        except openai.OpenAIError as e:
            logger.debug(f"OpenAI model {self._model} not available: {e}")
            return False

    async def shutdown(self) -> None:
        """Shutdown the embedding provider and cleanup resources."""
        if self._client:
            await self._client.close()
            self._client = None
        logger.info("OpenAI embedding provider shutdown")

    def get_model_info(self) -> dict[str, Any]:
        return {
            "provider": self.name,
            "model": self.model,
            "dimensions": self.dims,
            "batch_size": self.batch_size,
            "supported_models": list(self._model_config.keys()),
        }

    def get_usage_stats(self) -> dict[str, Any]:
        return self._usage_stats.copy()
