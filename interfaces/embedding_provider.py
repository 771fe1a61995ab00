"""EmbeddingProvider protocol for RagIndex - abstract interface for embedding implementations."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Capability interface for embedding backends.

    Implementations (Ollama, OpenAI, OpenAI-compatible servers, test fakes)
    are interchangeable and chosen at construction time; nothing in the
    indexing pipeline depends on which one it was handed.

    Failure modes are reported with the exceptions from core.exceptions:
    EmbeddingUnavailableError when the service is down,
    EmbeddingRateLimitError when it asks callers to back off, and
    EmbeddingResponseError when a response is malformed for the given input.
    """

    @property
    def name(self) -> str:
        """Provider name (e.g., 'ollama', 'openai')."""
        ...

    @property
    def model(self) -> str:
        """Model name (e.g., 'mxbai-embed-large')."""
        ...

    @property
    def batch_size(self) -> int:
        """Maximum number of texts per embed() call."""
        ...

    # Core Embedding Operations
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for a list of texts.

        Args:
            texts: List of text strings to embed

        Returns:
            List of embedding vectors (one per input text, same order)

        Raises:
            EmbeddingError: If embedding generation fails
        """
        ...

    async def embed_single(self, text: str) -> list[float]:
        """Generate embedding for a single text.

        Raises:
            EmbeddingError: If embedding generation fails
        """
        ...

    # Liveness
    async def is_available(self) -> bool:
        """Cheap probe: can the service be reached at all."""
        ...

    async def is_model_available(self) -> bool:
        """Whether the configured model is served."""
        ...

    async def shutdown(self) -> None:
        """Release network resources."""
        ...

    def get_model_info(self) -> dict[str, Any]:
        """Get information about the embedding model."""
        ...
