"""Provider registry and dependency injection container for RagIndex."""

from pathlib import Path
from typing import Any, Callable, Dict, Optional

from loguru import logger

from interfaces.embedding_provider import EmbeddingProvider
from interfaces.vector_store import VectorStore
from providers.database import DuckDBVectorStore, InMemoryVectorStore
from ragindex.chunker import TextChunker
from ragindex.core.config import EmbeddingProviderFactory, RagIndexConfig
from ragindex.file_discovery import IgnorePredicate, IgnoreRules
from services.embedding_service import EmbeddingService
from services.indexing_coordinator import IndexingCoordinator
from services.search_service import SearchService


class ProviderRegistry:
    """Registry for managing provider implementations and dependency injection.

    The vector store and the embedding provider are singletons, so the
    indexing coordinator and the search service built from one registry
    share the same store and the same embedding model.
    """

    def __init__(self, config: Optional[RagIndexConfig] = None):
        """Initialize the provider registry.

        Args:
            config: Application configuration (defaults to RagIndexConfig())
        """
        self._providers: Dict[str, tuple[Callable[[], Any], bool]] = {}
        self._singletons: Dict[str, Any] = {}
        self._config = config or RagIndexConfig()
        self._register_default_providers()

    @property
    def config(self) -> RagIndexConfig:
        return self._config

    def configure(self, config: RagIndexConfig) -> None:
        """Replace the configuration and drop instances built from the old one.

        Args:
            config: New application configuration
        """
        self.close()
        self._config = config
        self._register_default_providers()
        logger.info("Provider registry configured")

    def register_provider(self, name: str, factory: Callable[[], Any], singleton: bool = True) -> None:
        """Register a provider factory.

        Args:
            name: Provider name/identifier
            factory: Zero-argument callable building the provider
            singleton: Whether to reuse a single instance
        """
        self._providers[name] = (factory, singleton)

        # Clear existing singleton if registered
        if singleton and name in self._singletons:
            del self._singletons[name]

        logger.debug(f"Registered provider factory for {name}")

    def get_provider(self, name: str) -> Any:
        """Get a provider instance for the specified name.

        Args:
            name: Provider name to get

        Returns:
            Provider instance

        Raises:
            ValueError: If no provider is registered for the name
        """
        if name not in self._providers:
            raise ValueError(f"No provider registered for {name}")

        factory, is_singleton = self._providers[name]
        if not is_singleton:
            return factory()
        if name not in self._singletons:
            self._singletons[name] = factory()
        return self._singletons[name]

    def get_vector_store(self) -> VectorStore:
        return self.get_provider("vector_store")

    def get_embedding_provider(self) -> EmbeddingProvider:
        return self.get_provider("embedding")

    def create_embedding_service(self) -> EmbeddingService:
        """Create an EmbeddingService from the embedding configuration.

        Returns:
            Configured EmbeddingService instance
        """
        embedding_config = self._config.embedding
        return EmbeddingService(
            embedding_provider=self.get_embedding_provider(),
            embedding_batch_size=embedding_config.batch_size,
            max_concurrent_batches=embedding_config.max_concurrent_batches,
            max_retries=embedding_config.max_retries,
            retry_delay=embedding_config.retry_delay,
        )

    def create_chunker(self) -> TextChunker:
        chunking = self._config.chunking
        return TextChunker(
            chunk_size=chunking.chunk_size,
            chunk_overlap=chunking.chunk_overlap,
            min_chunk_size=chunking.min_chunk_size,
        )

    def create_indexing_coordinator(
        self, root: Path, ignore: Optional[IgnorePredicate] = None
    ) -> IndexingCoordinator:
        """Create an IndexingCoordinator with all dependencies.

        Args:
            root: Project root to index
            ignore: Ignore predicate (defaults to rules from the indexing config)

        Returns:
            Configured IndexingCoordinator instance
        """
        indexing = self._config.indexing
        root = Path(root)
        return IndexingCoordinator(
            vector_store=self.get_vector_store(),
            embedding_service=self.create_embedding_service(),
            root=root,
            chunker=self.create_chunker(),
            ignore=ignore or IgnoreRules.from_config(indexing, root),
            max_concurrent_files=indexing.max_concurrent_files,
            max_failure_ratio=indexing.max_failure_ratio,
        )

    def create_search_service(self) -> SearchService:
        """Create a SearchService with all dependencies.

        Returns:
            Configured SearchService instance
        """
        return SearchService(
            vector_store=self.get_vector_store(),
            embedding_service=self.create_embedding_service(),
        )

    def close(self) -> None:
        """Close the vector store if one was created."""
        store = self._singletons.pop("vector_store", None)
        if store is not None:
            store.close()
        self._singletons.clear()

    def _register_default_providers(self) -> None:
        """Register default provider implementations."""
        self.register_provider("vector_store", self._create_vector_store, singleton=True)
        self.register_provider("embedding", self._create_embedding_provider, singleton=True)

    def _create_vector_store(self) -> VectorStore:
        database = self._config.database
        if database.is_memory:
            logger.debug("Using in-memory vector store")
            return InMemoryVectorStore()

        store = DuckDBVectorStore(Path(database.path))
        store.connect()
        return store

    def _create_embedding_provider(self) -> EmbeddingProvider:
        return EmbeddingProviderFactory.create_provider(self._config.embedding)


# Global registry instance
_registry: Optional[ProviderRegistry] = None


def get_registry() -> ProviderRegistry:
    """Get the global provider registry instance.

    Returns:
        Global ProviderRegistry instance
    """
    global _registry
    if _registry is None:
        _registry = ProviderRegistry()
    return _registry


def configure_registry(config: RagIndexConfig) -> ProviderRegistry:
    """Configure the global provider registry.

    Args:
        config: Application configuration
    """
    global _registry
    if _registry is None:
        _registry = ProviderRegistry(config)
    else:
        _registry.configure(config)
    return _registry


def reset_registry() -> None:
    """Close and discard the global registry."""
    global _registry
    if _registry is not None:
        _registry.close()
    _registry = None


__all__ = [
    'ProviderRegistry',
    'get_registry',
    'configure_registry',
    'reset_registry',
]
