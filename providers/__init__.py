"""Providers package for RagIndex - concrete implementations of abstract interfaces."""

from .database import DuckDBVectorStore, InMemoryVectorStore
from .embeddings import (
    OllamaEmbeddingProvider,
    OpenAICompatibleProvider,
    OpenAIEmbeddingProvider,
)

__all__ = [
    # Vector stores
    "DuckDBVectorStore",
    "InMemoryVectorStore",

    # Embedding providers
    "OllamaEmbeddingProvider",
    "OpenAICompatibleProvider",
    "OpenAIEmbeddingProvider",
]
