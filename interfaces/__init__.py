"""Interfaces package for RagIndex - abstract protocols for provider implementations."""

from .embedding_provider import EmbeddingProvider
from .vector_store import VectorStore

__all__ = [
    "EmbeddingProvider",
    "VectorStore",
]
