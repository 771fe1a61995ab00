"""Embedding providers package for RagIndex - concrete embedding implementations."""

from .ollama_provider import OllamaEmbeddingProvider
from .openai_compatible_provider import OpenAICompatibleProvider
from .openai_provider import OpenAIEmbeddingProvider

__all__ = [
    "OllamaEmbeddingProvider",
    "OpenAICompatibleProvider",
    "OpenAIEmbeddingProvider",
]
