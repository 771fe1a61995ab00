"""
Configuration management package for RagIndex.

This package provides a unified configuration system that supports:
- Multiple configuration sources (environment variables, config files, CLI args)
- Type-safe configuration validation using Pydantic
- One embedding provider configuration shared by indexing and retrieval
- Secure handling of sensitive configuration data
"""

from .embedding_config import EmbeddingConfig
from .embedding_factory import EmbeddingProviderFactory
from .unified_config import (
    ChunkingConfig,
    DatabaseConfig,
    IndexingConfig,
    RagIndexConfig,
    RetrievalConfig,
    get_config,
    reset_config,
    set_config,
)

__all__ = [
    "EmbeddingConfig",
    "EmbeddingProviderFactory",
    "ChunkingConfig",
    "DatabaseConfig",
    "IndexingConfig",
    "RagIndexConfig",
    "RetrievalConfig",
    "get_config",
    "reset_config",
    "set_config",
]
