"""
Unified configuration system for RagIndex.

This module provides a single, type-safe configuration model covering
embedding, chunking, indexing, retrieval and storage, with hierarchical
loading from multiple sources.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .embedding_config import EmbeddingConfig


class ChunkingConfig(BaseModel):
    """Sliding-window chunking configuration."""

    chunk_size: int = Field(
        default=100,
        ge=1,
        le=100_000,
        description="Target chunk length in characters"
    )

    chunk_overlap: int = Field(
        default=20,
        ge=0,
        description="Characters shared between consecutive chunks"
    )

    min_chunk_size: int = Field(
        default=20,
        ge=0,
        description="Trailing remainders shorter than this merge into the previous chunk"
    )

    @model_validator(mode='after')
    def validate_overlap(self) -> 'ChunkingConfig':
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError('chunk_overlap must be smaller than chunk_size')
        return self


class IndexingConfig(BaseModel):
    """Indexing configuration."""

    include_extensions: list[str] = Field(
        default_factory=lambda: [
            'kt', 'kts', 'java', 'py', 'md', 'txt', 'yml', 'yaml', 'json', 'xml', 'properties'
        ],
        description="File extensions to index (empty list indexes every extension)"
    )

    exclude_dirs: list[str] = Field(
        default_factory=lambda: [
            'build', '.gradle', '.git', '.idea', 'out', 'target', 'node_modules',
            '.kotlin', 'bin', 'generated', '__pycache__', '.venv', 'venv', '.ragindex',
        ],
        description="Directory names skipped anywhere in the tree"
    )

    exclude_patterns: list[str] = Field(
        default_factory=list,
        description="fnmatch patterns (relative to the project root) to skip"
    )

    max_file_size_bytes: int = Field(
        default=1_000_000,
        ge=1,
        description="Files larger than this are not indexed"
    )

    max_concurrent_files: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Maximum files processed concurrently"
    )

    max_failure_ratio: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Run fails when failed/attempted chunks exceeds this ratio"
    )

    @field_validator('include_extensions')
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        return [ext.lower().lstrip('.') for ext in v if ext.strip()]


class RetrievalConfig(BaseModel):
    """Retrieval configuration."""

    default_k: int = Field(
        default=5,
        ge=1,
        le=1000,
        description="Number of results returned when k is not given"
    )

    min_similarity: Optional[float] = Field(
        default=None,
        ge=-1.0,
        le=1.0,
        description="Drop results scoring below this cosine similarity (0.3 is a good start)"
    )

    rerank: bool = Field(
        default=False,
        description="Apply keyword-hybrid re-ranking to results"
    )


class DatabaseConfig(BaseModel):
    """Vector store configuration."""

    path: str = Field(
        default='.ragindex/index.duckdb',
        description="DuckDB file path, or ':memory:' for the in-memory store"
    )

    @property
    def is_memory(self) -> bool:
        return self.path == ':memory:'


class RagIndexConfig(BaseSettings):
    """
    Unified configuration for RagIndex.

    Configuration Sources (in order of precedence):
    1. Runtime parameters (highest priority)
    2. Environment variables (RAGINDEX_*)
    3. Project config file (.ragindex.json)
    4. User config file (~/.ragindex/config.json)
    5. Default values (lowest priority)

    Environment Variable Examples:
        RAGINDEX_EMBEDDING__PROVIDER=ollama
        RAGINDEX_EMBEDDING__MODEL=mxbai-embed-large
        RAGINDEX_CHUNKING__CHUNK_SIZE=400
        RAGINDEX_INDEXING__MAX_CONCURRENT_FILES=8
        RAGINDEX_DATABASE__PATH=:memory:
        RAGINDEX_DEBUG=true
    """

    model_config = SettingsConfigDict(
        env_prefix='RAGINDEX_',
        env_nested_delimiter='__',
        case_sensitive=False,
        validate_default=True,
        extra='ignore',
        env_file=None,
    )

    # Component configurations
    embedding: EmbeddingConfig = Field(
        default_factory=EmbeddingConfig,
        description="Embedding provider configuration"
    )

    chunking: ChunkingConfig = Field(
        default_factory=ChunkingConfig,
        description="Chunking configuration"
    )

    indexing: IndexingConfig = Field(
        default_factory=IndexingConfig,
        description="Indexing configuration"
    )

    retrieval: RetrievalConfig = Field(
        default_factory=RetrievalConfig,
        description="Retrieval configuration"
    )

    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig,
        description="Vector store configuration"
    )

    # Global settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    @classmethod
    def load_hierarchical(cls,
                          project_dir: Path | None = None,
                          **override_values: Any) -> 'RagIndexConfig':
        """
        Load configuration from hierarchical sources.

        Args:
            project_dir: Project directory to search for .ragindex.json
            **override_values: Runtime parameter overrides; nested sections
                given as dicts are merged into the file values

        Returns:
            Loaded and validated configuration
        """
        config_data: dict[str, Any] = {}

        # 1. User config file (~/.ragindex/config.json)
        user_config_path = Path.home() / '.ragindex' / 'config.json'
        _merge(config_data, _read_json(user_config_path))

        # 2. Project config file (.ragindex.json)
        if project_dir is None:
            project_dir = Path.cwd()
        _merge(config_data, _read_json(project_dir / '.ragindex.json'))

        # 3. Environment variables
        env_values = _explicit_values(cls())
        env_values['embedding'] = {
            **_explicit_values(EmbeddingConfig()),
            **env_values.get('embedding', {}),
        }
        _merge(config_data, env_values)

        # 4. Runtime overrides
        _merge(config_data, override_values)

        if 'embedding' in config_data and isinstance(config_data['embedding'], dict):
            config_data['embedding'] = EmbeddingConfig(**config_data['embedding'])

        return cls(**config_data)

    @field_validator('embedding')
    def validate_embedding_config(cls, v: EmbeddingConfig) -> EmbeddingConfig:
        """Fall back to the conventional OPENAI_* variables for the openai provider."""
        if v.provider == 'openai' and not v.api_key and os.getenv('OPENAI_API_KEY'):
            logger.debug("Using OPENAI_API_KEY; consider setting RAGINDEX_EMBEDDING_API_KEY")
            config_dict = v.model_dump()
            config_dict['api_key'] = os.getenv('OPENAI_API_KEY')
            v = EmbeddingConfig(**config_dict)
        return v

    def get_missing_config(self) -> list[str]:
        """
        Get list of missing required configuration parameters.

        Returns:
            List of missing configuration parameter names
        """
        return [f'embedding.{item}' for item in self.embedding.get_missing_config()]

    def is_fully_configured(self) -> bool:
        """True when the selected embedding provider has what it needs."""
        return self.embedding.is_provider_configured()

    def to_dict(self) -> dict[str, Any]:
        """
        Convert configuration to dictionary format.

        Returns:
            Configuration as dictionary
        """
        return self.model_dump(mode='json', exclude_none=True)

    def save_to_file(self, file_path: Path) -> None:
        """
        Save configuration to JSON file, without the API key.

        Args:
            file_path: Path to save configuration file
        """
        file_path.parent.mkdir(parents=True, exist_ok=True)
        config_dict = self.to_dict()
        config_dict.get('embedding', {}).pop('api_key', None)

        with open(file_path, 'w') as f:
            json.dump(config_dict, f, indent=2)

    def get_embedding_model(self) -> str:
        """Get the embedding model name with provider defaults."""
        return self.embedding.get_default_model()

    def __repr__(self) -> str:
        """String representation hiding sensitive information."""
        api_key_display = "***" if self.embedding.api_key else None
        return (
            f"RagIndexConfig("
            f"embedding.provider={self.embedding.provider}, "
            f"embedding.model={self.get_embedding_model()}, "
            f"embedding.api_key={api_key_display}, "
            f"chunking.chunk_size={self.chunking.chunk_size}, "
            f"database.path={self.database.path})"
        )


def _read_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Failed to load config file {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config file {path}: top level must be an object")
        return {}
    return data


def _explicit_values(model: BaseModel) -> dict[str, Any]:
    """Fields a settings object received from its sources rather than defaults."""
    values: dict[str, Any] = {}
    for name in model.model_fields_set:
        value = getattr(model, name)
        values[name] = _explicit_values(value) if isinstance(value, BaseModel) else value
    return values


def _merge(target: dict[str, Any], source: dict[str, Any]) -> None:
    """Merge source into target, one level deep for section dicts."""
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            target[key] = {**target[key], **value}
        else:
            target[key] = value


# Global configuration instance
_config_instance: RagIndexConfig | None = None


def get_config() -> RagIndexConfig:
    """
    Get the global configuration instance.

    Returns:
        Global RagIndexConfig instance
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = RagIndexConfig.load_hierarchical()
    return _config_instance


def set_config(config: RagIndexConfig) -> None:
    """
    Set the global configuration instance.

    Args:
        config: Configuration instance to set as global
    """
    global _config_instance
    _config_instance = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config_instance
    _config_instance = None
