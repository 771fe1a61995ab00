"""
Embedding configuration for RagIndex.

This module provides a type-safe, validated configuration model for the
embedding providers, loadable from environment variables, config files
and CLI arguments with the same behavior everywhere.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingConfig(BaseSettings):
    """
    Configuration for embedding providers.

    Configuration Sources (in order of precedence):
    1. Runtime parameters (highest priority)
    2. Environment variables (RAGINDEX_EMBEDDING_*)
    3. Default values (lowest priority)

    Environment Variable Examples:
        RAGINDEX_EMBEDDING_PROVIDER=ollama
        RAGINDEX_EMBEDDING_MODEL=mxbai-embed-large
        RAGINDEX_EMBEDDING_BASE_URL=http://localhost:11434
        RAGINDEX_EMBEDDING_API_KEY=sk-...
        RAGINDEX_EMBEDDING_BATCH_SIZE=16
    """

    model_config = SettingsConfigDict(
        env_prefix='RAGINDEX_EMBEDDING_',
        env_nested_delimiter='__',
        case_sensitive=False,
        validate_default=True,
        extra='ignore',
    )

    # Provider Selection
    provider: Literal['ollama', 'openai', 'openai-compatible'] = Field(
        default='ollama',
        description="Embedding provider to use"
    )

    # Common Configuration
    model: Optional[str] = Field(
        default=None,
        description="Embedding model name (uses provider default if not specified)"
    )

    api_key: Optional[SecretStr] = Field(
        default=None,
        description="API key for authentication (openai and some compatible servers)"
    )

    base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the embedding API"
    )

    # Performance Configuration
    batch_size: int = Field(
        default=16,
        ge=1,
        le=2048,
        description="Texts per embedding request"
    )

    timeout: int = Field(
        default=60,
        ge=1,
        le=600,
        description="Request timeout in seconds"
    )

    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries per request for transient failures"
    )

    retry_delay: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Base backoff in seconds; retry n waits n * retry_delay"
    )

    max_concurrent_batches: int = Field(
        default=3,
        ge=1,
        le=32,
        description="Maximum embedding batches in flight across an indexing run"
    )

    max_text_length: Optional[int] = Field(
        default=None,
        ge=1,
        description="Truncate texts to this many characters before embedding"
    )

    @field_validator('base_url')
    def validate_base_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate and normalize base URL."""
        if v is None:
            return v

        v = v.rstrip('/')
        if not (v.startswith('http://') or v.startswith('https://')):
            raise ValueError('base_url must start with http:// or https://')
        return v

    def get_default_model(self) -> str:
        """
        Get the model for the selected provider.

        Returns:
            Configured model, or the provider's default
        """
        defaults = {
            'ollama': 'mxbai-embed-large',
            'openai': 'text-embedding-3-small',
            'openai-compatible': 'text-embedding-ada-002',
        }
        return self.model or defaults[self.provider]

    def get_base_url(self) -> Optional[str]:
        """Configured base URL, or the provider's well-known default."""
        if self.base_url:
            return self.base_url
        if self.provider == 'ollama':
            return 'http://localhost:11434'
        return None

    def is_provider_configured(self) -> bool:
        """
        Check if the provider is properly configured.

        Returns:
            True if the provider has all required configuration
        """
        if self.provider == 'openai':
            return self.api_key is not None
        if self.provider == 'openai-compatible':
            return self.base_url is not None
        # Ollama runs locally with a known default address
        return True

    def get_missing_config(self) -> list[str]:
        """
        Get list of missing required configuration parameters.

        Returns:
            List of missing configuration parameter names
        """
        missing = []
        if self.provider == 'openai' and not self.api_key:
            missing.append('api_key (RAGINDEX_EMBEDDING_API_KEY)')
        elif self.provider == 'openai-compatible' and not self.base_url:
            missing.append('base_url (RAGINDEX_EMBEDDING_BASE_URL)')
        return missing

    def get_provider_config(self) -> Dict[str, Any]:
        """
        Get provider-specific configuration dictionary.

        Returns:
            Dictionary of constructor arguments for the selected provider
        """
        config: Dict[str, Any] = {
            'model': self.get_default_model(),
            'batch_size': self.batch_size,
            'timeout': self.timeout,
            'max_text_length': self.max_text_length,
        }
        base_url = self.get_base_url()
        if base_url:
            config['base_url'] = base_url
        if self.api_key and self.provider != 'ollama':
            config['api_key'] = self.api_key.get_secret_value()
        return config

    def __repr__(self) -> str:
        """String representation hiding sensitive information."""
        api_key_display = "***" if self.api_key else None
        return (
            f"EmbeddingConfig("
            f"provider={self.provider}, "
            f"model={self.get_default_model()}, "
            f"api_key={api_key_display}, "
            f"base_url={self.get_base_url()}, "
            f"batch_size={self.batch_size})"
        )
