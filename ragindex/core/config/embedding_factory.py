"""
Embedding provider factory for RagIndex.

This module creates embedding providers from EmbeddingConfig so the CLI,
the registry and tests all build providers the same way.
"""

from typing import Any, Dict

from loguru import logger

from core.exceptions import ConfigurationError
from interfaces.embedding_provider import EmbeddingProvider
from providers.embeddings import (
    OllamaEmbeddingProvider,
    OpenAICompatibleProvider,
    OpenAIEmbeddingProvider,
)

from .embedding_config import EmbeddingConfig


class EmbeddingProviderFactory:
    """
    Factory for creating embedding providers from configuration.

    The provider is chosen once, at construction time; nothing downstream
    depends on which implementation it receives.
    """

    @staticmethod
    def create_provider(config: EmbeddingConfig) -> EmbeddingProvider:
        """
        Create an embedding provider from configuration.

        Args:
            config: Validated embedding configuration

        Returns:
            Configured embedding provider instance

        Raises:
            ConfigurationError: If provider configuration is invalid or incomplete
        """
        if not config.is_provider_configured():
            missing = config.get_missing_config()
            raise ConfigurationError(
                "embedding.provider",
                config.provider,
                f"Incomplete configuration for {config.provider} provider. Missing: {', '.join(missing)}",
            )

        provider_config = config.get_provider_config()

        if config.provider == 'ollama':
            return EmbeddingProviderFactory._create_ollama_provider(provider_config)
        elif config.provider == 'openai':
            return EmbeddingProviderFactory._create_openai_provider(provider_config)
        elif config.provider == 'openai-compatible':
            return EmbeddingProviderFactory._create_openai_compatible_provider(provider_config)
        else:
            raise ConfigurationError("embedding.provider", config.provider, "Unsupported provider")

    @staticmethod
    def _create_ollama_provider(config: Dict[str, Any]) -> OllamaEmbeddingProvider:
        """Create Ollama embedding provider."""
        logger.debug(f"Creating Ollama provider: model={config['model']}, base_url={config['base_url']}")
        return OllamaEmbeddingProvider(
            base_url=config['base_url'],
            model=config['model'],
            batch_size=config['batch_size'],
            timeout=config['timeout'],
            max_text_length=config['max_text_length'],
        )

    @staticmethod
    def _create_openai_provider(config: Dict[str, Any]) -> OpenAIEmbeddingProvider:
        """Create OpenAI embedding provider."""
        api_key = config.get('api_key')
        logger.debug(
            f"Creating OpenAI provider: model={config['model']}, "
            f"base_url={config.get('base_url')}, api_key={'***' if api_key else None}"
        )
        return OpenAIEmbeddingProvider(
            api_key=api_key,
            base_url=config.get('base_url'),
            model=config['model'],
            batch_size=config['batch_size'],
            timeout=config['timeout'],
            max_text_length=config['max_text_length'],
        )

    @staticmethod
    def _create_openai_compatible_provider(config: Dict[str, Any]) -> OpenAICompatibleProvider:
        """Create OpenAI-compatible embedding provider."""
        logger.debug(
            f"Creating OpenAI-compatible provider: model={config['model']}, "
            f"base_url={config['base_url']}"
        )
        return OpenAICompatibleProvider(
            base_url=config['base_url'],
            model=config['model'],
            api_key=config.get('api_key'),
            batch_size=config['batch_size'],
            timeout=config['timeout'],
            max_text_length=config['max_text_length'],
        )

    @staticmethod
    def get_supported_providers() -> list[str]:
        """Names accepted by EmbeddingConfig.provider."""
        return ['ollama', 'openai', 'openai-compatible']
