"""RagIndex Core Exceptions Package - Core exception classes for error handling.

This package contains the exception hierarchy for the RagIndex system. These
exceptions provide clear error categorization and enable proper error handling
throughout the application.

The exception hierarchy is designed to:
- Provide specific exception types for different error categories
- Let the indexing pipeline tell transient embedding failures from permanent ones
- Support structured error messages and context
"""

from .core import (
    ConfigurationError,
    DatabaseError,
    EmbeddingError,
    EmbeddingRateLimitError,
    EmbeddingResponseError,
    EmbeddingUnavailableError,
    IndexingInProgressError,
    ModelError,
    NotReadyError,
    RagIndexError,
    ValidationError,
    is_transient,
)

__all__ = [
    # Base exception
    "RagIndexError",

    # Domain-specific exceptions
    "ValidationError",
    "ModelError",
    "EmbeddingError",
    "EmbeddingUnavailableError",
    "EmbeddingRateLimitError",
    "EmbeddingResponseError",
    "NotReadyError",
    "IndexingInProgressError",
    "DatabaseError",
    "ConfigurationError",

    # Helpers
    "is_transient",
]
