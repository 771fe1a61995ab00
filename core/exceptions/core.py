"""RagIndex Core Exceptions - Core exception classes for error handling.

This module contains the exception hierarchy for the RagIndex system. These
exceptions provide clear error categorization and enable proper error handling
throughout the application. Embedding failures are split by how the indexing
pipeline must react to them: unavailable (fail fast), rate-limited (retry)
and malformed response (permanent for that input).
"""

from typing import Optional, Any, Dict


class RagIndexError(Exception):
    """Base exception for all RagIndex-specific errors.

    This is the root exception class that all other RagIndex exceptions
    inherit from. It provides common functionality for error handling,
    context tracking, and debugging.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """Initialize RagIndex error.

        Args:
            message: Human-readable error description
            context: Optional dictionary with error context (e.g., file paths, chunk keys)
            cause: Optional underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.cause = cause

    def __str__(self) -> str:
        """Return formatted error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message

    def add_context(self, key: str, value: Any) -> "RagIndexError":
        """Add context information to the error."""
        self.context[key] = value
        return self


class ValidationError(RagIndexError):
    """Raised when data validation fails.

    This exception is used when input data doesn't meet expected format,
    type, or caller contract requirements (for example a non-positive k).
    """

    def __init__(
        self,
        field: str,
        value: Any,
        reason: str,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize validation error.

        Args:
            field: Name of the field that failed validation
            value: The invalid value
            reason: Description of why validation failed
            context: Optional additional context
        """
        message = f"Validation failed for field '{field}': {reason}"
        super().__init__(message, context)
        self.field = field
        self.value = value
        self.reason = reason


class ModelError(RagIndexError):
    """Raised when domain model operations fail."""

    def __init__(
        self,
        model_type: str,
        operation: str,
        reason: str,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize model error.

        Args:
            model_type: Type of model that caused the error (e.g., "FileFingerprint")
            operation: Operation that failed (e.g., "create", "validate")
            reason: Description of what went wrong
            context: Optional additional context
        """
        message = f"{model_type} {operation} failed: {reason}"
        super().__init__(message, context)
        self.model_type = model_type
        self.operation = operation
        self.reason = reason


class EmbeddingError(RagIndexError):
    """Raised when embedding operations fail.

    Subclasses classify the failure; a bare EmbeddingError is treated as
    transient by the retry loop.
    """

    transient = True

    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        operation: Optional[str] = None,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """Initialize embedding error.

        Args:
            provider: Embedding provider name (e.g., "ollama")
            model: Model name (e.g., "mxbai-embed-large")
            operation: Operation that failed (e.g., "embed", "probe")
            reason: Description of what went wrong
            context: Optional additional context
            cause: Optional underlying exception
        """
        parts = []
        if provider:
            parts.append(f"provider={provider}")
        if model:
            parts.append(f"model={model}")
        if operation:
            parts.append(f"operation={operation}")

        prefix = f"Embedding error ({', '.join(parts)})" if parts else "Embedding error"
        message = f"{prefix}: {reason}" if reason else prefix

        super().__init__(message, context, cause)
        self.provider = provider
        self.model = model
        self.operation = operation
        self.reason = reason


class EmbeddingUnavailableError(EmbeddingError):
    """The embedding service cannot be reached at all."""

    transient = False


class EmbeddingRateLimitError(EmbeddingError):
    """The embedding service asked us to slow down; retrying may succeed."""

    transient = True

    def __init__(self, *args: Any, retry_after: Optional[float] = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.retry_after = retry_after


class EmbeddingResponseError(EmbeddingError):
    """The embedding service answered with something unusable for this input."""

    transient = False


class NotReadyError(RagIndexError):
    """Raised when a read-path operation needs the embedding service and it is down."""

    def __init__(self, reason: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(f"Embedding service not ready: {reason}", context)
        self.reason = reason


class IndexingInProgressError(RagIndexError):
    """Raised when index_project is called while another run is active."""

    def __init__(self, root: Optional[str] = None):
        context = {"root": root} if root else None
        super().__init__("An indexing run is already in progress", context)


class DatabaseError(RagIndexError):
    """Raised when vector store persistence operations fail."""

    def __init__(
        self,
        operation: Optional[str] = None,
        table: Optional[str] = None,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize database error.

        Args:
            operation: Database operation that failed (e.g., "upsert", "search")
            table: Database table involved in the operation
            reason: Description of what went wrong
            context: Optional additional context
        """
        parts = []
        if operation:
            parts.append(f"operation={operation}")
        if table:
            parts.append(f"table={table}")

        prefix = f"Database error ({', '.join(parts)})" if parts else "Database error"
        message = f"{prefix}: {reason}" if reason else prefix

        super().__init__(message, context)
        self.operation = operation
        self.table = table
        self.reason = reason


class ConfigurationError(RagIndexError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize configuration error.

        Args:
            config_key: Configuration key that caused the error
            config_value: Invalid configuration value
            reason: Description of what went wrong
            context: Optional additional context
        """
        if config_key:
            message = f"Configuration error for '{config_key}': {reason}"
        else:
            message = f"Configuration error: {reason}" if reason else "Configuration error"

        super().__init__(message, context)
        self.config_key = config_key
        self.config_value = config_value
        self.reason = reason


def is_transient(error: BaseException) -> bool:
    """Classify an embedding failure for the retry loop.

    Timeouts and connection resets are transient; anything the provider
    marked as permanent (or any non-embedding error) is not.
    """
    if isinstance(error, EmbeddingError):
        return error.transient
    return isinstance(error, (TimeoutError, ConnectionError))
