"""RagIndex Core Package - Domain models, types, and exceptions.

This package contains the core domain models and types that form the foundation
of the RagIndex architecture. These models are independent of infrastructure
concerns and provide a clean separation between business logic and implementation details.

Modules:
    models: Domain models for Chunk, FileFingerprint, VectorRecord and run results
    types: Common type definitions and aliases
    exceptions: Core exception classes for error handling
"""

from .exceptions import (
    EmbeddingError,
    ModelError,
    NotReadyError,
    RagIndexError,
    ValidationError,
)
from .models import Chunk, FileFingerprint, IndexingResult, RetrievalResult, VectorRecord
from .types import ChunkKey, ModelName, ProviderName, ReadinessStatus

__all__ = [
    # Domain Models
    "Chunk",
    "FileFingerprint",
    "VectorRecord",
    "IndexingResult",
    "RetrievalResult",

    # Types
    "ChunkKey",
    "ReadinessStatus",
    "ProviderName",
    "ModelName",

    # Exceptions
    "RagIndexError",
    "ValidationError",
    "ModelError",
    "EmbeddingError",
    "NotReadyError",
]

__version__ = "0.3.0"
