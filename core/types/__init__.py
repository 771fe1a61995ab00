"""RagIndex Core Types Package - Common type definitions and aliases.

This package contains type definitions, enums, and type aliases used throughout
the RagIndex system. These types provide better code clarity, IDE support,
and runtime type checking capabilities.

The types are organized into logical groups:
- Chunk identity and readiness enumerations
- Provider and model name types
- Common aliases for better readability
"""

from .common import (
    ByteOffset,
    CharOffset,
    ChunkKey,
    ContentHash,
    Dimensions,
    EmbeddingVector,
    FilePath,
    Generation,
    ModelName,
    ProviderName,
    ReadinessStatus,
    RunOutcome,
    SequenceIndex,
    Similarity,
    Timestamp,
)

__all__ = [
    # Enums
    "ReadinessStatus",
    "RunOutcome",

    # Identity
    "ChunkKey",

    # String types
    "ProviderName",
    "ModelName",
    "FilePath",
    "ContentHash",

    # Numeric types
    "SequenceIndex",
    "ByteOffset",
    "CharOffset",
    "Generation",
    "Timestamp",
    "Similarity",
    "Dimensions",

    # Complex types
    "EmbeddingVector",
]
