"""RagIndex Core Types - Common type definitions and aliases.

This module contains type definitions, enums, and type aliases used throughout
the RagIndex system. These types provide better code clarity, IDE support,
and runtime type checking capabilities.
"""

from enum import Enum
from typing import List, NamedTuple, NewType


# String-based type aliases for better semantic clarity
ProviderName = NewType("ProviderName", str)  # e.g., "ollama", "openai"
ModelName = NewType("ModelName", str)       # e.g., "mxbai-embed-large"
FilePath = NewType("FilePath", str)         # Project-relative POSIX path
ContentHash = NewType("ContentHash", str)   # Hex sha256 digest

# Numeric type aliases
SequenceIndex = NewType("SequenceIndex", int)  # 0-based chunk position in a file
ByteOffset = NewType("ByteOffset", int)        # Byte positions in files
CharOffset = NewType("CharOffset", int)        # Character positions in decoded text
Generation = NewType("Generation", int)        # Monotonic index stamp
Timestamp = NewType("Timestamp", float)        # Unix timestamp
Similarity = NewType("Similarity", float)      # Cosine similarity score
Dimensions = NewType("Dimensions", int)        # Embedding vector dimensions

# Complex types
EmbeddingVector = List[float]              # Vector embedding representation


class ChunkKey(NamedTuple):
    """Identity of a chunk: owning file plus its position in that file."""

    file_path: FilePath
    sequence_index: SequenceIndex

    def __str__(self) -> str:
        return f"{self.file_path}#{self.sequence_index}"


class ReadinessStatus(Enum):
    """Outcome of probing the embedding service before work starts."""

    READY = "ready"
    SERVICE_UNAVAILABLE = "service_unavailable"
    MODEL_NOT_FOUND = "model_not_found"

    @property
    def is_ready(self) -> bool:
        return self is ReadinessStatus.READY


class RunOutcome(Enum):
    """Terminal outcome of an indexing run."""

    SUCCESS = "success"
    ERROR = "error"
    NOT_READY = "not_ready"
    CANCELLED = "cancelled"

    @classmethod
    def from_string(cls, value: str) -> "RunOutcome":
        """Convert string to RunOutcome, defaulting to ERROR for invalid values."""
        try:
            return cls(value)
        except ValueError:
            return cls.ERROR
