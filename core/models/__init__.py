"""RagIndex Core Models Package - Domain model definitions.

This package contains the core domain models that represent the fundamental
entities in the RagIndex system. These models are designed to be independent
of infrastructure concerns and provide a clean, typed interface for working
with chunks, file fingerprints, stored vectors and run results.

The models follow these principles:
- Immutable data structures using dataclasses with frozen=True
- Rich type hints for better IDE support and runtime validation
- Clear separation between domain logic and persistence concerns
"""

from .chunk import Chunk, hash_text
from .fingerprint import FileFingerprint, hash_bytes
from .record import VectorRecord
from .results import (
    IndexingCancelled,
    IndexingError,
    IndexingNotReady,
    IndexingResult,
    IndexingSuccess,
    IndexRun,
    IndexStats,
    ProgressUpdate,
    RetrievalHit,
    RetrievalResult,
)

__all__ = [
    "Chunk",
    "FileFingerprint",
    "VectorRecord",
    "IndexingResult",
    "IndexingSuccess",
    "IndexingError",
    "IndexingNotReady",
    "IndexingCancelled",
    "IndexRun",
    "IndexStats",
    "ProgressUpdate",
    "RetrievalHit",
    "RetrievalResult",
    "hash_text",
    "hash_bytes",
]
