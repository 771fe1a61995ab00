"""VectorStore protocol for RagIndex - abstract interface for vector store implementations."""

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from core.models import FileFingerprint, VectorRecord
from core.types import ChunkKey


@runtime_checkable
class VectorStore(Protocol):
    """Abstract protocol for vector stores.

    Holds one VectorRecord per chunk key plus the fingerprint of every
    indexed file. Implementations (in-memory, DuckDB) share the ranking
    function in providers.database.ranking so results are identical across
    backends. Upserts replace records wholesale; a concurrent search sees
    either the old record or the new one, never a mix.
    """

    # Record Operations
    def upsert(self, record: VectorRecord) -> VectorRecord:
        """Insert or replace the record for record.key.

        Returns the stored record stamped with a fresh generation.
        """
        ...

    def upsert_many(self, records: Iterable[VectorRecord]) -> list[VectorRecord]:
        """Upsert several records, in order."""
        ...

    def get(self, key: ChunkKey) -> VectorRecord | None:
        """Get the record stored under key."""
        ...

    def get_by_file(self, file_path: str) -> list[VectorRecord]:
        """Get all records of a file ordered by sequence index."""
        ...

    def delete_by_file(self, file_path: str) -> int:
        """Delete all records of a file and return how many were removed."""
        ...

    def delete_keys(self, keys: Iterable[ChunkKey]) -> int:
        """Delete specific records and return how many were removed."""
        ...

    def search(
        self,
        query_embedding: list[float],
        k: int,
        min_similarity: float | None = None,
    ) -> list[tuple[VectorRecord, float]]:
        """Rank records by cosine similarity to query_embedding.

        Ordering is by score descending, then generation descending, then
        key ascending. Returns at most k pairs.
        """
        ...

    def size(self) -> int:
        """Number of stored records."""
        ...

    # Fingerprint Operations
    def get_fingerprint(self, path: str) -> FileFingerprint | None:
        """Get the stored fingerprint for a file."""
        ...

    def put_fingerprint(self, fingerprint: FileFingerprint) -> None:
        """Store (or replace) a file's fingerprint."""
        ...

    def delete_fingerprint(self, path: str) -> bool:
        """Delete a file's fingerprint; False if none was stored."""
        ...

    def list_fingerprints(self) -> list[FileFingerprint]:
        """All stored fingerprints ordered by path."""
        ...

    # Metadata
    def set_metadata(self, key: str, value: str) -> None:
        ...

    def get_metadata(self, key: str) -> str | None:
        ...

    def get_stats(self) -> dict[str, Any]:
        """Record count, file count and last index time."""
        ...

    # Lifecycle
    def clear(self) -> None:
        """Remove all records, fingerprints and metadata."""
        ...

    def close(self) -> None:
        """Release backing resources."""
        ...
