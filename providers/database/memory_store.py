"""In-memory vector store for RagIndex - dictionary backed, thread safe."""

import threading
from collections.abc import Iterable
from typing import Any

from loguru import logger

from core.models import FileFingerprint, VectorRecord
from core.types import ChunkKey

from .ranking import rank_records


class InMemoryVectorStore:
    """In-memory implementation of the VectorStore protocol.

    Records are immutable and replaced under a lock; searches rank a
    snapshot taken under the same lock, so a reader never sees a partially
    applied upsert.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._records: dict[ChunkKey, VectorRecord] = {}
        self._fingerprints: dict[str, FileFingerprint] = {}
        self._metadata: dict[str, str] = {}
        self._generation = 0

    @property
    def db_path(self) -> str:
        return ":memory:"

    def upsert(self, record: VectorRecord) -> VectorRecord:
        with self._lock:
            self._generation += 1
            stored = record.with_generation(self._generation)
            self._records[stored.key] = stored
            return stored

    def upsert_many(self, records: Iterable[VectorRecord]) -> list[VectorRecord]:
        with self._lock:
            return [self.upsert(record) for record in records]

    def get(self, key: ChunkKey) -> VectorRecord | None:
        with self._lock:
            return self._records.get(key)

    def get_by_file(self, file_path: str) -> list[VectorRecord]:
        with self._lock:
            records = [r for r in self._records.values() if r.file_path == file_path]
        return sorted(records, key=lambda r: r.sequence_index)

    def delete_by_file(self, file_path: str) -> int:
        with self._lock:
            keys = [key for key in self._records if key.file_path == file_path]
            for key in keys:
                del self._records[key]
        if keys:
            logger.debug(f"Deleted {len(keys)} records for {file_path}")
        return len(keys)

    def delete_keys(self, keys: Iterable[ChunkKey]) -> int:
        removed = 0
        with self._lock:
            for key in keys:
                if self._records.pop(key, None) is not None:
                    removed += 1
        return removed

    def search(
        self,
        query_embedding: list[float],
        k: int,
        min_similarity: float | None = None,
    ) -> list[tuple[VectorRecord, float]]:
        with self._lock:
            snapshot = list(self._records.values())
        return rank_records(snapshot, query_embedding, k, min_similarity)

    def size(self) -> int:
        with self._lock:
            return len(self._records)

    def get_fingerprint(self, path: str) -> FileFingerprint | None:
        with self._lock:
            return self._fingerprints.get(path)

    def put_fingerprint(self, fingerprint: FileFingerprint) -> None:
        with self._lock:
            self._fingerprints[fingerprint.path] = fingerprint

    def delete_fingerprint(self, path: str) -> bool:
        with self._lock:
            return self._fingerprints.pop(path, None) is not None

    def list_fingerprints(self) -> list[FileFingerprint]:
        with self._lock:
            return [self._fingerprints[p] for p in sorted(self._fingerprints)]

    def set_metadata(self, key: str, value: str) -> None:
        with self._lock:
            self._metadata[key] = value

    def get_metadata(self, key: str) -> str | None:
        with self._lock:
            return self._metadata.get(key)

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            last_index = self._metadata.get("last_index_time")
            return {
                "chunks": len(self._records),
                "files": len(self._fingerprints),
                "last_index_time": float(last_index) if last_index else None,
            }

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
            self._fingerprints.clear()
            self._metadata.clear()
        logger.info("In-memory vector store cleared")

    def close(self) -> None:
        """Nothing to release; kept for protocol parity with on-disk stores."""
