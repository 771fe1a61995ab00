"""RagIndex FileFingerprint Domain Model - Change-detection record for one indexed file.

This module contains the FileFingerprint model. One fingerprint exists per
indexed file: its content hash, size and modification time, plus the chunk
identities the file currently owns in the vector store. The indexer compares
a freshly computed fingerprint against the stored one to decide whether a
file needs re-embedding.
"""

import hashlib
import time
from dataclasses import dataclass, field, replace
from typing import Optional, Dict, Any, Iterable, Tuple

from ..types import ChunkKey, ContentHash, FilePath, SequenceIndex, Timestamp
from ..exceptions import ValidationError


def hash_bytes(data: bytes) -> ContentHash:
    """Return the hex sha256 digest of raw file content."""
    return ContentHash(hashlib.sha256(data).hexdigest())


@dataclass(frozen=True)
class FileFingerprint:
    """Domain model representing the indexed state of one file.

    Attributes:
        path: Project-relative POSIX path
        content_hash: sha256 of the file bytes
        size_bytes: File size in bytes
        mtime: Last modification time as Unix timestamp
        chunk_keys: Chunk identities the file owns in the vector store
        complete: False when some chunks failed to embed during the last run
        indexed_at: When the fingerprint was recorded
    """

    path: FilePath
    content_hash: ContentHash
    size_bytes: int
    mtime: Timestamp
    chunk_keys: Tuple[ChunkKey, ...] = ()
    complete: bool = True
    indexed_at: Optional[Timestamp] = field(default=None, compare=False)

    def __post_init__(self):
        """Validate fingerprint model after initialization."""
        self._validate()

    def _validate(self) -> None:
        if not self.path:
            raise ValidationError("path", self.path, "Path cannot be empty")

        if not self.content_hash:
            raise ValidationError("content_hash", self.content_hash, "Content hash cannot be empty")

        if self.size_bytes < 0:
            raise ValidationError("size_bytes", self.size_bytes, "File size cannot be negative")

        for key in self.chunk_keys:
            if key.file_path != self.path:
                raise ValidationError(
                    "chunk_keys", str(key), f"Chunk key does not belong to {self.path}"
                )

    @classmethod
    def from_bytes(cls, path: str, data: bytes, mtime: float) -> "FileFingerprint":
        """Create a fingerprint (with no chunks yet) from file content."""
        return cls(
            path=FilePath(path),
            content_hash=hash_bytes(data),
            size_bytes=len(data),
            mtime=Timestamp(mtime),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileFingerprint":
        """Create a FileFingerprint from its dictionary representation."""
        try:
            path = FilePath(data["path"])
            keys = tuple(
                ChunkKey(path, SequenceIndex(int(index)))
                for index in data.get("chunk_indices", [])
            )
            indexed_at = data.get("indexed_at")
            return cls(
                path=path,
                content_hash=ContentHash(data["content_hash"]),
                size_bytes=int(data["size_bytes"]),
                mtime=Timestamp(float(data["mtime"])),
                chunk_keys=keys,
                complete=bool(data.get("complete", True)),
                indexed_at=Timestamp(float(indexed_at)) if indexed_at is not None else None,
            )
        except (KeyError, ValueError, TypeError) as e:
            raise ValidationError("data", data, f"Invalid data format: {e}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert FileFingerprint to a JSON-friendly dictionary."""
        result: Dict[str, Any] = {
            "path": self.path,
            "content_hash": self.content_hash,
            "size_bytes": self.size_bytes,
            "mtime": self.mtime,
            "chunk_indices": [key.sequence_index for key in self.chunk_keys],
            "complete": self.complete,
        }
        if self.indexed_at is not None:
            result["indexed_at"] = self.indexed_at
        return result

    @property
    def chunk_count(self) -> int:
        return len(self.chunk_keys)

    def matches(self, other: Optional["FileFingerprint"]) -> bool:
        """True if `other` describes the same content and was fully indexed."""
        if other is None or not other.complete:
            return False
        return self.content_hash == other.content_hash and self.size_bytes == other.size_bytes

    def with_chunks(self, keys: Iterable[ChunkKey], complete: bool = True) -> "FileFingerprint":
        """Return a copy owning the given chunk identities, stamped now."""
        return replace(
            self,
            chunk_keys=tuple(sorted(keys, key=lambda k: k.sequence_index)),
            complete=complete,
            indexed_at=Timestamp(time.time()),
        )

    def __str__(self) -> str:
        return (
            f"FileFingerprint({self.path}, hash={self.content_hash[:12]}, "
            f"chunks={self.chunk_count}, complete={self.complete})"
        )
