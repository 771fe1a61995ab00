"""RagIndex Chunk Domain Model - Represents a contiguous text unit carved from a file.

This module contains the Chunk domain model, the unit of embedding and
retrieval. A chunk is identified by its owning file and its position in that
file; its content hash drives change detection and lets the indexer reuse an
existing vector when a re-chunked file produces the same text at the same
position.
"""

import hashlib
from dataclasses import dataclass, replace
from typing import Optional, Dict, Any

from ..types import (
    ByteOffset,
    CharOffset,
    ChunkKey,
    ContentHash,
    EmbeddingVector,
    FilePath,
    Generation,
    SequenceIndex,
)
from ..exceptions import ValidationError


def hash_text(text: str) -> ContentHash:
    """Return the hex sha256 digest of a chunk's text."""
    return ContentHash(hashlib.sha256(text.encode("utf-8")).hexdigest())


@dataclass(frozen=True)
class Chunk:
    """Domain model representing one chunk of a file.

    Attributes:
        file_path: Project-relative path of the owning file
        sequence_index: 0-based position of the chunk within the file
        text: Raw text content
        start_char: Start offset in the decoded text (inclusive)
        end_char: End offset in the decoded text (exclusive)
        start_byte: Start offset in the UTF-8 source (inclusive)
        end_byte: End offset in the UTF-8 source (exclusive)
        content_hash: sha256 of the text
        embedding: Vector once computed, None before
        generation: Index stamp assigned by the vector store on upsert
    """

    file_path: FilePath
    sequence_index: SequenceIndex
    text: str
    start_char: CharOffset
    end_char: CharOffset
    start_byte: ByteOffset
    end_byte: ByteOffset
    content_hash: ContentHash
    embedding: Optional[EmbeddingVector] = None
    generation: Optional[Generation] = None

    def __post_init__(self):
        """Validate chunk model after initialization."""
        self._validate()

    def _validate(self) -> None:
        if not self.file_path:
            raise ValidationError("file_path", self.file_path, "File path cannot be empty")

        if self.sequence_index < 0:
            raise ValidationError("sequence_index", self.sequence_index, "Sequence index cannot be negative")

        if not self.text:
            raise ValidationError("text", self.text, "Chunk text cannot be empty")

        if self.start_char < 0 or self.start_char >= self.end_char:
            raise ValidationError(
                "char_range", f"{self.start_char}-{self.end_char}", "Invalid character range"
            )

        if self.start_byte < 0 or self.start_byte >= self.end_byte:
            raise ValidationError(
                "byte_range", f"{self.start_byte}-{self.end_byte}", "Invalid byte range"
            )

    @classmethod
    def create(
        cls,
        file_path: str,
        sequence_index: int,
        text: str,
        start_char: int,
        end_char: int,
        start_byte: int,
        end_byte: int,
    ) -> "Chunk":
        """Create a chunk, computing its content hash from the text."""
        return cls(
            file_path=FilePath(file_path),
            sequence_index=SequenceIndex(sequence_index),
            text=text,
            start_char=CharOffset(start_char),
            end_char=CharOffset(end_char),
            start_byte=ByteOffset(start_byte),
            end_byte=ByteOffset(end_byte),
            content_hash=hash_text(text),
        )

    @property
    def key(self) -> ChunkKey:
        """Identity of this chunk."""
        return ChunkKey(self.file_path, self.sequence_index)

    @property
    def char_count(self) -> int:
        return self.end_char - self.start_char

    @property
    def byte_count(self) -> int:
        return self.end_byte - self.start_byte

    @property
    def has_embedding(self) -> bool:
        return self.embedding is not None

    def with_embedding(self, embedding: EmbeddingVector) -> "Chunk":
        """Create a new Chunk instance carrying the given embedding."""
        return replace(self, embedding=list(embedding))

    def overlaps_with(self, other: "Chunk") -> bool:
        """Check whether two chunks of the same file share any characters."""
        if self.file_path != other.file_path:
            return False
        return self.start_char < other.end_char and other.start_char < self.end_char

    def to_dict(self) -> Dict[str, Any]:
        """Convert Chunk model to dictionary."""
        result: Dict[str, Any] = {
            "file_path": self.file_path,
            "sequence_index": self.sequence_index,
            "text": self.text,
            "start_char": self.start_char,
            "end_char": self.end_char,
            "start_byte": self.start_byte,
            "end_byte": self.end_byte,
            "content_hash": self.content_hash,
        }
        if self.generation is not None:
            result["generation"] = self.generation
        return result

    def __repr__(self) -> str:
        return (
            f"Chunk(key={self.key}, chars={self.start_char}-{self.end_char}, "
            f"hash={self.content_hash[:12]}, embedded={self.has_embedding})"
        )
