"""RagIndex VectorRecord Domain Model - The vector store's unit of storage.

A VectorRecord carries a chunk's identity, its embedding and enough metadata
(file path, text, offsets) to materialize a retrieval result without a second
lookup. Records are immutable; the store replaces them wholesale on upsert so
readers never observe a vector paired with another version's metadata.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from ..types import (
    ByteOffset,
    ChunkKey,
    ContentHash,
    EmbeddingVector,
    FilePath,
    Generation,
    SequenceIndex,
)
from ..exceptions import ValidationError
from .chunk import Chunk


@dataclass(frozen=True)
class VectorRecord:
    """Stored embedding for one chunk.

    Attributes:
        key: Chunk identity (file path + sequence index)
        embedding: Embedding vector
        text: Chunk text
        content_hash: sha256 of the chunk text
        start_byte: Start offset in the source file
        end_byte: End offset in the source file
        generation: Monotonic stamp assigned by the store (0 until stored)
    """

    key: ChunkKey
    embedding: EmbeddingVector = field(repr=False)
    text: str = field(repr=False)
    content_hash: ContentHash
    start_byte: ByteOffset = ByteOffset(0)
    end_byte: ByteOffset = ByteOffset(0)
    generation: Generation = Generation(0)

    def __post_init__(self):
        if not self.embedding:
            raise ValidationError("embedding", self.embedding, "Embedding cannot be empty")
        if not self.text:
            raise ValidationError("text", self.text, "Record text cannot be empty")

    @classmethod
    def from_chunk(cls, chunk: Chunk, embedding: Optional[EmbeddingVector] = None) -> "VectorRecord":
        """Build a record from a chunk and its (possibly separately supplied) embedding."""
        vector = embedding if embedding is not None else chunk.embedding
        if vector is None:
            raise ValidationError("embedding", None, f"Chunk {chunk.key} has no embedding")
        return cls(
            key=chunk.key,
            embedding=[float(v) for v in vector],
            text=chunk.text,
            content_hash=chunk.content_hash,
            start_byte=chunk.start_byte,
            end_byte=chunk.end_byte,
        )

    @property
    def file_path(self) -> FilePath:
        return self.key.file_path

    @property
    def sequence_index(self) -> SequenceIndex:
        return self.key.sequence_index

    @property
    def dims(self) -> int:
        return len(self.embedding)

    def with_generation(self, generation: int) -> "VectorRecord":
        return replace(self, generation=Generation(generation))

    def to_dict(self, include_embedding: bool = False) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "file_path": self.file_path,
            "sequence_index": self.sequence_index,
            "text": self.text,
            "content_hash": self.content_hash,
            "start_byte": self.start_byte,
            "end_byte": self.end_byte,
            "generation": self.generation,
        }
        if include_embedding:
            result["embedding"] = list(self.embedding)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VectorRecord":
        try:
            return cls(
                key=ChunkKey(FilePath(data["file_path"]), SequenceIndex(int(data["sequence_index"]))),
                embedding=[float(v) for v in data["embedding"]],
                text=data["text"],
                content_hash=ContentHash(data["content_hash"]),
                start_byte=ByteOffset(int(data.get("start_byte", 0))),
                end_byte=ByteOffset(int(data.get("end_byte", 0))),
                generation=Generation(int(data.get("generation", 0))),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise ValidationError("data", data, f"Invalid data format: {e}")
