"""Tests for chunk, fingerprint and record domain models."""

import pytest

from core.exceptions import ValidationError
from core.models import Chunk, FileFingerprint, IndexRun, VectorRecord, hash_text
from core.types import ChunkKey, RunOutcome


class TestFileFingerprint:
    """Change detection through FileFingerprint.matches."""

    def test_same_content_matches(self):
        first = FileFingerprint.from_bytes("a.txt", b"hello world", 100.0)
        second = FileFingerprint.from_bytes("a.txt", b"hello world", 200.0)

        # mtime alone does not make a file dirty
        assert second.matches(first)

    def test_changed_content_does_not_match(self):
        first = FileFingerprint.from_bytes("a.txt", b"hello world", 100.0)
        second = FileFingerprint.from_bytes("a.txt", b"hello there", 100.0)

        assert not second.matches(first)
        assert not second.matches(None)

    def test_incomplete_fingerprint_never_matches(self):
        stored = FileFingerprint.from_bytes("a.txt", b"hello", 1.0).with_chunks([], complete=False)
        current = FileFingerprint.from_bytes("a.txt", b"hello", 1.0)

        assert not current.matches(stored)

    def test_with_chunks_sorts_keys_and_stamps_time(self):
        fingerprint = FileFingerprint.from_bytes("a.txt", b"data", 1.0)
        keys = [ChunkKey("a.txt", 2), ChunkKey("a.txt", 0), ChunkKey("a.txt", 1)]

        updated = fingerprint.with_chunks(keys)

        assert [k.sequence_index for k in updated.chunk_keys] == [0, 1, 2]
        assert updated.indexed_at is not None
        assert updated.complete

    def test_foreign_chunk_key_rejected(self):
        fingerprint = FileFingerprint.from_bytes("a.txt", b"data", 1.0)

        with pytest.raises(ValidationError):
            fingerprint.with_chunks([ChunkKey("b.txt", 0)])

    def test_dict_form_keeps_chunk_indices(self):
        fingerprint = FileFingerprint.from_bytes("docs/a.md", b"data", 5.0).with_chunks(
            [ChunkKey("docs/a.md", 0), ChunkKey("docs/a.md", 1)], complete=False
        )

        restored = FileFingerprint.from_dict(fingerprint.to_dict())

        assert restored == fingerprint
        assert restored.to_dict()["chunk_indices"] == [0, 1]


class TestChunkAndRecord:
    """Chunk validation and VectorRecord construction."""

    def test_chunk_hash_is_sha256_of_text(self):
        chunk = Chunk.create("a.txt", 0, "hello", 0, 5, 0, 5)

        assert chunk.content_hash == hash_text("hello")
        assert len(chunk.content_hash) == 64

    def test_chunk_rejects_empty_text_and_bad_ranges(self):
        with pytest.raises(ValidationError):
            Chunk.create("a.txt", 0, "", 0, 1, 0, 1)
        with pytest.raises(ValidationError):
            Chunk.create("a.txt", 0, "x", 3, 3, 0, 1)
        with pytest.raises(ValidationError):
            Chunk.create("a.txt", -1, "x", 0, 1, 0, 1)

    def test_record_from_chunk_copies_identity(self):
        chunk = Chunk.create("a.txt", 3, "hello", 10, 15, 12, 17)
        record = VectorRecord.from_chunk(chunk, [0.5, 1.0])

        assert record.key == ChunkKey("a.txt", 3)
        assert record.content_hash == chunk.content_hash
        assert (record.start_byte, record.end_byte) == (12, 17)
        assert record.generation == 0
        assert record.with_generation(4).generation == 4

    def test_record_requires_embedding(self):
        chunk = Chunk.create("a.txt", 0, "hello", 0, 5, 0, 5)

        with pytest.raises(ValidationError):
            VectorRecord.from_chunk(chunk)
        with pytest.raises(ValidationError):
            VectorRecord.from_chunk(chunk, [])


class TestIndexRun:
    def test_failure_ratio_counts_chunks(self):
        run = IndexRun(force_reindex=False)
        assert run.failure_ratio == 0.0

        run.chunks_created = 9
        run.chunks_failed = 1
        assert run.failure_ratio == pytest.approx(0.1)

    def test_summarize_marks_success(self):
        run = IndexRun(force_reindex=False)
        run.files_changed = 2
        run.files_skipped = 3
        run.chunks_created = 7

        result = run.summarize()

        assert run.outcome is RunOutcome.SUCCESS
        assert result.is_success
        assert result.files_processed == 5
        assert result.chunks_created == 7
