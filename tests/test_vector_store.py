"""Tests for the vector store backends and the shared ranking function."""

import tempfile
from pathlib import Path

import pytest

from core.models import FileFingerprint, VectorRecord, hash_text
from core.types import ChunkKey
from interfaces.vector_store import VectorStore
from providers.database import DuckDBVectorStore, InMemoryVectorStore, cosine_similarity, rank_records


def make_record(path: str, index: int, embedding: list[float], text: str | None = None) -> VectorRecord:
    text = text or f"{path} chunk {index}"
    return VectorRecord(
        key=ChunkKey(path, index),
        embedding=embedding,
        text=text,
        content_hash=hash_text(text),
        start_byte=0,
        end_byte=len(text.encode("utf-8")),
    )


class TestRanking:
    """cosine_similarity and rank_records without a store."""

    def test_cosine_similarity_basics(self):
        assert cosine_similarity([1.0, 0.0], [1.0, 0.0]) == pytest.approx(1.0)
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
        assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)

    def test_degenerate_vectors_score_zero(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 0.0]) == 0.0
        assert cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0]) == 0.0
        assert cosine_similarity([], []) == 0.0

    def test_ties_break_on_generation_then_key(self):
        records = [
            make_record("b.txt", 0, [1.0, 0.0]).with_generation(1),
            make_record("a.txt", 1, [1.0, 0.0]).with_generation(1),
            make_record("a.txt", 0, [1.0, 0.0]).with_generation(1),
            make_record("z.txt", 0, [1.0, 0.0]).with_generation(2),
        ]

        ranked = rank_records(records, [1.0, 0.0], k=4)

        assert [str(record.key) for record, _ in ranked] == ["z.txt#0", "a.txt#0", "a.txt#1", "b.txt#0"]

    def test_ranking_ignores_input_order(self):
        records = [make_record(f"f{i}.txt", 0, [1.0, float(i % 3)]) for i in range(9)]

        forward = rank_records(records, [1.0, 1.0], k=5)
        backward = rank_records(list(reversed(records)), [1.0, 1.0], k=5)

        assert forward == backward

    def test_non_positive_k_returns_nothing(self):
        records = [make_record("a.txt", 0, [1.0, 0.0])]

        assert rank_records(records, [1.0, 0.0], k=0) == []
        assert rank_records(records, [1.0, 0.0], k=-3) == []


class _VectorStoreContract:
    """Behaviour every VectorStore implementation must share."""

    store: VectorStore

    def test_satisfies_protocol(self):
        assert isinstance(self.store, VectorStore)

    def test_upsert_assigns_increasing_generations(self):
        first = self.store.upsert(make_record("a.txt", 0, [1.0, 0.0]))
        second = self.store.upsert(make_record("a.txt", 1, [0.0, 1.0]))

        assert second.generation > first.generation
        assert self.store.get(ChunkKey("a.txt", 1)) == second
        assert self.store.size() == 2

    def test_upsert_replaces_existing_key(self):
        self.store.upsert(make_record("a.txt", 0, [1.0, 0.0], text="old text"))
        replaced = self.store.upsert(make_record("a.txt", 0, [0.0, 1.0], text="new text"))

        stored = self.store.get(ChunkKey("a.txt", 0))
        assert self.store.size() == 1
        assert stored.text == "new text"
        assert stored.embedding == [0.0, 1.0]
        assert stored.generation == replaced.generation

    def test_get_by_file_is_ordered(self):
        self.store.upsert_many([
            make_record("a.txt", 2, [1.0, 0.0]),
            make_record("a.txt", 0, [1.0, 0.0]),
            make_record("b.txt", 0, [1.0, 0.0]),
            make_record("a.txt", 1, [1.0, 0.0]),
        ])

        assert [r.sequence_index for r in self.store.get_by_file("a.txt")] == [0, 1, 2]
        assert self.store.get_by_file("missing.txt") == []

    def test_deletes_report_counts(self):
        self.store.upsert_many([make_record("a.txt", i, [1.0, 0.0]) for i in range(3)])
        self.store.upsert(make_record("b.txt", 0, [1.0, 0.0]))

        assert self.store.delete_keys([ChunkKey("a.txt", 2), ChunkKey("a.txt", 7)]) == 1
        assert self.store.delete_by_file("a.txt") == 2
        assert self.store.delete_by_file("a.txt") == 0
        assert self.store.size() == 1

    def test_search_orders_by_similarity(self):
        self.store.upsert_many([
            make_record("a.txt", 0, [1.0, 0.0]),
            make_record("b.txt", 0, [0.0, 1.0]),
            make_record("c.txt", 0, [1.0, 1.0]),
        ])

        hits = self.store.search([1.0, 0.0], k=2)

        assert [str(record.key) for record, _ in hits] == ["a.txt#0", "c.txt#0"]
        assert hits[0][1] == pytest.approx(1.0)
        assert hits[1][1] == pytest.approx(0.7071, abs=1e-4)

    def test_search_prefers_newest_on_ties(self):
        self.store.upsert(make_record("old.txt", 0, [1.0, 0.0]))
        self.store.upsert(make_record("new.txt", 0, [2.0, 0.0]))

        hits = self.store.search([1.0, 0.0], k=1)

        assert hits[0][0].file_path == "new.txt"

    def test_search_handles_zero_and_mismatched_vectors(self):
        self.store.upsert_many([
            make_record("zero.txt", 0, [0.0, 0.0]),
            make_record("wide.txt", 0, [1.0, 0.0, 0.0]),
            make_record("good.txt", 0, [1.0, 0.0]),
        ])

        hits = self.store.search([1.0, 0.0], k=3)

        assert hits[0][0].file_path == "good.txt"
        assert [score for _, score in hits[1:]] == [0.0, 0.0]

    def test_search_min_similarity_and_empty_store(self):
        assert self.store.search([1.0, 0.0], k=5) == []

        self.store.upsert_many([
            make_record("a.txt", 0, [1.0, 0.0]),
            make_record("b.txt", 0, [0.0, 1.0]),
        ])

        hits = self.store.search([1.0, 0.0], k=5, min_similarity=0.5)
        assert [record.file_path for record, _ in hits] == ["a.txt"]
        assert self.store.search([1.0, 0.0], k=0) == []

    def test_fingerprint_lifecycle(self):
        fingerprint = FileFingerprint.from_bytes("docs/a.md", b"content", 12.5).with_chunks(
            [ChunkKey("docs/a.md", 0), ChunkKey("docs/a.md", 1)], complete=False
        )

        self.store.put_fingerprint(fingerprint)
        stored = self.store.get_fingerprint("docs/a.md")

        assert stored == fingerprint
        assert not stored.complete
        assert [fp.path for fp in self.store.list_fingerprints()] == ["docs/a.md"]

        assert self.store.delete_fingerprint("docs/a.md") is True
        assert self.store.delete_fingerprint("docs/a.md") is False
        assert self.store.get_fingerprint("docs/a.md") is None

    def test_metadata_and_stats(self):
        assert self.store.get_stats() == {"chunks": 0, "files": 0, "last_index_time": None}

        self.store.upsert(make_record("a.txt", 0, [1.0, 0.0]))
        self.store.put_fingerprint(FileFingerprint.from_bytes("a.txt", b"x", 1.0))
        self.store.set_metadata("last_index_time", "1700000000.5")

        assert self.store.get_metadata("last_index_time") == "1700000000.5"
        assert self.store.get_metadata("unknown") is None
        assert self.store.get_stats() == {"chunks": 1, "files": 1, "last_index_time": 1700000000.5}

    def test_clear_removes_everything(self):
        self.store.upsert(make_record("a.txt", 0, [1.0, 0.0]))
        self.store.put_fingerprint(FileFingerprint.from_bytes("a.txt", b"x", 1.0))

        self.store.clear()

        assert self.store.size() == 0
        assert self.store.list_fingerprints() == []


class TestInMemoryVectorStore(_VectorStoreContract):
    def setup_method(self):
        self.store = InMemoryVectorStore()

    def teardown_method(self):
        self.store.close()


class TestDuckDBVectorStore(_VectorStoreContract):
    def setup_method(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = Path(self.temp_dir.name) / "index" / "store.duckdb"
        self.store = DuckDBVectorStore(self.db_path)
        self.store.connect()

    def teardown_method(self):
        self.store.disconnect()
        self.temp_dir.cleanup()

    def test_data_survives_reconnect(self):
        stored = self.store.upsert(make_record("a.txt", 0, [0.25, 0.5], text="persisted"))
        self.store.put_fingerprint(
            FileFingerprint.from_bytes("a.txt", b"persisted", 3.0).with_chunks([ChunkKey("a.txt", 0)])
        )
        self.store.disconnect()

        reopened = DuckDBVectorStore(self.db_path)
        reopened.connect()
        try:
            record = reopened.get(ChunkKey("a.txt", 0))
            assert record.text == "persisted"
            assert record.embedding == [0.25, 0.5]
            assert reopened.get_fingerprint("a.txt").chunk_keys == (ChunkKey("a.txt", 0),)

            # Generations keep increasing across sessions
            later = reopened.upsert(make_record("b.txt", 0, [1.0, 0.0]))
            assert later.generation > stored.generation
        finally:
            reopened.disconnect()

    def test_operations_require_connection(self):
        self.store.disconnect()

        with pytest.raises(RuntimeError):
            self.store.size()
