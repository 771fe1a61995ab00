"""Tests for the sliding-window text chunker."""

import pytest

from core.exceptions import ValidationError
from ragindex.chunker import TextChunker


class TestTextChunker:
    """Window placement, offsets and edge cases of TextChunker."""

    def setup_method(self):
        self.chunker = TextChunker(chunk_size=100, chunk_overlap=20, min_chunk_size=20)
        self.words = " ".join(f"word{i}" for i in range(200))

    def test_short_text_is_single_chunk(self):
        chunks = list(self.chunker.chunk_text("hello world", "a.txt"))

        assert len(chunks) == 1
        chunk = chunks[0]
        assert chunk.text == "hello world"
        assert (chunk.start_char, chunk.end_char) == (0, 11)
        assert (chunk.start_byte, chunk.end_byte) == (0, 11)
        assert chunk.sequence_index == 0
        assert str(chunk.key) == "a.txt#0"

    def test_empty_and_whitespace_text_yield_nothing(self):
        assert list(self.chunker.chunk_text("", "a.txt")) == []
        assert list(self.chunker.chunk_text(" \n\t  \n", "a.txt")) == []

    def test_chunking_is_deterministic(self):
        first = list(self.chunker.chunk_text(self.words, "a.txt"))
        second = list(self.chunker.chunk_text(self.words, "a.txt"))

        assert first == second
        assert [c.content_hash for c in first] == [c.content_hash for c in second]

    def test_sequence_indices_are_contiguous(self):
        chunks = list(self.chunker.chunk_text(self.words, "a.txt"))

        assert len(chunks) > 5
        assert [c.sequence_index for c in chunks] == list(range(len(chunks)))

    def test_windows_advance_and_overlap(self):
        chunks = list(self.chunker.chunk_text(self.words, "a.txt"))

        for current, following in zip(chunks, chunks[1:]):
            assert following.start_char > current.start_char
            assert following.start_char < current.end_char
        assert chunks[0].start_char == 0
        assert chunks[-1].end_char == len(self.words)

    def test_chunk_size_is_respected(self):
        chunks = list(self.chunker.chunk_text(self.words, "a.txt"))

        # Only the last chunk may absorb a short remainder
        for chunk in chunks[:-1]:
            assert chunk.char_count <= 100
        assert chunks[-1].char_count < 100 + 20

    def test_window_end_prefers_line_breaks(self):
        text = ("x" * 80) + "\n" + ("y" * 200)
        chunks = list(self.chunker.chunk_text(text, "a.txt"))

        assert chunks[0].end_char == 81
        assert chunks[0].text.endswith("\n")

    def test_byte_offsets_address_utf8_source(self):
        text = "Grüße aus Köln. " * 30 + "Ünïcödé ✓ end"
        data = text.encode("utf-8")
        chunks = list(self.chunker.chunk_bytes(data, "notes.md"))

        assert len(chunks) > 1
        for chunk in chunks:
            assert data[chunk.start_byte:chunk.end_byte].decode("utf-8") == chunk.text
            assert text[chunk.start_char:chunk.end_char] == chunk.text

    def test_short_trailing_remainder_merges_into_previous(self):
        chunker = TextChunker(chunk_size=10, chunk_overlap=0, min_chunk_size=5)
        chunks = list(chunker.chunk_text("abcdefghijkl", "a.txt"))

        assert len(chunks) == 1
        assert chunks[0].text == "abcdefghijkl"

    def test_whitespace_windows_do_not_consume_indices(self):
        chunker = TextChunker(chunk_size=10, chunk_overlap=0, min_chunk_size=0)
        text = "abcdefghij" + " " * 10 + "klmnopqrst"
        chunks = list(chunker.chunk_text(text, "a.txt"))

        assert [c.text for c in chunks] == ["abcdefghij", "klmnopqrst"]
        assert [c.sequence_index for c in chunks] == [0, 1]
        assert chunks[1].start_char == 20

    def test_binary_and_invalid_utf8_yield_nothing(self):
        assert list(self.chunker.chunk_bytes(b"abc\x00def", "blob.bin")) == []
        assert list(self.chunker.chunk_bytes(b"\xff\xfe not utf8", "latin.txt")) == []

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"chunk_size": 0},
            {"chunk_size": 10, "chunk_overlap": 10},
            {"chunk_size": 10, "chunk_overlap": -1},
            {"min_chunk_size": -1},
        ],
    )
    def test_invalid_parameters_rejected(self, kwargs):
        with pytest.raises(ValidationError):
            TextChunker(**kwargs)
