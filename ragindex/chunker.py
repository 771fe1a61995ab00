"""Chunker module for RagIndex - splits raw file text into overlapping windows.

Windows target `chunk_size` characters. A window's end is pulled back to
the last newline (or, failing that, whitespace) in its final quarter, so
editing whitespace inside one chunk seldom moves the boundaries of the
chunks after it. Consecutive windows overlap by roughly `chunk_overlap`
characters, with the next start nudged forward onto a word boundary.
"""

from collections.abc import Iterator

from loguru import logger

from core.exceptions import ValidationError
from core.models import Chunk


class _ByteCursor:
    """Maps character offsets to UTF-8 byte offsets, walking from the last lookup."""

    def __init__(self, text: str):
        self._text = text
        self._char = 0
        self._byte = 0

    def byte_offset(self, char_offset: int) -> int:
        if char_offset >= self._char:
            self._byte += _utf8_len(self._text[self._char:char_offset])
        else:
            self._byte -= _utf8_len(self._text[char_offset:self._char])
        self._char = char_offset
        return self._byte


def _utf8_len(text: str) -> int:
    return len(text.encode("utf-8", errors="surrogatepass"))


class TextChunker:
    """Deterministic sliding-window chunker for plain text."""

    def __init__(self, chunk_size: int = 100, chunk_overlap: int = 20, min_chunk_size: int = 20):
        """Initialize the chunker.

        Args:
            chunk_size: Target window length in characters
            chunk_overlap: Characters shared between consecutive windows
            min_chunk_size: A trailing remainder shorter than this merges into the previous chunk
        """
        if chunk_size <= 0:
            raise ValidationError("chunk_size", chunk_size, "must be positive")
        if chunk_overlap < 0 or chunk_overlap >= chunk_size:
            raise ValidationError("chunk_overlap", chunk_overlap, "must be >= 0 and < chunk_size")
        if min_chunk_size < 0:
            raise ValidationError("min_chunk_size", min_chunk_size, "must not be negative")

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.min_chunk_size = min_chunk_size

    def chunk_text(self, text: str, file_path: str) -> Iterator[Chunk]:
        """Yield chunks of `text` in order.

        Calling again with the same arguments yields identical chunks.
        Windows that contain only whitespace are skipped and do not use up
        a sequence index.
        """
        if not text or not text.strip():
            return

        cursor = _ByteCursor(text)
        sequence_index = 0
        for start, end in self._merged_windows(text):
            piece = text[start:end]
            if not piece.strip():
                continue
            yield Chunk.create(
                file_path=file_path,
                sequence_index=sequence_index,
                text=piece,
                start_char=start,
                end_char=end,
                start_byte=cursor.byte_offset(start),
                end_byte=cursor.byte_offset(end),
            )
            sequence_index += 1

    def chunk_bytes(self, data: bytes, file_path: str) -> Iterator[Chunk]:
        """Decode file content as UTF-8 and chunk it.

        Binary content (a NUL byte) or content that is not valid UTF-8
        yields no chunks.
        """
        if b"\x00" in data:
            logger.debug(f"Skipping binary file: {file_path}")
            return iter(())
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug(f"Skipping non UTF-8 file: {file_path}")
            return iter(())
        return self.chunk_text(text, file_path)

    def _merged_windows(self, text: str) -> Iterator[tuple[int, int]]:
        """Windows with a short trailing remainder folded into the one before it."""
        length = len(text)
        pending: tuple[int, int] | None = None
        for start, end in self._windows(text):
            if pending is None:
                pending = (start, end)
                continue
            if end >= length and end - pending[1] < self.min_chunk_size:
                pending = (pending[0], end)
                continue
            yield pending
            pending = (start, end)
        if pending is not None:
            yield pending

    def _windows(self, text: str) -> Iterator[tuple[int, int]]:
        length = len(text)
        start = 0
        while start < length:
            end = min(start + self.chunk_size, length)
            if end < length:
                end = self._snap_end(text, start, end)
            yield start, end
            if end >= length:
                return

            next_start = self._snap_start(text, end - self.chunk_overlap, end)
            # Always advance; never step back to or before the current start.
            start = next_start if next_start > start else end

    def _snap_end(self, text: str, start: int, end: int) -> int:
        """Pull `end` back to a line or word boundary in the window's last quarter."""
        floor = max(start + 1, end - max(1, self.chunk_size // 4))
        newline = text.rfind("\n", floor, end)
        if newline != -1:
            return newline + 1
        for i in range(end - 1, floor - 1, -1):
            if text[i].isspace():
                return i + 1
        return end

    @staticmethod
    def _snap_start(text: str, position: int, end: int) -> int:
        """Move `position` forward to just after the first whitespace before `end`."""
        if position <= 0:
            return 0
        if text[position - 1].isspace():
            return position
        for i in range(position, end):
            if text[i].isspace():
                if i + 1 < end:
                    return i + 1
                break
        return position
