"""RagIndex result models - values surfaced to callers of the indexing and retrieval services.

Indexing always ends in exactly one IndexingResult variant; the coordinator
builds it from the IndexRun it owned for the duration of the pass.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..types import EmbeddingVector, FilePath, ReadinessStatus, RunOutcome
from .record import VectorRecord


@dataclass(frozen=True)
class ProgressUpdate:
    """Cumulative progress reported after each file completes."""

    current_file: str
    processed_files: int
    total_files: int
    processed_chunks: int

    @property
    def fraction(self) -> float:
        if self.total_files == 0:
            return 1.0
        return self.processed_files / self.total_files


class IndexingResult:
    """Base class of the indexing outcomes."""

    outcome: RunOutcome

    @property
    def is_success(self) -> bool:
        return self.outcome is RunOutcome.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        data = {k: v for k, v in self.__dict__.items()}
        data["status"] = self.outcome.value
        return data


@dataclass(frozen=True)
class IndexingSuccess(IndexingResult):
    files_processed: int
    chunks_created: int
    files_skipped: int = 0
    files_removed: int = 0
    chunks_failed: int = 0
    duration_seconds: float = 0.0

    outcome = RunOutcome.SUCCESS


@dataclass(frozen=True)
class IndexingError(IndexingResult):
    message: str

    outcome = RunOutcome.ERROR


@dataclass(frozen=True)
class IndexingNotReady(IndexingResult):
    reason: str
    status: ReadinessStatus = ReadinessStatus.SERVICE_UNAVAILABLE

    outcome = RunOutcome.NOT_READY

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.outcome.value, "reason": self.reason, "readiness": self.status.value}


@dataclass(frozen=True)
class IndexingCancelled(IndexingResult):
    files_processed: int
    chunks_created: int

    outcome = RunOutcome.CANCELLED


@dataclass
class IndexRun:
    """Mutable bookkeeping for one indexing pass. Owned by the coordinator."""

    force_reindex: bool
    started_at: float = field(default_factory=time.time)
    files_seen: int = 0
    files_changed: int = 0
    files_skipped: int = 0
    files_failed: int = 0
    files_removed: int = 0
    files_completed: int = 0
    chunks_created: int = 0
    chunks_reused: int = 0
    chunks_failed: int = 0
    outcome: Optional[RunOutcome] = None

    @property
    def chunks_attempted(self) -> int:
        return self.chunks_created + self.chunks_failed

    @property
    def failure_ratio(self) -> float:
        if self.chunks_attempted == 0:
            return 0.0
        return self.chunks_failed / self.chunks_attempted

    @property
    def files_processed(self) -> int:
        # Skipped (unchanged) files count as processed; they are up to date.
        return self.files_changed + self.files_skipped

    @property
    def elapsed(self) -> float:
        return time.time() - self.started_at

    def summarize(self) -> IndexingSuccess:
        self.outcome = RunOutcome.SUCCESS
        return IndexingSuccess(
            files_processed=self.files_processed,
            chunks_created=self.chunks_created,
            files_skipped=self.files_skipped,
            files_removed=self.files_removed,
            chunks_failed=self.chunks_failed,
            duration_seconds=round(self.elapsed, 3),
        )

    def cancelled(self) -> IndexingCancelled:
        self.outcome = RunOutcome.CANCELLED
        return IndexingCancelled(
            files_processed=self.files_processed,
            chunks_created=self.chunks_created,
        )

    def failed(self, message: str) -> IndexingError:
        self.outcome = RunOutcome.ERROR
        return IndexingError(message)


@dataclass(frozen=True)
class RetrievalHit:
    """One ranked retrieval result."""

    record: VectorRecord
    score: float

    @property
    def chunk_text(self) -> str:
        return self.record.text

    @property
    def file_path(self) -> FilePath:
        return self.record.file_path

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_path": self.file_path,
            "sequence_index": self.record.sequence_index,
            "chunk_text": self.chunk_text,
            "score": self.score,
        }


@dataclass(frozen=True)
class RetrievalResult:
    """Query text, its embedding, and hits ordered highest score first."""

    query: str
    query_embedding: EmbeddingVector = field(repr=False)
    hits: Tuple[RetrievalHit, ...] = ()

    def __len__(self) -> int:
        return len(self.hits)

    def __iter__(self):
        return iter(self.hits)

    @property
    def is_empty(self) -> bool:
        return not self.hits

    def to_dict(self) -> Dict[str, Any]:
        return {"query": self.query, "results": [hit.to_dict() for hit in self.hits]}


@dataclass(frozen=True)
class IndexStats:
    """Snapshot of the store for status reporting."""

    total_chunks: int
    indexed_files: List[str]
    last_index_time: Optional[float] = None
    ready: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_chunks": self.total_chunks,
            "indexed_files": list(self.indexed_files),
            "file_count": len(self.indexed_files),
            "last_index_time": self.last_index_time,
            "ready": self.ready,
        }
