"""Indexing coordinator service for RagIndex - orchestrates incremental project indexing."""

import asyncio
import inspect
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from core.exceptions import IndexingInProgressError
from core.models import (
    Chunk,
    FileFingerprint,
    IndexingNotReady,
    IndexingResult,
    IndexRun,
    ProgressUpdate,
    VectorRecord,
)
from core.types import ChunkKey, RunOutcome
from interfaces.vector_store import VectorStore
from ragindex.chunker import TextChunker
from ragindex.file_discovery import IgnorePredicate, IgnoreRules, discover_files, relative_key

from .base_service import BaseService
from .embedding_service import EmbeddingService

ProgressCallback = Callable[[ProgressUpdate], Any]


class IndexingCoordinator(BaseService):
    """Keeps the vector store in sync with the files under a project root.

    Only files whose content changed since the last run are re-chunked and
    re-embedded. Each file is committed on its own: its new records are
    upserted, stale records removed and its fingerprint replaced, with no
    suspension point in between, so a cancelled or failed file keeps its
    previous state. One run may be active per coordinator.
    """

    def __init__(
        self,
        vector_store: VectorStore,
        embedding_service: EmbeddingService,
        root: Path,
        chunker: Optional[TextChunker] = None,
        ignore: Optional[IgnorePredicate] = None,
        max_concurrent_files: int = 4,
        max_failure_ratio: float = 0.5,
    ):
        """Initialize indexing coordinator.

        Args:
            vector_store: Store for records and fingerprints
            embedding_service: Embedding service used for all chunk vectors
            root: Project root directory
            chunker: Chunker (defaults to TextChunker())
            ignore: Predicate returning True for paths to skip (defaults to IgnoreRules)
            max_concurrent_files: Files processed concurrently
            max_failure_ratio: Failed/attempted chunk ratio above which a run fails
        """
        super().__init__(vector_store)
        self._embedding_service = embedding_service
        self._root = Path(root)
        self._chunker = chunker or TextChunker()
        self._ignore = ignore or IgnoreRules(root=self._root)
        self._max_concurrent_files = max_concurrent_files
        self._max_failure_ratio = max_failure_ratio

        self._run_lock = asyncio.Lock()
        self._cancel_event: Optional[asyncio.Event] = None
        self._callback_tasks: set[asyncio.Task] = set()
        self._last_run: Optional[IndexRun] = None

    @property
    def root(self) -> Path:
        return self._root

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    @property
    def last_run(self) -> Optional[IndexRun]:
        return self._last_run

    def cancel(self) -> None:
        """Ask the active run to stop; a no-op when nothing is running."""
        if self._cancel_event is not None:
            logger.info("Cancellation requested for indexing run")
            self._cancel_event.set()

    async def index_project(
        self,
        force_reindex: bool = False,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> IndexingResult:
        """Bring the index up to date with the project root.

        Args:
            force_reindex: Re-embed every file, ignoring fingerprints and reusable vectors
            on_progress: Called after each file with cumulative counts; async callbacks
                finish before the run returns
            cancel_event: Setting it stops the run after in-flight embedding calls

        Returns:
            IndexingSuccess, IndexingError, IndexingNotReady or IndexingCancelled

        Raises:
            IndexingInProgressError: If another run is active on this coordinator
        """
        if self._run_lock.locked():
            raise IndexingInProgressError(str(self._root))

        async with self._run_lock:
            run = IndexRun(force_reindex=force_reindex)
            self._last_run = run
            self._cancel_event = cancel_event or asyncio.Event()
            try:
                result = await self._run(run, on_progress, self._cancel_event)
                await self._drain_callbacks()
                return result
            except asyncio.CancelledError:
                for task in list(self._callback_tasks):
                    task.cancel()
                run.outcome = RunOutcome.CANCELLED
                logger.info(f"Indexing task cancelled after {run.files_completed} files")
                raise
            except Exception as e:
                logger.error(f"Indexing run failed: {e}")
                await self._drain_callbacks()
                return run.failed(f"Indexing failed: {e}")
            finally:
                self._cancel_event = None

    async def _run(
        self,
        run: IndexRun,
        on_progress: Optional[ProgressCallback],
        cancel_event: asyncio.Event,
    ) -> IndexingResult:
        status = await self._embedding_service.check_readiness()
        if not status.is_ready:
            reason = self._embedding_service.describe_readiness(status)
            logger.warning(f"Indexing skipped: {reason}")
            run.outcome = RunOutcome.NOT_READY
            return IndexingNotReady(reason=reason, status=status)

        try:
            files = discover_files(self._root, self._ignore)
        except OSError as e:
            logger.error(f"Cannot traverse project root {self._root}: {e}")
            return run.failed(f"Cannot traverse project root {self._root}: {e}")

        run.files_seen = len(files)
        mode = "forced" if run.force_reindex else "incremental"
        logger.info(f"Indexing {len(files)} files under {self._root} ({mode})")

        file_semaphore = asyncio.Semaphore(self._max_concurrent_files)
        batch_semaphore = self._embedding_service.create_semaphore()

        async def worker(path: Path) -> None:
            async with file_semaphore:
                if cancel_event.is_set():
                    return
                await self._index_file(path, run, batch_semaphore, cancel_event, on_progress, len(files))

        await asyncio.gather(*(worker(path) for path in files))

        if cancel_event.is_set():
            result = run.cancelled()
            logger.info(
                f"Indexing cancelled: {result.files_processed} files processed, "
                f"{result.chunks_created} chunks created"
            )
            return result

        seen = {relative_key(self._root, path) for path in files}
        self._remove_vanished(seen, run)
        self._store.set_metadata("last_index_time", str(time.time()))

        if run.failure_ratio > self._max_failure_ratio:
            message = (
                f"{run.chunks_failed} of {run.chunks_attempted} chunks failed to embed "
                f"(ratio {run.failure_ratio:.2f} > {self._max_failure_ratio:.2f})"
            )
            logger.error(f"Indexing failed: {message}")
            return run.failed(message)

        result = run.summarize()
        logger.info(
            f"Indexing complete: {result.files_processed} files processed "
            f"({result.files_skipped} unchanged, {result.files_removed} removed), "
            f"{result.chunks_created} chunks created, {run.chunks_reused} reused, "
            f"{result.chunks_failed} failed in {result.duration_seconds:.2f}s"
        )
        return result

    async def _index_file(
        self,
        path: Path,
        run: IndexRun,
        batch_semaphore: asyncio.Semaphore,
        cancel_event: asyncio.Event,
        on_progress: Optional[ProgressCallback],
        total_files: int,
    ) -> None:
        """Process one file; structural faults are logged and counted, not raised."""
        rel_path = relative_key(self._root, path)
        try:
            committed = await self._process_file(path, rel_path, run, batch_semaphore, cancel_event)
        except Exception as e:
            logger.warning(f"Failed to index {rel_path}: {e}")
            run.files_failed += 1
            committed = True
        if not committed:
            return

        run.files_completed += 1
        self._notify_progress(on_progress, ProgressUpdate(
            current_file=rel_path,
            processed_files=run.files_completed,
            total_files=total_files,
            processed_chunks=run.chunks_created,
        ))

    async def _process_file(
        self,
        path: Path,
        rel_path: str,
        run: IndexRun,
        batch_semaphore: asyncio.Semaphore,
        cancel_event: asyncio.Event,
    ) -> bool:
        """Returns False when the file was abandoned because of cancellation."""
        data = path.read_bytes()
        fingerprint = FileFingerprint.from_bytes(rel_path, data, path.stat().st_mtime)
        previous = self._store.get_fingerprint(rel_path)

        if not run.force_reindex and fingerprint.matches(previous):
            logger.debug(f"Unchanged, skipping: {rel_path}")
            run.files_skipped += 1
            return True

        chunks = list(self._chunker.chunk_bytes(data, rel_path))
        reused, pending = self._partition_reusable(rel_path, chunks, run.force_reindex)
        logger.debug(
            f"{rel_path}: {len(chunks)} chunks, {len(reused)} reusable, {len(pending)} to embed"
        )

        embedded = await self._embedding_service.embed_texts(
            [chunk.text for chunk in pending], batch_semaphore
        )
        if cancel_event.is_set():
            logger.debug(f"Cancelled before commit, keeping previous state: {rel_path}")
            return False

        # Commit: no awaits from here on.
        new_records = [
            VectorRecord.from_chunk(chunk, vector)
            for chunk, vector in zip(pending, embedded.vectors)
            if vector is not None
        ]
        self._store.upsert_many(new_records)

        kept_keys = {record.key for record in reused} | {record.key for record in new_records}
        stale = {record.key for record in self._store.get_by_file(rel_path)} - kept_keys
        if previous is not None:
            stale |= set(previous.chunk_keys) - kept_keys
        if stale:
            self._store.delete_keys(stale)

        self._store.put_fingerprint(fingerprint.with_chunks(kept_keys, complete=embedded.failed == 0))

        run.files_changed += 1
        run.chunks_created += len(new_records)
        run.chunks_reused += len(reused)
        run.chunks_failed += embedded.failed
        if embedded.failed:
            logger.warning(f"{rel_path}: {embedded.failed} of {len(pending)} chunks failed to embed")
        return True

    def _partition_reusable(
        self, rel_path: str, chunks: list[Chunk], force_reindex: bool
    ) -> tuple[list[VectorRecord], list[Chunk]]:
        """Split chunks into stored records that can be kept and chunks needing embeddings."""
        if force_reindex:
            return [], chunks

        existing: dict[ChunkKey, VectorRecord] = {
            record.key: record for record in self._store.get_by_file(rel_path)
        }
        reused: list[VectorRecord] = []
        pending: list[Chunk] = []
        for chunk in chunks:
            record = existing.get(chunk.key)
            if record is not None and record.content_hash == chunk.content_hash:
                reused.append(record)
            else:
                pending.append(chunk)
        return reused, pending

    def _remove_vanished(self, seen: set[str], run: IndexRun) -> None:
        for fingerprint in self._store.list_fingerprints():
            if fingerprint.path in seen:
                continue
            removed = self._store.delete_by_file(fingerprint.path)
            self._store.delete_fingerprint(fingerprint.path)
            run.files_removed += 1
            logger.info(f"Removed {fingerprint.path} from index ({removed} chunks)")

    def _notify_progress(self, on_progress: Optional[ProgressCallback], update: ProgressUpdate) -> None:
        if on_progress is None:
            return
        try:
            outcome = on_progress(update)
        except Exception as e:
            logger.warning(f"Progress callback failed: {e}")
            return
        if inspect.isawaitable(outcome):
            task = asyncio.ensure_future(outcome)
            self._callback_tasks.add(task)
            task.add_done_callback(self._on_callback_done)

    async def _drain_callbacks(self) -> None:
        """Wait for async progress callbacks scheduled during the run."""
        if self._callback_tasks:
            await asyncio.gather(*self._callback_tasks, return_exceptions=True)

    def _on_callback_done(self, task: asyncio.Task) -> None:
        self._callback_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning(f"Progress callback failed: {task.exception()}")

    async def remove_file(self, file_path: str) -> int:
        """Remove a file's records and fingerprint from the index.

        Args:
            file_path: Project-relative path of the file

        Returns:
            Number of chunks removed
        """
        removed = self._store.delete_by_file(file_path)
        self._store.delete_fingerprint(file_path)
        logger.debug(f"Removed {file_path} ({removed} chunks)")
        return removed

    async def get_stats(self) -> dict[str, Any]:
        """Get store statistics plus whether a run is active.

        Returns:
            Dictionary with chunk and file counts and the last index time
        """
        stats = dict(self._store.get_stats())
        stats["running"] = self.is_running
        return stats
