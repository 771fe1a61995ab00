"""DuckDB vector store for RagIndex - persistent VectorStore backed by a DuckDB file."""

import os
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import duckdb
from loguru import logger

from core.exceptions import DatabaseError
from core.models import FileFingerprint, VectorRecord
from core.types import (
    ByteOffset,
    ChunkKey,
    ContentHash,
    FilePath,
    Generation,
    SequenceIndex,
    Timestamp,
)

from .ranking import rank_records

_RECORD_COLUMNS = (
    "file_path, sequence_index, text, content_hash, start_byte, end_byte, generation, embedding"
)


class DuckDBVectorStore:
    """DuckDB implementation of the VectorStore protocol.

    DuckDB is used for persistence only; ranking runs in Python with the
    same function as the in-memory store so both backends order results
    identically. A single connection is shared and guarded by a lock.
    """

    def __init__(self, db_path: Path | str):
        """Initialize DuckDB store.

        Args:
            db_path: Path to DuckDB database file or ":memory:" for a throwaway database
        """
        self._db_path = db_path
        self.connection: Any | None = None
        self._lock = threading.RLock()
        self._generation = 0

    @property
    def db_path(self) -> Path | str:
        """Database connection path or identifier."""
        return self._db_path

    @property
    def is_connected(self) -> bool:
        """Check if database connection is active."""
        return self.connection is not None

    def connect(self) -> None:
        """Open the database file and create the schema if needed."""
        logger.info(f"Connecting to DuckDB database: {self.db_path}")

        if str(self.db_path) != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        try:
            self._connect_with_wal_validation()
            self.create_schema()
            row = self._conn.execute("SELECT COALESCE(MAX(generation), 0) FROM records").fetchone()
            self._generation = int(row[0]) if row else 0
            logger.info("DuckDB vector store ready")
        except duckdb.Error as e:
            logger.error(f"DuckDB connection failed: {e}")
            raise DatabaseError("connect", reason=str(e)) from e

    def _connect_with_wal_validation(self) -> None:
        """Connect, removing a corrupted WAL file once if replay fails."""
        try:
            self.connection = duckdb.connect(str(self.db_path))
        except duckdb.Error as e:
            if "Failure while replaying WAL file" not in str(e):
                raise
            wal_file = Path(f"{self.db_path}.wal")
            logger.warning(f"WAL corruption detected, removing {wal_file}")
            if wal_file.exists():
                os.remove(wal_file)
            self.connection = duckdb.connect(str(self.db_path))
            logger.info("DuckDB connection successful after WAL cleanup")

    def disconnect(self) -> None:
        """Close database connection and cleanup resources."""
        with self._lock:
            if self.connection is not None:
                self.connection.close()
                self.connection = None
                logger.info("DuckDB connection closed")

    close = disconnect

    @property
    def _conn(self) -> Any:
        if self.connection is None:
            raise RuntimeError("No database connection")
        return self.connection

    def create_schema(self) -> None:
        """Create tables for records, fingerprints and index metadata."""
        logger.debug("Creating DuckDB schema")

        # Keys are enforced by delete-then-insert inside a transaction.
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS records (
                file_path TEXT NOT NULL,
                sequence_index INTEGER NOT NULL,
                text TEXT NOT NULL,
                content_hash TEXT NOT NULL,
                start_byte INTEGER,
                end_byte INTEGER,
                generation BIGINT NOT NULL,
                embedding DOUBLE[] NOT NULL
            )
        """)
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS fingerprints (
                path TEXT NOT NULL,
                content_hash TEXT NOT NULL,
                size_bytes BIGINT NOT NULL,
                mtime DOUBLE NOT NULL,
                chunk_indices INTEGER[],
                complete BOOLEAN NOT NULL,
                indexed_at DOUBLE
            )
        """)
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS index_metadata (
                key TEXT NOT NULL,
                value TEXT
            )
        """)

    def _transaction(self, operation: str, statements: list[tuple[str, list[Any]]]) -> None:
        """Run statements atomically, rolling back on failure."""
        conn = self._conn
        try:
            conn.execute("BEGIN TRANSACTION")
            for sql, params in statements:
                if params:
                    conn.execute(sql, params)
                else:
                    conn.execute(sql)
            conn.execute("COMMIT")
        except duckdb.Error as e:
            try:
                conn.execute("ROLLBACK")
            except duckdb.Error as rollback_error:
                logger.error(f"Rollback after failed {operation} also failed: {rollback_error}")
            raise DatabaseError(operation, reason=str(e)) from e

    @staticmethod
    def _row_to_record(row: tuple) -> VectorRecord:
        return VectorRecord(
            key=ChunkKey(FilePath(row[0]), SequenceIndex(row[1])),
            text=row[2],
            content_hash=ContentHash(row[3]),
            start_byte=ByteOffset(row[4] or 0),
            end_byte=ByteOffset(row[5] or 0),
            generation=Generation(row[6]),
            embedding=[float(v) for v in row[7]],
        )

    # Record Operations
    def upsert(self, record: VectorRecord) -> VectorRecord:
        return self.upsert_many([record])[0]

    def upsert_many(self, records: Iterable[VectorRecord]) -> list[VectorRecord]:
        with self._lock:
            stored = []
            statements: list[tuple[str, list[Any]]] = []
            generation = self._generation
            for record in records:
                generation += 1
                item = record.with_generation(generation)
                stored.append(item)
                statements.append((
                    "DELETE FROM records WHERE file_path = ? AND sequence_index = ?",
                    [item.file_path, item.sequence_index],
                ))
                statements.append((
                    f"INSERT INTO records ({_RECORD_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    [
                        item.file_path,
                        item.sequence_index,
                        item.text,
                        item.content_hash,
                        item.start_byte,
                        item.end_byte,
                        item.generation,
                        list(item.embedding),
                    ],
                ))
            if statements:
                self._transaction("upsert", statements)
                self._generation = generation
            return stored

    def get(self, key: ChunkKey) -> VectorRecord | None:
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_RECORD_COLUMNS} FROM records WHERE file_path = ? AND sequence_index = ?",
                [key.file_path, key.sequence_index],
            ).fetchone()
        return self._row_to_record(row) if row else None

    def get_by_file(self, file_path: str) -> list[VectorRecord]:
        with self._lock:
            rows = self._conn.execute(
                f"SELECT {_RECORD_COLUMNS} FROM records WHERE file_path = ? ORDER BY sequence_index",
                [file_path],
            ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def delete_by_file(self, file_path: str) -> int:
        with self._lock:
            count = self._conn.execute(
                "SELECT COUNT(*) FROM records WHERE file_path = ?", [file_path]
            ).fetchone()[0]
            if count:
                self._transaction(
                    "delete_by_file",
                    [("DELETE FROM records WHERE file_path = ?", [file_path])],
                )
                logger.debug(f"Deleted {count} records for {file_path}")
            return int(count)

    def delete_keys(self, keys: Iterable[ChunkKey]) -> int:
        with self._lock:
            existing = [key for key in keys if self.get(key) is not None]
            if existing:
                self._transaction(
                    "delete_keys",
                    [
                        (
                            "DELETE FROM records WHERE file_path = ? AND sequence_index = ?",
                            [key.file_path, key.sequence_index],
                        )
                        for key in existing
                    ],
                )
            return len(existing)

    def search(
        self,
        query_embedding: list[float],
        k: int,
        min_similarity: float | None = None,
    ) -> list[tuple[VectorRecord, float]]:
        with self._lock:
            rows = self._conn.execute(f"SELECT {_RECORD_COLUMNS} FROM records").fetchall()
        return rank_records(
            (self._row_to_record(row) for row in rows), query_embedding, k, min_similarity
        )

    def size(self) -> int:
        with self._lock:
            return int(self._conn.execute("SELECT COUNT(*) FROM records").fetchone()[0])

    # Fingerprint Operations
    def get_fingerprint(self, path: str) -> FileFingerprint | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT path, content_hash, size_bytes, mtime, chunk_indices, complete, indexed_at "
                "FROM fingerprints WHERE path = ?",
                [path],
            ).fetchone()
        return self._row_to_fingerprint(row) if row else None

    @staticmethod
    def _row_to_fingerprint(row: tuple) -> FileFingerprint:
        path = FilePath(row[0])
        return FileFingerprint(
            path=path,
            content_hash=ContentHash(row[1]),
            size_bytes=int(row[2]),
            mtime=Timestamp(row[3]),
            chunk_keys=tuple(ChunkKey(path, SequenceIndex(i)) for i in (row[4] or [])),
            complete=bool(row[5]),
            indexed_at=Timestamp(row[6]) if row[6] is not None else None,
        )

    def put_fingerprint(self, fingerprint: FileFingerprint) -> None:
        with self._lock:
            self._transaction("put_fingerprint", [
                ("DELETE FROM fingerprints WHERE path = ?", [fingerprint.path]),
                (
                    "INSERT INTO fingerprints "
                    "(path, content_hash, size_bytes, mtime, chunk_indices, complete, indexed_at) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?)",
                    [
                        fingerprint.path,
                        fingerprint.content_hash,
                        fingerprint.size_bytes,
                        fingerprint.mtime,
                        [key.sequence_index for key in fingerprint.chunk_keys],
                        fingerprint.complete,
                        fingerprint.indexed_at,
                    ],
                ),
            ])

    def delete_fingerprint(self, path: str) -> bool:
        with self._lock:
            if self.get_fingerprint(path) is None:
                return False
            self._transaction(
                "delete_fingerprint",
                [("DELETE FROM fingerprints WHERE path = ?", [path])],
            )
            return True

    def list_fingerprints(self) -> list[FileFingerprint]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT path, content_hash, size_bytes, mtime, chunk_indices, complete, indexed_at "
                "FROM fingerprints ORDER BY path"
            ).fetchall()
        return [self._row_to_fingerprint(row) for row in rows]

    # Metadata
    def set_metadata(self, key: str, value: str) -> None:
        with self._lock:
            self._transaction("set_metadata", [
                ("DELETE FROM index_metadata WHERE key = ?", [key]),
                ("INSERT INTO index_metadata (key, value) VALUES (?, ?)", [key, value]),
            ])

    def get_metadata(self, key: str) -> str | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM index_metadata WHERE key = ?", [key]
            ).fetchone()
        return row[0] if row else None

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            chunk_count = self._conn.execute("SELECT COUNT(*) FROM records").fetchone()[0]
            file_count = self._conn.execute("SELECT COUNT(*) FROM fingerprints").fetchone()[0]
            last_index = self.get_metadata("last_index_time")
        return {
            "chunks": int(chunk_count),
            "files": int(file_count),
            "last_index_time": float(last_index) if last_index else None,
        }

    def clear(self) -> None:
        with self._lock:
            self._transaction("clear", [
                ("DELETE FROM records", []),
                ("DELETE FROM fingerprints", []),
                ("DELETE FROM index_metadata", []),
            ])
        logger.info(f"DuckDB vector store cleared: {self.db_path}")
