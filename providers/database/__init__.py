"""Database providers package for RagIndex - concrete vector store implementations."""

from .duckdb_store import DuckDBVectorStore
from .memory_store import InMemoryVectorStore
from .ranking import cosine_similarity, rank_records

__all__ = [
    "DuckDBVectorStore",
    "InMemoryVectorStore",
    "cosine_similarity",
    "rank_records",
]
