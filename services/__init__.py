"""Service layer for RagIndex - indexing and retrieval coordination."""

from .base_service import BaseService
from .embedding_service import EmbeddingBatchResult, EmbeddingService
from .indexing_coordinator import IndexingCoordinator
from .search_service import SearchService

__all__ = [
    'BaseService',
    'IndexingCoordinator',
    'SearchService',
    'EmbeddingService',
    'EmbeddingBatchResult',
]
