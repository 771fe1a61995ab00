"""Search service for RagIndex - similarity retrieval over indexed chunks."""

import re
from typing import Optional

from loguru import logger

from core.exceptions import EmbeddingError, EmbeddingResponseError, NotReadyError, ValidationError
from core.models import IndexStats, RetrievalHit, RetrievalResult, VectorRecord
from interfaces.vector_store import VectorStore
from providers.database.ranking import ranking_key

from .base_service import BaseService
from .embedding_service import EmbeddingService

STOP_WORDS = frozenset({
    "the", "a", "an", "is", "are", "was", "were", "be", "been", "being", "have", "has",
    "had", "do", "does", "did", "will", "would", "could", "should", "may", "might",
    "to", "of", "in", "for", "on", "with", "at", "by", "from", "as", "into", "through",
})

_NON_WORD = re.compile(r"[^\w\s]")

# Cosine and keyword weights of the hybrid rerank score
SEMANTIC_WEIGHT = 0.6
KEYWORD_WEIGHT = 0.4


def extract_keywords(text: str) -> set[str]:
    """Lowercased words longer than two characters, minus stop words."""
    words = _NON_WORD.sub(" ", text.lower()).split()
    return {word for word in words if len(word) > 2 and word not in STOP_WORDS}


def keyword_score(query_keywords: set[str], content: str) -> float:
    """Fraction of query keywords found in content, as words and as substrings."""
    if not query_keywords:
        return 0.0

    content_words = extract_keywords(content)
    lowered = content.lower()
    word_matches = sum(1 for word in query_keywords if word in content_words)
    substring_matches = sum(1 for word in query_keywords if word in lowered)

    total = len(query_keywords)
    score = (word_matches / total) * 0.6 + (substring_matches / total) * 0.4
    return min(max(score, 0.0), 1.0)


class SearchService(BaseService):
    """Service for retrieving the chunks most similar to a query."""

    def __init__(
        self,
        vector_store: VectorStore,
        embedding_service: EmbeddingService,
        rerank_candidates: int = 10,
    ):
        """Initialize search service.

        Args:
            vector_store: Store to search
            embedding_service: Embedding service; must use the same model as indexing
            rerank_candidates: Minimum number of candidates fetched when reranking
        """
        super().__init__(vector_store)
        self._embedding_service = embedding_service
        self._rerank_candidates = rerank_candidates

    async def retrieve(
        self,
        query_text: str,
        k: int,
        min_similarity: Optional[float] = None,
        rerank: bool = False,
    ) -> RetrievalResult:
        """Retrieve the k chunks most similar to the query text.

        Args:
            query_text: Natural language query
            k: Maximum number of hits
            min_similarity: Drop hits whose cosine similarity is below this value
            rerank: Re-score candidates with the keyword hybrid score

        Returns:
            RetrievalResult with hits ordered by score, highest first

        Raises:
            ValidationError: If k is not positive
            NotReadyError: If the embedding service cannot embed the query
            EmbeddingResponseError: If the service rejects the query text itself
        """
        if k <= 0:
            raise ValidationError("k", k, "must be a positive integer")

        try:
            query_embedding = await self._embedding_service.embed_query(query_text)
        except EmbeddingResponseError:
            raise
        except EmbeddingError as e:
            logger.warning(f"Query embedding failed: {e}")
            raise NotReadyError(str(e)) from e

        limit = max(k, self._rerank_candidates) if rerank else k
        ranked = self._store.search(query_embedding, limit, min_similarity)
        logger.debug(f"Retrieved {len(ranked)} candidates for query '{query_text[:50]}'")

        if rerank:
            ranked = self._rerank(query_text, ranked)[:k]

        hits = tuple(RetrievalHit(record=record, score=score) for record, score in ranked)
        return RetrievalResult(query=query_text, query_embedding=query_embedding, hits=hits)

    def _rerank(
        self, query_text: str, candidates: list[tuple[VectorRecord, float]]
    ) -> list[tuple[VectorRecord, float]]:
        query_keywords = extract_keywords(query_text)
        rescored = [
            (record, score * SEMANTIC_WEIGHT + keyword_score(query_keywords, record.text) * KEYWORD_WEIGHT)
            for record, score in candidates
        ]
        rescored.sort(key=lambda pair: ranking_key(pair[0], pair[1]))
        return rescored

    async def index_status(self) -> IndexStats:
        """Describe the current index and whether queries can be served."""
        stats = self._store.get_stats()
        files = sorted(fingerprint.path for fingerprint in self._store.list_fingerprints())
        status = await self._embedding_service.check_readiness()
        return IndexStats(
            total_chunks=stats["chunks"],
            indexed_files=files,
            last_index_time=stats["last_index_time"],
            ready=status.is_ready,
        )
