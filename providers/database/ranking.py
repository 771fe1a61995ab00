"""Similarity ranking shared by every vector store backend."""

import heapq
import math
from collections.abc import Iterable, Sequence

from core.models import VectorRecord


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors.

    Vectors of different length, empty vectors and zero-norm vectors
    score 0.0 instead of raising.
    """
    if not a or len(a) != len(b):
        return 0.0

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


def ranking_key(record: VectorRecord, score: float) -> tuple:
    """Sort key: score desc, newest generation first, then key for determinism."""
    return (-score, -record.generation, record.key.file_path, record.key.sequence_index)


def rank_records(
    records: Iterable[VectorRecord],
    query_embedding: Sequence[float],
    k: int,
    min_similarity: float | None = None,
) -> list[tuple[VectorRecord, float]]:
    """Score records against the query and return the top k pairs."""
    if k <= 0:
        return []

    scored = []
    for record in records:
        score = cosine_similarity(query_embedding, record.embedding)
        if min_similarity is not None and score < min_similarity:
            continue
        scored.append((record, score))

    return heapq.nsmallest(k, scored, key=lambda pair: ranking_key(pair[0], pair[1]))
