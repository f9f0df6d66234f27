"""
Brute-force similarity ranking over the knowledge base.

Every stored vector is scored against the query; corpora are small (tens to
low thousands of entries), so no approximate index is kept.
"""

import logging
import math
from typing import List, Sequence

from raven_rag.errors import DimensionMismatch
from raven_rag.models import KnowledgeEntry, RankedChunk

logger = logging.getLogger(__name__)

MAX_TOP_K = 3


def cosine_similarity(vec1: Sequence[float], vec2: Sequence[float]) -> float:
    """
    Calculate cosine similarity between two vectors.

    Returns 0.0 when either vector has zero magnitude.

    Raises:
        DimensionMismatch: If the vectors have different lengths
    """
    if len(vec1) != len(vec2):
        raise DimensionMismatch(expected=len(vec2), actual=len(vec1))

    dot_product = sum(a * b for a, b in zip(vec1, vec2))
    magnitude1 = math.sqrt(sum(a * a for a in vec1))
    magnitude2 = math.sqrt(sum(b * b for b in vec2))

    if magnitude1 == 0 or magnitude2 == 0:
        return 0.0

    return dot_product / (magnitude1 * magnitude2)


def rank(
    query_vector: Sequence[float],
    entries: Sequence[KnowledgeEntry],
    k: int = MAX_TOP_K,
    max_k: int = MAX_TOP_K,
) -> List[RankedChunk]:
    """
    Score every entry against the query and return the best matches.

    Args:
        query_vector: Embedding of the query
        entries: Knowledge entries in store order
        k: Number of chunks requested, clamped to ``[0, max_k]``
        max_k: Upper bound on ``k``

    Returns:
        At most ``k`` chunks, highest score first. Equal scores keep store order.
    """
    k = max(0, min(k, max_k))
    if k == 0 or not entries:
        return []

    scored = [
        RankedChunk(id=entry.id, text=entry.text, score=cosine_similarity(query_vector, entry.vector))
        for entry in entries
    ]

    # sorted() is stable, also with reverse=True
    scored = sorted(scored, key=lambda chunk: chunk.score, reverse=True)[:k]

    logger.debug(
        "Top chunks: " + ", ".join(f"{chunk.id} (score: {chunk.score:.4f})" for chunk in scored)
    )
    return scored
