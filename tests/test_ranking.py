"""
Unit tests for cosine similarity and top-K ranking.
"""

import math
from datetime import datetime

import pytest

from raven_rag.errors import DimensionMismatch
from raven_rag.models import KnowledgeEntry
from raven_rag.ranking import MAX_TOP_K, cosine_similarity, rank


def make_entry(entry_id: str, vector, text=None) -> KnowledgeEntry:
    return KnowledgeEntry(
        id=entry_id,
        text=text or f"text {entry_id}",
        vector=vector,
        created_at=datetime.now(),
    )


@pytest.fixture
def entries():
    return [
        make_entry("a", [1.0, 0.0, 0.0]),
        make_entry("b", [0.0, 1.0, 0.0]),
        make_entry("c", [0.9, 0.1, 0.0]),
        make_entry("d", [0.1, 0.9, 0.0]),
        make_entry("e", [-1.0, 0.0, 0.0]),
    ]


def test_cosine_identical_vectors():
    assert cosine_similarity([0.3, 0.4, 0.5], [0.3, 0.4, 0.5]) == pytest.approx(1.0)


def test_cosine_orthogonal_vectors():
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)


def test_cosine_opposite_vectors():
    assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)


def test_cosine_zero_vector_is_zero():
    """Zero vectors score 0, never NaN."""
    score = cosine_similarity([0.0, 0.0, 0.0], [1.0, 2.0, 3.0])

    assert score == 0.0
    assert not math.isnan(score)
    assert cosine_similarity([1.0, 2.0], [0.0, 0.0]) == 0.0


def test_cosine_dimension_mismatch():
    with pytest.raises(DimensionMismatch):
        cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])


def test_rank_descending_and_bounded(entries):
    results = rank([1.0, 0.0, 0.0], entries, k=3)

    assert len(results) == 3
    assert [r.id for r in results] == ["a", "c", "d"]
    scores = [r.score for r in results]
    assert scores == sorted(scores, reverse=True)


@pytest.mark.parametrize("k", [0, 1, 2, 3, 10])
def test_rank_never_exceeds_k(entries, k):
    results = rank([0.5, 0.5, 0.0], entries, k=k)

    assert len(results) <= min(k, MAX_TOP_K, len(entries))
    scores = [r.score for r in results]
    assert all(a >= b for a, b in zip(scores, scores[1:]))


def test_rank_fewer_entries_than_k():
    results = rank([1.0, 0.0], [make_entry("only", [1.0, 0.0])], k=3)

    assert len(results) == 1
    assert results[0].score == pytest.approx(1.0)


def test_rank_empty_store():
    assert rank([1.0, 0.0], [], k=3) == []


def test_rank_ties_keep_store_order():
    tied = [
        make_entry("first", [1.0, 0.0]),
        make_entry("second", [2.0, 0.0]),
        make_entry("third", [3.0, 0.0]),
    ]

    results = rank([1.0, 0.0], tied, k=3)

    assert [r.id for r in results] == ["first", "second", "third"]


def test_rank_zero_vector_entry_scores_zero():
    results = rank([1.0, 0.0], [make_entry("zero", [0.0, 0.0]), make_entry("x", [1.0, 1.0])])

    by_id = {r.id: r.score for r in results}
    assert by_id["zero"] == 0.0
    assert results[0].id == "x"


def test_rank_carries_text():
    results = rank([1.0, 0.0], [make_entry("a", [1.0, 0.0], text="Adil built a RAG server")])

    assert results[0].text == "Adil built a RAG server"
