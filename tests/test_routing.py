"""
Unit tests for relevance routing and prompt assembly.
"""

import pytest
from casual_llm import AssistantMessage, SystemMessage, UserMessage

from raven_rag.models import ConversationTurn, RankedChunk, RouteDecision, RouteMode
from raven_rag.routing import RelevanceRouter, build_messages

THRESHOLD = 0.5


@pytest.fixture
def router():
    return RelevanceRouter(threshold=THRESHOLD)


def chunks_with_top(score: float):
    return [
        RankedChunk(id="1", text="first chunk", score=score),
        RankedChunk(id="2", text="second chunk", score=score - 0.1),
        RankedChunk(id="3", text="third chunk", score=score - 0.2),
    ]


def test_route_exactly_at_threshold_is_general(router):
    decision = router.route(chunks_with_top(THRESHOLD))

    assert decision.mode is RouteMode.GENERAL
    assert decision.context_text == ""
    assert decision.chunks == []


def test_route_just_above_threshold_is_grounded(router):
    decision = router.route(chunks_with_top(THRESHOLD + 1e-9))

    assert decision.mode is RouteMode.GROUNDED


def test_route_below_threshold_is_general(router):
    assert router.route(chunks_with_top(0.2)).mode is RouteMode.GENERAL


def test_route_no_chunks_is_general(router):
    decision = router.route([])

    assert decision.mode is RouteMode.GENERAL
    assert decision.context_text == ""


def test_grounded_context_joins_chunks_in_order(router):
    decision = router.route(chunks_with_top(0.9))

    assert decision.context_text == "first chunk\n\nsecond chunk\n\nthird chunk"
    assert [c.id for c in decision.chunks] == ["1", "2", "3"]


def test_grounded_includes_low_scoring_tail_chunks(router):
    """The cutoff looks at the top score only; all top-K chunks are injected."""
    chunks = [
        RankedChunk(id="1", text="relevant", score=0.8),
        RankedChunk(id="2", text="weak", score=0.1),
    ]

    decision = router.route(chunks)

    assert decision.mode is RouteMode.GROUNDED
    assert "weak" in decision.context_text


def test_build_messages_order():
    decision = RouteDecision(mode=RouteMode.GROUNDED, context_text="Adil built a RAG server")
    history = [
        ConversationTurn(role="user", content="Hi"),
        ConversationTurn(role="assistant", content="Hello!"),
    ]

    messages = build_messages("You are Raven.", decision, history, "What did Adil build?")

    assert len(messages) == 4
    assert isinstance(messages[0], SystemMessage)
    assert "You are Raven." in messages[0].content
    assert "Adil built a RAG server" in messages[0].content
    assert isinstance(messages[1], UserMessage)
    assert messages[1].content == "Hi"
    assert isinstance(messages[2], AssistantMessage)
    assert messages[2].content == "Hello!"
    assert isinstance(messages[3], UserMessage)
    assert messages[3].content == "What did Adil build?"


def test_build_messages_general_has_no_context():
    messages = build_messages(
        "You are Raven.", RouteDecision(mode=RouteMode.GENERAL), [], "What is X?"
    )

    assert len(messages) == 2
    assert "CONTEXT" not in messages[0].content
    assert "general knowledge" in messages[0].content
