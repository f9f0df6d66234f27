"""
Relevance routing and prompt assembly.

A single threshold decides whether retrieved chunks are injected as context
(grounded mode) or the model answers from general knowledge (general mode).
The cutoff is hard: scores are never blended across modes.
"""

import logging
from typing import List, Sequence

from casual_llm import AssistantMessage, ChatMessage, SystemMessage, UserMessage

from raven_rag.models import ConversationTurn, RankedChunk, RouteDecision, RouteMode
from raven_rag.prompts import GENERAL_INSTRUCTIONS, GROUNDED_INSTRUCTIONS

logger = logging.getLogger(__name__)

CONTEXT_SEPARATOR = "\n\n"


class RelevanceRouter:
    """Routes a query to grounded or general mode from its top similarity score."""

    def __init__(self, threshold: float = 0.5):
        """
        Args:
            threshold: Top score must be strictly greater than this to ground the answer
        """
        self.threshold = threshold

    def route(self, chunks: Sequence[RankedChunk]) -> RouteDecision:
        """
        Decide the answer mode for ranked chunks (highest score first).

        A top score exactly equal to the threshold routes to general mode.
        """
        if not chunks:
            logger.info("No knowledge chunks available, answering with general knowledge")
            return RouteDecision(mode=RouteMode.GENERAL)

        top_score = chunks[0].score
        if top_score > self.threshold:
            logger.info(
                f"High relevance (top={top_score:.4f} > {self.threshold}), "
                f"grounding answer in {len(chunks)} chunks"
            )
            return RouteDecision(
                mode=RouteMode.GROUNDED,
                context_text=CONTEXT_SEPARATOR.join(chunk.text for chunk in chunks),
                chunks=list(chunks),
            )

        logger.info(
            f"Low relevance (top={top_score:.4f} <= {self.threshold}), "
            f"answering with general knowledge"
        )
        return RouteDecision(mode=RouteMode.GENERAL)


def build_system_prompt(persona: str, decision: RouteDecision) -> str:
    if decision.mode is RouteMode.GROUNDED:
        instructions = GROUNDED_INSTRUCTIONS.format(context=decision.context_text)
    else:
        instructions = GENERAL_INSTRUCTIONS
    return f"{persona.strip()}\n\n{instructions}"


def build_messages(
    persona: str,
    decision: RouteDecision,
    history: Sequence[ConversationTurn],
    question: str,
) -> List[ChatMessage]:
    """
    Assemble the outbound message sequence.

    Args:
        persona: Fixed persona instruction
        decision: Routing decision carrying the context text
        history: Prior turns of the session, oldest first
        question: The new user question

    Returns:
        System message, then history, then the new user message
    """
    messages: List[ChatMessage] = [SystemMessage(content=build_system_prompt(persona, decision))]

    for turn in history:
        if turn.role == "user":
            messages.append(UserMessage(content=turn.content))
        else:
            messages.append(AssistantMessage(content=turn.content))

    messages.append(UserMessage(content=question))
    return messages
