import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from raven_rag.completions import ChatCompletion
from raven_rag.embeddings import TextEmbedding
from raven_rag.errors import DimensionMismatch, InvalidRequest, UpstreamUnavailable
from raven_rag.models import ChatAnswer, ConversationTurn, RouteDecision, RouteMode
from raven_rag.prompts import DEFAULT_PERSONA
from raven_rag.ranking import rank
from raven_rag.routing import RelevanceRouter, build_messages
from raven_rag.storage import ConversationStore, KnowledgeStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ChatService:
    """
    Answers one question at a time: embed, rank, route, complete, remember.

    Steps run strictly in that order. Conversation memory is only written
    once the completion succeeded, so a failed request leaves no trace.
    """

    def __init__(
        self,
        store: KnowledgeStore,
        conversations: ConversationStore,
        router: RelevanceRouter,
        embedding: Optional[TextEmbedding],
        completion: Optional[ChatCompletion],
        persona: str = DEFAULT_PERSONA,
        top_k: int = 3,
        timeout: float = 30.0,
    ):
        self.store = store
        self.conversations = conversations
        self.router = router
        self.embedding = embedding
        self.completion = completion
        self.persona = persona
        self.top_k = top_k
        self.timeout = timeout

    async def _bounded(self, call: Awaitable[T], what: str) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"{what} timed out after {self.timeout}s")
            raise UpstreamUnavailable("AI service timed out") from e

    async def retrieve(self, question: str) -> RouteDecision:
        """Rank the knowledge base against the question and route the answer."""
        entries = await self.store.snapshot_all()
        if not entries:
            logger.info("Knowledge base is empty, skipping retrieval")
            return RouteDecision(mode=RouteMode.GENERAL)

        if self.embedding is None:
            logger.error("Embedding gateway not configured")
            raise UpstreamUnavailable("AI client not initialized")

        query_vector = await self._bounded(self.embedding.embed_query(question), "Query embedding")

        try:
            chunks = rank(query_vector, entries, k=self.top_k, max_k=self.top_k)
        except DimensionMismatch as e:
            # The embedding model no longer matches the stored vectors
            logger.error(f"Query embedding incompatible with knowledge base: {e}")
            raise UpstreamUnavailable("Embedding model does not match the knowledge base") from e

        return self.router.route(chunks)

    async def ask(self, question: Optional[str], session_id: str) -> ChatAnswer:
        """
        Answer a question within a session.

        Args:
            question: The user's question
            session_id: Conversation identifier

        Returns:
            The answer with the mode it was produced in

        Raises:
            InvalidRequest: If the question is missing or blank
            UpstreamUnavailable: If a gateway is absent, failing or times out
            RateLimited: If a gateway reports rate exhaustion
        """
        if not isinstance(question, str) or not question.strip():
            raise InvalidRequest("No question provided")
        question = question.strip()

        logger.info(f"Chat request for session {session_id}: '{question[:50]}'")

        if self.completion is None:
            logger.error("Completion gateway not configured")
            raise UpstreamUnavailable("AI client not initialized")

        decision = await self.retrieve(question)

        async with self.conversations.session_lock(session_id):
            history = await self.conversations.get(session_id)
            messages = build_messages(self.persona, decision, history, question)

            logger.debug(
                f"Prompt for session {session_id}: mode={decision.mode.value}, "
                f"history={len(history)} turns, context={len(decision.context_text)} chars"
            )

            answer = await self._bounded(self.completion.complete(messages), "Completion")

            await self.conversations.append(
                session_id,
                ConversationTurn(role="user", content=question),
                ConversationTurn(role="assistant", content=answer),
            )

        return ChatAnswer(
            answer=answer,
            mode=decision.mode,
            session_id=session_id,
            chunks=decision.chunks,
        )
