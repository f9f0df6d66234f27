"""
raven-rag: retrieval-augmented chat over a small curated knowledge base.

Core components:
- storage: JSON-snapshot knowledge store and short-term conversation memory
- ranking: brute-force cosine similarity ranking
- routing: threshold-based grounded/general routing and prompt assembly
- chat_service: per-request orchestration (embed, rank, route, complete, remember)
- knowledge_service: admin ingestion, update and deletion
- embeddings / completions: gateways to the model providers
- api: FastAPI application factory
"""

__version__ = "0.1.0"

from raven_rag.chat_service import ChatService
from raven_rag.knowledge_service import KnowledgeService
from raven_rag.models import (
    ChatAnswer,
    ConversationTurn,
    KnowledgeEntry,
    RankedChunk,
    RouteDecision,
    RouteMode,
)
from raven_rag.routing import RelevanceRouter

__all__ = [
    "__version__",
    # Models
    "KnowledgeEntry",
    "ConversationTurn",
    "RankedChunk",
    "RouteMode",
    "RouteDecision",
    "ChatAnswer",
    # Services
    "ChatService",
    "KnowledgeService",
    "RelevanceRouter",
]
