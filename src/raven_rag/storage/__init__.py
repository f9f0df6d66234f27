"""
Storage for the knowledge base and short-term conversation memory.

Provides protocol definitions plus the single-process implementations used
by the service.
"""

from raven_rag.storage.conversations.memory import InMemoryConversationStore
from raven_rag.storage.knowledge.json_file import JsonKnowledgeStore
from raven_rag.storage.protocols import ConversationStore, KnowledgeStore

__all__ = [
    "KnowledgeStore",
    "ConversationStore",
    "JsonKnowledgeStore",
    "InMemoryConversationStore",
]
