"""
Storage protocol definitions for the knowledge base and conversation memory.

These protocols define the interface that storage implementations must provide.
"""

from typing import AsyncContextManager, Dict, List, Optional, Protocol

from raven_rag.models import ConversationTurn, KnowledgeEntry


class KnowledgeStore(Protocol):
    """
    Protocol for the knowledge base.

    Implementations must serialise mutations against each other and against
    full scans, so readers never observe a store mid-mutation.
    """

    @property
    def dimension(self) -> Optional[int]:
        """Embedding dimensionality of stored entries, None while empty."""
        ...

    async def load(self) -> None:
        """Load the durable snapshot. Missing or corrupt data yields an empty store."""
        ...

    async def append(self, text: str, vector: List[float]) -> str:
        """
        Add an entry.

        Args:
            text: Snippet text
            vector: Embedding of the text

        Returns:
            The generated entry ID

        Raises:
            DimensionMismatch: If the vector length differs from stored entries
            StorageFailure: If the snapshot could not be written
        """
        ...

    async def update(self, entry_id: str, text: str, vector: List[float]) -> KnowledgeEntry:
        """
        Replace text and vector of an entry.

        Raises:
            NotFound: If no entry has this ID
            DimensionMismatch: If the vector length differs from stored entries
            StorageFailure: If the snapshot could not be written
        """
        ...

    async def delete(self, entry_id: str) -> bool:
        """
        Remove an entry. Deleting an absent ID is a successful no-op.

        Returns:
            True if an entry was removed
        """
        ...

    async def get(self, entry_id: str) -> Optional[KnowledgeEntry]:
        ...

    async def snapshot_all(self) -> List[KnowledgeEntry]:
        """Consistent copy of all entries in store order."""
        ...

    async def count(self) -> int:
        ...


class ConversationStore(Protocol):
    """
    Protocol for short-term conversation memory.

    Stores the most recent turns of each session in a bounded window.
    """

    @property
    def window(self) -> int:
        """Maximum number of turns kept per session."""
        ...

    def session_lock(self, session_id: str) -> AsyncContextManager:
        """Lock serialising read-then-append sequences for one session."""
        ...

    async def append(
        self, session_id: str, user_turn: ConversationTurn, assistant_turn: ConversationTurn
    ) -> int:
        """
        Append a user/assistant pair, dropping the oldest turns beyond the window.

        Returns:
            Number of turns stored for the session afterwards
        """
        ...

    async def get(self, session_id: str) -> List[ConversationTurn]:
        """Turns of a session, oldest first. Empty for unknown sessions."""
        ...

    async def dump_all(self) -> Dict[str, List[ConversationTurn]]:
        ...

    async def clear(self, session_id: str) -> int:
        ...

    async def evict_idle(self, max_idle_seconds: float, now: Optional[float] = None) -> int:
        """
        Drop sessions that have not been touched within ``max_idle_seconds``.

        Returns:
            Number of sessions evicted
        """
        ...
