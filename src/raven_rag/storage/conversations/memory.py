"""
In-memory conversation storage implementation.

Keeps the most recent turns of every session in a bounded deque. Suitable
for a single-process deployment; data is lost on restart.
"""

import asyncio
import logging
import time
from collections import deque
from contextlib import asynccontextmanager
from typing import AsyncIterator, Deque, Dict, List, Optional

from raven_rag.models import ConversationTurn

logger = logging.getLogger(__name__)

class InMemoryConversationStore:
    """
    In-memory implementation of the ConversationStore protocol.

    Each session owns a deque capped at ``window`` turns, so the oldest turns
    drop out first (FIFO). Sessions are independent: each has its own lock
    and nothing is shared across sessions.
    """

    def __init__(self, window: int = 6):
        """
        Initialize the store.

        Args:
            window: Maximum number of turns kept per session (positive, even)
        """
        if window <= 0 or window % 2:
            raise ValueError("window must be a positive even number")

        self._window = window
        self._sessions: Dict[str, Deque[ConversationTurn]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}
        self._last_seen: Dict[str, float] = {}

        logger.info(f"InMemoryConversationStore initialized (window={window})")

    @property
    def window(self) -> int:
        return self._window

    @asynccontextmanager
    async def session_lock(self, session_id: str) -> AsyncIterator[None]:
        """
        Hold the lock of one session.

        The lock lives as long as some task holds or waits for it; the last
        user to leave drops it.
        """
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        self._lock_users[session_id] = self._lock_users.get(session_id, 0) + 1

        try:
            async with lock:
                yield
        finally:
            remaining = self._lock_users[session_id] - 1
            if remaining:
                self._lock_users[session_id] = remaining
            else:
                del self._lock_users[session_id]
                del self._locks[session_id]

    def is_busy(self, session_id: str) -> bool:
        """Whether a task holds or waits for the session lock."""
        return session_id in self._lock_users

    async def append(
        self, session_id: str, user_turn: ConversationTurn, assistant_turn: ConversationTurn
    ) -> int:
        """Append a user/assistant pair to a session's history."""
        history = self._sessions.get(session_id)
        if history is None:
            history = self._sessions[session_id] = deque(maxlen=self._window)

        history.append(user_turn)
        history.append(assistant_turn)
        self._last_seen[session_id] = time.monotonic()

        logger.debug(f"Added turn pair for session {session_id} (total: {len(history)})")
        return len(history)

    async def get(self, session_id: str) -> List[ConversationTurn]:
        history = self._sessions.get(session_id)
        if history is None:
            return []

        self._last_seen[session_id] = time.monotonic()
        return list(history)

    async def dump_all(self) -> Dict[str, List[ConversationTurn]]:
        return {session_id: list(history) for session_id, history in self._sessions.items()}

    async def clear(self, session_id: str) -> int:
        """Forget a session. Returns the number of turns dropped."""
        history = self._sessions.pop(session_id, None)
        self._last_seen.pop(session_id, None)

        count = len(history) if history else 0
        if count:
            logger.info(f"Cleared {count} turns for session {session_id}")
        return count

    async def evict_idle(self, max_idle_seconds: float, now: Optional[float] = None) -> int:
        """Drop sessions idle for longer than ``max_idle_seconds``."""
        now = time.monotonic() if now is None else now
        idle = [
            session_id
            for session_id, last_seen in self._last_seen.items()
            if now - last_seen > max_idle_seconds and not self.is_busy(session_id)
        ]

        for session_id in idle:
            await self.clear(session_id)

        if idle:
            logger.info(f"Evicted {len(idle)} idle sessions (idle > {max_idle_seconds}s)")
        return len(idle)

    def last_seen(self, session_id: str) -> Optional[float]:
        return self._last_seen.get(session_id)
