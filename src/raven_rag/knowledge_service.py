import asyncio
import logging
from typing import Iterable, List, Optional

from raven_rag.embeddings import TextEmbedding
from raven_rag.errors import InvalidRequest, NotFound, UpstreamUnavailable
from raven_rag.models import KnowledgeEntry
from raven_rag.storage import KnowledgeStore

logger = logging.getLogger(__name__)


class KnowledgeService:
    """Admin operations on the knowledge base: embed text, then mutate the store."""

    def __init__(
        self,
        store: KnowledgeStore,
        embedding: Optional[TextEmbedding],
        timeout: float = 30.0,
    ):
        self.store = store
        self.embedding = embedding
        self.timeout = timeout

    @staticmethod
    def _clean(text: Optional[str]) -> str:
        if not isinstance(text, str) or not text.strip():
            raise InvalidRequest("Invalid text")
        return text.strip()

    async def _embed(self, text: str) -> List[float]:
        if self.embedding is None:
            logger.error("Embedding gateway not configured")
            raise UpstreamUnavailable("Embedding service unavailable")

        try:
            return await asyncio.wait_for(self.embedding.embed_document(text), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Document embedding timed out after {self.timeout}s")
            raise UpstreamUnavailable("Embedding service timed out") from e

    async def ingest(self, text: Optional[str]) -> KnowledgeEntry:
        """
        Embed a snippet and add it to the knowledge base.

        Raises:
            InvalidRequest: If text is missing or blank
            UpstreamUnavailable: If the embedding gateway is absent or failing
            DimensionMismatch: If the embedding does not fit the store
            StorageFailure: If the snapshot could not be written
        """
        text = self._clean(text)
        vector = await self._embed(text)
        entry_id = await self.store.append(text, vector)
        entry = await self.store.get(entry_id)
        if entry is None:
            # Deleted by a concurrent request between append and read-back
            raise NotFound(f"Knowledge entry {entry_id} not found")
        return entry

    async def ingest_many(self, texts: Iterable[str]) -> List[str]:
        """Ingest snippets one after another, skipping blank ones. Returns the new IDs."""
        ids = []
        for text in texts:
            if not text or not text.strip():
                continue
            entry = await self.ingest(text)
            ids.append(entry.id)
        logger.info(f"Ingested {len(ids)} knowledge entries")
        return ids

    async def update(self, entry_id: str, text: Optional[str]) -> KnowledgeEntry:
        """
        Re-embed an entry's new text and replace it.

        Raises:
            NotFound: If no entry has this ID
        """
        text = self._clean(text)
        if await self.store.get(entry_id) is None:
            raise NotFound(f"Knowledge entry {entry_id} not found")

        vector = await self._embed(text)
        return await self.store.update(entry_id, text, vector)

    async def delete(self, entry_id: str) -> bool:
        return await self.store.delete(entry_id)

    async def list_entries(self) -> List[KnowledgeEntry]:
        return await self.store.snapshot_all()

    async def count(self) -> int:
        return await self.store.count()
