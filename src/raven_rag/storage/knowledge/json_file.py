"""
JSON-file knowledge store implementation.

Holds every entry in memory and mirrors the full list to a single JSON
document. Each mutation rewrites the whole document (write to a temp file,
fsync, atomic rename), which is fine for small corpora. An append-only or
incremental format is the upgrade path if the corpus grows.
"""

import asyncio
import json
import logging
import os
import tempfile
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError

from raven_rag.errors import DimensionMismatch, NotFound, StorageFailure
from raven_rag.models import KnowledgeEntry

logger = logging.getLogger(__name__)


class JsonKnowledgeStore:
    """
    Implementation of the KnowledgeStore protocol backed by a JSON snapshot.

    A single asyncio lock covers every mutation together with its snapshot
    write, and every full scan. Entries are replaced, never modified in
    place, so copies handed to readers stay consistent.

    If a snapshot write fails the mutation is rolled back in memory and
    StorageFailure is raised, keeping memory and disk identical.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        """
        Initialize the store.

        Args:
            path: Snapshot file location (None = memory only, nothing persisted)
        """
        self._path = Path(path) if path is not None else None
        self._entries: List[KnowledgeEntry] = []
        self._lock = asyncio.Lock()

        logger.info(f"JsonKnowledgeStore initialized (path={self._path})")

    @property
    def path(self) -> Optional[Path]:
        return self._path

    @property
    def dimension(self) -> Optional[int]:
        if not self._entries:
            return None
        return len(self._entries[0].vector)

    async def load(self) -> None:
        """Read the snapshot. Missing or malformed content leaves the store empty."""
        if self._path is None:
            return

        async with self._lock:
            self._entries = await asyncio.to_thread(self._read_snapshot)
        logger.info(f"Knowledge base loaded: {len(self._entries)} entries")

    def _read_snapshot(self) -> List[KnowledgeEntry]:
        if not self._path.exists():
            logger.warning(f"Knowledge snapshot {self._path} not found, starting empty")
            return []

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Knowledge snapshot {self._path} unreadable ({e}), starting empty")
            return []

        if not isinstance(raw, list):
            logger.warning(f"Knowledge snapshot {self._path} is not a list, starting empty")
            return []

        loaded_at = datetime.now()
        entries: List[KnowledgeEntry] = []
        seen_ids = set()

        for index, item in enumerate(raw):
            if not isinstance(item, dict):
                logger.warning(f"Skipping snapshot row {index}: not an object")
                continue

            # Rows written by older tooling have numeric ids and no timestamps
            row = dict(item)
            if "id" in row and row["id"] is not None:
                row["id"] = str(row["id"])
            else:
                row["id"] = str(uuid.uuid4())
            row.setdefault("createdAt", loaded_at.isoformat())

            try:
                entry = KnowledgeEntry.model_validate(row)
            except ValidationError as e:
                logger.warning(f"Skipping snapshot row {index}: {e.error_count()} validation errors")
                continue

            if entries and len(entry.vector) != len(entries[0].vector):
                logger.warning(
                    f"Skipping snapshot row {index}: dimension {len(entry.vector)} "
                    f"!= {len(entries[0].vector)}"
                )
                continue

            if entry.id in seen_ids:
                logger.warning(f"Skipping snapshot row {index}: duplicate id {entry.id}")
                continue

            seen_ids.add(entry.id)
            entries.append(entry)

        return entries

    def _write_snapshot(self, entries: List[KnowledgeEntry]) -> None:
        if self._path is None:
            return

        document = json.dumps([entry.to_snapshot() for entry in entries], ensure_ascii=False)
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(document)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

    async def _commit(self, previous: List[KnowledgeEntry], action: str) -> None:
        """Persist the current entries, restoring ``previous`` if the write fails."""
        try:
            await asyncio.to_thread(self._write_snapshot, list(self._entries))
        except OSError as e:
            self._entries = previous
            logger.error(f"Failed to persist knowledge snapshot after {action}, rolled back: {e}")
            raise StorageFailure() from e

    def _check_dimension(self, vector: List[float], ignore_id: Optional[str] = None) -> None:
        for entry in self._entries:
            if entry.id == ignore_id:
                continue
            if len(entry.vector) != len(vector):
                raise DimensionMismatch(expected=len(entry.vector), actual=len(vector))
            return

    def _index_of(self, entry_id: str) -> Optional[int]:
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return index
        return None

    async def append(self, text: str, vector: List[float]) -> str:
        """Add an entry and persist the snapshot."""
        async with self._lock:
            self._check_dimension(vector)

            entry = KnowledgeEntry(
                id=str(uuid.uuid4()),
                text=text,
                vector=list(vector),
                created_at=datetime.now(),
            )
            previous = list(self._entries)
            self._entries = previous + [entry]
            await self._commit(previous, f"append {entry.id}")

            logger.info(f"Saved knowledge entry {entry.id}: '{text[:50]}...' (total: {len(self._entries)})")
            return entry.id

    async def update(self, entry_id: str, text: str, vector: List[float]) -> KnowledgeEntry:
        """Replace text and vector of an entry and persist the snapshot."""
        async with self._lock:
            index = self._index_of(entry_id)
            if index is None:
                raise NotFound(f"Knowledge entry {entry_id} not found")

            self._check_dimension(vector, ignore_id=entry_id if len(self._entries) == 1 else None)

            updated = self._entries[index].model_copy(
                update={"text": text, "vector": list(vector), "updated_at": datetime.now()}
            )
            previous = list(self._entries)
            entries = list(previous)
            entries[index] = updated
            self._entries = entries
            await self._commit(previous, f"update {entry_id}")

            logger.info(f"Updated knowledge entry {entry_id}")
            return updated

    async def delete(self, entry_id: str) -> bool:
        """Remove an entry and persist the snapshot. Absent IDs are a no-op."""
        async with self._lock:
            index = self._index_of(entry_id)
            if index is None:
                logger.debug(f"Delete of absent knowledge entry {entry_id} ignored")
                return False

            previous = list(self._entries)
            self._entries = previous[:index] + previous[index + 1:]
            await self._commit(previous, f"delete {entry_id}")

            logger.info(f"Deleted knowledge entry {entry_id} (total: {len(self._entries)})")
            return True

    async def get(self, entry_id: str) -> Optional[KnowledgeEntry]:
        async with self._lock:
            index = self._index_of(entry_id)
            return None if index is None else self._entries[index]

    async def snapshot_all(self) -> List[KnowledgeEntry]:
        async with self._lock:
            return list(self._entries)

    async def count(self) -> int:
        async with self._lock:
            return len(self._entries)
