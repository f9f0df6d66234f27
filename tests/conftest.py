"""Shared fakes for the embedding and completion gateways."""

from typing import Dict, List, Optional
from unittest.mock import AsyncMock

import pytest


class FakeEmbedding:
    """Deterministic embedder: looks vectors up by text."""

    def __init__(self, vectors: Optional[Dict[str, List[float]]] = None, default=None):
        self.vectors = vectors or {}
        self.default = default or [1.0, 0.0, 0.0]
        self.calls: List[str] = []

    @property
    def dimension(self) -> int:
        return len(self.default)

    @property
    def model_name(self) -> str:
        return "fake-embedding"

    async def embed_document(self, text: str) -> List[float]:
        self.calls.append(text)
        return list(self.vectors.get(text, self.default))

    async def embed_query(self, text: str) -> List[float]:
        self.calls.append(text)
        return list(self.vectors.get(text, self.default))


class FakeCompletion:
    """Records every message sequence and answers with a numbered reply."""

    def __init__(self, answer: str = "Answer"):
        self.answer = answer
        self.calls: List[list] = []
        self.complete = AsyncMock(side_effect=self._complete)

    @property
    def model_name(self) -> str:
        return "fake-chat"

    async def _complete(self, messages) -> str:
        self.calls.append(list(messages))
        return f"{self.answer} {len(self.calls)}"


@pytest.fixture
def fake_embedding():
    return FakeEmbedding()


@pytest.fixture
def fake_completion():
    return FakeCompletion()


@pytest.fixture
def make_embedding():
    """Factory for FakeEmbedding with custom vectors."""
    return FakeEmbedding
