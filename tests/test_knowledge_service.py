"""
Unit tests for KnowledgeService.
"""

import json
from unittest.mock import AsyncMock

import pytest

from raven_rag.errors import InvalidRequest, NotFound, UpstreamUnavailable
from raven_rag.knowledge_service import KnowledgeService
from raven_rag.storage import JsonKnowledgeStore


@pytest.fixture
def snapshot_path(tmp_path):
    return tmp_path / "vector-database.json"


@pytest.fixture
def store(snapshot_path):
    return JsonKnowledgeStore(snapshot_path)


@pytest.fixture
def service(store, make_embedding):
    embedding = make_embedding({"Adil built a RAG server": [1.0, 0.0], "new text": [0.0, 1.0]})
    return KnowledgeService(store, embedding, timeout=5.0)


@pytest.mark.asyncio
async def test_ingest_embeds_and_stores(service, snapshot_path):
    entry = await service.ingest("  Adil built a RAG server  ")

    assert entry.text == "Adil built a RAG server"
    assert entry.vector == [1.0, 0.0]
    assert await service.count() == 1
    assert json.loads(snapshot_path.read_text())[0]["id"] == entry.id


@pytest.mark.asyncio
@pytest.mark.parametrize("text", [None, "", "   "])
async def test_ingest_rejects_blank_text(service, text):
    with pytest.raises(InvalidRequest):
        await service.ingest(text)

    assert await service.count() == 0


@pytest.mark.asyncio
async def test_ingest_without_embedding_gateway(store):
    service = KnowledgeService(store, None)

    with pytest.raises(UpstreamUnavailable):
        await service.ingest("text")

    assert await store.count() == 0


@pytest.mark.asyncio
async def test_ingest_embedding_failure(store):
    embedding = AsyncMock()
    embedding.embed_document = AsyncMock(side_effect=UpstreamUnavailable())
    service = KnowledgeService(store, embedding)

    with pytest.raises(UpstreamUnavailable):
        await service.ingest("text")

    assert await store.count() == 0


@pytest.mark.asyncio
async def test_ingest_many_skips_blank(service):
    ids = await service.ingest_many(["one", "", "  ", "two"])

    assert len(ids) == 2
    assert [e.text for e in await service.list_entries()] == ["one", "two"]


@pytest.mark.asyncio
async def test_update_re_embeds(service):
    entry = await service.ingest("Adil built a RAG server")

    updated = await service.update(entry.id, "new text")

    assert updated.text == "new text"
    assert updated.vector == [0.0, 1.0]


@pytest.mark.asyncio
async def test_update_missing_entry_skips_embedding(store, make_embedding):
    embedding = make_embedding()
    service = KnowledgeService(store, embedding)

    with pytest.raises(NotFound):
        await service.update("missing", "text")

    assert embedding.calls == []


@pytest.mark.asyncio
async def test_delete_is_idempotent(service):
    entry = await service.ingest("Adil built a RAG server")

    assert await service.delete(entry.id) is True
    assert await service.delete(entry.id) is False
    assert await service.count() == 0
