"""Tests for the command line entry point."""

import json

import pytest

from raven_rag import cli
from raven_rag.config import Settings


@pytest.fixture
def settings(tmp_path):
    return Settings(knowledge_path=str(tmp_path / "kb.json"), _env_file=None)


def test_split_paragraphs():
    text = "First paragraph\nstill first.\n\n\nSecond one.\n   \nThird.\n"

    assert cli.split_paragraphs(text) == [
        "First paragraph\nstill first.",
        "Second one.",
        "Third.",
    ]


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_ingest_and_list(tmp_path, settings, make_embedding, monkeypatch, capsys):
    source = tmp_path / "notes.txt"
    source.write_text("Adil built a RAG server.\n\nAdil likes hiking.\n", encoding="utf-8")
    monkeypatch.setattr(cli, "get_settings", lambda: settings)
    monkeypatch.setattr(cli, "build_embedding", lambda s: make_embedding())

    assert cli.main(["ingest", str(source)]) == 0
    assert "Ingested 2 entries" in capsys.readouterr().out

    rows = json.loads((tmp_path / "kb.json").read_text())
    assert [row["text"] for row in rows] == ["Adil built a RAG server.", "Adil likes hiking."]

    assert cli.main(["list"]) == 0
    assert "Adil likes hiking." in capsys.readouterr().out


def test_ingest_without_embedding_gateway(tmp_path, settings, monkeypatch, capsys):
    source = tmp_path / "notes.txt"
    source.write_text("Some text", encoding="utf-8")
    monkeypatch.setattr(cli, "get_settings", lambda: settings)
    monkeypatch.setattr(cli, "build_embedding", lambda s: None)

    assert cli.main(["ingest", str(source)]) == 1
    assert "Embedding service unavailable" in capsys.readouterr().err
