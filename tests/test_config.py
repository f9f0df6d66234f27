"""Tests for environment configuration."""

import pytest
from pydantic import ValidationError

from raven_rag.config import GEMINI_OPENAI_BASE_URL, Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    settings = Settings(_env_file=None)

    assert settings.relevance_threshold == 0.5
    assert settings.top_k == 3
    assert settings.history_window == 6
    assert settings.port == 3000
    assert settings.embedding_base_url == GEMINI_OPENAI_BASE_URL
    assert settings.admin_token is None
    assert settings.resolved_chat_api_key is None


def test_reads_prefixed_environment(monkeypatch):
    monkeypatch.setenv("RAVEN_RELEVANCE_THRESHOLD", "0.45")
    monkeypatch.setenv("RAVEN_HISTORY_WINDOW", "10")
    monkeypatch.setenv("RAVEN_ADMIN_TOKEN", "token")

    settings = Settings(_env_file=None)

    assert settings.relevance_threshold == 0.45
    assert settings.history_window == 10
    assert settings.admin_token == "token"


def test_gemini_key_fallback(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")

    settings = Settings(chat_api_key="chat-key", _env_file=None)

    assert settings.resolved_embedding_api_key == "gemini-key"
    assert settings.resolved_chat_api_key == "chat-key"


@pytest.mark.parametrize("window", [0, 5, -2])
def test_history_window_must_be_positive_even(window):
    with pytest.raises(ValidationError):
        Settings(history_window=window, _env_file=None)


def test_threshold_bounds():
    with pytest.raises(ValidationError):
        Settings(relevance_threshold=1.5, _env_file=None)
