"""
Runtime configuration for raven-rag.

Values come from ``RAVEN_``-prefixed environment variables or a ``.env``
file. ``GEMINI_API_KEY`` is honoured as a fallback for both gateway keys.
"""

import os
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from raven_rag.prompts import DEFAULT_PERSONA

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RAVEN_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Knowledge base
    knowledge_path: str = "vector-database.json"
    relevance_threshold: float = Field(default=0.5, ge=-1.0, le=1.0)
    top_k: int = Field(default=3, ge=1)

    # Conversation memory
    history_window: int = 6
    session_idle_ttl: float = Field(default=3600.0, gt=0)
    session_sweep_interval: float = Field(default=300.0, gt=0)

    # Gateways
    gateway_timeout: float = Field(default=30.0, gt=0)
    embedding_model: str = "text-embedding-004"
    embedding_api_key: Optional[str] = None
    embedding_base_url: Optional[str] = GEMINI_OPENAI_BASE_URL
    embedding_dimensions: Optional[int] = None
    chat_provider: Literal["openai", "ollama"] = "openai"
    chat_model: str = "gemini-2.5-pro"
    chat_api_key: Optional[str] = None
    chat_base_url: Optional[str] = GEMINI_OPENAI_BASE_URL
    chat_temperature: Optional[float] = None
    persona: str = DEFAULT_PERSONA

    # HTTP service
    admin_token: Optional[str] = None
    cors_origins: List[str] = ["*"]
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    @field_validator("history_window")
    @classmethod
    def _window_holds_pairs(cls, value: int) -> int:
        if value <= 0 or value % 2:
            raise ValueError("history_window must be a positive even number")
        return value

    @property
    def resolved_embedding_api_key(self) -> Optional[str]:
        return self.embedding_api_key or os.getenv("GEMINI_API_KEY")

    @property
    def resolved_chat_api_key(self) -> Optional[str]:
        return self.chat_api_key or os.getenv("GEMINI_API_KEY")


@lru_cache
def get_settings() -> Settings:
    return Settings()
