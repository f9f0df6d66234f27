from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class KnowledgeEntry(BaseModel):
    """A snippet of curated knowledge together with its embedding.

    Snapshot documents use the camelCase names (``embedding``, ``createdAt``,
    ``updatedAt``); the Python attributes use snake_case.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Store-assigned identifier, stable for the entry's lifetime")
    text: str = Field(..., description="Snippet text injected as grounding context")
    vector: List[float] = Field(..., alias="embedding", description="Embedding of the text")
    created_at: datetime = Field(..., alias="createdAt", description="When the entry was ingested")
    updated_at: Optional[datetime] = Field(
        default=None, alias="updatedAt", description="When text and vector were last replaced"
    )

    def to_snapshot(self) -> dict:
        """Serialise using the snapshot field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ConversationTurn(BaseModel):
    """Model for one turn of short-term conversation memory"""

    role: Literal["user", "assistant"]
    content: str
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())


class RankedChunk(BaseModel):
    """Knowledge entry scored against a query. Never persisted."""

    id: str
    text: str
    score: float = Field(..., description="Cosine similarity in [-1, 1]")


class RouteMode(str, Enum):
    GROUNDED = "grounded"
    GENERAL = "general"


class RouteDecision(BaseModel):
    mode: RouteMode
    context_text: str = ""
    chunks: List[RankedChunk] = Field(default_factory=list)


class ChatAnswer(BaseModel):
    """Result of one orchestrated chat request"""

    answer: str
    mode: RouteMode
    session_id: str
    chunks: List[RankedChunk] = Field(
        default_factory=list, description="Chunks injected as context (empty in general mode)"
    )
