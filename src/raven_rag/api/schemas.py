"""Request and response bodies of the HTTP API."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from raven_rag.models import ConversationTurn


class ChatRequest(BaseModel):
    question: Optional[str] = Field(default=None, description="The user's question")


class ChatResponse(BaseModel):
    answer: str


class KnowledgeTextRequest(BaseModel):
    text: Optional[str] = Field(default=None, description="Snippet text to embed and store")


class KnowledgeSavedResponse(BaseModel):
    status: str = "Saved"
    id: str
    totalEntries: int


class KnowledgeUpdatedResponse(BaseModel):
    status: str = "Updated"
    id: str


class KnowledgeDeletedResponse(BaseModel):
    status: str = "Deleted"
    id: str
    removed: bool
    totalEntries: int


class SessionsResponse(BaseModel):
    sessions: Dict[str, List[ConversationTurn]]


class HealthResponse(BaseModel):
    status: str
    entries: int
    embedding_available: bool
    completion_available: bool


class ErrorResponse(BaseModel):
    error: str
