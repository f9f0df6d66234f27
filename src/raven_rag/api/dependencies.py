"""FastAPI dependencies: service lookup, session identity, admin auth."""

import secrets
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, Request

from raven_rag.chat_service import ChatService
from raven_rag.config import Settings
from raven_rag.errors import Forbidden, Unauthorized
from raven_rag.knowledge_service import KnowledgeService
from raven_rag.storage import ConversationStore, KnowledgeStore

SESSION_HEADER = "X-Session-Id"
ADMIN_TOKEN_HEADER = "X-Admin-Token"


@dataclass
class Services:
    """State owned by one application instance."""

    settings: Settings
    store: KnowledgeStore
    conversations: ConversationStore
    chat: ChatService
    knowledge: KnowledgeService


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_session_id(
    request: Request,
    x_session_id: Optional[str] = Header(default=None, alias=SESSION_HEADER),
) -> str:
    """Caller-supplied session ID, falling back to the client address."""
    if x_session_id and x_session_id.strip():
        return x_session_id.strip()
    if request.client and request.client.host:
        return request.client.host
    return "anonymous"


def require_admin(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    x_admin_token: Optional[str] = Header(default=None, alias=ADMIN_TOKEN_HEADER),
) -> None:
    """
    Accept ``Authorization: Bearer <token>`` or ``X-Admin-Token``.

    Raises:
        Unauthorized: If no credential was sent
        Forbidden: If the credential is wrong or admin access is disabled
    """
    token = x_admin_token
    if token is None and authorization:
        scheme, _, value = authorization.partition(" ")
        if scheme.lower() == "bearer" and value:
            token = value.strip()

    if not token:
        raise Unauthorized("Admin credentials required")

    expected = get_services(request).settings.admin_token
    if not expected or not secrets.compare_digest(token.encode(), expected.encode()):
        raise Forbidden("Unauthorized")
