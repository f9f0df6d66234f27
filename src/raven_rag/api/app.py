"""
HTTP service for raven-rag.

``create_app`` builds a FastAPI application that owns its state: the
knowledge store, conversation memory and gateways are created (or injected)
per application and live on ``app.state.services``. The lifespan loads the
knowledge snapshot on startup and runs the idle-session sweeper until
shutdown.
"""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from raven_rag import __version__
from raven_rag.api.dependencies import (
    Services,
    get_services,
    get_session_id,
    require_admin,
)
from raven_rag.api.schemas import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HealthResponse,
    KnowledgeDeletedResponse,
    KnowledgeSavedResponse,
    KnowledgeTextRequest,
    KnowledgeUpdatedResponse,
    SessionsResponse,
)
from raven_rag.chat_service import ChatService
from raven_rag.completions import ChatCompletion, build_completion
from raven_rag.config import Settings, get_settings
from raven_rag.embeddings import TextEmbedding, build_embedding
from raven_rag.errors import RavenError
from raven_rag.knowledge_service import KnowledgeService
from raven_rag.routing import RelevanceRouter
from raven_rag.storage import (
    ConversationStore,
    InMemoryConversationStore,
    JsonKnowledgeStore,
    KnowledgeStore,
)

logger = logging.getLogger(__name__)

_UNSET = object()

_ERRORS = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}
_CHAT_ERRORS = {**_ERRORS, 429: {"model": ErrorResponse}}
_ADMIN_ERRORS = {
    **_ERRORS,
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


def build_services(
    settings: Settings,
    store: Optional[KnowledgeStore] = None,
    conversations: Optional[ConversationStore] = None,
    embedding=_UNSET,
    completion=_UNSET,
) -> Services:
    """
    Wire the components together.

    Gateways left unset are built from settings; pass None explicitly to
    run without one.
    """
    store = store if store is not None else JsonKnowledgeStore(settings.knowledge_path)
    conversations = (
        conversations
        if conversations is not None
        else InMemoryConversationStore(window=settings.history_window)
    )
    embedder: Optional[TextEmbedding] = (
        build_embedding(settings) if embedding is _UNSET else embedding
    )
    completer: Optional[ChatCompletion] = (
        build_completion(settings) if completion is _UNSET else completion
    )

    chat = ChatService(
        store=store,
        conversations=conversations,
        router=RelevanceRouter(settings.relevance_threshold),
        embedding=embedder,
        completion=completer,
        persona=settings.persona,
        top_k=settings.top_k,
        timeout=settings.gateway_timeout,
    )
    knowledge = KnowledgeService(store, embedder, timeout=settings.gateway_timeout)

    return Services(
        settings=settings,
        store=store,
        conversations=conversations,
        chat=chat,
        knowledge=knowledge,
    )


async def _sweep_idle_sessions(services: Services) -> None:
    settings = services.settings
    while True:
        await asyncio.sleep(settings.session_sweep_interval)
        try:
            await services.conversations.evict_idle(settings.session_idle_ttl)
        except Exception:
            logger.exception("Idle session sweep failed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    services: Services = app.state.services
    await services.store.load()
    sweeper = asyncio.create_task(_sweep_idle_sessions(services))
    logger.info(f"raven-rag {__version__} started")
    try:
        yield
    finally:
        sweeper.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper
        logger.info("raven-rag stopped")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[KnowledgeStore] = None,
    conversations: Optional[ConversationStore] = None,
    embedding=_UNSET,
    completion=_UNSET,
) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="raven-rag",
        version=__version__,
        description="Retrieval-augmented chat over a small curated knowledge base",
        lifespan=lifespan,
    )
    app.state.services = build_services(settings, store, conversations, embedding, completion)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RavenError)
    async def raven_error_handler(request: Request, exc: RavenError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error(400, "Malformed request body")

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error in {request.method} {request.url.path}")
        return _error(500, "Internal server error")

    @app.get("/health", response_model=HealthResponse, responses={500: {"model": ErrorResponse}})
    async def health(services: Services = Depends(get_services)):
        return HealthResponse(
            status="ok",
            entries=await services.store.count(),
            embedding_available=services.chat.embedding is not None,
            completion_available=services.chat.completion is not None,
        )

    @app.post("/chat", response_model=ChatResponse, responses=_CHAT_ERRORS)
    async def chat(
        body: ChatRequest,
        session_id: str = Depends(get_session_id),
        services: Services = Depends(get_services),
    ):
        result = await services.chat.ask(body.question, session_id)
        return ChatResponse(answer=result.answer)

    @app.post(
        "/knowledge",
        response_model=KnowledgeSavedResponse,
        dependencies=[Depends(require_admin)],
        responses=_ADMIN_ERRORS,
    )
    async def add_knowledge(body: KnowledgeTextRequest, services: Services = Depends(get_services)):
        entry = await services.knowledge.ingest(body.text)
        return KnowledgeSavedResponse(id=entry.id, totalEntries=await services.knowledge.count())

    @app.get("/knowledge", dependencies=[Depends(require_admin)], responses=_ADMIN_ERRORS)
    async def list_knowledge(services: Services = Depends(get_services)):
        entries = await services.knowledge.list_entries()
        return JSONResponse(content=[entry.to_snapshot() for entry in entries])

    @app.put(
        "/knowledge/{entry_id}",
        response_model=KnowledgeUpdatedResponse,
        dependencies=[Depends(require_admin)],
        responses=_ADMIN_ERRORS,
    )
    async def update_knowledge(
        entry_id: str, body: KnowledgeTextRequest, services: Services = Depends(get_services)
    ):
        entry = await services.knowledge.update(entry_id, body.text)
        return KnowledgeUpdatedResponse(id=entry.id)

    @app.delete(
        "/knowledge/{entry_id}",
        response_model=KnowledgeDeletedResponse,
        dependencies=[Depends(require_admin)],
        responses=_ADMIN_ERRORS,
    )
    async def delete_knowledge(entry_id: str, services: Services = Depends(get_services)):
        removed = await services.knowledge.delete(entry_id)
        return KnowledgeDeletedResponse(
            id=entry_id, removed=removed, totalEntries=await services.knowledge.count()
        )

    @app.get(
        "/admin/sessions",
        response_model=SessionsResponse,
        dependencies=[Depends(require_admin)],
        responses=_ADMIN_ERRORS,
    )
    async def list_sessions(services: Services = Depends(get_services)):
        return SessionsResponse(sessions=await services.conversations.dump_all())

    return app
