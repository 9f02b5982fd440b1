import asyncio
import logging
from collections.abc import AsyncIterator

from fastapi import Depends, Request

from align.application.interfaces.llm import ILanguageModelClient
from align.application.services import (
    ContextBuilder,
    ContextWindow,
    MediationEngine,
    TranscriptPersister,
)
from align.application.use_cases import ConversationService
from align.domain.exceptions import AuthenticationException, ResourceNotFoundException
from align.infrastructure.config.settings import Settings
from align.infrastructure.persistence.database import Database
from align.infrastructure.persistence.repositories import SqlSessionStore, SubjectRepository
from align.infrastructure.security.jwt import extract_token, resolve_subject_id
from align.shared.context import set_current_subject

logger = logging.getLogger(__name__)

DISCONNECT_POLL_SECONDS = 0.25
WATCHER_SHUTDOWN_SECONDS = 1.0


# Process-wide resources created in main.create_app / lifespan
def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_llm_client(request: Request) -> ILanguageModelClient:
    return request.app.state.llm_client


async def get_current_subject_id(
    request: Request,
    database: Database = Depends(get_database),
) -> int:
    """
    Identity gate: resolve the authenticated subject for this request.

    The token comes from the Authorization header or the session cookie.
    Runs before any session store access. The lookup uses its own short
    session so no connection is held while the turn is processed.

    Raises:
        AuthenticationException: Token missing or invalid (401)
        ResourceNotFoundException: Subject unknown or soft-deleted (404)
    """
    token = extract_token(request)
    if token is None:
        raise AuthenticationException()

    try:
        subject_id = resolve_subject_id(token)
    except ValueError as e:
        logger.info("Rejected identity token: %s", e)
        raise AuthenticationException("Could not validate credentials") from e

    async with database.session() as db:
        subject = await SubjectRepository(db).get_active_by_id(subject_id)
    if subject is None:
        raise ResourceNotFoundException("subject", subject_id)

    set_current_subject(subject.id)
    return subject.id


def _build_conversation_service(
    database: Database, llm_client: ILanguageModelClient, settings: Settings
) -> ConversationService:
    """Internal helper to wire the turn pipeline over the shared resources"""
    store = SqlSessionStore(database)
    return ConversationService(
        store=store,
        engine=MediationEngine(llm_client, timeout=settings.llm_timeout_seconds),
        context_builder=ContextBuilder(
            ContextWindow(
                max_messages=settings.context_max_messages,
                max_chars=settings.context_max_chars,
            )
        ),
        persister=TranscriptPersister(store),
    )


async def get_conversation_service(
    database: Database = Depends(get_database),
    llm_client: ILanguageModelClient = Depends(get_llm_client),
    settings: Settings = Depends(get_settings_dep),
) -> ConversationService:
    """Conversation service dependency"""
    return _build_conversation_service(database, llm_client, settings)


async def disconnect_watcher(request: Request) -> AsyncIterator[asyncio.Event]:
    """
    Event that is set once the client disconnects.

    Handed to the mediation engine so an abandoned request stops waiting on
    the model instead of drafting a reply nobody will read.
    """
    cancel = asyncio.Event()
    stop = asyncio.Event()

    async def watch() -> None:
        while not (cancel.is_set() or stop.is_set()):
            if await request.is_disconnected():
                cancel.set()
                return
            await asyncio.sleep(DISCONNECT_POLL_SECONDS)

    task = asyncio.create_task(watch())
    try:
        yield cancel
    finally:
        # The stop flag ends the loop even if a cancel is swallowed inside
        # is_disconnected(); the wait is bounded either way
        stop.set()
        task.cancel()
        await asyncio.wait({task}, timeout=WATCHER_SHUTDOWN_SECONDS)
