"""
Non-API surfaces: public service info, health probe and the app surface.

Page rendering lives in the frontend; these endpoints return the data the
pages are built from.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from align.application.modes import MODES
from align.application.use_cases import ConversationService
from align.infrastructure.persistence.database import Database
from align.presentation.api.dependencies import (
    get_conversation_service,
    get_current_subject_id,
    get_database,
)
from align.presentation.api.v1.schemas.conversation import SessionResponse

router = APIRouter()

DASHBOARD_RECENT_LIMIT = 5


@router.get("/")
async def root(request: Request):
    settings = request.app.state.settings
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@router.get("/health")
async def health_check(database: Annotated[Database, Depends(get_database)]):
    """
    Health check endpoint for load balancers and monitoring.

    Returns:
    - 200 OK if the API and database respond
    - 503 Service Unavailable otherwise
    """
    checks: dict[str, Any] = {"api": True, "database": False}
    try:
        async with database.session() as db:
            await db.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception as e:
        checks["error"] = type(e).__name__
        return JSONResponse(status_code=503, content={"status": "unhealthy", "checks": checks})
    return {"status": "healthy", "checks": checks}


@router.get("/app")
async def app_entry():
    """Entry surface of the app; the sign-in form is rendered by the frontend"""
    return {"surface": "app", "page": "entry", "authenticated": False}


@router.get("/app/dashboard")
async def dashboard(
    subject_id: Annotated[int, Depends(get_current_subject_id)],
    service: Annotated[ConversationService, Depends(get_conversation_service)],
):
    """Recent sessions of both kinds for the signed-in subject"""
    recent: dict[str, list[dict[str, Any]]] = {}
    for kind, mode in MODES.items():
        sessions = await service.list_sessions(kind, subject_id, limit=DASHBOARD_RECENT_LIMIT)
        recent[kind.value] = [
            SessionResponse.from_session(s, mode).model_dump(
                mode="json", by_alias=True, exclude_unset=True
            )
            for s in sessions
        ]
    return {"subjectId": subject_id, "recent": recent, "success": True}
