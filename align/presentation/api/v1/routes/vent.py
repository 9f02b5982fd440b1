import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends

from align.application.modes import get_mode
from align.application.use_cases import ConversationService
from align.domain.enums import SessionKind
from align.presentation.api.dependencies import (
    disconnect_watcher,
    get_conversation_service,
    get_current_subject_id,
)
from align.presentation.api.v1.schemas.conversation import (
    SessionListResponse,
    SessionResponse,
    TurnResponse,
    VentTurnRequest,
)

router = APIRouter()

mode = get_mode(SessionKind.VENT)


@router.post("", response_model=TurnResponse, response_model_exclude_unset=True)
async def vent_turn(
    data: VentTurnRequest,
    subject_id: Annotated[int, Depends(get_current_subject_id)],
    service: Annotated[ConversationService, Depends(get_conversation_service)],
    cancel: Annotated[asyncio.Event, Depends(disconnect_watcher)],
):
    """Private reflection turn: reply with guidance and record the exchange"""
    result = await service.take_turn(mode, subject_id, data.to_turn(), cancel)
    return TurnResponse.from_result(result)


@router.get("", response_model=SessionListResponse, response_model_exclude_unset=True)
async def list_vent_sessions(
    subject_id: Annotated[int, Depends(get_current_subject_id)],
    service: Annotated[ConversationService, Depends(get_conversation_service)],
):
    """The caller's vent sessions, most recently updated first"""
    sessions = await service.list_sessions(SessionKind.VENT, subject_id)
    return SessionListResponse(
        sessions=[SessionResponse.from_session(s, mode) for s in sessions], success=True
    )
