"""Session routes: CRUD plus the progress, chat and export endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from app.api.deps import get_chat_service, get_progress_service, get_storage
from app.core.exceptions import RecordNotFoundError
from app.schemas.entities import SessionCreate, SessionRecord, SessionUpdate
from app.schemas.teaching import (
    AdvanceResponse,
    ChatSendRequest,
    ChatSendResponse,
    FeedbackRequest,
    FeedbackResponse,
    ProgressResponse,
)
from app.services.chat_service import ChatService
from app.services.export_service import export_filename, export_session
from app.services.progress_service import ProgressService
from app.storage.base import Storage

router = APIRouter()


@router.post("", response_model=SessionRecord, status_code=201)
async def create_session(data: SessionCreate, storage: Storage = Depends(get_storage)):
    return await storage.create_session(data)


@router.get("", response_model=list[SessionRecord])
async def list_sessions(user_id: int = Query(..., alias="userId"), storage: Storage = Depends(get_storage)):
    return await storage.list_sessions_by_user(user_id)


@router.get("/{session_id}", response_model=SessionRecord)
async def get_session(session_id: int, storage: Storage = Depends(get_storage)):
    session = await storage.get_session(session_id)
    if session is None:
        raise RecordNotFoundError("Session", session_id)
    return session


@router.patch("/{session_id}", response_model=SessionRecord)
async def update_session(session_id: int, data: SessionUpdate, storage: Storage = Depends(get_storage)):
    """Save title, topic, step or completion state.

    Completed steps can be added but never removed.
    """
    updates = data.model_dump(exclude_unset=True, exclude_none=True)
    if "steps_completed" in updates:
        session = await storage.get_session(session_id)
        if session is None:
            raise RecordNotFoundError("Session", session_id)
        dropped = set(session.steps_completed) - set(updates["steps_completed"])
        if dropped:
            raise HTTPException(
                status_code=400,
                detail=f"Completed steps cannot be un-marked: {sorted(s.value for s in dropped)}",
            )
    return await storage.update_session(session_id, updates)


@router.get("/{session_id}/progress", response_model=ProgressResponse)
async def get_progress(session_id: int, service: ProgressService = Depends(get_progress_service)):
    return await service.snapshot(session_id)


@router.post("/{session_id}/advance", response_model=AdvanceResponse)
async def advance_session(session_id: int, service: ProgressService = Depends(get_progress_service)):
    return await service.advance(session_id)


@router.post("/{session_id}/recompute", response_model=ProgressResponse)
async def recompute_progress(session_id: int, service: ProgressService = Depends(get_progress_service)):
    return await service.recompute(session_id)


@router.post("/{session_id}/feedback", response_model=FeedbackResponse)
async def record_feedback(
    session_id: int,
    data: FeedbackRequest,
    service: ProgressService = Depends(get_progress_service),
):
    return await service.record_feedback(session_id, data.feedback, data.message)


@router.post("/{session_id}/chat", response_model=ChatSendResponse)
async def send_chat(
    session_id: int,
    data: ChatSendRequest,
    service: ChatService = Depends(get_chat_service),
):
    """One chat turn. An AI failure still returns 200 with status "unanswered"."""
    return await service.send(session_id, data.content, is_initial=data.is_initial)


@router.get("/{session_id}/export")
async def export(session_id: int, storage: Storage = Depends(get_storage)):
    bundle = await export_session(storage, session_id)
    return JSONResponse(
        content=bundle.model_dump(mode="json", by_alias=True),
        headers={"Content-Disposition": f"attachment; filename={export_filename(session_id)}"},
    )
