from fastapi import APIRouter, Depends, Query

from app.api.deps import get_storage
from app.schemas.entities import MessageCreate, MessageRecord
from app.storage.base import Storage

router = APIRouter()


@router.post("", response_model=MessageRecord, status_code=201)
async def create_message(data: MessageCreate, storage: Storage = Depends(get_storage)):
    return await storage.create_message(data)


@router.get("", response_model=list[MessageRecord])
async def list_messages(session_id: int = Query(..., alias="sessionId"), storage: Storage = Depends(get_storage)):
    """Transcript in creation order."""
    return await storage.list_messages_by_session(session_id)
