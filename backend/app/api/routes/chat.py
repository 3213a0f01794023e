from fastapi import APIRouter, Depends

from app.api.deps import get_chat_service
from app.schemas.teaching import LegacyChatRequest, LegacyChatResponse
from app.services.chat_service import ChatService

router = APIRouter()


@router.post("", response_model=LegacyChatResponse)
async def chat(data: LegacyChatRequest, service: ChatService = Depends(get_chat_service)):
    """Single persona reply; both turns are stored when sessionId is given."""
    return LegacyChatResponse(message=await service.legacy_reply(data))
