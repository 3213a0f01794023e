from fastapi import APIRouter, Depends, Query

from app.api.deps import get_storage
from app.core.exceptions import RecordNotFoundError
from app.schemas.entities import AiPersonaCreate, AiPersonaRecord, AiPersonaUpdate
from app.storage.base import Storage

router = APIRouter()


@router.post("", response_model=AiPersonaRecord, status_code=201)
async def create_persona(data: AiPersonaCreate, storage: Storage = Depends(get_storage)):
    return await storage.create_ai_persona(data)


@router.get("", response_model=list[AiPersonaRecord])
async def list_personas(user_id: int = Query(..., alias="userId"), storage: Storage = Depends(get_storage)):
    return await storage.list_ai_personas_by_user(user_id)


@router.get("/{persona_id}", response_model=AiPersonaRecord)
async def get_persona(persona_id: int, storage: Storage = Depends(get_storage)):
    persona = await storage.get_ai_persona(persona_id)
    if persona is None:
        raise RecordNotFoundError("AI Persona", persona_id)
    return persona


@router.patch("/{persona_id}", response_model=AiPersonaRecord)
async def update_persona(persona_id: int, data: AiPersonaUpdate, storage: Storage = Depends(get_storage)):
    """Edit a persona; only fields present in the body change."""
    return await storage.update_ai_persona(persona_id, data.model_dump(exclude_unset=True, exclude_none=True))
