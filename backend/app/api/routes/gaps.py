from fastapi import APIRouter, Depends, Query

from app.api.deps import get_materials_service, get_storage
from app.schemas.analysis import GapAnalysisRequest, TeachConceptRequest, TeachConceptResponse
from app.schemas.entities import GapRecord
from app.services.materials_service import MaterialsService
from app.storage.base import Storage

router = APIRouter()


@router.post("", response_model=list[GapRecord])
async def analyze_gaps(data: GapAnalysisRequest, service: MaterialsService = Depends(get_materials_service)):
    """Analyze teaching gaps and append them to the session."""
    return await service.analyze_gaps(data.session_id, data.material_ids)


@router.get("", response_model=list[GapRecord])
async def list_gaps(session_id: int = Query(..., alias="sessionId"), storage: Storage = Depends(get_storage)):
    return await storage.list_gaps_by_session(session_id)


@router.post("/teach", response_model=TeachConceptResponse)
async def teach_concept(data: TeachConceptRequest, service: MaterialsService = Depends(get_materials_service)):
    """Mark a gap concept as covered and refocus the session on it."""
    return await service.teach_concept(data.session_id, data.concept)
