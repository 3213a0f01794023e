from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from app.api.deps import get_materials_service, get_storage
from app.schemas.entities import MaterialCreate, MaterialRecord
from app.services.materials_service import MaterialsService
from app.storage.base import Storage

router = APIRouter()


@router.post("", response_model=MaterialRecord, status_code=201)
async def create_material(data: MaterialCreate, service: MaterialsService = Depends(get_materials_service)):
    """Store a material and extract its key concepts."""
    return await service.create_material(data)


@router.post("/upload", response_model=list[MaterialRecord], status_code=201)
async def upload_materials(
    files: list[UploadFile] = File(...),
    user_id: int = Form(..., alias="userId"),
    session_id: int | None = Form(None, alias="sessionId"),
    service: MaterialsService = Depends(get_materials_service),
):
    """Store each multipart ``files`` part as a material; the type comes from the file name.

    File bytes are decoded as UTF-8 with replacement characters.
    """
    uploads = [(f.filename or "upload", await f.read()) for f in files]
    return await service.upload(user_id, session_id, uploads)


@router.get("", response_model=list[MaterialRecord])
async def list_materials(
    user_id: int | None = Query(None, alias="userId"),
    session_id: int | None = Query(None, alias="sessionId"),
    storage: Storage = Depends(get_storage),
):
    if session_id is not None:
        return await storage.list_materials_by_session(session_id)
    if user_id is not None:
        return await storage.list_materials_by_user(user_id)
    raise HTTPException(status_code=400, detail="userId or sessionId is required")
