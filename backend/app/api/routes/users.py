from fastapi import APIRouter, Depends

from app.api.deps import get_storage
from app.core.exceptions import RecordNotFoundError
from app.schemas.entities import UserCreate, UserRecord
from app.storage.base import Storage

router = APIRouter()


@router.post("", response_model=UserRecord, response_model_exclude={"password"}, status_code=201)
async def create_user(data: UserCreate, storage: Storage = Depends(get_storage)):
    return await storage.create_user(data)


@router.get("/{user_id}", response_model=UserRecord, response_model_exclude={"password"})
async def get_user(user_id: int, storage: Storage = Depends(get_storage)):
    user = await storage.get_user(user_id)
    if user is None:
        raise RecordNotFoundError("User", user_id)
    return user
