from typing import Optional

from fastapi import APIRouter, Depends, status

from app.api.deps import RequestPayload, get_current_user, get_payload, get_storage
from app.schemas.experience import ExperienceCreate, ExperienceUpdate
from app.schemas.user import User
from app.services import experience_service
from app.services.common import clamp_page
from app.tools.file_uploader import StorageBackend

router = APIRouter()


@router.get("")
async def read_experiences(
    userId: Optional[str] = None,
    current: Optional[bool] = None,
    page: int = 1,
    limit: int = 10,
):
    page, limit = clamp_page(page, limit)
    return await experience_service.list_experiences(userId, current, page, limit)


@router.get("/stats")
async def read_experience_stats(user: User = Depends(get_current_user)):
    return await experience_service.experience_stats(user)


@router.get("/user/{user_id}")
async def read_user_experiences(user_id: str):
    return await experience_service.list_user_experiences(user_id)


@router.get("/{experience_id}")
async def read_experience(experience_id: str):
    return await experience_service.get_experience(experience_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_experience(
    payload: RequestPayload = Depends(get_payload),
    user: User = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage),
):
    async with payload.rollback_uploads(storage):
        await payload.store_file("companyLogo", storage)
        data = payload.validate(ExperienceCreate)
        return await experience_service.create_experience(user, data)


@router.put("/{experience_id}")
async def update_experience(
    experience_id: str,
    payload: RequestPayload = Depends(get_payload),
    user: User = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage),
):
    experience = await experience_service.get_owned_experience(user, experience_id)
    async with payload.rollback_uploads(storage):
        await payload.store_file("companyLogo", storage)
        data = payload.validate(ExperienceUpdate)
        return await experience_service.update_experience(user, experience, data, storage)


@router.delete("/{experience_id}")
async def delete_experience(
    experience_id: str,
    user: User = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage),
):
    await experience_service.delete_experience(user, experience_id, storage)
    return {"message": "Experience removed"}
