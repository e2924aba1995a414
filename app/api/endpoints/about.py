from typing import Optional

from fastapi import APIRouter, Depends, status

from app.api.deps import RequestPayload, get_current_user, get_optional_user, get_payload, get_storage, require_admin
from app.core.errors import ValidationError
from app.schemas.about import AboutCreate, AboutUpdate
from app.schemas.user import User
from app.services import about_service
from app.tools.file_uploader import StorageBackend

router = APIRouter()


@router.get("/public")
async def read_public_about(viewer: Optional[User] = Depends(get_optional_user)):
    """First About record; ``resumeUrl`` is only shown to signed-in callers."""
    return await about_service.get_public_about(viewer)


@router.get("/user/{user_id}")
async def read_user_about(user_id: str, viewer: Optional[User] = Depends(get_optional_user)):
    return await about_service.get_about_for_user(user_id, viewer)


@router.get("/me")
async def read_my_about(user: User = Depends(get_current_user)):
    return await about_service.get_my_about(user)


@router.post("/me", status_code=status.HTTP_201_CREATED)
async def create_my_about(payload: AboutCreate, user: User = Depends(get_current_user)):
    return await about_service.create_about(user, payload)


@router.put("/me")
async def update_my_about(payload: AboutUpdate, user: User = Depends(get_current_user)):
    return await about_service.update_about(user, payload)


@router.delete("/me")
async def delete_my_about(user: User = Depends(get_current_user), storage: StorageBackend = Depends(get_storage)):
    return await about_service.delete_about(user, storage)


@router.put("/me/resume")
async def upload_resume(
    payload: RequestPayload = Depends(get_payload),
    user: User = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage),
):
    async with payload.rollback_uploads(storage):
        resume_url = await payload.store_file("resume", storage)
        if not resume_url:
            raise ValidationError("No resume uploaded")
        return await about_service.attach_resume(user, resume_url, storage)


@router.get("/admin/all")
async def read_all_abouts(admin: User = Depends(require_admin)):
    return await about_service.list_all_abouts()
