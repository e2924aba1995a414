from typing import Optional

from fastapi import APIRouter, Depends, status

from app.api.deps import RequestPayload, get_current_user, get_payload, get_storage
from app.schemas.project import ProjectCreate, ProjectUpdate
from app.schemas.user import User
from app.services import project_service
from app.services.common import clamp_page
from app.tools.file_uploader import StorageBackend

router = APIRouter()

MAX_PROJECT_IMAGES = 5


@router.get("")
async def read_projects(
    category: Optional[str] = None,
    search: Optional[str] = None,
    featured: Optional[bool] = None,
    page: int = 1,
    limit: int = 10,
):
    """Public projects, newest first, with optional category/featured/text filters."""
    page, limit = clamp_page(page, limit)
    return await project_service.list_projects(category, featured, search, page, limit)


@router.get("/stats")
async def read_project_stats(user: User = Depends(get_current_user)):
    return await project_service.project_stats(user)


@router.post("/upload-images")
async def upload_images(
    payload: RequestPayload = Depends(get_payload),
    user: User = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage),
):
    images = await payload.store_files("images", storage, MAX_PROJECT_IMAGES)
    return {"images": images}


@router.get("/user/{user_id}")
async def read_user_projects(user_id: str):
    return await project_service.list_user_projects(user_id)


@router.get("/{project_id}")
async def read_project(project_id: str):
    """Single project; each fetch increments its view counter."""
    return await project_service.view_project(project_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: RequestPayload = Depends(get_payload),
    user: User = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage),
):
    async with payload.rollback_uploads(storage):
        await payload.store_file("image", storage)
        data = payload.validate(ProjectCreate)
        return await project_service.create_project(user, data)


@router.put("/{project_id}")
async def update_project(
    project_id: str,
    payload: RequestPayload = Depends(get_payload),
    user: User = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage),
):
    """Ownership is settled before the body is parsed or any file is stored."""
    project = await project_service.get_owned_project(user, project_id)
    async with payload.rollback_uploads(storage):
        await payload.store_file("image", storage)
        data = payload.validate(ProjectUpdate)
        return await project_service.update_project(user, project, data, storage)


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    user: User = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage),
):
    await project_service.delete_project(user, project_id, storage)
    return {"message": "Project removed"}


@router.put("/{project_id}/like")
async def like_project(project_id: str, user: User = Depends(get_current_user)):
    likes = await project_service.like_project(project_id)
    return {"likes": likes}


@router.put("/{project_id}/feature")
async def feature_project(project_id: str, user: User = Depends(get_current_user)):
    return await project_service.toggle_featured(user, project_id)
