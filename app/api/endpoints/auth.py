from fastapi import APIRouter, Depends, status

from app.api.deps import RequestPayload, get_current_user, get_payload, get_storage, require_admin
from app.core.errors import ValidationError
from app.schemas.user import ChangePasswordRequest, LoginRequest, ProfileUpdate, RegisterRequest, User
from app.services import auth_service
from app.services.common import clamp_page
from app.tools.file_uploader import StorageBackend

router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest):
    """Create an account and return a bearer token for it."""
    return await auth_service.register(request)


@router.post("/login")
async def login(request: LoginRequest):
    return await auth_service.login(request)


@router.get("/profile")
async def read_profile(user: User = Depends(get_current_user)):
    return auth_service.public_user(user)


@router.put("/profile")
async def update_profile(update: ProfileUpdate, user: User = Depends(get_current_user)):
    return await auth_service.update_profile(user, update)


@router.put("/change-password")
async def change_password(request: ChangePasswordRequest, user: User = Depends(get_current_user)):
    await auth_service.change_password(user, request)
    return {"success": True, "message": "Password updated successfully"}


@router.put("/profile/avatar")
async def update_avatar(
    payload: RequestPayload = Depends(get_payload),
    user: User = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage),
):
    async with payload.rollback_uploads(storage):
        avatar_url = await payload.store_file("avatar", storage)
        if not avatar_url:
            raise ValidationError("No avatar uploaded")
        return await auth_service.update_avatar(user, avatar_url, storage)


@router.get("/users")
async def read_users(page: int = 1, limit: int = 50, admin: User = Depends(require_admin)):
    page, limit = clamp_page(page, limit, default_limit=50)
    return await auth_service.list_users(page, limit)


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    admin: User = Depends(require_admin),
    storage: StorageBackend = Depends(get_storage),
):
    await auth_service.delete_user(admin, user_id, storage)
    return {"success": True, "message": "User removed"}
