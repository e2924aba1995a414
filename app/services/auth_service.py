"""
Auth Service

Registration, login and profile management for portfolio users.
"""

import logging
from typing import Any, Dict

from app.core.errors import AuthError, DuplicateError, NotFoundError, ValidationError
from app.core.security import create_access_token, hash_password, verify_password
from app.crud import crud_user
from app.schemas.user import ChangePasswordRequest, LoginRequest, ProfileUpdate, RegisterRequest, User
from app.services.common import parse_object_id, total_pages
from app.tools.file_uploader import StorageBackend, discard_asset

logger = logging.getLogger(__name__)


def public_user(user: User) -> Dict[str, Any]:
    """Fields of a user that are safe to hand to any client."""
    created = getattr(user, "createdAt", None)
    return {
        "_id": str(user.id),
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "avatar": user.avatar or "",
        "bio": user.bio,
        "location": user.location,
        "isActive": user.isActive,
        "createdAt": created.isoformat() if created else None,
    }


def auth_response(user: User) -> Dict[str, Any]:
    return {"token": create_access_token(str(user.id)), "user": public_user(user)}


async def register(request: RegisterRequest) -> Dict[str, Any]:
    if await crud_user.get_user_by_email(request.email):
        raise DuplicateError("User already exists")

    user = User(
        name=request.name,
        email=request.email,
        password=hash_password(request.password),
    )
    await user.insert()
    logger.info("Registered user %s", user.email)
    return auth_response(user)


async def login(request: LoginRequest) -> Dict[str, Any]:
    user = await crud_user.get_user_by_email(request.email)
    if user is None or not verify_password(request.password, user.password):
        raise AuthError("Invalid credentials")
    if not user.isActive:
        raise AuthError("Account is deactivated")
    return auth_response(user)


async def update_profile(user: User, update: ProfileUpdate) -> Dict[str, Any]:
    changes = update.model_dump(exclude_unset=True, exclude_none=True)
    new_email = changes.get("email")
    if new_email and new_email != user.email:
        existing = await crud_user.get_user_by_email(new_email)
        if existing is not None and str(existing.id) != str(user.id):
            raise DuplicateError("Email is already in use")
    for field, value in changes.items():
        setattr(user, field, value)
    await user.save()
    return public_user(user)


async def change_password(user: User, request: ChangePasswordRequest) -> None:
    if not verify_password(request.currentPassword, user.password):
        raise AuthError("Current password is incorrect")
    user.password = hash_password(request.newPassword)
    await user.save()


async def update_avatar(user: User, avatar_url: str, storage: StorageBackend) -> Dict[str, Any]:
    previous = user.avatar
    user.avatar = avatar_url
    await user.save()
    if previous and previous != avatar_url:
        await discard_asset(storage, previous)
    return public_user(user)


async def list_users(page: int, limit: int) -> Dict[str, Any]:
    total = await User.find_many({}).count()
    users = await crud_user.get_users(skip=(page - 1) * limit, limit=limit)
    return {
        "success": True,
        "users": [public_user(u) for u in users],
        "total": total,
        "currentPage": page,
        "totalPages": total_pages(total, limit),
    }


async def delete_user(admin: User, user_id: str, storage: StorageBackend) -> None:
    oid = parse_object_id(user_id, "user")
    if str(oid) == str(admin.id):
        raise ValidationError("You cannot delete your own account")
    user = await User.get(oid)
    if user is None:
        raise NotFoundError("User not found")
    await discard_asset(storage, user.avatar)
    await user.delete()
    logger.info("Admin %s deleted user %s", admin.email, user.email)
