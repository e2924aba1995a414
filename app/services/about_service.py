"""
About Service

One About record per user. Anonymous readers never see the resume link.
"""

from typing import Any, Dict, List, Optional

from app.core.errors import NotFoundError, ValidationError
from app.crud import crud_user
from app.schemas.about import About, AboutCreate, AboutUpdate
from app.schemas.user import User
from app.services.common import apply_updates, parse_object_id, update_fields
from app.tools.file_uploader import StorageBackend, discard_asset
from app.tools.serializers import owner_summary, serialize_document

PUBLIC_OWNER_FIELDS = ("name", "email", "avatar")


async def serialize_about(about: About, viewer: Optional[User] = None, join_owner: bool = True) -> Dict[str, Any]:
    exclude = () if viewer is not None else ("resumeUrl",)
    data = serialize_document(about, exclude=exclude)
    if join_owner:
        owner = await crud_user.get_user_by_id(str(about.user))
        data["user"] = owner_summary(owner, PUBLIC_OWNER_FIELDS) or str(about.user)
    return data


async def _own_about(user: User) -> Optional[About]:
    return await About.find_one({"user": user.id})


async def _own_about_or_404(user: User) -> About:
    about = await _own_about(user)
    if about is None:
        raise NotFoundError("About information not found")
    return about


async def get_public_about(viewer: Optional[User]) -> Dict[str, Any]:
    about = await About.find_one({})
    if about is None:
        raise NotFoundError("About information not found")
    return {"success": True, "about": await serialize_about(about, viewer)}


async def get_about_for_user(user_id: str, viewer: Optional[User]) -> Dict[str, Any]:
    about = await About.find_one({"user": parse_object_id(user_id, "user")})
    if about is None:
        raise NotFoundError("About information not found")
    return {"success": True, "about": await serialize_about(about, viewer)}


async def get_my_about(user: User) -> Dict[str, Any]:
    about = await _own_about_or_404(user)
    return {"success": True, "about": await serialize_about(about, user, join_owner=False)}


async def create_about(user: User, payload: AboutCreate) -> Dict[str, Any]:
    if await _own_about(user) is not None:
        raise ValidationError("About information already exists for this user")
    about = About(**payload.model_dump(), user=user.id)
    await about.insert()
    return {"success": True, "about": await serialize_about(about, user, join_owner=False)}


async def update_about(user: User, payload: AboutUpdate) -> Dict[str, Any]:
    about = await _own_about_or_404(user)
    apply_updates(about, update_fields(payload, clearable=("website",)))
    await about.save()
    return {"success": True, "about": await serialize_about(about, user, join_owner=False)}


async def delete_about(user: User, storage: StorageBackend) -> Dict[str, Any]:
    about = await _own_about_or_404(user)
    await discard_asset(storage, about.resumeUrl)
    await about.delete()
    return {"success": True, "message": "About information deleted successfully"}


async def attach_resume(user: User, resume_url: str, storage: StorageBackend) -> Dict[str, Any]:
    about = await _own_about(user)
    if about is None:
        about = About(user=user.id, name=user.name or "User", bio=" ", resumeUrl=resume_url)
        await about.insert()
    else:
        previous = about.resumeUrl
        about.resumeUrl = resume_url
        await about.save()
        if previous and previous != resume_url:
            await discard_asset(storage, previous)
    return {"success": True, "resumeUrl": about.resumeUrl}


async def list_all_abouts() -> Dict[str, Any]:
    abouts: List[About] = await About.find_many({}).to_list()
    owners = await crud_user.get_users_by_ids(a.user for a in abouts)
    items = []
    for about in abouts:
        data = serialize_document(about)
        data["user"] = owner_summary(owners.get(str(about.user)), ("name", "email")) or str(about.user)
        items.append(data)
    return {"success": True, "count": len(items), "abouts": items}
