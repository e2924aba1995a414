from typing import Dict, Iterable, List, Optional

from beanie import PydanticObjectId
from bson import ObjectId

from app.schemas.user import User


async def get_user_by_id(user_id: str) -> Optional[User]:
    if not ObjectId.is_valid(str(user_id)):
        return None
    return await User.get(PydanticObjectId(str(user_id)))


async def get_user_by_email(email: str) -> Optional[User]:
    return await User.find_one({"email": email.strip().lower()})


async def get_users(skip: int = 0, limit: int = 100) -> List[User]:
    return await User.find_many({}).sort("-createdAt").skip(skip).limit(limit).to_list()


async def get_users_by_ids(user_ids: Iterable) -> Dict[str, User]:
    """Batch lookup used to join owners onto listings."""
    ids = list({PydanticObjectId(str(uid)) for uid in user_ids if uid is not None})
    if not ids:
        return {}
    users = await User.find_many({"_id": {"$in": ids}}).to_list()
    return {str(u.id): u for u in users}
