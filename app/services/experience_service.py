"""
Experience Service

Work history CRUD, display helpers (date range, duration) and dashboard stats.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.core.errors import NotFoundError
from app.crud import crud_user
from app.schemas.experience import Experience, ExperienceCreate, ExperienceUpdate
from app.schemas.user import User
from app.services.common import (
    apply_updates,
    ensure_owner_or_admin,
    paginate,
    parse_object_id,
    total_pages,
    update_fields,
)
from app.tools.file_uploader import StorageBackend, discard_asset
from app.tools.serializers import owner_summary, serialize_document

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def format_date_range(start: datetime, end: Optional[datetime], current: bool) -> str:
    """``"Jan 2020 - Mar 2022"``, or ``"Jan 2020 - Present"`` for ongoing roles."""
    start_label = start.strftime("%b %Y")
    if current or end is None:
        return f"{start_label} - Present"
    return f"{start_label} - {end.strftime('%b %Y')}"


def format_duration(start: datetime, end: Optional[datetime], current: bool, now: Optional[datetime] = None) -> str:
    """Human duration in the largest whole unit: years, then months, then days."""
    finish = (now or datetime.now(timezone.utc)) if current or end is None else end
    diff_days = abs((_aware(finish) - _aware(start)).days)
    months = diff_days // 30
    years = months // 12
    if years > 0:
        return f"{years} year{'s' if years > 1 else ''}"
    if months > 0:
        return f"{months} month{'s' if months > 1 else ''}"
    return f"{diff_days} day{'s' if diff_days > 1 else ''}"


def build_experience_query(user_id: Optional[str] = None, current: Optional[bool] = None) -> Dict[str, Any]:
    query: Dict[str, Any] = {"isPublic": True}
    if user_id:
        query["user"] = parse_object_id(user_id, "user")
    if current:
        query["current"] = True
    return query


async def serialize_experiences(experiences: List[Experience], owner_fields=("name", "avatar")) -> List[Dict[str, Any]]:
    owners = await crud_user.get_users_by_ids(e.user for e in experiences)
    items = []
    for experience in experiences:
        data = serialize_document(experience)
        data["user"] = owner_summary(owners.get(str(experience.user)), owner_fields) or str(experience.user)
        data["dateRange"] = format_date_range(experience.from_, experience.to, experience.current)
        data["duration"] = format_duration(experience.from_, experience.to, experience.current)
        items.append(data)
    return items


async def serialize_experience(experience: Experience, owner_fields=("name", "avatar")) -> Dict[str, Any]:
    return (await serialize_experiences([experience], owner_fields))[0]


async def get_experience_or_404(experience_id: str) -> Experience:
    experience = await Experience.get(parse_object_id(experience_id, "experience"))
    if experience is None:
        raise NotFoundError("Experience not found")
    return experience


async def list_experiences(user_id: Optional[str], current: Optional[bool], page: int, limit: int) -> Dict[str, Any]:
    query = build_experience_query(user_id, current)
    experiences, total = await paginate(Experience, query, "-from", page, limit)
    return {
        "experiences": await serialize_experiences(experiences),
        "totalPages": total_pages(total, limit),
        "currentPage": page,
        "total": total,
    }


async def list_user_experiences(user_id: str) -> List[Dict[str, Any]]:
    experiences = await Experience.find(build_experience_query(user_id)).sort("-from").to_list()
    return await serialize_experiences(experiences)


async def get_experience(experience_id: str) -> Dict[str, Any]:
    experience = await get_experience_or_404(experience_id)
    return await serialize_experience(experience, ("name", "avatar", "bio", "location"))


async def create_experience(user: User, payload: ExperienceCreate) -> Dict[str, Any]:
    fields = payload.model_dump(exclude_none=True)
    if fields.get("current"):
        fields["to"] = None
    experience = Experience(**fields, user=user.id)
    await experience.insert()
    logger.info("User %s created experience %s", user.id, experience.id)
    return await serialize_experience(experience)


async def get_owned_experience(user: User, experience_id: str) -> Experience:
    """Load an experience the caller may modify: its owner or an admin."""
    experience = await get_experience_or_404(experience_id)
    ensure_owner_or_admin(experience, user)
    return experience


async def update_experience(user: User, experience: Experience, payload: ExperienceUpdate, storage: StorageBackend) -> Dict[str, Any]:
    ensure_owner_or_admin(experience, user)
    updates = update_fields(payload, clearable=("companyWebsite",))
    if updates.get("current"):
        updates["to"] = None

    previous_logo = experience.companyLogo
    new_logo = updates.get("companyLogo")

    apply_updates(experience, updates)
    await experience.save()

    if new_logo and previous_logo and new_logo != previous_logo:
        await discard_asset(storage, previous_logo)
    return await serialize_experience(experience)


async def delete_experience(user: User, experience_id: str, storage: StorageBackend) -> None:
    experience = await get_owned_experience(user, experience_id)
    await discard_asset(storage, experience.companyLogo)
    await experience.delete()
    logger.info("User %s deleted experience %s", user.id, experience_id)


def total_years(experiences: List[Experience], now: Optional[datetime] = None) -> float:
    now = now or datetime.now(timezone.utc)
    days = 0
    for exp in experiences:
        end = now if exp.current or exp.to is None else exp.to
        days += (_aware(end) - _aware(exp.from_)).days
    return round(days / DAYS_PER_YEAR, 2)


async def experience_stats(user: User) -> Dict[str, Any]:
    match = {"$match": {"user": user.id}}
    experiences = await Experience.find({"user": user.id}).to_list()
    industry_stats = await Experience.aggregate([
        match,
        {"$group": {"_id": "$industry", "count": {"$sum": 1}}},
    ]).to_list()
    employment_type_stats = await Experience.aggregate([
        match,
        {"$group": {"_id": "$employmentType", "count": {"$sum": 1}}},
    ]).to_list()
    return {
        "stats": {
            "totalExperiences": len(experiences),
            "currentExperiences": sum(1 for e in experiences if e.current),
            "totalDuration": total_years(experiences),
        },
        "industryStats": industry_stats,
        "employmentTypeStats": employment_type_stats,
    }
