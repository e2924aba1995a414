from typing import Any, Dict, List, Optional

from app.core.errors import NotFoundError
from app.schemas.skill import Skill, SkillCreate, SkillUpdate
from app.services.common import apply_updates, parse_object_id, update_fields
from app.tools.serializers import serialize_document


def serialize_skill(skill: Skill) -> Dict[str, Any]:
    data = serialize_document(skill)
    data["displayPercent"] = skill.display_percent
    return data


def build_skill_query(category: Optional[str] = None, level: Optional[str] = None) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    if category and category != "all":
        query["category"] = category
    if level:
        query["level"] = level
    return query


async def get_skill_or_404(skill_id: str) -> Skill:
    skill = await Skill.get(parse_object_id(skill_id, "skill"))
    if skill is None:
        raise NotFoundError("Skill not found")
    return skill


async def list_skills(category: Optional[str] = None, level: Optional[str] = None) -> List[Dict[str, Any]]:
    skills = await Skill.find(build_skill_query(category, level)).sort("+order", "+name").to_list()
    return [serialize_skill(s) for s in skills]


async def create_skill(payload: SkillCreate) -> Dict[str, Any]:
    skill = Skill(**payload.model_dump())
    await skill.insert()
    return serialize_skill(skill)


async def update_skill(skill_id: str, payload: SkillUpdate) -> Dict[str, Any]:
    skill = await get_skill_or_404(skill_id)
    # an explicit null percent falls back to the level mapping
    updates = update_fields(payload, clearable=("percent",))
    apply_updates(skill, updates)
    await skill.save()
    return serialize_skill(skill)


async def delete_skill(skill_id: str) -> None:
    skill = await get_skill_or_404(skill_id)
    await skill.delete()
