from typing import Optional

from fastapi import APIRouter, Depends, status

from app.api.deps import require_admin
from app.schemas.skill import SkillCreate, SkillLevel, SkillUpdate
from app.schemas.user import User
from app.services import skill_service

router = APIRouter()


@router.get("")
async def read_skills(category: Optional[str] = None, level: Optional[SkillLevel] = None):
    """Skills ordered for display; each carries its resolved ``displayPercent``."""
    return await skill_service.list_skills(category, level)


@router.get("/{skill_id}")
async def read_skill(skill_id: str):
    skill = await skill_service.get_skill_or_404(skill_id)
    return skill_service.serialize_skill(skill)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_skill(payload: SkillCreate, admin: User = Depends(require_admin)):
    return await skill_service.create_skill(payload)


@router.put("/{skill_id}")
async def update_skill(skill_id: str, payload: SkillUpdate, admin: User = Depends(require_admin)):
    return await skill_service.update_skill(skill_id, payload)


@router.delete("/{skill_id}")
async def delete_skill(skill_id: str, admin: User = Depends(require_admin)):
    await skill_service.delete_skill(skill_id)
    return {"message": "Skill deleted"}
