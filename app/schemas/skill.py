from typing import Literal, Optional

from pydantic import BaseModel, Field

from app.schemas.common import TimestampedDocument

SkillLevel = Literal["Beginner", "Intermediate", "Advanced", "Expert"]

LEVEL_PERCENT = {
    "Beginner": 25,
    "Intermediate": 50,
    "Advanced": 75,
    "Expert": 100,
}


def resolve_percent(level: Optional[str], percent: Optional[int]) -> int:
    """Explicit percent wins; otherwise the level decides."""
    if percent is not None:
        return percent
    return LEVEL_PERCENT.get(level or "Beginner", LEVEL_PERCENT["Beginner"])


class Skill(TimestampedDocument):
    name: str
    category: str
    level: SkillLevel = "Beginner"
    icon: str = ""
    order: int = 0
    # None means "derive from level"
    percent: Optional[int] = Field(None, ge=0, le=100)

    class Settings:
        name = "skills"

    @property
    def display_percent(self) -> int:
        return resolve_percent(self.level, self.percent)


class SkillCreate(BaseModel):
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    level: SkillLevel = "Beginner"
    icon: str = ""
    order: int = 0
    percent: Optional[int] = Field(None, ge=0, le=100)


class SkillUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    level: Optional[SkillLevel] = None
    icon: Optional[str] = None
    order: Optional[int] = None
    percent: Optional[int] = Field(None, ge=0, le=100)
