from typing import List, Optional

from beanie import Indexed, PydanticObjectId
from pydantic import BaseModel, Field
from typing_extensions import Annotated

from app.schemas.common import CsvList, OptionalUrl, TimestampedDocument


class Education(BaseModel):
    degree: str = Field(..., min_length=1)
    school: str = Field(..., min_length=1)
    year: str = Field(..., min_length=1)
    description: Optional[str] = None


class About(TimestampedDocument):
    name: str
    bio: str
    location: Optional[str] = None
    website: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    achievements: List[str] = Field(default_factory=list)
    resumeUrl: Optional[str] = None
    # one About per user
    user: Annotated[PydanticObjectId, Indexed(unique=True)]

    class Settings:
        name = "abouts"


class AboutCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    bio: str = Field(..., min_length=1, max_length=1000)
    location: Optional[str] = Field(None, max_length=100)
    website: OptionalUrl = None
    skills: CsvList = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    achievements: CsvList = Field(default_factory=list)


class AboutUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    bio: Optional[str] = Field(None, min_length=1, max_length=1000)
    location: Optional[str] = Field(None, max_length=100)
    website: OptionalUrl = None
    skills: Optional[CsvList] = None
    education: Optional[List[Education]] = None
    achievements: Optional[CsvList] = None
