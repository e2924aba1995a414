from typing import List, Literal, Optional

import pymongo
from beanie import PydanticObjectId
from pydantic import BaseModel, Field
from pymongo import IndexModel

from app.schemas.common import CsvList, OptionalUrl, TimestampedDocument

ProjectCategory = Literal["web", "mobile", "desktop", "api", "other"]
ProjectStatus = Literal["completed", "in-progress", "planned"]


class Project(TimestampedDocument):
    title: str
    description: str
    image: str
    images: List[str] = Field(default_factory=list)
    technologies: List[str] = Field(default_factory=list)
    category: ProjectCategory = "web"
    githubUrl: Optional[str] = None
    liveUrl: Optional[str] = None
    demoUrl: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    challenges: Optional[str] = None
    solutions: Optional[str] = None
    duration: Optional[str] = None
    teamSize: Optional[int] = None
    status: ProjectStatus = "completed"
    featured: bool = False
    views: int = 0
    likes: int = 0
    user: PydanticObjectId
    tags: List[str] = Field(default_factory=list)
    isPublic: bool = True

    class Settings:
        name = "projects"
        indexes = [
            IndexModel(
                [("title", pymongo.TEXT), ("description", pymongo.TEXT), ("technologies", pymongo.TEXT)],
                name="project_text_search",
            ),
            IndexModel([("user", pymongo.ASCENDING)]),
        ]


class ProjectBase(BaseModel):
    images: Optional[CsvList] = None
    technologies: Optional[CsvList] = None
    category: Optional[ProjectCategory] = None
    githubUrl: OptionalUrl = None
    liveUrl: OptionalUrl = None
    demoUrl: OptionalUrl = None
    features: Optional[CsvList] = None
    challenges: Optional[str] = Field(None, max_length=500)
    solutions: Optional[str] = Field(None, max_length=500)
    duration: Optional[str] = None
    teamSize: Optional[int] = Field(None, ge=1)
    status: Optional[ProjectStatus] = None
    featured: Optional[bool] = None
    tags: Optional[CsvList] = None
    isPublic: Optional[bool] = None


class ProjectCreate(ProjectBase):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    image: str = Field(..., min_length=1, description="Uploaded image URL or path")


class ProjectUpdate(ProjectBase):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=1000)
    image: Optional[str] = None
