from datetime import datetime
from typing import List, Literal, Optional

import pymongo
from beanie import PydanticObjectId
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pymongo import IndexModel

from app.schemas.common import CsvList, OptionalUrl, TimestampedDocument

EmploymentType = Literal["full-time", "part-time", "contract", "freelance", "internship"]


class Experience(TimestampedDocument):
    # "from" is a keyword, so the attribute carries a trailing underscore
    model_config = ConfigDict(populate_by_name=True)

    title: str
    company: str
    location: Optional[str] = None
    from_: datetime = Field(..., alias="from")
    to: Optional[datetime] = None
    current: bool = False
    description: Optional[str] = None
    responsibilities: List[str] = Field(default_factory=list)
    achievements: List[str] = Field(default_factory=list)
    technologies: List[str] = Field(default_factory=list)
    industry: Optional[str] = None
    employmentType: EmploymentType = "full-time"
    salary: Optional[str] = None
    supervisor: Optional[str] = None
    companyWebsite: Optional[str] = None
    companyLogo: Optional[str] = None
    user: PydanticObjectId
    isPublic: bool = True

    class Settings:
        name = "experiences"
        indexes = [
            IndexModel([("user", pymongo.ASCENDING), ("from", pymongo.DESCENDING)]),
        ]


class ExperienceBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    location: Optional[str] = Field(None, max_length=100)
    to: Optional[datetime] = None
    current: Optional[bool] = None
    description: Optional[str] = Field(None, max_length=1000)
    responsibilities: Optional[CsvList] = None
    achievements: Optional[CsvList] = None
    technologies: Optional[CsvList] = None
    industry: Optional[str] = Field(None, max_length=50)
    employmentType: Optional[EmploymentType] = None
    salary: Optional[str] = None
    supervisor: Optional[str] = Field(None, max_length=100)
    companyWebsite: OptionalUrl = None
    companyLogo: Optional[str] = None
    isPublic: Optional[bool] = None

    @model_validator(mode="before")
    @classmethod
    def drop_blank_dates(cls, data):
        # HTML forms submit "" for an untouched date input
        if isinstance(data, dict):
            data = dict(data)
            for key in ("to", "from", "from_"):
                if data.get(key) == "":
                    data.pop(key)
        return data

    @model_validator(mode="after")
    def clear_end_when_current(self):
        if self.current:
            self.to = None
        return self

    @model_validator(mode="after")
    def check_each_item_length(self):
        for field in ("responsibilities", "achievements"):
            for item in getattr(self, field) or []:
                if len(item) > 200:
                    raise ValueError(f"{field} entries cannot be more than 200 characters")
        return self


class ExperienceCreate(ExperienceBase):
    title: str = Field(..., min_length=1, max_length=100)
    company: str = Field(..., min_length=1, max_length=100)
    from_: datetime = Field(..., alias="from")


class ExperienceUpdate(ExperienceBase):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    company: Optional[str] = Field(None, min_length=1, max_length=100)
    from_: Optional[datetime] = Field(None, alias="from")
