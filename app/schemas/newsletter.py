import re
from datetime import datetime
from typing import Optional

import pymongo
from beanie import Indexed
from pydantic import BaseModel, Field, field_validator
from pymongo import IndexModel
from typing_extensions import Annotated

from app.schemas.common import TimestampedDocument, utcnow

EMAIL_PATTERN = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")


class Newsletter(TimestampedDocument):
    email: Annotated[str, Indexed(unique=True)]
    subscribedAt: datetime = Field(default_factory=utcnow)
    isActive: bool = True
    source: str = "website"

    class Settings:
        name = "newsletters"
        indexes = [IndexModel([("subscribedAt", pymongo.DESCENDING)])]


class SubscribeRequest(BaseModel):
    email: Optional[str] = None
    source: str = "website"

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        value = value.strip().lower()
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Please enter a valid email")
        return value
