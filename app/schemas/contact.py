from typing import Literal, Optional

import pymongo
from pydantic import BaseModel, EmailStr, Field
from pymongo import IndexModel

from app.schemas.common import TimestampedDocument

ContactStatus = Literal["new", "read", "archived"]


class Contact(TimestampedDocument):
    name: str
    email: str
    subject: Optional[str] = None
    message: str
    status: ContactStatus = "new"

    class Settings:
        name = "contacts"
        indexes = [IndexModel([("status", pymongo.ASCENDING), ("createdAt", pymongo.DESCENDING)])]


class ContactCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    subject: Optional[str] = Field(None, max_length=200)
    message: str = Field(..., min_length=1, max_length=5000)


class ContactStatusUpdate(BaseModel):
    status: ContactStatus
