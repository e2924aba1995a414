from typing import Literal, Optional

from beanie import Indexed
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing_extensions import Annotated

from app.schemas.common import TimestampedDocument

Role = Literal["user", "admin"]


class User(TimestampedDocument):
    name: str
    email: Annotated[str, Indexed(unique=True)]
    password: str
    role: Role = "user"
    avatar: str = ""
    bio: Optional[str] = None
    location: Optional[str] = None
    isActive: bool = True

    class Settings:
        name = "users"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def _lower(value):
    return value.strip().lower() if isinstance(value, str) else value


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return _lower(value)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Name must be at least 2 characters long")
        return value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return _lower(value)


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    bio: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, max_length=100)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return _lower(value)


class ChangePasswordRequest(BaseModel):
    currentPassword: str
    newPassword: str = Field(..., min_length=6)
