"""
Shared FastAPI dependencies: authentication, storage and body parsing.
"""

import json
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Type, TypeVar

from fastapi import Depends, Header, Request
from pydantic import BaseModel
from starlette.datastructures import UploadFile

from app.core.config import settings
from app.core.errors import AuthError, ForbiddenError, ValidationError
from app.core.security import decode_access_token
from app.crud import crud_user
from app.schemas.user import User
from app.tools.file_uploader import StorageBackend, discard_asset, store_upload

ModelT = TypeVar("ModelT", bound=BaseModel)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    token = authorization.split(" ", 1)[1].strip()
    return token or None


async def _resolve_user(token: str) -> User:
    user_id = decode_access_token(token)
    user = await crud_user.get_user_by_id(user_id)
    if user is None:
        raise AuthError("Not authorized, user not found")
    if not user.isActive:
        raise AuthError("Account is deactivated")
    return user


async def get_current_user(authorization: Optional[str] = Header(None)) -> User:
    token = _bearer_token(authorization)
    if token is None:
        raise AuthError("Not authorized, no token")
    return await _resolve_user(token)


async def get_optional_user(authorization: Optional[str] = Header(None)) -> Optional[User]:
    """Like get_current_user, but anonymous or invalid callers get None."""
    token = _bearer_token(authorization)
    if token is None:
        return None
    try:
        return await _resolve_user(token)
    except AuthError:
        return None


def require_role(role: str):
    async def checker(user: User = Depends(get_current_user)) -> User:
        if user.role != role:
            raise ForbiddenError(f"Not authorized as an {role}" if role == "admin" else f"Not authorized as a {role}")
        return user
    return checker


require_admin = require_role("admin")


def get_storage(request: Request) -> StorageBackend:
    return request.app.state.storage


class RequestPayload:
    """Body fields plus uploaded files, whether the request was JSON or multipart."""

    def __init__(self, data: Dict[str, Any], files: Dict[str, List[UploadFile]], error: Optional[str] = None):
        self.data = data
        self.files = files
        # a malformed body is only reported once a handler asks for its fields
        self.error = error
        self.stored: List[str] = []

    async def store_file(self, field_name: str, storage: StorageBackend) -> Optional[str]:
        """Persist the first upload under ``field_name`` and write its URL into data."""
        uploads = self.files.get(field_name) or []
        if not uploads:
            return None
        url = await store_upload(storage, field_name, uploads[0], settings.MAX_UPLOAD_BYTES)
        self.stored.append(url)
        self.data[field_name] = url
        return url

    async def store_files(self, field_name: str, storage: StorageBackend, max_count: int) -> List[str]:
        uploads = self.files.get(field_name) or []
        if len(uploads) > max_count:
            raise ValidationError(f"Too many files. Maximum is {max_count}.")
        urls = []
        for upload in uploads:
            url = await store_upload(storage, field_name, upload, settings.MAX_UPLOAD_BYTES)
            self.stored.append(url)
            urls.append(url)
        if urls:
            self.data[field_name] = urls
        return urls

    def validate(self, model: Type[ModelT]) -> ModelT:
        if self.error:
            raise ValidationError(self.error)
        return model.model_validate(self.data)

    @asynccontextmanager
    async def rollback_uploads(self, storage: StorageBackend):
        """Files stored for a request that then fails are removed again."""
        try:
            yield self
        except Exception:
            for url in self.stored:
                await discard_asset(storage, url)
            raise


async def get_payload(request: Request) -> RequestPayload:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data") or content_type.startswith("application/x-www-form-urlencoded"):
        form = await request.form()
        data: Dict[str, Any] = {}
        files: Dict[str, List[UploadFile]] = {}
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if value.filename:
                    files.setdefault(key, []).append(value)
            elif key in data:
                # repeated form keys become lists
                existing = data[key]
                data[key] = (existing if isinstance(existing, list) else [existing]) + [value]
            else:
                data[key] = value
        return RequestPayload(data, files)

    body = await request.body()
    if not body:
        return RequestPayload({}, {})
    try:
        data = json.loads(body)
    except ValueError:
        return RequestPayload({}, {}, error="Invalid JSON body")
    if not isinstance(data, dict):
        return RequestPayload({}, {}, error="Request body must be a JSON object")
    return RequestPayload(data, {})
