"""
File storage for avatars, resumes, project images and company logos.

Two interchangeable backends sit behind ``StorageBackend``: Cloudinary for
production and the local ``uploads`` directory otherwise. ``build_storage``
picks one at startup; request handlers only ever see the interface.
"""

import io
import logging
import random
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import cloudinary
import cloudinary.uploader
from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from app.core.config import Settings
from app.core.errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_PDF_TYPE = "application/pdf"
IMAGE_TRANSFORMATION = [
    {"width": 800, "height": 600, "crop": "limit"},
    {"quality": "auto"},
]


def is_allowed_content_type(content_type: Optional[str]) -> bool:
    if not content_type:
        return False
    return content_type.startswith("image/") or content_type == ALLOWED_PDF_TYPE


def validate_upload(content_type: Optional[str], size: int, max_bytes: int) -> None:
    """Reject anything that is not an image or PDF, or is over the size cap."""
    if not is_allowed_content_type(content_type):
        raise ValidationError("Only image or PDF files are allowed!")
    if size > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        raise ValidationError(f"File too large. Maximum size is {limit_mb}MB.")


class StorageBackend(ABC):
    """Persists uploaded bytes and hands back a publicly resolvable URL or path."""

    @abstractmethod
    async def save(self, field_name: str, filename: str, content_type: str, data: bytes) -> str:
        ...

    @abstractmethod
    async def delete(self, url: str) -> bool:
        ...


class LocalStorage(StorageBackend):
    def __init__(self, base_dir: str, url_prefix: str = "/uploads"):
        self.base_dir = Path(base_dir)
        self.url_prefix = url_prefix.rstrip("/")

    def _unique_name(self, field_name: str, filename: str) -> str:
        suffix = Path(filename or "").suffix.lower()
        return f"{field_name}-{int(time.time() * 1000)}-{random.randint(0, 10**9)}{suffix}"

    async def save(self, field_name: str, filename: str, content_type: str, data: bytes) -> str:
        name = self._unique_name(field_name, filename)
        await run_in_threadpool(self._write, name, data)
        return f"{self.url_prefix}/{name}"

    def _write(self, name: str, data: bytes) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        (self.base_dir / name).write_bytes(data)

    def path_for(self, url: str) -> Optional[Path]:
        if not url or not url.startswith(self.url_prefix + "/"):
            return None
        return self.base_dir / Path(url).name

    async def delete(self, url: str) -> bool:
        path = self.path_for(url)
        if path is None or not path.exists():
            return False
        path.unlink()
        return True


class CloudinaryStorage(StorageBackend):
    def __init__(self, folder: str = "portfolio"):
        self.folder = folder

    def public_id_for(self, url: str) -> str:
        """``https://.../portfolio/abc123.jpg`` -> ``portfolio/abc123``."""
        last_segment = url.rstrip("/").rsplit("/", 1)[-1]
        return f"{self.folder}/{last_segment.split('.')[0]}"

    async def save(self, field_name: str, filename: str, content_type: str, data: bytes) -> str:
        options = {"folder": self.folder, "resource_type": "auto"}
        if content_type.startswith("image/"):
            options["transformation"] = IMAGE_TRANSFORMATION
        result = await run_in_threadpool(cloudinary.uploader.upload, io.BytesIO(data), **options)
        url = result.get("secure_url")
        if not url:
            raise RuntimeError("Cloudinary upload returned no URL")
        return url

    async def delete(self, url: str) -> bool:
        result = await run_in_threadpool(cloudinary.uploader.destroy, self.public_id_for(url))
        return (result or {}).get("result") == "ok"


def configure_cloudinary(settings: Settings) -> None:
    """Configures the Cloudinary client with credentials from settings."""
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )


def build_storage(settings: Settings) -> StorageBackend:
    """Select the storage backend once, at startup."""
    if settings.STORAGE_BACKEND.lower() == "cloudinary":
        if settings.cloudinary_configured:
            configure_cloudinary(settings)
            logger.info("Using Cloudinary storage (folder '%s')", settings.CLOUDINARY_FOLDER)
            return CloudinaryStorage(folder=settings.CLOUDINARY_FOLDER)
        logger.warning("Cloudinary credentials not found. Using local storage only.")
    logger.info("Using local storage in '%s'", settings.UPLOAD_DIR)
    return LocalStorage(settings.UPLOAD_DIR)


async def store_upload(storage: StorageBackend, field_name: str, upload: UploadFile, max_bytes: int) -> str:
    """Validate an incoming upload and persist it; returns the stored URL."""
    content_type = upload.content_type or ""
    # multipart parsing already spooled the part, so its size is known before reading it
    validate_upload(content_type, upload.size or 0, max_bytes)
    data = await upload.read(max_bytes + 1)
    validate_upload(content_type, len(data), max_bytes)
    return await storage.save(field_name, upload.filename or "", content_type, data)


async def discard_asset(storage: StorageBackend, url: Optional[str]) -> None:
    """Best-effort delete; a failure is logged and never blocks the caller."""
    if not url:
        return
    try:
        await storage.delete(url)
    except Exception as e:
        logger.warning("Failed to delete stored asset %s: %s", url, e)
