import io
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from starlette.datastructures import Headers, UploadFile

from app.core.config import Settings
from app.core.errors import ValidationError
from app.tools.file_uploader import (
    CloudinaryStorage,
    LocalStorage,
    build_storage,
    discard_asset,
    store_upload,
    validate_upload,
)

FIVE_MB = 5 * 1024 * 1024


def make_upload(filename: str, content_type: str, data: bytes = b"bytes") -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename=filename, headers=Headers({"content-type": content_type}))


@pytest.mark.parametrize("content_type", ["image/png", "image/jpeg", "application/pdf"])
def test_images_and_pdfs_are_accepted(content_type):
    validate_upload(content_type, 1024, FIVE_MB)


@pytest.mark.parametrize("content_type", ["text/plain", "application/zip", None])
def test_other_types_are_rejected(content_type):
    with pytest.raises(ValidationError) as exc:
        validate_upload(content_type, 1024, FIVE_MB)
    assert exc.value.message == "Only image or PDF files are allowed!"


def test_oversized_upload_is_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_upload("image/png", FIVE_MB + 1, FIVE_MB)
    assert "5MB" in exc.value.message


@pytest.mark.asyncio
async def test_local_storage_saves_and_deletes(tmp_path):
    storage = LocalStorage(str(tmp_path))
    url = await storage.save("avatar", "Me.PNG", "image/png", b"png-bytes")

    assert url.startswith("/uploads/avatar-")
    assert url.endswith(".png")
    path = storage.path_for(url)
    assert path.read_bytes() == b"png-bytes"

    assert await storage.delete(url) is True
    assert not path.exists()
    assert await storage.delete(url) is False


@pytest.mark.asyncio
async def test_local_storage_ignores_foreign_urls(tmp_path):
    storage = LocalStorage(str(tmp_path))
    assert await storage.delete("https://res.cloudinary.com/demo/image/upload/x.png") is False


def test_cloudinary_public_id_from_url():
    storage = CloudinaryStorage(folder="portfolio")
    url = "https://res.cloudinary.com/demo/image/upload/v1/portfolio/abc123.jpg"
    assert storage.public_id_for(url) == "portfolio/abc123"


@pytest.mark.asyncio
async def test_cloudinary_upload_applies_image_transformation():
    storage = CloudinaryStorage(folder="portfolio")
    with patch("app.tools.file_uploader.cloudinary.uploader.upload", return_value={"secure_url": "https://cdn/x.png"}) as upload:
        url = await storage.save("image", "x.png", "image/png", b"data")

    assert url == "https://cdn/x.png"
    options = upload.call_args.kwargs
    assert options["folder"] == "portfolio"
    assert options["resource_type"] == "auto"
    assert "transformation" in options


def test_build_storage_falls_back_to_local_without_credentials(tmp_path):
    settings = Settings(STORAGE_BACKEND="cloudinary", UPLOAD_DIR=str(tmp_path),
                        CLOUDINARY_CLOUD_NAME=None, CLOUDINARY_API_KEY=None, CLOUDINARY_API_SECRET=None)
    assert isinstance(build_storage(settings), LocalStorage)


def test_build_storage_uses_cloudinary_when_configured():
    settings = Settings(STORAGE_BACKEND="cloudinary", CLOUDINARY_CLOUD_NAME="demo",
                        CLOUDINARY_API_KEY="key", CLOUDINARY_API_SECRET="secret")
    with patch("app.tools.file_uploader.cloudinary.config") as config:
        storage = build_storage(settings)
    assert isinstance(storage, CloudinaryStorage)
    config.assert_called_once()


@pytest.mark.asyncio
async def test_store_upload_validates_before_saving(storage):
    with pytest.raises(ValidationError):
        await store_upload(storage, "resume", make_upload("notes.txt", "text/plain"), FIVE_MB)
    storage.save.assert_not_called()

    url = await store_upload(storage, "resume", make_upload("cv.pdf", "application/pdf"), FIVE_MB)
    assert url == "/uploads/file.png"
    storage.save.assert_awaited_once_with("resume", "cv.pdf", "application/pdf", b"bytes")


@pytest.mark.asyncio
async def test_discard_asset_swallows_backend_failures():
    storage = MagicMock()
    storage.delete = AsyncMock(side_effect=RuntimeError("cdn down"))
    await discard_asset(storage, "https://cdn/x.png")
    storage.delete.assert_awaited_once()


@pytest.mark.asyncio
async def test_discard_asset_skips_empty_url(storage):
    await discard_asset(storage, "")
    storage.delete.assert_not_called()


@pytest.mark.asyncio
async def test_declared_oversize_is_rejected_without_reading(storage):
    upload = UploadFile(file=io.BytesIO(b""), filename="huge.png", size=FIVE_MB + 1,
                        headers=Headers({"content-type": "image/png"}))
    with patch.object(upload, "read", AsyncMock(return_value=b"")) as read:
        with pytest.raises(ValidationError) as exc:
            await store_upload(storage, "image", upload, FIVE_MB)
    assert "5MB" in exc.value.message
    read.assert_not_called()
    storage.save.assert_not_called()


@pytest.mark.asyncio
async def test_upload_without_declared_size_is_still_capped(storage):
    upload = make_upload("big.png", "image/png", data=b"0123456789")
    with pytest.raises(ValidationError):
        await store_upload(storage, "image", upload, 8)
    storage.save.assert_not_called()
