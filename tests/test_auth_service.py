from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from beanie import PydanticObjectId

from app.core.errors import AuthError, DuplicateError, ValidationError
from app.core.security import decode_access_token, verify_password
from app.schemas.user import ChangePasswordRequest, LoginRequest, ProfileUpdate, RegisterRequest, User
from app.services import auth_service
from conftest import make_user


def user_factory(**fields):
    return User.model_construct(id=PydanticObjectId(), **fields)


@pytest.mark.asyncio
async def test_register_hashes_password_and_returns_token():
    request = RegisterRequest(name="Ada", email="ADA@example.com", password="secret1")
    with patch.object(auth_service.crud_user, "get_user_by_email", AsyncMock(return_value=None)), \
            patch.object(auth_service, "User", MagicMock(side_effect=user_factory)), \
            patch.object(User, "insert", AsyncMock()) as insert:
        body = await auth_service.register(request)

    insert.assert_awaited_once()
    assert body["user"]["email"] == "ada@example.com"
    assert body["user"]["role"] == "user"
    assert "password" not in body["user"]
    assert decode_access_token(body["token"]) == body["user"]["_id"]


@pytest.mark.asyncio
async def test_register_duplicate_email_fails():
    request = RegisterRequest(name="Ada", email="ada@example.com", password="secret1")
    with patch.object(auth_service.crud_user, "get_user_by_email", AsyncMock(return_value=make_user())):
        with pytest.raises(DuplicateError) as exc:
            await auth_service.register(request)
    assert exc.value.status_code == 400
    assert exc.value.message == "User already exists"


@pytest.mark.asyncio
async def test_login_with_valid_credentials():
    user = make_user()
    with patch.object(auth_service.crud_user, "get_user_by_email", AsyncMock(return_value=user)):
        body = await auth_service.login(LoginRequest(email="ada@example.com", password="secret1"))
    assert body["user"]["_id"] == str(user.id)
    assert body["token"]


@pytest.mark.asyncio
@pytest.mark.parametrize("found", [True, False])
async def test_login_failure_does_not_reveal_which_part_was_wrong(found):
    user = make_user() if found else None
    with patch.object(auth_service.crud_user, "get_user_by_email", AsyncMock(return_value=user)):
        with pytest.raises(AuthError) as exc:
            await auth_service.login(LoginRequest(email="ada@example.com", password="wrong-password"))
    assert exc.value.message == "Invalid credentials"


@pytest.mark.asyncio
async def test_login_deactivated_account():
    user = make_user(isActive=False)
    with patch.object(auth_service.crud_user, "get_user_by_email", AsyncMock(return_value=user)):
        with pytest.raises(AuthError) as exc:
            await auth_service.login(LoginRequest(email="ada@example.com", password="secret1"))
    assert exc.value.message == "Account is deactivated"


@pytest.mark.asyncio
async def test_change_password_checks_current_password(user):
    with patch.object(User, "save", AsyncMock()) as save:
        with pytest.raises(AuthError):
            await auth_service.change_password(user, ChangePasswordRequest(currentPassword="nope", newPassword="newsecret"))
        save.assert_not_called()

        await auth_service.change_password(user, ChangePasswordRequest(currentPassword="secret1", newPassword="newsecret"))
    save.assert_awaited_once()
    assert verify_password("newsecret", user.password)


@pytest.mark.asyncio
async def test_update_profile_rejects_email_in_use(user):
    other = make_user(email="taken@example.com")
    with patch.object(auth_service.crud_user, "get_user_by_email", AsyncMock(return_value=other)):
        with pytest.raises(DuplicateError):
            await auth_service.update_profile(user, ProfileUpdate(email="taken@example.com"))


@pytest.mark.asyncio
async def test_update_profile_applies_only_sent_fields(user):
    with patch.object(User, "save", AsyncMock()):
        body = await auth_service.update_profile(user, ProfileUpdate(bio="Poet of science"))
    assert body["bio"] == "Poet of science"
    assert body["name"] == "Ada Lovelace"


@pytest.mark.asyncio
async def test_admin_cannot_delete_themself(admin, storage):
    with pytest.raises(ValidationError):
        await auth_service.delete_user(admin, str(admin.id), storage)


@pytest.mark.asyncio
async def test_delete_user_discards_avatar(admin, storage):
    victim = make_user(avatar="/uploads/avatar-1.png")
    with patch.object(User, "get", AsyncMock(return_value=victim)), \
            patch.object(User, "delete", AsyncMock()) as delete:
        await auth_service.delete_user(admin, str(victim.id), storage)
    delete.assert_awaited_once()
    storage.delete.assert_awaited_once_with("/uploads/avatar-1.png")
