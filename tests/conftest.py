import os
import tempfile
from datetime import datetime

# Settings are read at import time, so the environment has to be in place first
os.environ["RATE_LIMIT_MAX"] = "0"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="portfolio-uploads-")
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ENVIRONMENT"] = "test"

from unittest.mock import AsyncMock, MagicMock

import pytest
from beanie import PydanticObjectId

from app.core.security import hash_password
from app.schemas.experience import Experience
from app.schemas.newsletter import Newsletter
from app.schemas.project import Project
from app.schemas.user import User


def fake_query(items=None, count=None):
    """Stand-in for a Beanie FindMany chain: sort/skip/limit return itself."""
    items = list(items or [])
    query = MagicMock()
    query.sort.return_value = query
    query.skip.return_value = query
    query.limit.return_value = query
    query.to_list = AsyncMock(return_value=items)
    query.count = AsyncMock(return_value=len(items) if count is None else count)
    return query


def make_user(**overrides) -> User:
    fields = dict(
        id=PydanticObjectId(),
        name="Ada Lovelace",
        email="ada@example.com",
        password=hash_password("secret1"),
        role="user",
        avatar="",
        isActive=True,
    )
    fields.update(overrides)
    return User.model_construct(**fields)


def make_project(owner: User, **overrides) -> Project:
    fields = dict(
        id=PydanticObjectId(),
        title="Analytical Engine",
        description="A general purpose mechanical computer",
        image="/uploads/image-1.png",
        user=owner.id,
    )
    fields.update(overrides)
    return Project.model_construct(**fields)


def make_experience(owner: User, **overrides) -> Experience:
    fields = dict(
        id=PydanticObjectId(),
        title="Engineer",
        company="Babbage & Co",
        current=False,
        user=owner.id,
        companyWebsite="https://babbage.example.com",
        companyLogo="/uploads/companyLogo-1.png",
    )
    fields["from"] = datetime(2020, 1, 1)
    fields.update(overrides)
    return Experience.model_construct(**fields)


def make_subscription(**overrides) -> Newsletter:
    fields = dict(id=PydanticObjectId(), email="reader@example.com", isActive=True)
    fields.update(overrides)
    return Newsletter.model_construct(**fields)


@pytest.fixture
def user():
    return make_user()


@pytest.fixture
def admin():
    return make_user(name="Admin User", email="admin@example.com", role="admin")


@pytest.fixture
def storage():
    backend = MagicMock()
    backend.save = AsyncMock(return_value="/uploads/file.png")
    backend.delete = AsyncMock(return_value=True)
    return backend


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from main import app

    # no `with` block: the lifespan (and its database connection) is skipped
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()
