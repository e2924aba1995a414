from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from beanie import PydanticObjectId

from app.core.errors import NotFoundError, ValidationError
from app.schemas.newsletter import Newsletter, SubscribeRequest
from app.services import newsletter_service
from conftest import fake_query, make_subscription


def newsletter_factory(**fields):
    return Newsletter.model_construct(id=PydanticObjectId(), **fields)


@pytest.mark.asyncio
async def test_subscribe_new_email_is_201():
    model = MagicMock(side_effect=newsletter_factory)
    model.find_one = AsyncMock(return_value=None)
    with patch.object(newsletter_service, "Newsletter", model), \
            patch.object(Newsletter, "insert", AsyncMock()) as insert:
        status, body = await newsletter_service.subscribe(SubscribeRequest(email="Reader@Example.com"))

    insert.assert_awaited_once()
    model.find_one.assert_awaited_once_with({"email": "reader@example.com"})
    assert status == 201
    assert body["message"] == "Successfully subscribed to newsletter!"
    assert body["subscription"]["email"] == "reader@example.com"
    assert body["subscription"]["source"] == "website"


@pytest.mark.asyncio
async def test_subscribe_while_active_fails():
    with patch.object(Newsletter, "find_one", AsyncMock(return_value=make_subscription())):
        with pytest.raises(ValidationError) as exc:
            await newsletter_service.subscribe(SubscribeRequest(email="reader@example.com"))
    assert exc.value.message == "You are already subscribed to our newsletter"


@pytest.mark.asyncio
async def test_subscribe_reactivates_inactive_record():
    old = datetime.now(timezone.utc) - timedelta(days=30)
    subscription = make_subscription(isActive=False, subscribedAt=old)
    with patch.object(Newsletter, "find_one", AsyncMock(return_value=subscription)), \
            patch.object(Newsletter, "save", AsyncMock()) as save:
        status, body = await newsletter_service.subscribe(SubscribeRequest(email="reader@example.com"))

    save.assert_awaited_once()
    assert status == 200
    assert body["message"] == "Welcome back! Your newsletter subscription has been reactivated."
    assert subscription.isActive is True
    assert subscription.subscribedAt > old


@pytest.mark.asyncio
async def test_subscribe_without_email():
    with pytest.raises(ValidationError) as exc:
        await newsletter_service.subscribe(SubscribeRequest())
    assert exc.value.message == "Please provide an email address"


@pytest.mark.asyncio
async def test_unsubscribe_soft_deletes():
    subscription = make_subscription()
    with patch.object(Newsletter, "find_one", AsyncMock(return_value=subscription)) as find_one, \
            patch.object(Newsletter, "save", AsyncMock()):
        body = await newsletter_service.unsubscribe("Reader@Example.com")
    find_one.assert_awaited_once_with({"email": "reader@example.com"})
    assert subscription.isActive is False
    assert body["message"] == "Successfully unsubscribed from newsletter"


@pytest.mark.asyncio
async def test_unsubscribe_unknown_email_is_404():
    with patch.object(Newsletter, "find_one", AsyncMock(return_value=None)):
        with pytest.raises(NotFoundError):
            await newsletter_service.unsubscribe("ghost@example.com")


@pytest.mark.asyncio
async def test_list_subscriptions_pagination_block():
    items = [make_subscription(), make_subscription(email="other@example.com")]
    with patch.object(Newsletter, "find", return_value=fake_query(items, count=25)):
        body = await newsletter_service.list_subscriptions(page=2, limit=10)
    assert body["pagination"] == {
        "currentPage": 2,
        "totalPages": 3,
        "total": 25,
        "hasNextPage": True,
        "hasPrevPage": True,
    }
    assert len(body["subscriptions"]) == 2


def test_period_starts_are_utc_midnight_and_first_of_month():
    today, month = newsletter_service.period_starts(datetime(2024, 6, 17, 15, 30, tzinfo=timezone.utc))
    assert today == datetime(2024, 6, 17, tzinfo=timezone.utc)
    assert month == datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_subscription_stats_counts():
    counts = iter([10, 7, 1, 4])
    with patch.object(Newsletter, "find", side_effect=lambda *a, **k: fake_query(count=next(counts))):
        body = await newsletter_service.subscription_stats()
    assert body["stats"] == {"total": 10, "active": 7, "today": 1, "thisMonth": 4}


def test_rows_to_csv():
    subscribed = datetime(2024, 1, 2, tzinfo=timezone.utc)
    row = newsletter_service.export_row(make_subscription(subscribedAt=subscribed, source="footer"))
    text = newsletter_service.rows_to_csv([row])
    lines = text.strip().splitlines()
    assert lines[0] == "email,subscribedAt,isActive,source"
    assert lines[1] == f"reader@example.com,{subscribed.isoformat()},True,footer"
