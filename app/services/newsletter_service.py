"""
Newsletter Service

Subscriptions are soft-deleted: unsubscribing flips ``isActive`` and a later
subscribe with the same address reactivates the existing record.
"""

import csv
import io
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from app.core.errors import NotFoundError, ValidationError
from app.schemas.common import utcnow
from app.schemas.newsletter import Newsletter, SubscribeRequest
from app.services.common import paginate, parse_object_id, total_pages
from app.tools.serializers import serialize_document

logger = logging.getLogger(__name__)

EXPORT_FIELDS = ["email", "subscribedAt", "isActive", "source"]


async def subscribe(request: SubscribeRequest) -> Tuple[int, Dict[str, Any]]:
    """Returns ``(status_code, body)``: 201 for a new subscriber, 200 on reactivation."""
    if not request.email:
        raise ValidationError("Please provide an email address")

    existing = await Newsletter.find_one({"email": request.email})
    if existing is not None:
        if existing.isActive:
            raise ValidationError("You are already subscribed to our newsletter")
        existing.isActive = True
        existing.subscribedAt = utcnow()
        await existing.save()
        logger.info("Reactivated newsletter subscription for %s", request.email)
        return 200, {
            "success": True,
            "message": "Welcome back! Your newsletter subscription has been reactivated.",
        }

    subscription = Newsletter(email=request.email, source=request.source or "website")
    await subscription.insert()
    logger.info("New newsletter subscription for %s", request.email)
    return 201, {
        "success": True,
        "message": "Successfully subscribed to newsletter!",
        "subscription": serialize_document(subscription),
    }


async def unsubscribe(email: str) -> Dict[str, Any]:
    subscription = await Newsletter.find_one({"email": email.strip().lower()})
    if subscription is None:
        raise NotFoundError("Subscription not found")
    subscription.isActive = False
    await subscription.save()
    return {"success": True, "message": "Successfully unsubscribed from newsletter"}


async def list_subscriptions(page: int, limit: int) -> Dict[str, Any]:
    subscriptions, total = await paginate(Newsletter, {}, "-subscribedAt", page, limit)
    pages = total_pages(total, limit)
    return {
        "success": True,
        "subscriptions": [serialize_document(s) for s in subscriptions],
        "pagination": {
            "currentPage": page,
            "totalPages": pages,
            "total": total,
            "hasNextPage": page < pages,
            "hasPrevPage": page > 1,
        },
    }


def period_starts(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Start of the current UTC day and of the current UTC month."""
    now = now or datetime.now(timezone.utc)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    month = today.replace(day=1)
    return today, month


async def subscription_stats() -> Dict[str, Any]:
    today, month = period_starts()
    return {
        "success": True,
        "stats": {
            "total": await Newsletter.find({}).count(),
            "active": await Newsletter.find({"isActive": True}).count(),
            "today": await Newsletter.find({"subscribedAt": {"$gte": today}}).count(),
            "thisMonth": await Newsletter.find({"subscribedAt": {"$gte": month}}).count(),
        },
    }


async def delete_subscription(subscription_id: str) -> Dict[str, Any]:
    subscription = await Newsletter.get(parse_object_id(subscription_id, "subscription"))
    if subscription is None:
        raise NotFoundError("Subscription not found")
    await subscription.delete()
    return {"success": True, "message": "Subscription deleted successfully"}


def export_row(subscription: Newsletter) -> Dict[str, Any]:
    subscribed = subscription.subscribedAt
    return {
        "email": subscription.email,
        "subscribedAt": subscribed.isoformat() if subscribed else None,
        "isActive": subscription.isActive,
        "source": subscription.source,
    }


def rows_to_csv(rows: List[Dict[str, Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_FIELDS)
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()


async def export_subscriptions() -> List[Dict[str, Any]]:
    subscriptions = await Newsletter.find({}).sort("-subscribedAt").to_list()
    return [export_row(s) for s in subscriptions]
