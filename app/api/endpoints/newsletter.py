from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from app.api.deps import require_admin
from app.schemas.newsletter import SubscribeRequest
from app.schemas.user import User
from app.services import newsletter_service
from app.services.common import clamp_page

router = APIRouter()


@router.post("/subscribe")
async def subscribe(request: SubscribeRequest):
    """201 for a new subscriber, 200 when an old subscription is reactivated."""
    status_code, body = await newsletter_service.subscribe(request)
    return JSONResponse(status_code=status_code, content=body)


@router.get("/unsubscribe/{email}")
async def unsubscribe(email: str):
    return await newsletter_service.unsubscribe(email)


@router.get("/admin/subscriptions")
async def read_subscriptions(page: int = 1, limit: int = 10, admin: User = Depends(require_admin)):
    page, limit = clamp_page(page, limit)
    return await newsletter_service.list_subscriptions(page, limit)


@router.get("/admin/stats")
async def read_subscription_stats(admin: User = Depends(require_admin)):
    return await newsletter_service.subscription_stats()


@router.get("/admin/export")
async def export_subscriptions(format: Optional[str] = None, admin: User = Depends(require_admin)):
    rows = await newsletter_service.export_subscriptions()
    if format == "csv":
        return Response(
            content=newsletter_service.rows_to_csv(rows),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="newsletter-subscriptions.csv"'},
        )
    return {"success": True, "data": rows}


@router.delete("/admin/subscription/{subscription_id}")
async def delete_subscription(subscription_id: str, admin: User = Depends(require_admin)):
    return await newsletter_service.delete_subscription(subscription_id)
