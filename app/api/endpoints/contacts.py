from typing import Optional

from fastapi import APIRouter, Depends

from app.api.deps import require_admin
from app.schemas.contact import ContactCreate, ContactStatus, ContactStatusUpdate
from app.schemas.user import User
from app.services import contact_service
from app.services.common import clamp_page

router = APIRouter()


@router.post("", status_code=201)
async def create_contact(payload: ContactCreate):
    """Public contact form submission."""
    return await contact_service.create_contact(payload)


@router.get("")
async def read_contacts(
    status: Optional[ContactStatus] = None,
    page: int = 1,
    limit: int = 20,
    admin: User = Depends(require_admin),
):
    page, limit = clamp_page(page, limit, default_limit=20)
    return await contact_service.list_contacts(status, page, limit)


@router.get("/{contact_id}")
async def read_contact(contact_id: str, admin: User = Depends(require_admin)):
    return await contact_service.get_contact(contact_id)


@router.put("/{contact_id}")
async def update_contact(contact_id: str, payload: ContactStatusUpdate, admin: User = Depends(require_admin)):
    return await contact_service.update_contact_status(contact_id, payload)


@router.delete("/{contact_id}")
async def delete_contact(contact_id: str, admin: User = Depends(require_admin)):
    return await contact_service.delete_contact(contact_id)
