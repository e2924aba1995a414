import logging
from typing import Any, Dict, Optional

from app.core.errors import NotFoundError
from app.schemas.contact import Contact, ContactCreate, ContactStatusUpdate
from app.services.common import paginate, parse_object_id, total_pages
from app.tools.serializers import serialize_document

logger = logging.getLogger(__name__)


async def get_contact_or_404(contact_id: str) -> Contact:
    contact = await Contact.get(parse_object_id(contact_id, "contact"))
    if contact is None:
        raise NotFoundError("Message not found")
    return contact


async def create_contact(payload: ContactCreate) -> Dict[str, Any]:
    contact = Contact(**payload.model_dump(exclude_none=True))
    await contact.insert()
    logger.info("New contact message from %s", contact.email)
    return {"success": True, "message": "Message sent successfully", "contact": serialize_document(contact)}


async def list_contacts(status: Optional[str], page: int, limit: int) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    if status:
        query["status"] = status
    contacts, total = await paginate(Contact, query, "-createdAt", page, limit)
    return {
        "success": True,
        "contacts": [serialize_document(c) for c in contacts],
        "totalPages": total_pages(total, limit),
        "currentPage": page,
        "total": total,
    }


async def get_contact(contact_id: str) -> Dict[str, Any]:
    contact = await get_contact_or_404(contact_id)
    return {"success": True, "contact": serialize_document(contact)}


async def update_contact_status(contact_id: str, payload: ContactStatusUpdate) -> Dict[str, Any]:
    contact = await get_contact_or_404(contact_id)
    contact.status = payload.status
    await contact.save()
    return {"success": True, "contact": serialize_document(contact)}


async def delete_contact(contact_id: str) -> Dict[str, Any]:
    contact = await get_contact_or_404(contact_id)
    await contact.delete()
    return {"success": True, "message": "Message deleted successfully"}
