from typing import Any, Dict, Iterable, Optional, Tuple

from beanie import PydanticObjectId
from bson import ObjectId
from pydantic import BaseModel

from app.core.errors import ForbiddenError, ValidationError


def parse_object_id(value: str, label: str = "resource") -> PydanticObjectId:
    """Validate a 24-hex identifier before it reaches the database."""
    if not value or not ObjectId.is_valid(str(value)):
        raise ValidationError(f"Invalid {label} ID format")
    return PydanticObjectId(str(value))


def is_owner_or_admin(record: Any, user: Any) -> bool:
    return str(record.user) == str(user.id) or user.role == "admin"


def ensure_owner_or_admin(record: Any, user: Any) -> None:
    if not is_owner_or_admin(record, user):
        raise ForbiddenError("Not authorized")


def update_fields(payload: BaseModel, clearable: Iterable[str] = ()) -> Dict[str, Any]:
    """Fields the caller actually sent; nulls are dropped unless the field may be cleared."""
    sent = payload.model_dump(exclude_unset=True)
    keep_null = set(clearable)
    return {k: v for k, v in sent.items() if v is not None or k in keep_null}


def apply_updates(record: Any, updates: Dict[str, Any]) -> Any:
    for field, value in updates.items():
        setattr(record, field, value)
    return record


async def paginate(model, query: Dict[str, Any], sort: str, page: int, limit: int):
    """Return ``(items, total)`` for one page of ``model`` matching ``query``."""
    total = await model.find(query).count()
    items = await model.find(query).sort(sort).skip((page - 1) * limit).limit(limit).to_list()
    return items, total


def total_pages(total: int, limit: int) -> int:
    if limit <= 0:
        return 0
    return -(-total // limit)


def clamp_page(page: Optional[int], limit: Optional[int], default_limit: int = 10) -> Tuple[int, int]:
    """Normalize query-string pagination to positive integers."""
    page = page if page and page > 0 else 1
    limit = limit if limit and limit > 0 else default_limit
    return page, limit
