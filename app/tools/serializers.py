from typing import Any, Dict, Iterable, Optional
from datetime import datetime, date

from bson import ObjectId

# Beanie bookkeeping and secrets never leave the API
ALWAYS_EXCLUDED = {"revision_id", "password"}


def _convert_value(v: Any) -> Any:
    """Convert a single value to a JSON-friendly representation."""
    if isinstance(v, ObjectId):
        return str(v)
    if isinstance(v, (datetime, date)):
        return v.isoformat()
    return v


def serialize_document(doc: Any, exclude: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    """Serialize a Beanie/Pydantic document or plain dict into JSON-friendly dict.

    - Pydantic models are dumped by alias, so the id comes out as ``_id``
      and Experience.from_ as ``from``.
    - ObjectId and datetime values are converted recursively.
    - ``password`` and ``revision_id`` are always dropped, plus ``exclude``.
    """
    if doc is None:
        return {}

    if hasattr(doc, "model_dump"):
        data = doc.model_dump(by_alias=True)
    elif isinstance(doc, dict):
        data = dict(doc)
    else:
        data = getattr(doc, "__dict__", {}) or {}

    if "id" in data and "_id" not in data:
        data["_id"] = data.pop("id")

    skipped = ALWAYS_EXCLUDED | set(exclude or ())
    for key in skipped:
        data.pop(key, None)

    def recurse(obj: Any) -> Any:
        if isinstance(obj, dict):
            return {k: recurse(_convert_value(v)) for k, v in obj.items()}
        if isinstance(obj, list):
            return [recurse(_convert_value(x)) for x in obj]
        return _convert_value(obj)

    return recurse(data)


def owner_summary(user: Any, fields: Iterable[str] = ("name", "avatar")) -> Optional[Dict[str, Any]]:
    """The slice of a user that gets joined onto the records they own."""
    if user is None:
        return None
    summary = {"_id": str(user.id)}
    for field in fields:
        summary[field] = getattr(user, field, None)
    return summary
