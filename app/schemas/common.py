import re
from datetime import datetime, timezone
from typing import Any, List, Optional

from beanie import Document, Insert, Replace, Save, SaveChanges, before_event
from pydantic import AfterValidator, BeforeValidator
from typing_extensions import Annotated

URL_PATTERN = re.compile(r"^https?://.+")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def split_csv(value: Any) -> Any:
    """Turn ``"a, b,,c"`` into ``["a", "b", "c"]``; lists pass through untouched."""
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


def blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def check_url(value: Optional[str]) -> Optional[str]:
    if value is not None and not URL_PATTERN.match(value):
        raise ValueError("Please enter a valid URL")
    return value


CsvList = Annotated[List[str], BeforeValidator(split_csv)]
OptionalUrl = Annotated[Optional[str], BeforeValidator(blank_to_none), AfterValidator(check_url)]


class TimestampedDocument(Document):
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @before_event(Insert)
    def set_created_at(self):
        now = utcnow()
        if self.createdAt is None:
            self.createdAt = now
        self.updatedAt = now

    @before_event(Replace, Save, SaveChanges)
    def set_updated_at(self):
        self.updatedAt = utcnow()

