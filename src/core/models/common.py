import math
from datetime import datetime, timezone
from typing import Annotated, Any, Literal
from uuid import uuid4

from pydantic import AfterValidator, BaseModel, Field

Currency = Literal["USD", "EUR", "GBP", "JPY", "CAD", "AUD"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid4().hex


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps from clients are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDateTime = Annotated[datetime, AfterValidator(_as_utc)]


def percentage(done: float, total: float) -> int:
    """Rounded ``done / total * 100``, half up; 0 when there is nothing to count."""
    if not total:
        return 0
    return math.floor(done / total * 100 + 0.5)


class Money(BaseModel):
    amount: float = Field(default=0, ge=0)
    currency: Currency = "USD"


class ImageRef(BaseModel):
    public_id: str = ""
    url: str
    caption: str = Field(default="", max_length=200)


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class Document(BaseModel):
    """Base for every persisted record.

    ``version`` backs optimistic concurrency: the store only accepts a write
    whose expected version matches the stored one. ``before_save`` is run by
    the repository ahead of every create and replace.
    """

    id: str = Field(default_factory=new_id)
    version: int = 0
    created_at: UtcDateTime = Field(default_factory=utcnow)
    updated_at: UtcDateTime = Field(default_factory=utcnow)

    def before_save(self) -> None:
        """Recompute stored aggregates. No-op by default."""

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude=set(type(self).model_computed_fields))

    def to_public(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
