import math
from datetime import datetime, timedelta
from typing import Literal

from pydantic import BaseModel, Field, computed_field, model_validator

from core.models.common import Currency, Document, ImageRef, UtcDateTime, percentage, utcnow

TripStatus = Literal["Planning", "Active", "Completed", "Cancelled"]
TripType = Literal["Solo", "Couple", "Family", "Group", "Business"]
CollaboratorRole = Literal["Viewer", "Editor", "Admin"]

_ONE_DAY = timedelta(days=1)


def trip_duration(start: datetime, end: datetime) -> int:
    """Whole days between the two dates, rounded up."""
    return math.ceil(abs(end - start) / _ONE_DAY)


class TripBudget(BaseModel):
    total: float = Field(default=0, ge=0)
    currency: Currency = "USD"
    spent: float = Field(default=0, ge=0)


class Collaborator(BaseModel):
    user: str
    role: CollaboratorRole = "Viewer"
    invited_at: UtcDateTime = Field(default_factory=utcnow)
    accepted_at: UtcDateTime | None = None


class WeatherSnapshot(BaseModel):
    date: UtcDateTime
    temperature_min: float | None = None
    temperature_max: float | None = None
    condition: str = ""
    icon: str = ""


class TripMeta(BaseModel):
    views: int = 0
    likes: int = 0
    shares: int = 0


class TripFields(BaseModel):
    """Client-editable trip attributes."""

    title: str = Field(..., min_length=3, max_length=100)
    description: str = Field(default="", max_length=1000)
    destination: str = Field(..., min_length=1)
    start_date: UtcDateTime
    end_date: UtcDateTime
    status: TripStatus = "Planning"
    type: TripType = "Solo"
    budget: TripBudget = Field(default_factory=TripBudget)
    cover_image: ImageRef | None = None
    is_public: bool = False
    tags: list[str] = []
    notes: str = Field(default="", max_length=2000)
    weather: list[WeatherSnapshot] = []

    @model_validator(mode="after")
    def end_after_start(self) -> "TripFields":
        if self.start_date >= self.end_date:
            raise ValueError("end_date must be after start_date")
        return self


class Trip(Document, TripFields):
    user: str
    duration: int = 0
    collaborators: list[Collaborator] = []
    meta: TripMeta = Field(default_factory=TripMeta)

    def before_save(self) -> None:
        self.duration = trip_duration(self.start_date, self.end_date)

    def find_collaborator(self, user_id: str) -> Collaborator | None:
        return next((c for c in self.collaborators if c.user == user_id), None)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def progress(self) -> int:
        if self.status == "Cancelled":
            return 0
        if self.status == "Completed":
            return 100
        now = utcnow()
        if now < self.start_date:
            return 0
        if now >= self.end_date:
            return 100
        elapsed = (now - self.start_date).total_seconds()
        total = (self.end_date - self.start_date).total_seconds()
        return percentage(elapsed, total)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def budget_remaining(self) -> float:
        return self.budget.total - self.budget.spent

    @computed_field  # type: ignore[prop-decorator]
    @property
    def budget_percentage(self) -> int:
        return percentage(self.budget.spent, self.budget.total)
