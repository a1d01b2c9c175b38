from typing import Literal

from pydantic import BaseModel, Field, computed_field, model_validator

from core.models.common import Coordinates, Document, ImageRef, Money, UtcDateTime, new_id, percentage

ActivityType = Literal[
    "Attraction",
    "Restaurant",
    "Hotel",
    "Transport",
    "Activity",
    "Shopping",
    "Entertainment",
    "Custom",
]


class ActivityLocation(BaseModel):
    name: str = ""
    address: str = ""
    coordinates: Coordinates | None = None


class BookingInfo(BaseModel):
    is_booked: bool = False
    confirmation_number: str = ""
    booking_url: str = ""
    contact_info: str = ""


class Activity(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    type: ActivityType = "Activity"
    location: ActivityLocation = Field(default_factory=ActivityLocation)
    start_time: UtcDateTime | None = None
    end_time: UtcDateTime | None = None
    duration: int = Field(default=60, ge=0)
    cost: Money = Field(default_factory=Money)
    booking_info: BookingInfo = Field(default_factory=BookingInfo)
    images: list[ImageRef] = []
    rating: float | None = Field(default=None, ge=0, le=5)
    notes: str = Field(default="", max_length=1000)
    is_completed: bool = False
    order: int = 0

    @model_validator(mode="after")
    def end_not_before_start(self) -> "Activity":
        if self.start_time and self.end_time and self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        return self


class DayWeather(BaseModel):
    temperature: float | None = None
    condition: str = ""
    icon: str = ""


class ItineraryDay(BaseModel):
    id: str = Field(default_factory=new_id)
    day_number: int = Field(..., ge=1)
    date: UtcDateTime | None = None
    title: str = Field(default="", max_length=100)
    description: str = Field(default="", max_length=500)
    activities: list[Activity] = []
    notes: str = Field(default="", max_length=1000)
    weather: DayWeather | None = None


class ItineraryFields(BaseModel):
    """Client-editable itinerary attributes."""

    title: str = Field(..., min_length=3, max_length=100)
    description: str = Field(default="", max_length=1000)
    days: list[ItineraryDay] = []
    is_public: bool = False
    tags: list[str] = []
    is_template: bool = False
    template_category: str | None = None

    @model_validator(mode="after")
    def unique_day_numbers(self) -> "ItineraryFields":
        seen: set[int] = set()
        for day in self.days:
            if day.day_number in seen:
                raise ValueError(f"Duplicate day number {day.day_number}")
            seen.add(day.day_number)
        return self


class Itinerary(Document, ItineraryFields):
    trip: str
    total_cost: Money = Field(default_factory=Money)
    total_duration: int = 0

    def all_activities(self) -> list[Activity]:
        return [activity for day in self.days for activity in day.activities]

    def before_save(self) -> None:
        self.days.sort(key=lambda day: day.day_number)
        activities = self.all_activities()
        currency = activities[0].cost.currency if activities else self.total_cost.currency
        self.total_cost = Money(amount=sum(a.cost.amount for a in activities), currency=currency)
        self.total_duration = len(self.days)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_activities(self) -> int:
        return len(self.all_activities())

    @computed_field  # type: ignore[prop-decorator]
    @property
    def completed_activities(self) -> int:
        return sum(1 for activity in self.all_activities() if activity.is_completed)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def completion_percentage(self) -> int:
        return percentage(self.completed_activities, self.total_activities)
