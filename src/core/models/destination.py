from typing import Literal

from pydantic import BaseModel, Field, computed_field

from core.models.common import Coordinates, Document, ImageRef, Money, UtcDateTime, new_id, utcnow

DestinationCategory = Literal[
    "Beach",
    "Mountain",
    "City",
    "Adventure",
    "Food",
    "Culture",
    "Nature",
    "Historical",
    "Shopping",
    "Nightlife",
    "Luxury",
    "Honeymoon",
    "Romantic",
    "Lake",
]
BudgetTier = Literal["Budget", "Mid-range", "Luxury"]


class RatingSummary(BaseModel):
    average: float = Field(default=0, ge=0, le=5)
    count: int = Field(default=0, ge=0)


class HelpfulMark(BaseModel):
    user: str
    created_at: UtcDateTime = Field(default_factory=utcnow)


class ReviewFields(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    title: str = Field(default="", max_length=100)
    comment: str = Field(..., min_length=1, max_length=1000)


class Review(ReviewFields):
    id: str = Field(default_factory=new_id)
    user: str
    images: list[ImageRef] = []
    helpful: list[HelpfulMark] = []
    created_at: UtcDateTime = Field(default_factory=utcnow)
    updated_at: UtcDateTime = Field(default_factory=utcnow)


class QuickRatingInput(BaseModel):
    rating: float = Field(..., ge=1, le=5)
    review: str = Field(default="", max_length=1000)


class QuickRating(QuickRatingInput):
    user: str
    date: UtcDateTime = Field(default_factory=utcnow)


class Attraction(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    type: str = ""
    rating: float | None = Field(default=None, ge=0, le=5)
    price: Money | None = None


class BestTimeToVisit(BaseModel):
    months: list[str] = []
    description: str = ""


class DestinationMeta(BaseModel):
    views: int = 0
    favorites: int = 0


class DestinationFields(BaseModel):
    """Client-editable destination attributes."""

    name: str = Field(..., min_length=2, max_length=100)
    country: str = Field(..., min_length=2, max_length=100)
    city: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=2000)
    short_description: str = Field(default="", max_length=200)
    images: list[ImageRef] = []
    main_image: ImageRef | None = None
    categories: list[DestinationCategory] = Field(..., min_length=1)
    coordinates: Coordinates | None = None
    attractions: list[Attraction] = []
    budget_tier: BudgetTier = "Mid-range"
    best_time_to_visit: BestTimeToVisit = Field(default_factory=BestTimeToVisit)
    climate: str = ""
    languages: list[str] = []
    currency: str = ""
    timezone: str = ""
    is_active: bool = True
    featured: bool = False
    tags: list[str] = []


class Destination(Document, DestinationFields):
    rating: RatingSummary = Field(default_factory=RatingSummary)
    reviews: list[Review] = []
    # Quick ratings are a separate metric from reviews and never feed ``rating``
    ratings: list[QuickRating] = []
    quick_rating: RatingSummary = Field(default_factory=RatingSummary)
    meta: DestinationMeta = Field(default_factory=DestinationMeta)

    def before_save(self) -> None:
        self.rating = _summarize([review.rating for review in self.reviews])
        self.quick_rating = _summarize([entry.rating for entry in self.ratings])

    def find_review(self, review_id: str) -> Review | None:
        return next((r for r in self.reviews if r.id == review_id), None)

    def find_review_by(self, user_id: str) -> Review | None:
        return next((r for r in self.reviews if r.user == user_id), None)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def full_location(self) -> str:
        return f"{self.city}, {self.country}"


def _summarize(values: list[float]) -> RatingSummary:
    if not values:
        return RatingSummary()
    return RatingSummary(average=sum(values) / len(values), count=len(values))
