"""Destination catalog, images, reviews and quick ratings."""

import logging
from typing import Any

from core.db.repository import Repository
from core.errors import ConflictError, NotFoundError, ValidationError
from core.models.common import ImageRef, utcnow
from core.models.destination import (
    Destination,
    DestinationFields,
    HelpfulMark,
    QuickRating,
    QuickRatingInput,
    Review,
    ReviewFields,
)
from core.pagination import Page, paginate, parse_page_params, parse_sort, sort_by
from core.services.images import ImageStore, ImageUpload, discard_images
from core.services.scoped import merge_fields, mutate_with_retry
from core.validation import parse_payload

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = frozenset({"name", "country", "city", "rating.average", "meta.views", "created_at"})
FEATURED_LIMIT = 6
POPULAR_LIMIT = 8


def _contains(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()


def _float_param(query: dict[str, Any], name: str) -> float | None:
    raw = query.get(name)
    if raw in (None, ""):
        return None
    try:
        return float(raw)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name} must be a number") from e


class DestinationService:
    def __init__(self, destinations: Repository[Destination], images: ImageStore) -> None:
        self._destinations = destinations
        self._images = images

    # --- Catalog queries ---

    def _active(self) -> list[Destination]:
        return self._destinations.find(is_active=True)

    def _filter(self, destinations: list[Destination], query: dict[str, Any]) -> list[Destination]:
        if query.get("category"):
            destinations = [d for d in destinations if query["category"] in d.categories]
        if query.get("country"):
            destinations = [d for d in destinations if _contains(d.country, str(query["country"]))]
        if query.get("city"):
            destinations = [d for d in destinations if _contains(d.city, str(query["city"]))]
        if query.get("budget_tier"):
            destinations = [d for d in destinations if d.budget_tier == query["budget_tier"]]
        min_rating = _float_param(query, "min_rating")
        if min_rating is not None:
            destinations = [d for d in destinations if d.rating.average >= min_rating]
        return destinations

    def _page(self, destinations: list[Destination], query: dict[str, Any]) -> Page[Destination]:
        page, limit = parse_page_params(query)
        sort_field, descending = parse_sort(query.get("sort"), "-rating.average")
        if sort_field not in SORTABLE_FIELDS:
            raise ValidationError(f"Cannot sort destinations by {sort_field}")
        return paginate(sort_by(destinations, sort_field, descending=descending), page, limit)

    def list_destinations(self, query: dict[str, Any] | None = None) -> Page[Destination]:
        query = query or {}
        return self._page(self._filter(self._active(), query), query)

    def search(self, query: dict[str, Any] | None = None) -> Page[Destination]:
        query = query or {}
        term = str(query.get("q") or "").strip()
        if not term:
            raise ValidationError("Search query is required")
        matches = [
            d
            for d in self._active()
            if any(_contains(text, term) for text in (d.name, d.city, d.country, d.description))
        ]
        return self._page(self._filter(matches, query), query)

    def featured(self, limit: int = FEATURED_LIMIT) -> list[Destination]:
        featured = [d for d in self._active() if d.featured]
        return sort_by(featured, "rating.average", descending=True)[:limit]

    def popular(self, limit: int = POPULAR_LIMIT) -> list[Destination]:
        ranked = sorted(
            self._active(),
            key=lambda d: (d.rating.average, d.meta.views),
            reverse=True,
        )
        return ranked[:limit]

    def by_category(self, category: str, query: dict[str, Any] | None = None) -> Page[Destination]:
        return self.list_destinations({**(query or {}), "category": category})

    def by_country(self, country: str, query: dict[str, Any] | None = None) -> Page[Destination]:
        return self.list_destinations({**(query or {}), "country": country})

    def categories(self) -> list[str]:
        return sorted({category for d in self._active() for category in d.categories})

    def countries(self) -> list[str]:
        return sorted({d.country for d in self._active()})

    def get(self, destination_id: str) -> Destination:
        destination = self._destinations.get(destination_id)
        if destination is None:
            raise NotFoundError("Destination not found")
        return destination

    def increment_visit(self, destination_id: str) -> int:
        views = self._destinations.increment(destination_id, "meta.views")
        if views is None:
            raise NotFoundError("Destination not found")
        return views

    # --- Catalog mutations ---

    def _upload_all(self, uploads: list[Any] | None, folder: str) -> list[ImageRef]:
        parsed = [parse_payload(ImageUpload, upload) for upload in uploads or []]
        return [self._images.upload(upload, folder) for upload in parsed]

    def create(self, payload: Any, uploads: list[Any] | None = None) -> Destination:
        fields = parse_payload(DestinationFields, payload)
        uploaded = self._upload_all(uploads, "destinations")
        destination = Destination.model_validate(fields.model_dump())
        destination.images.extend(uploaded)
        if destination.main_image is None and destination.images:
            destination.main_image = destination.images[0]
        self._destinations.create(destination)
        logger.info("Created destination %s (%s)", destination.id, destination.full_location)
        return destination

    def update(self, destination_id: str, payload: Any, main_upload: Any = None) -> Destination:
        new_main = self._upload_all([main_upload], "destinations")[0] if main_upload else None
        replaced: list[ImageRef] = []

        def change(destination: Destination) -> None:
            merge_fields(destination, DestinationFields, payload)
            replaced.clear()
            if new_main is not None:
                if destination.main_image is not None:
                    replaced.append(destination.main_image)
                destination.main_image = new_main

        try:
            destination = mutate_with_retry(self._destinations, lambda: self.get(destination_id), change)
        except Exception:
            if new_main is not None:
                discard_images(self._images, [new_main])
            raise
        discard_images(self._images, replaced)
        return destination

    def upload_images(self, destination_id: str, uploads: list[Any]) -> Destination:
        if not uploads:
            raise ValidationError("No images provided")
        uploaded = self._upload_all(uploads, "destinations")

        def change(destination: Destination) -> None:
            destination.images.extend(uploaded)
            if destination.main_image is None:
                destination.main_image = uploaded[0]

        try:
            return mutate_with_retry(self._destinations, lambda: self.get(destination_id), change)
        except Exception:
            discard_images(self._images, uploaded)
            raise

    def delete(self, destination_id: str) -> None:
        destination = self.get(destination_id)
        images = list(destination.images)
        if destination.main_image is not None:
            images.append(destination.main_image)
        images.extend(image for review in destination.reviews for image in review.images)
        self._destinations.delete(destination.id)
        discard_images(self._images, images)
        logger.info("Deleted destination %s", destination.id)

    # --- Reviews ---

    def list_reviews(self, destination_id: str, query: dict[str, Any] | None = None) -> Page[Review]:
        page, limit = parse_page_params(query)
        reviews = sort_by(self.get(destination_id).reviews, "created_at", descending=True)
        return paginate(reviews, page, limit)

    def add_review(
        self, destination_id: str, user_id: str, payload: Any, uploads: list[Any] | None = None
    ) -> Destination:
        fields = parse_payload(ReviewFields, payload)
        if self.get(destination_id).find_review_by(user_id) is not None:
            raise ConflictError("You have already reviewed this destination")
        images = self._upload_all(uploads, "reviews")

        def change(destination: Destination) -> None:
            if destination.find_review_by(user_id) is not None:
                raise ConflictError("You have already reviewed this destination")
            destination.reviews.append(Review(**fields.model_dump(), user=user_id, images=images))

        try:
            return mutate_with_retry(self._destinations, lambda: self.get(destination_id), change)
        except Exception:
            discard_images(self._images, images)
            raise

    def _own_review(self, destination: Destination, review_id: str, user_id: str) -> Review:
        review = destination.find_review(review_id)
        if review is None or review.user != user_id:
            raise NotFoundError("Review not found or unauthorized")
        return review

    def update_review(self, destination_id: str, review_id: str, user_id: str, payload: Any) -> Destination:
        def change(destination: Destination) -> None:
            review = self._own_review(destination, review_id, user_id)
            merge_fields(review, ReviewFields, payload)
            review.updated_at = utcnow()

        return mutate_with_retry(self._destinations, lambda: self.get(destination_id), change)

    def delete_review(self, destination_id: str, review_id: str, user_id: str) -> Destination:
        removed: list[ImageRef] = []

        def change(destination: Destination) -> None:
            review = self._own_review(destination, review_id, user_id)
            destination.reviews.remove(review)
            removed[:] = review.images

        destination = mutate_with_retry(self._destinations, lambda: self.get(destination_id), change)
        discard_images(self._images, removed)
        return destination

    def toggle_review_helpful(self, destination_id: str, review_id: str, user_id: str) -> Destination:
        def change(destination: Destination) -> None:
            review = destination.find_review(review_id)
            if review is None:
                raise NotFoundError("Review not found")
            mark = next((m for m in review.helpful if m.user == user_id), None)
            if mark is None:
                review.helpful.append(HelpfulMark(user=user_id))
            else:
                review.helpful.remove(mark)

        return mutate_with_retry(self._destinations, lambda: self.get(destination_id), change)

    # --- Quick ratings ---

    def add_rating(self, destination_id: str, user_id: str, payload: Any) -> Destination:
        """Record a quick rating. Independent of reviews: no one-per-user rule, never feeds ``rating``."""
        data = parse_payload(QuickRatingInput, payload)

        def change(destination: Destination) -> None:
            destination.ratings.append(QuickRating(**data.model_dump(), user=user_id))

        return mutate_with_retry(self._destinations, lambda: self.get(destination_id), change)
