from collections import Counter
from typing import Any

from core.access import Operation
from core.errors import ConflictError, NotFoundError, ValidationError
from core.models.common import percentage
from core.models.itinerary import Activity, Itinerary, ItineraryDay, ItineraryFields
from core.services import scoped
from core.services.scoped import TripScopedService, load_authorized_trip


def _check_unique_day_numbers(itinerary: Itinerary) -> None:
    counts = Counter(day.day_number for day in itinerary.days)
    duplicates = sorted(number for number, count in counts.items() if count > 1)
    if duplicates:
        raise ConflictError(f"Day {duplicates[0]} already exists in this itinerary")


def _day_with_activity(itinerary: Itinerary, activity_id: str) -> ItineraryDay:
    for day in itinerary.days:
        if any(activity.id == activity_id for activity in day.activities):
            return day
    raise NotFoundError("Activity not found")


def _first_day_number(itinerary: Itinerary) -> float:
    return min((day.day_number for day in itinerary.days), default=float("inf"))


class ItineraryService(TripScopedService[Itinerary]):
    noun = "Itinerary"
    fields_model = ItineraryFields

    def list_for_trip(self, trip_id: str, user_id: str) -> list[Itinerary]:
        load_authorized_trip(self._trips, trip_id, user_id, Operation.READ)
        return sorted(self._repo.find(trip=trip_id), key=_first_day_number)

    # --- Days ---

    def add_day(self, itinerary_id: str, user_id: str, payload: Any, trip_id: str | None = None) -> Itinerary:
        def change(itinerary: Itinerary) -> None:
            scoped.add_item(itinerary.days, ItineraryDay, payload)
            _check_unique_day_numbers(itinerary)

        return self._mutate(itinerary_id, user_id, change, trip_id)

    def update_day(
        self, itinerary_id: str, day_id: str, user_id: str, payload: Any, trip_id: str | None = None
    ) -> Itinerary:
        def change(itinerary: Itinerary) -> None:
            scoped.update_item(itinerary.days, day_id, payload, "Day")
            _check_unique_day_numbers(itinerary)

        return self._mutate(itinerary_id, user_id, change, trip_id)

    def delete_day(self, itinerary_id: str, day_id: str, user_id: str, trip_id: str | None = None) -> Itinerary:
        return self._mutate(
            itinerary_id, user_id, lambda i: scoped.remove_item(i.days, day_id, "Day"), trip_id
        )

    # --- Activities ---

    def add_activity(
        self, itinerary_id: str, day_id: str, user_id: str, payload: Any, trip_id: str | None = None
    ) -> Itinerary:
        def change(itinerary: Itinerary) -> None:
            day = scoped.find_item(itinerary.days, day_id, "Day")
            activity = scoped.add_item(day.activities, Activity, payload)
            if not (isinstance(payload, dict) and "order" in payload):
                activity.order = len(day.activities) - 1

        return self._mutate(itinerary_id, user_id, change, trip_id)

    def update_activity(
        self, itinerary_id: str, activity_id: str, user_id: str, payload: Any, trip_id: str | None = None
    ) -> Itinerary:
        def change(itinerary: Itinerary) -> None:
            day = _day_with_activity(itinerary, activity_id)
            scoped.update_item(day.activities, activity_id, payload, "Activity")

        return self._mutate(itinerary_id, user_id, change, trip_id)

    def delete_activity(
        self, itinerary_id: str, activity_id: str, user_id: str, trip_id: str | None = None
    ) -> Itinerary:
        def change(itinerary: Itinerary) -> None:
            day = _day_with_activity(itinerary, activity_id)
            scoped.remove_item(day.activities, activity_id, "Activity")

        return self._mutate(itinerary_id, user_id, change, trip_id)

    def toggle_activity(
        self, itinerary_id: str, activity_id: str, user_id: str, trip_id: str | None = None
    ) -> Itinerary:
        def change(itinerary: Itinerary) -> None:
            day = _day_with_activity(itinerary, activity_id)
            scoped.toggle_flag(day.activities, activity_id, "is_completed", "Activity")

        return self._mutate(itinerary_id, user_id, change, trip_id)

    def reorder_activities(
        self, itinerary_id: str, day_id: str, user_id: str, activity_ids: Any, trip_id: str | None = None
    ) -> Itinerary:
        """Put the listed activities first, in the given order; unlisted ones keep their relative order after them."""
        if not isinstance(activity_ids, list) or not all(isinstance(a, str) for a in activity_ids):
            raise ValidationError("activity_ids must be a list of activity ids")

        def change(itinerary: Itinerary) -> None:
            day = scoped.find_item(itinerary.days, day_id, "Day")
            by_id = {activity.id: activity for activity in day.activities}
            listed = [by_id[a] for a in dict.fromkeys(activity_ids) if a in by_id]
            rest = [activity for activity in day.activities if activity.id not in set(activity_ids)]
            day.activities = listed + rest
            for position, activity in enumerate(day.activities):
                activity.order = position

        return self._mutate(itinerary_id, user_id, change, trip_id)

    def get_stats(self, trip_id: str, user_id: str) -> dict[str, Any]:
        itineraries = self.list_for_trip(trip_id, user_id)
        activities = [a for i in itineraries for a in i.all_activities()]
        completed = sum(1 for a in activities if a.is_completed)
        return {
            "total_itineraries": len(itineraries),
            "total_days": sum(i.total_duration for i in itineraries),
            "total_activities": len(activities),
            "completed_activities": completed,
            "completion_percentage": percentage(completed, len(activities)),
            "total_cost": sum(i.total_cost.amount for i in itineraries),
            "activity_types": dict(Counter(a.type for a in activities)),
        }
