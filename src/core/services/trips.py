"""Trip lifecycle, listing, statistics and collaborator management."""

import logging
from collections import Counter
from typing import Any

from pydantic import BaseModel

from core.access import Operation
from core.db.repository import Repository
from core.errors import ConflictError, NotFoundError, UpstreamError, ValidationError
from core.models.budget import Budget
from core.models.common import utcnow
from core.models.destination import Destination
from core.models.itinerary import Itinerary
from core.models.packing_list import PackingList
from core.models.trip import Collaborator, CollaboratorRole, Trip, TripFields
from core.models.user import LowerEmail, User
from core.pagination import Page, paginate, parse_page_params, parse_sort, sort_by
from core.services.notifications import NotificationSender, trip_invitation_email
from core.services.scoped import load_authorized_trip, merge_fields, mutate_with_retry
from core.validation import parse_payload

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = frozenset({"created_at", "updated_at", "start_date", "end_date", "title", "duration"})
_SCOPES = ("owned", "shared", "all")


class CollaboratorInput(BaseModel):
    email: LowerEmail
    role: CollaboratorRole = "Viewer"


class RoleInput(BaseModel):
    role: CollaboratorRole


class TripService:
    def __init__(
        self,
        trips: Repository[Trip],
        destinations: Repository[Destination],
        users: Repository[User],
        budgets: Repository[Budget],
        itineraries: Repository[Itinerary],
        packing_lists: Repository[PackingList],
        notifier: NotificationSender,
        frontend_url: str,
    ) -> None:
        self._trips = trips
        self._destinations = destinations
        self._users = users
        self._budgets = budgets
        self._itineraries = itineraries
        self._packing_lists = packing_lists
        self._notifier = notifier
        self._frontend_url = frontend_url.rstrip("/")

    def get_authorized(self, trip_id: str, user_id: str, operation: Operation) -> Trip:
        return load_authorized_trip(self._trips, trip_id, user_id, operation)

    # --- Queries ---

    def list_trips(self, user_id: str, query: dict[str, Any] | None = None) -> Page[Trip]:
        query = query or {}
        page, limit = parse_page_params(query)
        scope = query.get("scope") or "owned"
        if scope not in _SCOPES:
            raise ValidationError(f"scope must be one of: {', '.join(_SCOPES)}")
        sort_field, descending = parse_sort(query.get("sort"), "-created_at")
        if sort_field not in SORTABLE_FIELDS:
            raise ValidationError(f"Cannot sort trips by {sort_field}")

        if scope == "owned":
            trips = self._trips.find(user=user_id)
        else:
            everything = self._trips.find()
            shared = [t for t in everything if t.find_collaborator(user_id)]
            owned = [t for t in everything if t.user == user_id] if scope == "all" else []
            trips = owned + shared

        if query.get("status"):
            trips = [t for t in trips if t.status == query["status"]]
        if query.get("type"):
            trips = [t for t in trips if t.type == query["type"]]
        if query.get("search"):
            needle = str(query["search"]).lower()
            trips = [t for t in trips if needle in t.title.lower()]

        return paginate(sort_by(trips, sort_field, descending=descending), page, limit)

    def get_trip(self, trip_id: str, user_id: str) -> Trip:
        return self.get_authorized(trip_id, user_id, Operation.READ)

    def get_trip_stats(self, user_id: str) -> dict[str, Any]:
        trips = self._trips.find(user=user_id)
        total = len(trips)
        return {
            "overview": {
                "total_trips": total,
                "total_budget": sum(t.budget.total for t in trips),
                "total_spent": sum(t.budget.spent for t in trips),
                "avg_duration": round(sum(t.duration for t in trips) / total, 1) if total else 0,
            },
            "status_stats": dict(Counter(t.status for t in trips)),
            "type_stats": dict(Counter(t.type for t in trips)),
        }

    # --- Lifecycle ---

    def create_trip(self, user_id: str, payload: Any) -> Trip:
        fields = parse_payload(TripFields, payload)
        if fields.start_date < utcnow():
            raise ValidationError("Start date cannot be in the past")
        self._require_destination(fields.destination)

        trip = Trip.model_validate({**fields.model_dump(), "user": user_id})
        self._trips.create(trip)
        logger.info("Created trip %s for user %s", trip.id, user_id)
        return trip

    def update_trip(self, trip_id: str, user_id: str, payload: Any) -> Trip:
        if payload is not None and not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        changes = payload or {}

        def change(trip: Trip) -> None:
            new_destination = changes.get("destination")
            if new_destination and new_destination != trip.destination:
                self._require_destination(new_destination)
            merge_fields(trip, TripFields, changes)

        return mutate_with_retry(
            self._trips,
            lambda: self.get_authorized(trip_id, user_id, Operation.WRITE_TRIP),
            change,
        )

    def delete_trip(self, trip_id: str, user_id: str) -> dict[str, int]:
        """Delete the trip together with its budgets, itineraries and packing lists."""
        trip = self.get_authorized(trip_id, user_id, Operation.DELETE_TRIP)
        removed = {
            "budgets": self._budgets.delete_where(trip=trip.id),
            "itineraries": self._itineraries.delete_where(trip=trip.id),
            "packing_lists": self._packing_lists.delete_where(trip=trip.id),
        }
        self._trips.delete(trip.id)
        logger.info(
            "Deleted trip %s with %d budgets, %d itineraries, %d packing lists",
            trip.id,
            removed["budgets"],
            removed["itineraries"],
            removed["packing_lists"],
        )
        return removed

    def _require_destination(self, destination_id: str) -> None:
        if self._destinations.get(destination_id) is None:
            raise NotFoundError("Destination not found")

    # --- Collaborators ---

    def list_collaborators(self, trip_id: str, user_id: str) -> list[dict[str, Any]]:
        trip = self.get_authorized(trip_id, user_id, Operation.READ)
        entries = []
        for collaborator in trip.collaborators:
            user = self._users.get(collaborator.user)
            entry = collaborator.model_dump(mode="json")
            entry["name"] = user.full_name if user else ""
            entry["email"] = user.email if user else ""
            entries.append(entry)
        return entries

    def add_collaborator(self, trip_id: str, user_id: str, payload: Any) -> Trip:
        data = parse_payload(CollaboratorInput, payload)
        self.get_authorized(trip_id, user_id, Operation.MANAGE_COLLABORATORS)
        invitee = self._users.find_one(email=data.email)
        if invitee is None:
            raise NotFoundError("No user found with that email")

        def change(trip: Trip) -> None:
            if invitee.id == trip.user:
                raise ValidationError("Trip owner cannot be added as a collaborator")
            if trip.find_collaborator(invitee.id):
                raise ConflictError("User is already a collaborator")
            trip.collaborators.append(Collaborator(user=invitee.id, role=data.role))

        trip = mutate_with_retry(
            self._trips,
            lambda: self.get_authorized(trip_id, user_id, Operation.MANAGE_COLLABORATORS),
            change,
        )
        logger.info("Added collaborator %s to trip %s as %s", invitee.id, trip.id, data.role)
        self._send_invitation(trip, user_id, invitee)
        return trip

    def update_collaborator_role(self, trip_id: str, user_id: str, collaborator_id: str, payload: Any) -> Trip:
        data = parse_payload(RoleInput, payload)

        def change(trip: Trip) -> None:
            collaborator = trip.find_collaborator(collaborator_id)
            if collaborator is None:
                raise NotFoundError("Collaborator not found")
            collaborator.role = data.role

        return mutate_with_retry(
            self._trips,
            lambda: self.get_authorized(trip_id, user_id, Operation.MANAGE_COLLABORATORS),
            change,
        )

    def remove_collaborator(self, trip_id: str, user_id: str, collaborator_id: str) -> Trip:
        def change(trip: Trip) -> None:
            collaborator = trip.find_collaborator(collaborator_id)
            if collaborator is None:
                raise NotFoundError("Collaborator not found")
            trip.collaborators.remove(collaborator)

        trip = mutate_with_retry(
            self._trips,
            lambda: self.get_authorized(trip_id, user_id, Operation.MANAGE_COLLABORATORS),
            change,
        )
        logger.info("Removed collaborator %s from trip %s", collaborator_id, trip.id)
        return trip

    def _send_invitation(self, trip: Trip, inviter_id: str, invitee: User) -> None:
        inviter = self._users.get(inviter_id)
        subject, body = trip_invitation_email(
            inviter.full_name if inviter else "A TravelTrack user",
            trip.title,
            f"{self._frontend_url}/trips/{trip.id}",
        )
        try:
            self._notifier.send(invitee.email, subject, body)
        except UpstreamError:
            logger.warning("Invitation email to %s for trip %s not sent", invitee.email, trip.id, exc_info=True)
