"""
Shared machinery for records that hang off a trip (budgets, itineraries,
packing lists) and for the item lists embedded in them.

A trip-scoped record never stores a user: every call re-reads the record,
then re-reads its trip and runs the access guard against the trip's current
owner and collaborators. Writes go through ``mutate_with_retry``, which repeats the
load, authorize, change and save cycle when the conditional save loses a
race against another writer.
"""

import logging
from collections.abc import Callable, MutableSequence
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from core.access import Operation, authorize_trip
from core.db.repository import Repository
from core.errors import NotFoundError, ValidationError, VersionConflictError
from core.models.common import Document
from core.models.trip import Trip
from core.validation import parse_payload

logger = logging.getLogger(__name__)

_MAX_WRITE_ATTEMPTS = 3

DocT = TypeVar("DocT", bound=Document)
ItemT = TypeVar("ItemT", bound=BaseModel)


def load_authorized_trip(trips: Repository[Trip], trip_id: str, user_id: str, operation: Operation) -> Trip:
    trip = trips.get(trip_id)
    if trip is None:
        raise NotFoundError("Trip not found")
    authorize_trip(trip, user_id, operation)
    return trip


def mutate_with_retry(
    repo: Repository[DocT],
    load: Callable[[], DocT],
    change: Callable[[DocT], Any],
) -> DocT:
    """Load, change and conditionally save; start over when another writer got there first."""
    attempt = 1
    while True:
        doc = load()
        change(doc)
        try:
            return repo.save(doc)
        except VersionConflictError:
            if attempt >= _MAX_WRITE_ATTEMPTS:
                raise
            logger.info(
                "Version conflict on %s %s, retrying (attempt %d)", repo.collection.value, doc.id, attempt
            )
            attempt += 1


def _changes_dict(changes: Any) -> dict[str, Any]:
    if changes is None:
        return {}
    if not isinstance(changes, dict):
        raise ValidationError("Request body must be a JSON object")
    return changes


def merge_fields(doc: BaseModel, fields_model: type[BaseModel], changes: Any) -> None:
    """Shallow-merge ``changes`` into the editable fields of ``doc`` and revalidate them."""
    changes = _changes_dict(changes)
    names = set(fields_model.model_fields)
    base = doc.model_dump(include=names)
    validated = parse_payload(fields_model, {**base, **{k: v for k, v in changes.items() if k in names}})
    for name in names:
        setattr(doc, name, getattr(validated, name))


# --- Embedded item lists ---


def _index_of(items: MutableSequence[ItemT], item_id: str, label: str) -> int:
    for index, item in enumerate(items):
        if getattr(item, "id", None) == item_id:
            return index
    raise NotFoundError(f"{label} not found")


def find_item(items: MutableSequence[ItemT], item_id: str, label: str = "Item") -> ItemT:
    return items[_index_of(items, item_id, label)]


def add_item(items: MutableSequence[ItemT], model: type[ItemT], payload: Any) -> ItemT:
    data = {k: v for k, v in payload.items() if k != "id"} if isinstance(payload, dict) else payload
    item = parse_payload(model, data)
    items.append(item)
    return item


def update_item(items: MutableSequence[ItemT], item_id: str, changes: Any, label: str = "Item") -> ItemT:
    index = _index_of(items, item_id, label)
    current = items[index]
    updates = {k: v for k, v in _changes_dict(changes).items() if k != "id"}
    merged = parse_payload(type(current), {**current.model_dump(), **updates})
    items[index] = merged
    return merged


def remove_item(items: MutableSequence[ItemT], item_id: str, label: str = "Item") -> ItemT:
    return items.pop(_index_of(items, item_id, label))


def toggle_flag(items: MutableSequence[ItemT], item_id: str, flag: str, label: str = "Item") -> ItemT:
    item = find_item(items, item_id, label)
    setattr(item, flag, not getattr(item, flag))
    return item


# --- Trip-scoped records ---


class TripScopedService(Generic[DocT]):
    """CRUD over a collection whose records belong to a trip."""

    noun = "Record"
    fields_model: type[BaseModel]

    def __init__(self, repo: Repository[DocT], trips: Repository[Trip]) -> None:
        self._repo = repo
        self._trips = trips

    def _load(self, doc_id: str, user_id: str, operation: Operation, trip_id: str | None = None) -> DocT:
        doc = self._repo.get(doc_id)
        if doc is None or (trip_id is not None and getattr(doc, "trip") != trip_id):
            raise NotFoundError(f"{self.noun} not found")
        load_authorized_trip(self._trips, getattr(doc, "trip"), user_id, operation)
        return doc

    def _mutate(
        self,
        doc_id: str,
        user_id: str,
        change: Callable[[DocT], Any],
        trip_id: str | None = None,
    ) -> DocT:
        return mutate_with_retry(
            self._repo,
            lambda: self._load(doc_id, user_id, Operation.WRITE_SUB_RESOURCE, trip_id),
            change,
        )

    def list_for_trip(self, trip_id: str, user_id: str) -> list[DocT]:
        load_authorized_trip(self._trips, trip_id, user_id, Operation.READ)
        return self._repo.find(trip=trip_id, sort="created_at", descending=True)

    def get(self, doc_id: str, user_id: str, trip_id: str | None = None) -> DocT:
        return self._load(doc_id, user_id, Operation.READ, trip_id)

    def create(self, trip_id: str, user_id: str, payload: Any) -> DocT:
        load_authorized_trip(self._trips, trip_id, user_id, Operation.WRITE_SUB_RESOURCE)
        fields = parse_payload(self.fields_model, payload)
        doc = self._repo.model.model_validate({**fields.model_dump(), "trip": trip_id})
        self._repo.create(doc)
        logger.info("Created %s %s for trip %s", self.noun, doc.id, trip_id)
        return doc

    def update(self, doc_id: str, user_id: str, payload: Any, trip_id: str | None = None) -> DocT:
        return self._mutate(doc_id, user_id, lambda doc: merge_fields(doc, self.fields_model, payload), trip_id)

    def delete(self, doc_id: str, user_id: str, trip_id: str | None = None) -> None:
        doc = self._load(doc_id, user_id, Operation.WRITE_SUB_RESOURCE, trip_id)
        self._repo.delete(doc.id)
        logger.info("Deleted %s %s", self.noun, doc.id)
