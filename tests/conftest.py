"""Shared test fixtures for TravelTrack."""

import copy
import os
import sys
from collections import defaultdict
from datetime import timedelta
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from dotenv import load_dotenv

# Load .env file for test configuration
load_dotenv()

# Unset AWS_PROFILE for local testing (DynamoDB Local doesn't need it)
if "AWS_PROFILE" in os.environ:
    del os.environ["AWS_PROFILE"]

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from core.config import Config  # noqa: E402
from core.db.repository import Repository  # noqa: E402
from core.db.store import Collection, DocumentStore, Record  # noqa: E402
from core.errors import ConflictError, VersionConflictError  # noqa: E402
from core.models import Budget, Destination, Itinerary, PackingList, Trip, User  # noqa: E402
from core.models.common import ImageRef, utcnow  # noqa: E402
from core.pagination import sort_by  # noqa: E402
from core.services.budgets import BudgetService  # noqa: E402
from core.services.destinations import DestinationService  # noqa: E402
from core.services.images import ImageStore  # noqa: E402
from core.services.itineraries import ItineraryService  # noqa: E402
from core.services.notifications import NotificationSender  # noqa: E402
from core.services.packing_lists import PackingListService  # noqa: E402
from core.services.trips import TripService  # noqa: E402


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed store with the same conditional-write rules as DynamoDB."""

    def __init__(self) -> None:
        self.tables: dict[Collection, dict[str, Record]] = defaultdict(dict)

    def get(self, collection: Collection, doc_id: str) -> Record | None:
        record = self.tables[collection].get(doc_id)
        return copy.deepcopy(record) if record is not None else None

    def find(self, collection, filters=None, sort=None, descending=False):
        records = [
            copy.deepcopy(record)
            for record in self.tables[collection].values()
            if all(record.get(k) == v for k, v in (filters or {}).items())
        ]
        return sort_by(records, sort, descending=descending) if sort else records

    def create(self, collection: Collection, record: Record) -> None:
        if record["id"] in self.tables[collection]:
            raise ConflictError(f"{collection.value}/{record['id']} already exists")
        self.tables[collection][record["id"]] = copy.deepcopy(record)

    def replace(self, collection: Collection, record: Record, expected_version: int) -> None:
        current = self.tables[collection].get(record["id"])
        if current is None or current.get("version") != expected_version:
            raise VersionConflictError(f"{collection.value}/{record['id']} changed since version {expected_version}")
        self.tables[collection][record["id"]] = copy.deepcopy(record)

    def delete(self, collection: Collection, doc_id: str) -> bool:
        return self.tables[collection].pop(doc_id, None) is not None

    def increment(self, collection: Collection, doc_id: str, field_path: str, amount: int = 1) -> int | None:
        record = self.tables[collection].get(doc_id)
        if record is None:
            return None
        *parents, leaf = field_path.split(".")
        target = record
        for part in parents:
            target = target.setdefault(part, {})
        target[leaf] = target.get(leaf, 0) + amount
        return target[leaf]


# --- Configuration ---


@pytest.fixture
def app_config():
    """A complete Config with test values; override with ``model_copy(update=...)``."""
    return Config(
        aws_region="us-east-1",
        users_table="Users",
        trips_table="Trips",
        destinations_table="Destinations",
        budgets_table="Budgets",
        itineraries_table="Itineraries",
        packing_lists_table="PackingLists",
        images_bucket="bucket",
        images_base_url="https://bucket.s3.amazonaws.com",
        email_from="no-reply@example.com",
        frontend_url="http://localhost:5173",
        weather_api_url="https://api.openweathermap.org/data/2.5",
        environment="test",
    )


# --- Stores & repositories ---


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def users(store):
    return Repository(store, Collection.USERS, User)


@pytest.fixture
def trips(store):
    return Repository(store, Collection.TRIPS, Trip)


@pytest.fixture
def destinations(store):
    return Repository(store, Collection.DESTINATIONS, Destination)


@pytest.fixture
def budgets(store):
    return Repository(store, Collection.BUDGETS, Budget)


@pytest.fixture
def itineraries(store):
    return Repository(store, Collection.ITINERARIES, Itinerary)


@pytest.fixture
def packing_lists(store):
    return Repository(store, Collection.PACKING_LISTS, PackingList)


# --- Collaborators of the services ---


@pytest.fixture
def notifier():
    return MagicMock(spec=NotificationSender)


@pytest.fixture
def image_store():
    images = MagicMock(spec=ImageStore)
    images.upload.side_effect = lambda upload, folder: ImageRef(
        public_id=f"traveltrack/{folder}/img.jpg",
        url=f"https://images.example.com/traveltrack/{folder}/img.jpg",
        caption=upload.caption,
    )
    return images


# --- Sample records ---


def make_user(users: Repository[User], email: str, first_name: str = "Test", **overrides: Any) -> User:
    fields = dict(
        first_name=first_name,
        last_name="User",
        email=email,
        password_hash="not-a-real-hash",
        is_email_verified=True,
    )
    fields.update(overrides)
    return users.create(User(**fields))


def trip_payload(destination_id: str, **overrides: Any) -> dict[str, Any]:
    start = utcnow() + timedelta(days=10)
    payload = dict(
        title="Summer in Lisbon",
        destination=destination_id,
        start_date=start.isoformat(),
        end_date=(start + timedelta(days=5)).isoformat(),
        budget={"total": 2000, "currency": "EUR"},
    )
    payload.update(overrides)
    return payload


VALID_DESTINATION = dict(
    name="Lisbon",
    country="Portugal",
    city="Lisbon",
    description="Hilly coastal capital with trams and tiled facades.",
    categories=["City", "Culture"],
)


@pytest.fixture
def user_factory(users):
    """Create and store a verified user: ``user_factory(email, **overrides)``."""
    return lambda email, **overrides: make_user(users, email, **overrides)


@pytest.fixture
def new_trip_payload():
    """Build a valid create-trip body: ``new_trip_payload(destination_id, **overrides)``."""
    return trip_payload


@pytest.fixture
def owner(users):
    return make_user(users, "owner@example.com", first_name="Olivia")


@pytest.fixture
def outsider(users):
    return make_user(users, "outsider@example.com", first_name="Oscar")


@pytest.fixture
def destination(destinations):
    return destinations.create(Destination(**VALID_DESTINATION))


@pytest.fixture
def trip_service(trips, destinations, users, budgets, itineraries, packing_lists, notifier):
    return TripService(
        trips=trips,
        destinations=destinations,
        users=users,
        budgets=budgets,
        itineraries=itineraries,
        packing_lists=packing_lists,
        notifier=notifier,
        frontend_url="https://app.example.com/",
    )


@pytest.fixture
def trip(trip_service, owner, destination):
    return trip_service.create_trip(owner.id, trip_payload(destination.id))


@pytest.fixture
def budget_service(budgets, trips):
    return BudgetService(budgets, trips)


@pytest.fixture
def itinerary_service(itineraries, trips):
    return ItineraryService(itineraries, trips)


@pytest.fixture
def packing_list_service(packing_lists, trips):
    return PackingListService(packing_lists, trips)


@pytest.fixture
def destination_service(destinations, image_store):
    return DestinationService(destinations, image_store)


# --- DynamoDB Local (integration) ---


@pytest.fixture
def dynamodb_client():
    """Provide a low-level DynamoDB client for integration tests."""
    import boto3
    from core.config import get_config

    config = get_config()

    return boto3.client(
        "dynamodb",
        endpoint_url=config.dynamodb_endpoint,
        region_name=config.aws_region,
        aws_access_key_id="dummy",
        aws_secret_access_key="dummy",
    )


@pytest.fixture
def dynamo_store(dynamodb_client):
    """Provide a DynamoDocumentStore and delete everything it wrote afterwards."""
    from core.config import get_config
    from core.db.dynamo import DynamoDocumentStore

    document_store = DynamoDocumentStore(get_config(), dynamodb_client)
    yield document_store

    # Cleanup: scan and delete all items created during test
    for collection in Collection:
        table = document_store.table_name(collection)
        response = dynamodb_client.scan(TableName=table, ProjectionExpression="id")
        for item in response.get("Items", []):
            dynamodb_client.delete_item(TableName=table, Key={"id": item["id"]})
