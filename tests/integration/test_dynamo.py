"""Integration tests for the DynamoDB document store against DynamoDB Local."""

import pytest

from core.db.repository import Repository
from core.db.store import Collection
from core.errors import ConflictError, VersionConflictError
from core.models import Destination
from core.services.scoped import mutate_with_retry


def _trip_record(trip_id, user="u-1", version=1, **extra):
    record = {"id": trip_id, "user": user, "title": "Porto weekend", "version": version, "budget": {"total": 350.5}}
    record.update(extra)
    return record


@pytest.mark.integration
def test_create_and_get(dynamo_store):
    dynamo_store.create(Collection.TRIPS, _trip_record("trip-001", tags=["food"], cover=None))

    record = dynamo_store.get(Collection.TRIPS, "trip-001")

    assert record["title"] == "Porto weekend"
    assert record["budget"]["total"] == 350.5
    assert record["tags"] == ["food"]
    assert record["cover"] is None


@pytest.mark.integration
def test_get_missing(dynamo_store):
    assert dynamo_store.get(Collection.TRIPS, "no-such-trip") is None


@pytest.mark.integration
def test_create_rejects_existing_id(dynamo_store):
    dynamo_store.create(Collection.TRIPS, _trip_record("trip-002"))
    with pytest.raises(ConflictError):
        dynamo_store.create(Collection.TRIPS, _trip_record("trip-002"))


@pytest.mark.integration
def test_find_filters_and_sorts(dynamo_store):
    dynamo_store.create(Collection.TRIPS, _trip_record("trip-b", user="u-2", title="B"))
    dynamo_store.create(Collection.TRIPS, _trip_record("trip-a", user="u-2", title="A"))
    dynamo_store.create(Collection.TRIPS, _trip_record("trip-c", user="u-3", title="C"))

    records = dynamo_store.find(Collection.TRIPS, {"user": "u-2"}, sort="title")

    assert [r["id"] for r in records] == ["trip-a", "trip-b"]


@pytest.mark.integration
def test_replace_is_conditional_on_version(dynamo_store):
    dynamo_store.create(Collection.TRIPS, _trip_record("trip-003"))

    dynamo_store.replace(Collection.TRIPS, _trip_record("trip-003", version=2, title="Renamed"), expected_version=1)
    assert dynamo_store.get(Collection.TRIPS, "trip-003")["title"] == "Renamed"

    with pytest.raises(VersionConflictError):
        dynamo_store.replace(Collection.TRIPS, _trip_record("trip-003", version=2), expected_version=1)


@pytest.mark.integration
def test_delete(dynamo_store):
    dynamo_store.create(Collection.TRIPS, _trip_record("trip-004"))
    assert dynamo_store.delete(Collection.TRIPS, "trip-004") is True
    assert dynamo_store.delete(Collection.TRIPS, "trip-004") is False


@pytest.mark.integration
def test_increment_nested_counter(dynamo_store):
    destinations = Repository(dynamo_store, Collection.DESTINATIONS, Destination)
    destination = destinations.create(
        Destination(name="Porto", country="Portugal", city="Porto", description="Port wine", categories=["City"])
    )

    assert destinations.increment(destination.id, "meta.views") == 1
    assert destinations.increment(destination.id, "meta.views") == 2
    assert destinations.increment("no-such-destination", "meta.views") is None


@pytest.mark.integration
def test_stale_writer_retries_against_fresh_copy(dynamo_store):
    destinations = Repository(dynamo_store, Collection.DESTINATIONS, Destination)
    destination = destinations.create(
        Destination(name="Porto", country="Portugal", city="Porto", description="Port wine", categories=["City"])
    )
    stale = destinations.get(destination.id)
    concurrent = destinations.get(destination.id)
    concurrent.tags = ["river"]
    destinations.save(concurrent)

    loads = iter([stale])

    def load():
        return next(loads, None) or destinations.get(destination.id)

    saved = mutate_with_retry(destinations, load, lambda d: d.languages.append("Portuguese"))

    assert saved.version == 3
    assert saved.tags == ["river"]
    assert saved.languages == ["Portuguese"]
