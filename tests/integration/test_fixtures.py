"""Test that integration test fixtures are working."""

import pytest

from core.db.store import Collection


@pytest.mark.integration
def test_dynamodb_client_fixture(dynamodb_client):
    """Every collection has its table in DynamoDB Local."""
    table_names = dynamodb_client.list_tables()["TableNames"]
    for table in ("TravelTrackUsers", "TravelTrackTrips", "TravelTrackDestinations"):
        assert table in table_names


@pytest.mark.integration
def test_dynamo_store_fixture(dynamo_store):
    """Tables are keyed on ``id`` and the store reports healthy."""
    assert dynamo_store.health_check() is True
    for collection in Collection:
        assert dynamo_store.table_name(collection).startswith("TravelTrack")
