"""DynamoDB-backed document store: one table per collection, hash key ``id``."""

import json
import logging
from decimal import Decimal
from typing import Any

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import ClientError

from core.config import Config
from core.db.store import Collection, DocumentStore, Record
from core.errors import ConflictError, TravelTrackError, VersionConflictError
from core.pagination import sort_by

logger = logging.getLogger(__name__)

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()

_CONDITION_FAILED = "ConditionalCheckFailedException"


def _to_dynamo_value(value: Any) -> dict[str, Any]:
    # TypeSerializer rejects floats; route everything through Decimal
    normalized = json.loads(json.dumps(value), parse_float=Decimal)
    return _serializer.serialize(normalized)


def _to_item(record: Record) -> dict[str, Any]:
    return {key: _to_dynamo_value(value) for key, value in record.items()}


def _plain(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, set)):
        return [_plain(v) for v in value]
    return value


def _from_item(item: dict[str, Any]) -> Record:
    return {key: _plain(_deserializer.deserialize(value)) for key, value in item.items()}


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


class DynamoDocumentStore(DocumentStore):
    def __init__(self, config: Config, client: Any) -> None:
        self._client = client
        self._tables = {
            Collection.USERS: config.users_table,
            Collection.TRIPS: config.trips_table,
            Collection.DESTINATIONS: config.destinations_table,
            Collection.BUDGETS: config.budgets_table,
            Collection.ITINERARIES: config.itineraries_table,
            Collection.PACKING_LISTS: config.packing_lists_table,
        }

    def table_name(self, collection: Collection) -> str:
        return self._tables[collection]

    def get(self, collection: Collection, doc_id: str) -> Record | None:
        try:
            response = self._client.get_item(
                TableName=self.table_name(collection),
                Key={"id": {"S": doc_id}},
                ConsistentRead=True,
            )
        except ClientError as e:
            raise TravelTrackError(f"Failed to read {collection.value}/{doc_id}: {e}") from e
        item = response.get("Item")
        return _from_item(item) if item else None

    def find(
        self,
        collection: Collection,
        filters: dict[str, Any] | None = None,
        sort: str | None = None,
        descending: bool = False,
    ) -> list[Record]:
        scan_kwargs: dict[str, Any] = {"TableName": self.table_name(collection)}
        if filters:
            clauses = []
            names: dict[str, str] = {}
            values: dict[str, Any] = {}
            for i, (field, value) in enumerate(filters.items()):
                clauses.append(f"#f{i} = :v{i}")
                names[f"#f{i}"] = field
                values[f":v{i}"] = _to_dynamo_value(value)
            scan_kwargs["FilterExpression"] = " AND ".join(clauses)
            scan_kwargs["ExpressionAttributeNames"] = names
            scan_kwargs["ExpressionAttributeValues"] = values

        records: list[Record] = []
        last_key = None
        while True:
            if last_key:
                scan_kwargs["ExclusiveStartKey"] = last_key
            try:
                response = self._client.scan(**scan_kwargs)
            except ClientError as e:
                raise TravelTrackError(f"Failed to scan {collection.value}: {e}") from e

            records.extend(_from_item(item) for item in response.get("Items", []))

            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break

        if sort:
            return sort_by(records, sort, descending=descending)
        return records

    def create(self, collection: Collection, record: Record) -> None:
        try:
            self._client.put_item(
                TableName=self.table_name(collection),
                Item=_to_item(record),
                ConditionExpression="attribute_not_exists(#id)",
                ExpressionAttributeNames={"#id": "id"},
            )
        except ClientError as e:
            if _error_code(e) == _CONDITION_FAILED:
                raise ConflictError(f"{collection.value}/{record['id']} already exists") from e
            raise TravelTrackError(f"Failed to create {collection.value}/{record['id']}: {e}") from e

    def replace(self, collection: Collection, record: Record, expected_version: int) -> None:
        try:
            self._client.put_item(
                TableName=self.table_name(collection),
                Item=_to_item(record),
                ConditionExpression="#version = :expected",
                ExpressionAttributeNames={"#version": "version"},
                ExpressionAttributeValues={":expected": {"N": str(expected_version)}},
            )
        except ClientError as e:
            if _error_code(e) == _CONDITION_FAILED:
                raise VersionConflictError(
                    f"{collection.value}/{record['id']} changed since version {expected_version}"
                ) from e
            raise TravelTrackError(f"Failed to write {collection.value}/{record['id']}: {e}") from e

    def delete(self, collection: Collection, doc_id: str) -> bool:
        try:
            response = self._client.delete_item(
                TableName=self.table_name(collection),
                Key={"id": {"S": doc_id}},
                ReturnValues="ALL_OLD",
            )
        except ClientError as e:
            raise TravelTrackError(f"Failed to delete {collection.value}/{doc_id}: {e}") from e
        return bool(response.get("Attributes"))

    def increment(self, collection: Collection, doc_id: str, field_path: str, amount: int = 1) -> int | None:
        parts = field_path.split(".")
        names = {"#id": "id"}
        for i, part in enumerate(parts):
            names[f"#p{i}"] = part
        path = ".".join(f"#p{i}" for i in range(len(parts)))
        try:
            response = self._client.update_item(
                TableName=self.table_name(collection),
                Key={"id": {"S": doc_id}},
                UpdateExpression=f"ADD {path} :amount",
                ConditionExpression="attribute_exists(#id)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues={":amount": {"N": str(amount)}},
                ReturnValues="UPDATED_NEW",
            )
        except ClientError as e:
            if _error_code(e) == _CONDITION_FAILED:
                return None
            raise TravelTrackError(f"Failed to increment {collection.value}/{doc_id}.{field_path}: {e}") from e

        value: Any = _from_item(response.get("Attributes", {}))
        for part in parts:
            value = value.get(part) if isinstance(value, dict) else None
        return value

    def health_check(self) -> bool:
        try:
            self._client.describe_table(TableName=self.table_name(Collection.USERS))
            return True
        except Exception:
            logger.exception("DynamoDB health check failed")
            return False
