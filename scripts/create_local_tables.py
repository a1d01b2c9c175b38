#!/usr/bin/env python3
"""Create DynamoDB tables for local development.

Creates the six TravelTrack document tables against DynamoDB Local. Every
table is keyed on the string attribute ``id``; table names come from the
same settings the Lambdas read (``USERS_TABLE``, ``TRIPS_TABLE``, ...).

Usage:
    python scripts/create_local_tables.py
"""

import sys
from pathlib import Path

import boto3
from botocore.exceptions import ClientError

# Add src to path for config import
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.config import get_config
from core.db import Collection, DynamoDocumentStore


def create_document_table(dynamodb, table_name: str) -> None:
    """Create one table keyed on ``id``."""
    try:
        dynamodb.create_table(
            TableName=table_name,
            KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "id", "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        print(f"✓ Created {table_name} table")
    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceInUseException":
            print(f"✓ {table_name} table already exists")
        else:
            raise


def main():
    """Create all DynamoDB tables."""
    config = get_config()

    endpoint_url = config.dynamodb_endpoint or "http://localhost:8000"

    print(f"Creating DynamoDB tables at {endpoint_url}...")
    print()

    # For DynamoDB Local, use dummy credentials
    dynamodb = boto3.client(
        "dynamodb",
        endpoint_url=endpoint_url,
        region_name=config.aws_region,
        aws_access_key_id="dummy",
        aws_secret_access_key="dummy",
    )

    store = DynamoDocumentStore(config, dynamodb)
    for collection in Collection:
        create_document_table(dynamodb, store.table_name(collection))

    print()
    print("✅ All DynamoDB tables ready")


if __name__ == "__main__":
    main()
