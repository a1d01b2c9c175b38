"""
Document persistence for TravelTrack.

``DocumentStore`` is the storage interface; ``DynamoDocumentStore`` is the
DynamoDB implementation and ``Repository`` the typed per-collection wrapper
the services use.
"""

from core.db.dynamo import DynamoDocumentStore
from core.db.repository import Repository
from core.db.store import Collection, DocumentStore

__all__ = ["Collection", "DocumentStore", "DynamoDocumentStore", "Repository"]
