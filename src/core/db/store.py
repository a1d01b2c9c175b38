from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

Record = dict[str, Any]


class Collection(str, Enum):
    USERS = "users"
    TRIPS = "trips"
    DESTINATIONS = "destinations"
    BUDGETS = "budgets"
    ITINERARIES = "itineraries"
    PACKING_LISTS = "packing_lists"


class DocumentStore(ABC):
    """Keyed document storage, one namespace per collection.

    Records are plain JSON-compatible dicts with a string ``id``. Writes
    through ``replace`` are conditional on the stored ``version``.
    """

    @abstractmethod
    def get(self, collection: Collection, doc_id: str) -> Record | None: ...

    @abstractmethod
    def find(
        self,
        collection: Collection,
        filters: dict[str, Any] | None = None,
        sort: str | None = None,
        descending: bool = False,
    ) -> list[Record]:
        """Records whose top-level fields equal every value in ``filters``."""

    @abstractmethod
    def create(self, collection: Collection, record: Record) -> None:
        """Insert; raises ``ConflictError`` when the id is taken."""

    @abstractmethod
    def replace(self, collection: Collection, record: Record, expected_version: int) -> None:
        """Overwrite; raises ``VersionConflictError`` when the stored version differs."""

    @abstractmethod
    def delete(self, collection: Collection, doc_id: str) -> bool: ...

    @abstractmethod
    def increment(self, collection: Collection, doc_id: str, field_path: str, amount: int = 1) -> int | None:
        """Atomically add ``amount`` to a numeric field; None when the record is missing."""

    def health_check(self) -> bool:
        return True
