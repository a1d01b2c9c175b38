from typing import Any, Generic, TypeVar

from core.db.store import Collection, DocumentStore
from core.models.common import Document, utcnow
from core.pagination import sort_by

DocT = TypeVar("DocT", bound=Document)


class Repository(Generic[DocT]):
    """Typed access to one collection of a ``DocumentStore``."""

    def __init__(self, store: DocumentStore, collection: Collection, model: type[DocT]) -> None:
        self._store = store
        self.collection = collection
        self.model = model

    def get(self, doc_id: str) -> DocT | None:
        record = self._store.get(self.collection, doc_id)
        return self.model.model_validate(record) if record is not None else None

    def find(self, sort: str | None = None, descending: bool = False, **filters: Any) -> list[DocT]:
        records = self._store.find(self.collection, filters or None)
        docs = [self.model.model_validate(record) for record in records]
        # Sort on typed values; stored timestamps are strings
        return sort_by(docs, sort, descending=descending) if sort else docs

    def find_one(self, **filters: Any) -> DocT | None:
        matches = self.find(**filters)
        return matches[0] if matches else None

    def create(self, doc: DocT) -> DocT:
        doc.before_save()
        now = utcnow()
        doc.created_at = now
        doc.updated_at = now
        doc.version = 1
        self._store.create(self.collection, doc.to_record())
        return doc

    def save(self, doc: DocT) -> DocT:
        """Conditional replace against the version the document was loaded at."""
        expected = doc.version
        doc.before_save()
        doc.updated_at = utcnow()
        doc.version = expected + 1
        try:
            self._store.replace(self.collection, doc.to_record(), expected_version=expected)
        except Exception:
            doc.version = expected
            raise
        return doc

    def delete(self, doc_id: str) -> bool:
        return self._store.delete(self.collection, doc_id)

    def delete_where(self, **filters: Any) -> int:
        deleted = 0
        for record in self._store.find(self.collection, filters):
            if self._store.delete(self.collection, record["id"]):
                deleted += 1
        return deleted

    def increment(self, doc_id: str, field_path: str, amount: int = 1) -> int | None:
        return self._store.increment(self.collection, doc_id, field_path, amount)
