from __future__ import annotations

import copy
import uuid
from typing import Any, Iterable, Mapping

from .errors import CollectionNotFound, DuplicateId, InvalidPayload, ItemNotFound

Record = dict[str, Any]


def new_record_id() -> str:
    return uuid.uuid4().hex


class DocumentStore:
    """
    In-memory collections of JSON objects keyed by their string `id`.

    Pure data structure: no locking and no I/O. Callers serialize access
    through `persistence.locks.ConcurrencyGuard`.

    Records are copied on the way in and on the way out, so nothing outside
    the store ever holds a reference to a stored dict.
    """

    def __init__(self, collections: Mapping[str, Iterable[Record]] | None = None):
        self._collections: dict[str, list[Record]] = {}
        for name, records in (collections or {}).items():
            self._collections[name] = [copy.deepcopy(r) for r in records]

    def __contains__(self, collection: object) -> bool:
        return collection in self._collections

    def __len__(self) -> int:
        return len(self._collections)

    def collection_names(self) -> list[str]:
        return list(self._collections)

    def snapshot(self) -> dict[str, list[Record]]:
        return copy.deepcopy(self._collections)

    def _collection(self, collection: str) -> list[Record]:
        items = self._collections.get(collection)
        if items is None:
            raise CollectionNotFound(collection)
        return items

    def _position(self, collection: str, record_id: str) -> tuple[list[Record], int]:
        items = self._collection(collection)
        for index, item in enumerate(items):
            # Exact match only: a numeric id never equals its string form.
            if item.get("id") == record_id:
                return items, index
        raise ItemNotFound(collection, record_id)

    def list_all(self, collection: str) -> list[Record]:
        return copy.deepcopy(self._collection(collection))

    def get_by_id(self, collection: str, record_id: str) -> Record:
        items, index = self._position(collection, record_id)
        return copy.deepcopy(items[index])

    def create(self, collection: str, candidate: Any) -> Record:
        if not isinstance(candidate, dict):
            raise InvalidPayload("Expected JSON object")
        record = copy.deepcopy(candidate)
        if "id" not in record:
            record["id"] = new_record_id()
        elif not isinstance(record["id"], str) or not record["id"]:
            raise InvalidPayload("'id' field must be a non-empty string")

        record_id = record["id"]
        items = self._collections.get(collection, [])
        if any(item.get("id") == record_id for item in items):
            raise DuplicateId(collection, record_id)

        # Only materialize the collection once the record is known to fit.
        self._collections.setdefault(collection, items).append(record)
        return copy.deepcopy(record)

    def update(self, collection: str, record_id: str, replacement: Any) -> str:
        if not isinstance(replacement, dict):
            raise InvalidPayload("Expected JSON object")
        items, index = self._position(collection, record_id)
        record = copy.deepcopy(replacement)
        record["id"] = record_id
        items[index] = record
        return record_id

    def delete(self, collection: str, record_id: str) -> Record:
        items, index = self._position(collection, record_id)
        return items.pop(index)
