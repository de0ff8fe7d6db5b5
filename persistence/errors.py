from __future__ import annotations


class StoreError(Exception):
    """Base class for every error raised by the resource store."""


class InvalidRequest(StoreError):
    """Collection name or id missing from the request."""


class InvalidPayload(StoreError):
    """Request body is not a JSON object (or carries a non-string id)."""


class DuplicateId(StoreError):
    def __init__(self, collection: str, record_id: str):
        super().__init__(f"Duplicate ID: {collection}/{record_id}")
        self.collection = collection
        self.record_id = record_id


class CollectionNotFound(StoreError):
    def __init__(self, collection: str):
        super().__init__(f"Resource not found: {collection}")
        self.collection = collection


class ItemNotFound(StoreError):
    def __init__(self, collection: str, record_id: str):
        super().__init__(f"Item not found: {collection}/{record_id}")
        self.collection = collection
        self.record_id = record_id


class LoadError(StoreError):
    """The backing file cannot be turned into a store; startup must abort."""


class PersistError(StoreError):
    """Writing the backing file failed. The in-memory mutation is kept."""
