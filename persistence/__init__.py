from __future__ import annotations

from .disk_store import DatabaseDoc, DiskJsonDatabase
from .document_store import DocumentStore, Record
from .errors import (
    CollectionNotFound,
    DuplicateId,
    InvalidPayload,
    InvalidRequest,
    ItemNotFound,
    LoadError,
    PersistError,
    StoreError,
)
from .locks import AsyncReadWriteLock, ConcurrencyGuard
from .repositories import AsyncDiskResourceRepository, AsyncResourceRepository

__all__ = [
    "DatabaseDoc",
    "DiskJsonDatabase",
    "DocumentStore",
    "Record",
    "AsyncReadWriteLock",
    "ConcurrencyGuard",
    "AsyncResourceRepository",
    "AsyncDiskResourceRepository",
    "StoreError",
    "InvalidRequest",
    "InvalidPayload",
    "DuplicateId",
    "CollectionNotFound",
    "ItemNotFound",
    "LoadError",
    "PersistError",
]
