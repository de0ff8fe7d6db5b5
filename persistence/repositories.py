from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Protocol, TypeVar

from .document_store import DocumentStore, Record
from .errors import InvalidRequest
from .interfaces import CollectionsDocumentStore
from .locks import ConcurrencyGuard

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AsyncResourceRepository(Protocol):
    async def collection_names(self) -> list[str]: ...

    async def list_all(self, collection: str) -> list[Record]: ...
    async def get_by_id(self, collection: str, record_id: str) -> Record: ...

    async def create(self, collection: str, payload: Any) -> Record: ...
    async def update(self, collection: str, record_id: str, payload: Any) -> str: ...
    async def delete(self, collection: str, record_id: str) -> Record: ...


class AsyncDiskResourceRepository(AsyncResourceRepository):
    """
    Resource collections served from memory and mirrored to one JSON file.

    Reads share the lock; every mutation takes it exclusively and writes the
    full dataset before releasing it, so saves land on disk in mutation order.
    A failed save raises PersistError but the in-memory change stays applied.
    """

    def __init__(self, guard: ConcurrencyGuard, database: CollectionsDocumentStore):
        self._guard = guard
        self._database = database

    @classmethod
    def open(cls, database: CollectionsDocumentStore) -> "AsyncDiskResourceRepository":
        """Create the backing file if needed and load it. Raises LoadError."""
        database.ensure_exists()
        store = DocumentStore(database.load())
        return cls(ConcurrencyGuard(store), database)

    @property
    def guard(self) -> ConcurrencyGuard:
        return self._guard

    async def collection_names(self) -> list[str]:
        return await self._guard.with_read(lambda store: store.collection_names())

    async def list_all(self, collection: str) -> list[Record]:
        _require(collection=collection)
        return await self._guard.with_read(lambda store: store.list_all(collection))

    async def get_by_id(self, collection: str, record_id: str) -> Record:
        _require(collection=collection, id=record_id)
        return await self._guard.with_read(lambda store: store.get_by_id(collection, record_id))

    async def create(self, collection: str, payload: Any) -> Record:
        _require(collection=collection)
        return await self._mutate(lambda store: store.create(collection, payload))

    async def update(self, collection: str, record_id: str, payload: Any) -> str:
        _require(collection=collection, id=record_id)
        return await self._mutate(lambda store: store.update(collection, record_id, payload))

    async def delete(self, collection: str, record_id: str) -> Record:
        _require(collection=collection, id=record_id)
        return await self._mutate(lambda store: store.delete(collection, record_id))

    async def _mutate(self, change: Callable[[DocumentStore], T]) -> T:
        granted = asyncio.Event()

        async def _locked(store: DocumentStore) -> T:
            granted.set()
            return await self._apply(store, change)

        task = asyncio.ensure_future(self._guard.with_write(_locked))
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if granted.is_set():
                # Write access was granted: the change and its save run to the end.
                task.add_done_callback(_log_abandoned)
            else:
                task.cancel()
            raise

    async def _apply(self, store: DocumentStore, change: Callable[[DocumentStore], T]) -> T:
        result = change(store)
        await asyncio.to_thread(self._database.save, store.snapshot())
        return result


def _log_abandoned(task: "asyncio.Future[Any]") -> None:
    if task.cancelled():
        return
    e = task.exception()
    if e is not None:
        logger.warning("Mutation failed after its caller went away: %s", e, exc_info=e)


def _require(**values: str) -> None:
    for name, value in values.items():
        if not isinstance(value, str) or not value:
            raise InvalidRequest(f"Missing {name}")
