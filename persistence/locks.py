from __future__ import annotations

import asyncio
import contextlib
import inspect
from typing import Any, AsyncIterator, Awaitable, Callable, TypeVar

from .document_store import DocumentStore

T = TypeVar("T")


class AsyncReadWriteLock:
    """
    Many concurrent readers or one exclusive writer.

    Writer-preferring: once a writer is waiting, new readers queue behind it
    so a steady stream of reads cannot starve mutations.
    """

    def __init__(self) -> None:
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def writer_active(self) -> bool:
        return self._writer

    @contextlib.asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writer and self._waiting_writers == 0)
            self._readers += 1
        try:
            yield
        finally:
            # Bookkeeping happens before any await so cancellation cannot skip it.
            self._readers -= 1
            if self._readers == 0:
                await self._wake_waiters()

    @contextlib.asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._cond:
            self._waiting_writers += 1
            try:
                await self._cond.wait_for(lambda: not self._writer and self._readers == 0)
            except BaseException:
                self._waiting_writers -= 1
                # Readers held back by this writer may proceed now.
                self._cond.notify_all()
                raise
            self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            self._writer = False
            await self._wake_waiters()

    async def _wake_waiters(self) -> None:
        # Shielded: a second cancellation while the condition lock is contended
        # must not lose the wake-up.
        await asyncio.shield(self._notify_all())

    async def _notify_all(self) -> None:
        async with self._cond:
            self._cond.notify_all()


class ConcurrencyGuard:
    """
    Owns the DocumentStore and hands it out only under the global lock.
    """

    def __init__(self, store: DocumentStore):
        self._store = store
        self._lock = AsyncReadWriteLock()

    @property
    def lock(self) -> AsyncReadWriteLock:
        return self._lock

    @contextlib.asynccontextmanager
    async def read(self) -> AsyncIterator[DocumentStore]:
        async with self._lock.read():
            yield self._store

    @contextlib.asynccontextmanager
    async def write(self) -> AsyncIterator[DocumentStore]:
        async with self._lock.write():
            yield self._store

    async def with_read(self, fn: Callable[[DocumentStore], T | Awaitable[T]]) -> T:
        async with self.read() as store:
            return await _call(fn, store)

    async def with_write(self, fn: Callable[[DocumentStore], T | Awaitable[T]]) -> T:
        async with self.write() as store:
            return await _call(fn, store)


async def _call(fn: Callable[[DocumentStore], Any], store: DocumentStore) -> Any:
    result = fn(store)
    if inspect.isawaitable(result):
        result = await result
    return result
