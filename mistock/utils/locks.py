import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

from mistock.core.errors import ConcurrencyConflict


class KeyedLock:
    """
    One asyncio.Lock per id, so writes to the same ledger/request/obligation
    run one at a time while different ids proceed independently.

    Waiting is bounded: if the id stays busy longer than ``timeout`` seconds
    the caller gets ConcurrencyConflict instead of queueing forever.
    """

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout
        self._locks: Dict[str, asyncio.Lock] = {}
        self._waiters: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=self.timeout)
            except asyncio.TimeoutError:
                raise ConcurrencyConflict(f"Another operation on {key} is still in progress")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def is_busy(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()
