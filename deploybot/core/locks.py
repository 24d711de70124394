"""Per-key serialization of critical sections."""

import asyncio
from collections import deque
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


class LockStore:
    """Runs at most one critical section per key at a time.

    Callers on the same key are served in call order; callers on different
    keys never wait on each other. The store is not a singleton: build one
    and hand it to whatever needs to serialize work.
    """

    def __init__(self) -> None:
        self._waiters: dict[str, deque[asyncio.Future[None]]] = {}
        self._held: set[str] = set()

    async def lock(self, key: str, critical_section: Callable[[], Awaitable[T]]) -> T:
        """Run ``critical_section`` once every earlier holder of ``key`` is done."""
        await self._acquire(key)
        try:
            return await critical_section()
        finally:
            self._release(key)

    async def _acquire(self, key: str) -> None:
        if key not in self._held:
            self._held.add(key)
            return

        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.setdefault(key, deque()).append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            # Ownership may have been handed over just before cancellation.
            if waiter.done() and not waiter.cancelled():
                self._release(key)
            raise

    def _release(self, key: str) -> None:
        queue = self._waiters.get(key)
        while queue:
            waiter = queue.popleft()
            if not waiter.done():
                # Hand the key straight to the next waiter; it stays held.
                waiter.set_result(None)
                return

        self._waiters.pop(key, None)
        self._held.discard(key)
