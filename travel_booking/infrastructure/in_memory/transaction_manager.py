import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from travel_booking.application.interfaces.transaction_manager import TransactionManager


class InMemoryTransactionManager(TransactionManager):
    """
    Serializes units of work with a single lock.

    Re-entrant for the owning task, so nested ``start()`` calls join the
    outer unit. There is no rollback: a failed unit keeps its writes.
    After-commit callbacks run once the lock has been released.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._owner: asyncio.Task | None = None
        self._depth = 0
        self._after_commit: list[Callable[[], Awaitable[None]]] = []

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        task = asyncio.current_task()
        if self._owner is not None and self._owner is task:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        async with self._lock:
            self._owner = task
            self._depth = 1
            callbacks = self._after_commit = []
            try:
                yield
            finally:
                self._owner = None
                self._depth = 0
                self._after_commit = []

        for callback in callbacks:
            await callback()

    async def run_after_commit(self, callback: Callable[[], Awaitable[None]]) -> None:
        if self._owner is None or self._owner is not asyncio.current_task():
            await callback()
            return
        self._after_commit.append(callback)
