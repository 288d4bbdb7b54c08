from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from travel_booking.application.interfaces.transaction_manager import TransactionManager


class SQLAlchemyTransactionManager(TransactionManager):
    """
    Outermost ``start()`` owns the transaction; nested calls join it.

    Reads issued before the first ``start()`` autobegin a transaction on the
    session; it is committed first so the unit of work starts clean.
    After-commit callbacks run once the outermost unit has committed.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._depth = 0
        self._after_commit: list[Callable[[], Awaitable[None]]] = []

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        if self._depth > 0:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        if self._session.in_transaction():
            await self._session.commit()

        self._depth = 1
        callbacks = self._after_commit = []
        try:
            async with self._session.begin():
                yield
        finally:
            self._depth = 0
            self._after_commit = []

        for callback in callbacks:
            await callback()

    async def run_after_commit(self, callback: Callable[[], Awaitable[None]]) -> None:
        if self._depth == 0:
            await callback()
            return
        self._after_commit.append(callback)
