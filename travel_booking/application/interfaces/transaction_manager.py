from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Protocol


class TransactionManager(Protocol):
    """
    Unit of work for booking writes.

    Everything awaited inside ``start()`` commits together or not at all;
    nested scopes join the outer transaction.
    """

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        yield

    async def run_after_commit(self, callback: Callable[[], Awaitable[None]]) -> None:
        """
        Await ``callback`` once the outermost unit has committed, or right
        away when no unit is open. Dropped if the unit fails.
        """
        ...
