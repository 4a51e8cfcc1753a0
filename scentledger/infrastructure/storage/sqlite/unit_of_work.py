"""SQLite unit of work: every store bound to one write transaction."""

from contextlib import AbstractAsyncContextManager
from types import TracebackType

import aiosqlite

from scentledger.config import get_logger
from scentledger.core.interfaces.unit_of_work import IUnitOfWork
from scentledger.infrastructure.storage.sqlite.catalog_store import (
    SQLiteCustomerStore,
    SQLiteProductStore,
)
from scentledger.infrastructure.storage.sqlite.connection import ConnectionPool, get_pool
from scentledger.infrastructure.storage.sqlite.ledger_store import SQLiteLedgerStore
from scentledger.infrastructure.storage.sqlite.sales_store import SQLiteSalesStore

logger = get_logger(__name__)


class SQLiteUnitOfWork(IUnitOfWork):
    """
    One pooled connection inside BEGIN IMMEDIATE.

    Holding the write lock from the first read means a FIFO plan made in
    this unit cannot be invalidated by another writer before it is applied.
    """

    def __init__(self, pool: ConnectionPool | None = None):
        self._pool = pool
        self._tx: AbstractAsyncContextManager[aiosqlite.Connection] | None = None

    async def __aenter__(self) -> "SQLiteUnitOfWork":
        pool = self._pool or await get_pool()
        self._tx = pool.transaction(immediate=True)
        conn = await self._tx.__aenter__()

        self.ledger = SQLiteLedgerStore(conn)
        self.sales = SQLiteSalesStore(conn)
        self.products = SQLiteProductStore(conn)
        self.customers = SQLiteCustomerStore(conn)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._tx is None:
            return
        tx, self._tx = self._tx, None
        if exc is not None:
            logger.debug("unit_of_work_rolled_back", error=type(exc).__name__)
        await tx.__aexit__(exc_type, exc, tb)
