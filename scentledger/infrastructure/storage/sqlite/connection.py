"""
Pooled aiosqlite connections to the ledger database.

Every connection runs in WAL mode with foreign keys enforced. Work that
must not interleave with another writer (planning and applying a sale)
uses transaction(immediate=True), which takes SQLite's write lock at BEGIN.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from scentledger.config import get_logger, get_settings

logger = get_logger(__name__)

_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
)


class ConnectionPool:
    """Fixed number of connections to one database file, opened lazily."""

    def __init__(self, db_path: Path, size: int = 5, busy_timeout_ms: int = 30000):
        self.db_path = db_path
        self.size = size
        self.busy_timeout_ms = busy_timeout_ms

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue()
        self._connections: list[aiosqlite.Connection] = []
        self._guard = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return bool(self._connections)

    async def open(self) -> None:
        """Open all connections; a no-op when already open."""
        async with self._guard:
            if self._connections:
                return
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            for _ in range(self.size):
                conn = await self._connect()
                self._connections.append(conn)
                self._idle.put_nowait(conn)
        logger.info("ledger_pool_opened", db_path=str(self.db_path), size=self.size)

    async def _connect(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self.db_path)
        for pragma in _PRAGMAS:
            await conn.execute(pragma)
        await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout_ms}")
        conn.row_factory = aiosqlite.Row
        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection; it goes back to the pool on exit."""
        if not self._connections:
            await self.open()
        conn = await self._idle.get()
        try:
            yield conn
        finally:
            self._idle.put_nowait(conn)

    @asynccontextmanager
    async def transaction(self, immediate: bool = False) -> AsyncIterator[aiosqlite.Connection]:
        """
        Borrow a connection inside a transaction.

        Commits when the block exits cleanly and rolls back when it raises,
        cancellation included.
        """
        async with self.acquire() as conn:
            if immediate:
                await conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()

    async def close(self) -> None:
        async with self._guard:
            while self._connections:
                await self._connections.pop().close()
            self._idle = asyncio.Queue()
        logger.info("ledger_pool_closed", db_path=str(self.db_path))


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Shared pool for the configured database, opened on first use."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = ConnectionPool(
            storage.db_path,
            size=storage.pool_size,
            busy_timeout_ms=storage.busy_timeout,
        )
    await _pool.open()
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction(immediate: bool = False) -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.transaction(immediate=immediate) as conn:
        yield conn
