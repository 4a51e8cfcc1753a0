"""Shared plumbing for SQLite stores."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date, datetime

import aiosqlite

from scentledger.infrastructure.storage.sqlite.connection import get_connection, get_transaction


def parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)


def parse_date(value: str | None) -> date | None:
    if not value:
        return None
    return date.fromisoformat(value[:10])


def iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value else None


class SQLiteStore:
    """
    Base store.

    A store built with a connection runs every statement on it and never
    commits; the owning unit of work decides. A store built without one
    draws pooled connections and commits each write on its own.
    """

    def __init__(self, conn: aiosqlite.Connection | None = None):
        self._conn = conn

    @asynccontextmanager
    async def _read(self) -> AsyncIterator[aiosqlite.Connection]:
        if self._conn is not None:
            yield self._conn
        else:
            async with get_connection() as conn:
                yield conn

    @asynccontextmanager
    async def _write(self) -> AsyncIterator[aiosqlite.Connection]:
        if self._conn is not None:
            yield self._conn
        else:
            async with get_transaction() as conn:
                yield conn
