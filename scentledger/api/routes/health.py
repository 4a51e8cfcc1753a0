"""Liveness and database health."""

import time

import aiosqlite
from fastapi import APIRouter

from scentledger import __version__
from scentledger.application.dto.responses import ComponentHealthResponse, HealthResponse
from scentledger.infrastructure.storage.sqlite import get_pool

router = APIRouter(prefix="/api/health", tags=["health"])

_STARTED = time.monotonic()


def _report(status: str, database: ComponentHealthResponse | None = None) -> HealthResponse:
    return HealthResponse(
        status=status,
        version=__version__,
        uptime_seconds=time.monotonic() - _STARTED,
        database=database,
    )


async def _probe_ledger() -> ComponentHealthResponse:
    began = time.perf_counter()
    try:
        pool = await get_pool()
        async with pool.acquire() as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM shipment_items")
            (lots,) = await cursor.fetchone()
    except (aiosqlite.Error, OSError) as e:
        return ComponentHealthResponse(name="sqlite", available=False, detail=str(e))
    return ComponentHealthResponse(
        name="sqlite",
        available=True,
        latency_ms=(time.perf_counter() - began) * 1000,
        detail=f"{lots} lots",
    )


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return _report("healthy")


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """Round trip to SQLite, reporting how many lots the ledger holds."""
    database = await _probe_ledger()
    return _report("healthy" if database.available else "unhealthy", database)
