"""
ScentLedger HTTP application.

Startup migrates the ledger database and opens the connection pool;
shutdown closes the pool. Run with `python manage.py start` or
`uvicorn scentledger.api.main:app`.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scentledger import __version__
from scentledger.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from scentledger.api.middleware.error_handler import setup_exception_handlers
from scentledger.api.routes import (
    exchange_rate_router,
    health_router,
    inventory_router,
    sales_router,
    shipments_router,
)
from scentledger.config import configure_logging, get_logger, get_settings
from scentledger.infrastructure.storage.sqlite import close_pool, get_pool
from scentledger.infrastructure.storage.sqlite.migrations.migrator import initialize_database

logger = get_logger(__name__)

ROUTERS = (
    health_router,
    shipments_router,
    inventory_router,
    sales_router,
    exchange_rate_router,
)


async def _migrate_or_fail() -> int:
    results = await initialize_database()
    broken = next((r for r in results if not r.success), None)
    if broken is not None:
        logger.error("ledger_schema_not_ready", version=broken.version, error=broken.error)
        raise RuntimeError(f"Migration v{broken.version} failed: {broken.error}")
    return len(results)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger.info("ledger_api_starting", environment=settings.environment, port=settings.api.port)

    applied = await _migrate_or_fail()
    await get_pool()
    logger.info("ledger_api_ready", migrations_applied=applied)
    try:
        yield
    finally:
        await close_pool()
        logger.info("ledger_api_stopped")


def create_app() -> FastAPI:
    """Build the FastAPI app with middleware, error handlers and routers."""
    settings = get_settings()
    configure_logging()

    app = FastAPI(
        title="ScentLedger API",
        description="FIFO inventory allocation and shipment settlement for perfume resale",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
    )

    # Added last runs first: errors are rendered inside the request log
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
            allow_credentials=True,
        )
    setup_exception_handlers(app)

    for router in ROUTERS:
        app.include_router(router)

    @app.get("/", include_in_schema=False)
    async def index() -> dict[str, str]:
        return {"name": settings.app_name, "version": __version__, "health": "/api/health"}

    return app


app = create_app()
