"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest

from scentledger.config import reset_settings
from scentledger.core.entities import (
    AllocationRecord,
    AvailableLot,
    Currency,
    ProductIdentity,
    Sale,
    SaleLine,
)
from scentledger.infrastructure.exchange_rate import reset_exchange_rate_provider


@pytest.fixture(autouse=True)
def fresh_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Point storage at a per-test directory and drop cached singletons."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("STORAGE_POOL_SIZE", "2")
    monkeypatch.setenv("ALLOCATION_RETRY_DELAY", "0.001")
    monkeypatch.setenv("FX_MAX_RETRIES", "2")
    reset_settings()
    reset_exchange_rate_provider()
    yield
    reset_settings()
    reset_exchange_rate_provider()


@pytest.fixture
async def ledger_db(tmp_path: Path) -> AsyncGenerator[Path, None]:
    """Migrated temporary database behind the global connection pool."""
    from scentledger.config import get_settings
    from scentledger.infrastructure.storage.sqlite import connection as conn_module
    from scentledger.infrastructure.storage.sqlite import close_pool
    from scentledger.infrastructure.storage.sqlite.migrations.migrator import initialize_database

    db_path = get_settings().storage.db_path
    results = await initialize_database(db_path, create_backup_before=False)
    assert all(r.success for r in results)

    conn_module._pool = None
    try:
        yield db_path
    finally:
        await close_pool()


@pytest.fixture
def chanel_no5() -> ProductIdentity:
    return ProductIdentity(brand="Chanel", name="No. 5", size="100ml")


@pytest.fixture
def two_lots() -> list[AvailableLot]:
    """Older lot of 5 @ $10, newer lot of 5 @ $20."""
    from datetime import datetime

    return [
        AvailableLot(
            lot_id=2, shipment_id=2, arrival_key=datetime(2024, 2, 1),
            remaining_quantity=5, unit_cost=20.0,
        ),
        AvailableLot(
            lot_id=1, shipment_id=1, arrival_key=datetime(2024, 1, 1),
            remaining_quantity=5, unit_cost=10.0,
        ),
    ]


@pytest.fixture
def allocated_sale(chanel_no5: ProductIdentity) -> Sale:
    """USD sale of 7 units at $30 taken from two shipments."""
    line = SaleLine(
        id=11,
        sale_id=1,
        identity=chanel_no5,
        quantity=7,
        unit_price=30.0,
        amount_paid=0.0,
        allocations=[
            AllocationRecord(sale_item_id=11, shipment_item_id=1, shipment_id=1, quantity=5, unit_cost=10.0),
            AllocationRecord(sale_item_id=11, shipment_item_id=2, shipment_id=2, quantity=2, unit_cost=20.0),
        ],
    )
    return Sale(id=1, currency=Currency.USD, exchange_rate_used=60.0, lines=[line])
