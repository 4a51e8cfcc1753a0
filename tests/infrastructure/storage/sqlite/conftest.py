"""Pytest fixtures for SQLite storage tests."""

import pytest

from scentledger.core.entities import Product, Shipment, ShipmentLot
from scentledger.infrastructure.storage.sqlite import (
    SQLiteCustomerStore,
    SQLiteLedgerStore,
    SQLiteProductStore,
    SQLiteSalesStore,
)


@pytest.fixture
def ledger(ledger_db) -> SQLiteLedgerStore:
    return SQLiteLedgerStore()


@pytest.fixture
def sales(ledger_db) -> SQLiteSalesStore:
    return SQLiteSalesStore()


@pytest.fixture
def products(ledger_db) -> SQLiteProductStore:
    return SQLiteProductStore()


@pytest.fixture
def customers(ledger_db) -> SQLiteCustomerStore:
    return SQLiteCustomerStore()


@pytest.fixture
async def product(products) -> Product:
    return await products.create_product(Product(brand="Chanel", name="No. 5", size="100ml", sku="CH-5-100"))


@pytest.fixture
async def two_shipments(ledger, product) -> list[Shipment]:
    """SH-1 holds 5 @ $10, SH-2 (newer) holds 5 @ $20, both of the same product."""
    created = []
    for number, cost in (("SH-1", 10.0), ("SH-2", 20.0)):
        shipment = Shipment(
            shipment_number=number,
            lots=[ShipmentLot(product_id=product.id, identity=product.identity, quantity=5, unit_cost=cost)],
        )
        shipment.total_cost = shipment.compute_total_cost()
        shipment.net_profit = -shipment.total_cost
        created.append(await ledger.create_shipment(shipment))
    return created
