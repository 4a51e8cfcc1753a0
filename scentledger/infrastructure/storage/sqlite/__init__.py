"""SQLite storage implementations."""

from scentledger.infrastructure.storage.sqlite.catalog_store import (
    SQLiteCustomerStore,
    SQLiteProductStore,
)
from scentledger.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from scentledger.infrastructure.storage.sqlite.ledger_store import SQLiteLedgerStore
from scentledger.infrastructure.storage.sqlite.sales_store import SQLiteSalesStore
from scentledger.infrastructure.storage.sqlite.unit_of_work import SQLiteUnitOfWork

# Singleton instances
_ledger_store: SQLiteLedgerStore | None = None
_sales_store: SQLiteSalesStore | None = None
_product_store: SQLiteProductStore | None = None
_customer_store: SQLiteCustomerStore | None = None


async def get_ledger_store() -> SQLiteLedgerStore:
    """Get singleton ledger store instance."""
    global _ledger_store
    if _ledger_store is None:
        _ledger_store = SQLiteLedgerStore()
    return _ledger_store


async def get_sales_store() -> SQLiteSalesStore:
    """Get singleton sales store instance."""
    global _sales_store
    if _sales_store is None:
        _sales_store = SQLiteSalesStore()
    return _sales_store


async def get_product_store() -> SQLiteProductStore:
    """Get singleton product store instance."""
    global _product_store
    if _product_store is None:
        _product_store = SQLiteProductStore()
    return _product_store


async def get_customer_store() -> SQLiteCustomerStore:
    """Get singleton customer store instance."""
    global _customer_store
    if _customer_store is None:
        _customer_store = SQLiteCustomerStore()
    return _customer_store


def get_unit_of_work() -> SQLiteUnitOfWork:
    """New unit of work on the global pool."""
    return SQLiteUnitOfWork()


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteLedgerStore",
    "SQLiteSalesStore",
    "SQLiteProductStore",
    "SQLiteCustomerStore",
    "SQLiteUnitOfWork",
    # Factory functions
    "get_ledger_store",
    "get_sales_store",
    "get_product_store",
    "get_customer_store",
    "get_unit_of_work",
]
