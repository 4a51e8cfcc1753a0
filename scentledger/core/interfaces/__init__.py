"""Core interfaces (ports) for dependency injection."""

from scentledger.core.interfaces.catalog_store import ICustomerStore, IProductStore
from scentledger.core.interfaces.exchange_rate import (
    ExchangeRateSnapshot,
    IExchangeRateProvider,
)
from scentledger.core.interfaces.ledger_store import ILedgerStore
from scentledger.core.interfaces.sales_store import ISalesStore
from scentledger.core.interfaces.unit_of_work import IUnitOfWork

__all__ = [
    # Storage interfaces
    "ILedgerStore",
    "ISalesStore",
    "IProductStore",
    "ICustomerStore",
    "IUnitOfWork",
    # Exchange rate
    "IExchangeRateProvider",
    "ExchangeRateSnapshot",
]
