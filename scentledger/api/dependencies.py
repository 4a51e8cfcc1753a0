"""
Dependency injection container for FastAPI.

Provides use cases, stores and the rate supplier to route handlers.
Tests replace any of these through app.dependency_overrides.
"""

from fastapi import Depends

from scentledger.application.use_cases import (
    AdjustInventoryUseCase,
    CorrectLotCostUseCase,
    CreateSaleUseCase,
    CreateShipmentUseCase,
    ReconcileShipmentUseCase,
    UpdatePaymentUseCase,
    UpdateShipmentStatusUseCase,
)
from scentledger.core.interfaces import IExchangeRateProvider
from scentledger.infrastructure.exchange_rate import get_exchange_rate_provider
from scentledger.infrastructure.storage.sqlite import (
    SQLiteLedgerStore,
    SQLiteSalesStore,
    get_ledger_store,
    get_sales_store,
)


# Store dependencies
async def get_ledger() -> SQLiteLedgerStore:
    """Get ledger store (shipments, lots, allocations)."""
    return await get_ledger_store()


async def get_sales() -> SQLiteSalesStore:
    """Get sales store."""
    return await get_sales_store()


def get_rate_provider() -> IExchangeRateProvider:
    """Get exchange rate supplier."""
    return get_exchange_rate_provider()


# Use case dependencies
def get_create_shipment_use_case() -> CreateShipmentUseCase:
    return CreateShipmentUseCase()


def get_update_shipment_status_use_case() -> UpdateShipmentStatusUseCase:
    return UpdateShipmentStatusUseCase()


def get_reconcile_use_case() -> ReconcileShipmentUseCase:
    return ReconcileShipmentUseCase()


def get_adjust_inventory_use_case() -> AdjustInventoryUseCase:
    return AdjustInventoryUseCase()


def get_correct_lot_cost_use_case() -> CorrectLotCostUseCase:
    return CorrectLotCostUseCase()


def get_create_sale_use_case(
    rate_provider: IExchangeRateProvider = Depends(get_rate_provider),
) -> CreateSaleUseCase:
    return CreateSaleUseCase(rate_provider=rate_provider)


def get_update_payment_use_case() -> UpdatePaymentUseCase:
    return UpdatePaymentUseCase()
