"""API route modules."""

from scentledger.api.routes.exchange_rate import router as exchange_rate_router
from scentledger.api.routes.health import router as health_router
from scentledger.api.routes.inventory import router as inventory_router
from scentledger.api.routes.sales import router as sales_router
from scentledger.api.routes.shipments import router as shipments_router

__all__ = [
    "exchange_rate_router",
    "health_router",
    "inventory_router",
    "sales_router",
    "shipments_router",
]
