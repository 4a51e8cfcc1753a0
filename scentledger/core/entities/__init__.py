"""Domain entities."""

from scentledger.core.entities.allocation import (
    AllocationPlan,
    AllocationRecord,
    AvailableLot,
    PlannedAllocation,
)
from scentledger.core.entities.product import Product, ProductIdentity
from scentledger.core.entities.sale import (
    Currency,
    Customer,
    Payment,
    PaymentStatus,
    Sale,
    SaleLine,
    derive_payment_status,
    round_money,
)
from scentledger.core.entities.settlement import (
    SettlementDelta,
    SettlementRow,
    ShipmentTotals,
)
from scentledger.core.entities.shipment import (
    InventoryAdjustment,
    InventorySummary,
    Shipment,
    ShipmentLot,
    ShipmentStatus,
)

__all__ = [
    # Catalog
    "Product",
    "ProductIdentity",
    # Shipments
    "Shipment",
    "ShipmentLot",
    "ShipmentStatus",
    "InventoryAdjustment",
    "InventorySummary",
    # Allocation
    "AvailableLot",
    "PlannedAllocation",
    "AllocationPlan",
    "AllocationRecord",
    # Sales
    "Currency",
    "Customer",
    "Payment",
    "PaymentStatus",
    "Sale",
    "SaleLine",
    "derive_payment_status",
    "round_money",
    # Settlement
    "SettlementDelta",
    "SettlementRow",
    "ShipmentTotals",
]
