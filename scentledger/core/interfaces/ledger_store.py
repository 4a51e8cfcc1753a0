"""Abstract interface for the inventory ledger (shipments, lots, allocations)."""

from abc import ABC, abstractmethod

from scentledger.core.entities.allocation import AllocationRecord, AvailableLot
from scentledger.core.entities.product import ProductIdentity
from scentledger.core.entities.settlement import SettlementRow, ShipmentTotals
from scentledger.core.entities.shipment import (
    InventoryAdjustment,
    InventorySummary,
    Shipment,
    ShipmentLot,
    ShipmentStatus,
)


class ILedgerStore(ABC):
    """Interface for shipment, lot and allocation persistence."""

    # Shipments

    @abstractmethod
    async def create_shipment(self, shipment: Shipment) -> Shipment:
        """Create a shipment together with its lots."""
        pass

    @abstractmethod
    async def get_shipment(self, shipment_id: int) -> Shipment | None:
        """Get shipment by ID with its lots."""
        pass

    @abstractmethod
    async def list_shipments(
        self,
        status: ShipmentStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Shipment]:
        """List shipments, newest first."""
        pass

    @abstractmethod
    async def count_shipments(self, status: ShipmentStatus | None = None) -> int:
        """Number of shipments, optionally in one status."""
        pass

    @abstractmethod
    async def update_shipment_status(self, shipment: Shipment) -> Shipment:
        """Persist status, shipped_date and delivered_date."""
        pass

    @abstractmethod
    async def update_shipment_aggregates(self, totals: ShipmentTotals) -> None:
        """Write total_cost, total_revenue, cost_of_goods_sold and net_profit."""
        pass

    # Lots

    @abstractmethod
    async def get_lot(self, lot_id: int) -> ShipmentLot | None:
        """Get a shipment lot by ID."""
        pass

    @abstractmethod
    async def get_available_inventory(
        self, identity: ProductIdentity
    ) -> list[AvailableLot]:
        """Lots of a product with remaining_inventory > 0, oldest first."""
        pass

    @abstractmethod
    async def decrement_lot(self, lot_id: int, quantity: int) -> bool:
        """
        Atomically take quantity units from a lot.

        Returns False when the lot holds fewer than quantity units.
        """
        pass

    @abstractmethod
    async def compare_and_set_remaining(
        self, lot_id: int, expected: int, new_remaining: int
    ) -> bool:
        """Set remaining_inventory only if it still equals expected."""
        pass

    @abstractmethod
    async def update_lot_cost(self, lot_id: int, unit_cost: float) -> None:
        """Change a lot's unit cost (cost correction only)."""
        pass

    @abstractmethod
    async def consolidated_inventory(self) -> list[InventorySummary]:
        """Remaining stock per product identity."""
        pass

    # Allocations

    @abstractmethod
    async def insert_allocation(self, record: AllocationRecord) -> AllocationRecord:
        """Insert an allocation record."""
        pass

    @abstractmethod
    async def list_allocations_for_lot(self, lot_id: int) -> list[AllocationRecord]:
        """All allocation records drawn from a lot."""
        pass

    @abstractmethod
    async def rewrite_allocation_costs(self, lot_id: int, unit_cost: float) -> int:
        """Set unit_cost on every allocation of a lot. Returns rows changed."""
        pass

    @abstractmethod
    async def list_settlement_rows(self, shipment_id: int) -> list[SettlementRow]:
        """Allocations of a shipment's lots joined to their sale lines and sales."""
        pass

    # Adjustments

    @abstractmethod
    async def add_adjustment(self, adjustment: InventoryAdjustment) -> InventoryAdjustment:
        """Record an inventory adjustment."""
        pass

    @abstractmethod
    async def list_adjustments(self, lot_id: int) -> list[InventoryAdjustment]:
        """Adjustments of a lot, newest first."""
        pass
