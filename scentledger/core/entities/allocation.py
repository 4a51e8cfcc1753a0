"""FIFO allocation entities."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from scentledger.core.entities.product import ProductIdentity


class AvailableLot(BaseModel):
    """A lot with stock left, as returned by the FIFO-ordered inventory query."""

    lot_id: int
    shipment_id: int
    arrival_key: datetime
    remaining_quantity: int
    unit_cost: float


class PlannedAllocation(BaseModel):
    """Units a sale line will take from one lot, at that lot's cost."""

    model_config = ConfigDict(frozen=True)

    lot_id: int
    shipment_id: int
    quantity: int = Field(..., gt=0)
    unit_cost: float

    @property
    def cost(self) -> float:
        return self.quantity * self.unit_cost


class AllocationPlan(BaseModel):
    """Complete, side-effect-free allocation decision for one product line."""

    identity: ProductIdentity
    quantity_needed: int
    allocations: list[PlannedAllocation] = Field(default_factory=list)
    total_cost: float = 0.0

    @property
    def allocated_quantity(self) -> int:
        return sum(a.quantity for a in self.allocations)

    @property
    def shipment_ids(self) -> set[int]:
        return {a.shipment_id for a in self.allocations}


class AllocationRecord(BaseModel):
    """Immutable provenance: sale line X took Q units from lot Y at cost C."""

    id: int | None = None
    sale_item_id: int
    shipment_item_id: int
    shipment_id: int | None = None
    quantity: int = Field(..., gt=0)
    unit_cost: float
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def cost(self) -> float:
        return self.quantity * self.unit_cost
