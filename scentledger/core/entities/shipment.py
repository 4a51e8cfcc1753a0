"""Shipment and inventory lot entities."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from scentledger.core.entities.product import ProductIdentity


class ShipmentStatus(str, Enum):
    """Shipment lifecycle states, in order."""

    PREPARING = "preparing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    SETTLED = "settled"

    @property
    def rank(self) -> int:
        return list(ShipmentStatus).index(self)

    def can_transition_to(self, other: "ShipmentStatus") -> bool:
        """Statuses only move forward."""
        return other.rank > self.rank


class ShipmentLot(BaseModel):
    """
    One product line within a shipment (a shipment_item).

    quantity and unit_cost are fixed when the shipment is created;
    remaining_inventory only goes down through allocation or an
    explicit adjustment.
    """

    id: int | None = None
    shipment_id: int | None = None
    product_id: int | None = None
    identity: ProductIdentity | None = None
    quantity: int = Field(..., gt=0)
    unit_cost: float = Field(..., ge=0)
    remaining_inventory: int | None = Field(default=None, ge=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @model_validator(mode="after")
    def default_remaining(self) -> "ShipmentLot":
        if self.remaining_inventory is None:
            self.remaining_inventory = self.quantity
        return self

    @property
    def sold_quantity(self) -> int:
        return self.quantity - (self.remaining_inventory or 0)

    @property
    def lot_cost(self) -> float:
        return self.quantity * self.unit_cost


class Shipment(BaseModel):
    """
    An inbound batch of stock, denominated in USD.

    total_cost is fixed at creation. total_revenue, cost_of_goods_sold and
    net_profit are derived from the allocation records against its lots.
    """

    id: int | None = None
    shipment_number: str
    status: ShipmentStatus = ShipmentStatus.PREPARING
    shipped_date: date | None = None
    delivered_date: date | None = None
    shipping_cost: float = Field(default=0.0, ge=0)
    additional_costs: float = Field(default=0.0, ge=0)
    total_cost: float = 0.0
    total_revenue: float = 0.0
    cost_of_goods_sold: float = 0.0
    net_profit: float = 0.0
    notes: str | None = None
    lots: list[ShipmentLot] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def compute_total_cost(self) -> float:
        """Sum of lot cost plus shipping and additional costs."""
        return (
            sum(lot.lot_cost for lot in self.lots)
            + self.shipping_cost
            + self.additional_costs
        )

    @property
    def remaining_units(self) -> int:
        return sum(lot.remaining_inventory or 0 for lot in self.lots)


class InventoryAdjustment(BaseModel):
    """Manual correction of a lot's remaining inventory."""

    id: int | None = None
    shipment_item_id: int
    adjustment_quantity: int  # signed
    previous_remaining: int
    new_remaining: int
    reason: str
    adjusted_by: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class InventorySummary(BaseModel):
    """Consolidated stock for one product identity across all lots."""

    identity: ProductIdentity
    total_remaining: int
    lot_count: int
    next_unit_cost: float | None = None  # cost of the next unit FIFO would sell
