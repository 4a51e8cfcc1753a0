"""Shipment settlement entities."""

from pydantic import BaseModel


class SettlementDelta(BaseModel):
    """Revenue and cost a batch of allocations adds to one shipment (USD)."""

    shipment_id: int
    units: int = 0
    revenue_delta: float = 0.0
    cost_delta: float = 0.0


class ShipmentTotals(BaseModel):
    """Derived aggregates of a shipment."""

    shipment_id: int
    total_cost: float
    total_revenue: float
    cost_of_goods_sold: float
    net_profit: float

    def drift_from(self, other: "ShipmentTotals", tolerance: float = 0.005) -> dict[str, float]:
        """Fields that differ from another snapshot by more than tolerance."""
        drift = {}
        for field in ("total_cost", "total_revenue", "cost_of_goods_sold", "net_profit"):
            delta = getattr(self, field) - getattr(other, field)
            if abs(delta) > tolerance:
                drift[field] = delta
        return drift


class SettlementRow(BaseModel):
    """One allocation joined to the sale it belongs to."""

    quantity: int
    unit_cost: float
    unit_price: float
    currency: str
    exchange_rate_used: float

    @property
    def revenue_usd(self) -> float:
        revenue = self.quantity * self.unit_price
        if self.currency == "DOP":
            return revenue / self.exchange_rate_used
        return revenue

    @property
    def cost(self) -> float:
        return self.quantity * self.unit_cost
