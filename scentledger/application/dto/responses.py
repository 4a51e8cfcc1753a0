"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field


# --- Common ---


class ComponentHealthResponse(BaseModel):
    """Health of one dependency."""

    name: str
    available: bool
    latency_ms: float | None = None
    detail: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ComponentHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_INVENTORY)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    context: dict[str, Any] | None = Field(default=None, description="Structured error details")
    timestamp: datetime = Field(default_factory=datetime.now)


# --- Shipments ---


class LotResponse(BaseModel):
    """Shipment lot response DTO."""

    id: int
    shipment_id: int
    product_id: int | None = None
    brand: str
    name: str
    size: str
    quantity: int
    unit_cost: float
    remaining_inventory: int
    sold_quantity: int


class ShipmentResponse(BaseModel):
    """Shipment response DTO."""

    id: int
    shipment_number: str
    status: str
    shipped_date: date | None = None
    delivered_date: date | None = None
    shipping_cost: float
    additional_costs: float
    total_cost: float
    total_revenue: float
    cost_of_goods_sold: float
    net_profit: float
    remaining_units: int
    notes: str | None = None
    lots: list[LotResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ShipmentListResponse(BaseModel):
    """List of shipments."""

    shipments: list[ShipmentResponse]
    total: int


class ShipmentTotalsResponse(BaseModel):
    """Aggregates of one shipment."""

    total_cost: float
    total_revenue: float
    cost_of_goods_sold: float
    net_profit: float


class ReconciledShipmentResponse(BaseModel):
    """Stored vs recomputed aggregates for one shipment."""

    shipment_id: int
    stored: ShipmentTotalsResponse
    recomputed: ShipmentTotalsResponse
    drift: dict[str, float]
    written: bool


class ReconciliationResponse(BaseModel):
    """Result of reconciling one or all shipments."""

    shipments: list[ReconciledShipmentResponse]
    drifted: int


# --- Inventory ---


class AvailableLotResponse(BaseModel):
    """A lot with stock, in FIFO order."""

    lot_id: int
    shipment_id: int
    arrival_key: datetime
    remaining_quantity: int
    unit_cost: float


class AvailableInventoryResponse(BaseModel):
    """Available lots of one product."""

    product: str
    total_available: int
    lots: list[AvailableLotResponse]


class InventorySummaryResponse(BaseModel):
    """Consolidated stock of one product."""

    brand: str
    name: str
    size: str
    total_remaining: int
    lot_count: int
    next_unit_cost: float | None = None


class ConsolidatedInventoryResponse(BaseModel):
    """Stock across all products."""

    products: list[InventorySummaryResponse]
    total_units: int


class AdjustmentResponse(BaseModel):
    """Inventory adjustment response DTO."""

    id: int
    lot_id: int
    adjustment_quantity: int
    previous_remaining: int
    new_remaining: int
    reason: str
    adjusted_by: str | None = None
    created_at: datetime


class CostCorrectionResponse(BaseModel):
    """Result of correcting a lot's unit cost."""

    lot_id: int
    shipment_id: int
    previous_unit_cost: float
    new_unit_cost: float
    allocations_updated: int
    previous_net_profit: float
    net_profit: float
    profit_impact: float


# --- Sales ---


class AllocationResponse(BaseModel):
    """Units a sale line took from one lot."""

    lot_id: int
    shipment_id: int | None = None
    quantity: int
    unit_cost: float


class SaleLineResponse(BaseModel):
    """Sale line response DTO."""

    id: int
    brand: str
    name: str
    size: str
    quantity: int
    unit_price: float
    line_total: float
    amount_paid: float | None = None
    balance: float
    payment_status: str
    cost_of_goods: float
    allocations: list[AllocationResponse] = Field(default_factory=list)


class SaleResponse(BaseModel):
    """Sale response DTO."""

    id: int
    customer_id: int | None = None
    customer_name: str | None = None
    sale_date: date
    currency: str
    exchange_rate_used: float
    total_amount: float
    amount_paid: float
    outstanding_balance: float
    payment_status: str
    payment_method: str | None = None
    notes: str | None = None
    total_cost: float
    profit_usd: float
    lines: list[SaleLineResponse] = Field(default_factory=list)
    created_at: datetime


class SaleListResponse(BaseModel):
    """List of sales."""

    sales: list[SaleResponse]
    total: int


class PaymentResponse(BaseModel):
    """Payment response DTO."""

    id: int
    sale_id: int
    sale_item_id: int | None = None
    amount: float
    payment_method: str | None = None
    payment_date: date
    notes: str | None = None


class UpdatePaymentResponse(BaseModel):
    """Sale after a payment update plus the payments recorded."""

    sale: SaleResponse
    payments: list[PaymentResponse]


# --- Exchange rate ---


class ExchangeRateResponse(BaseModel):
    """Current USD -> DOP rate."""

    usd_to_dop: float
    source: str
    is_manual: bool
    fetched_at: datetime | None = None
