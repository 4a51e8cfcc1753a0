"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from pydantic import BaseModel, Field, field_validator, model_validator

from scentledger.core.entities.sale import Currency, round_money
from scentledger.core.entities.shipment import ShipmentStatus


# --- Shipments ---


class ShipmentLotRequest(BaseModel):
    """One product line of an inbound shipment."""

    brand: str = Field(..., min_length=1, description="Product brand")
    name: str = Field(..., min_length=1, description="Product name")
    size: str = Field(default="", description="Bottle size", examples=["100ml", "3.4oz"])
    quantity: int = Field(..., gt=0, description="Units received")
    unit_cost: float = Field(..., ge=0, description="Cost per unit in USD")
    sku: str | None = Field(default=None, description="Catalog SKU for new products")
    sale_price: float | None = Field(default=None, ge=0, description="Default sale price")


class CreateShipmentRequest(BaseModel):
    """Request to record an inbound shipment."""

    shipment_number: str = Field(..., min_length=1, description="Shipment reference")
    shipping_cost: float = Field(default=0.0, ge=0, description="Freight in USD")
    additional_costs: float = Field(default=0.0, ge=0, description="Duties, fees, etc. in USD")
    notes: str | None = Field(default=None, description="Additional notes")
    lots: list[ShipmentLotRequest] = Field(..., min_length=1, description="Products received")


class UpdateShipmentStatusRequest(BaseModel):
    """Request to move a shipment forward in its lifecycle."""

    status: ShipmentStatus


# --- Inventory ---


class AdjustInventoryRequest(BaseModel):
    """Manual correction of a lot's remaining inventory."""

    lot_id: int = Field(..., description="Shipment item ID")
    adjustment_quantity: int = Field(..., description="Signed change in units")
    reason: str = Field(..., min_length=1, description="Why the count changed")
    adjusted_by: str | None = Field(default=None, description="Operator")
    confirm_exceeds_original: bool = Field(
        default=False,
        description="Allow remaining inventory above the lot's original quantity",
    )

    @field_validator("adjustment_quantity")
    @classmethod
    def non_zero(cls, v: int) -> int:
        if v == 0:
            raise ValueError("adjustment_quantity must not be zero")
        return v

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("reason must not be blank")
        return v.strip()


class CorrectLotCostRequest(BaseModel):
    """Fix a lot's unit cost after the fact."""

    lot_id: int = Field(..., description="Shipment item ID")
    new_unit_cost: float = Field(..., ge=0, description="Corrected cost per unit in USD")


# --- Sales ---


class SaleLineRequest(BaseModel):
    """One product within a sale."""

    brand: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    size: str = ""
    quantity: int = Field(..., gt=0, description="Units sold")
    unit_price: float = Field(..., ge=0, description="Price per unit in the sale currency")
    amount_paid: float = Field(default=0.0, ge=0, description="Paid up front on this line")

    @model_validator(mode="after")
    def paid_within_total(self) -> "SaleLineRequest":
        if round_money(self.amount_paid) > round_money(self.quantity * self.unit_price):
            raise ValueError("amount_paid exceeds line total")
        return self


class CreateSaleRequest(BaseModel):
    """Request to create a sale."""

    customer_name: str = Field(..., min_length=1, description="Found or created by name")
    sale_date: str | None = Field(
        default=None,
        description="Sale date in ISO format (defaults to today)",
    )
    currency: Currency = Currency.USD
    exchange_rate: float | None = Field(
        default=None,
        gt=0,
        description="USD -> DOP rate to freeze; the current rate when omitted",
    )
    payment_method: str | None = Field(default=None, examples=["cash", "transfer"])
    notes: str | None = None
    lines: list[SaleLineRequest] = Field(..., min_length=1)


class LinePaymentRequest(BaseModel):
    """Additional payment on one sale line."""

    sale_item_id: int
    amount: float = Field(..., gt=0)


class UpdatePaymentRequest(BaseModel):
    """Per-line additional payments."""

    payments: list[LinePaymentRequest] = Field(..., min_length=1)
    payment_method: str | None = None
    payment_date: str | None = Field(default=None, description="ISO date (defaults to today)")
    notes: str | None = None

    @field_validator("payments")
    @classmethod
    def unique_lines(cls, v: list[LinePaymentRequest]) -> list[LinePaymentRequest]:
        ids = [p.sale_item_id for p in v]
        if len(ids) != len(set(ids)):
            raise ValueError("each sale line may appear once")
        return v


class PayAllRequest(BaseModel):
    """Settle every line of a sale."""

    payment_method: str | None = None
    payment_date: str | None = None
    notes: str | None = None


# --- Exchange rate ---


class SetExchangeRateRequest(BaseModel):
    """Pin a manual USD -> DOP rate."""

    usd_to_dop: float = Field(..., gt=0, examples=[58.75])
