"""Sale, sale line, customer and payment entities."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from scentledger.core.entities.allocation import AllocationRecord
from scentledger.core.entities.product import ProductIdentity


class Currency(str, Enum):
    """Currencies a sale can be transacted in."""

    USD = "USD"
    DOP = "DOP"


class PaymentStatus(str, Enum):
    """Payment state derived from amount paid vs total."""

    PAID = "paid"
    PARTIAL = "partial"
    LAYAWAY = "layaway"


def round_money(amount: float) -> float:
    """Round to cents."""
    return round(amount + 0.0, 2)


def derive_payment_status(total: float, paid: float) -> PaymentStatus:
    """paid when nothing is owed, layaway when nothing was paid, else partial."""
    if round_money(total - paid) <= 0:
        return PaymentStatus.PAID
    if round_money(paid) > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.LAYAWAY


class Customer(BaseModel):
    """A buyer, resolved by name at sale time."""

    id: int | None = None
    name: str = Field(..., min_length=1)
    phone: str | None = None
    email: str | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class SaleLine(BaseModel):
    """One product within a sale, priced in the sale's currency."""

    id: int | None = None
    sale_id: int | None = None
    product_id: int | None = None
    identity: ProductIdentity
    quantity: int = Field(..., gt=0)
    unit_price: float = Field(..., ge=0)
    line_total: float = 0.0
    # None means no line-level payment figure exists yet (legacy rows)
    amount_paid: float | None = Field(default=None, ge=0)
    allocations: list[AllocationRecord] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @model_validator(mode="after")
    def compute_line_total(self) -> "SaleLine":
        self.line_total = round_money(self.quantity * self.unit_price)
        return self

    @property
    def balance(self) -> float:
        return round_money(self.line_total - (self.amount_paid or 0.0))

    @property
    def cost_of_goods(self) -> float:
        """FIFO cost of the units on this line (USD)."""
        return sum(a.cost for a in self.allocations)

    @property
    def payment_status(self) -> PaymentStatus:
        return derive_payment_status(self.line_total, self.amount_paid or 0.0)


class Sale(BaseModel):
    """
    A transaction with a customer.

    exchange_rate_used is frozen at creation; amounts are in the sale's
    currency. outstanding_balance and payment_status are always derived.
    """

    id: int | None = None
    customer_id: int | None = None
    customer_name: str | None = None
    sale_date: date = Field(default_factory=date.today)
    currency: Currency = Currency.USD
    exchange_rate_used: float = Field(..., gt=0)
    total_amount: float = 0.0
    amount_paid: float = Field(default=0.0, ge=0)
    outstanding_balance: float = 0.0
    payment_status: PaymentStatus = PaymentStatus.LAYAWAY
    payment_method: str | None = None
    notes: str | None = None
    lines: list[SaleLine] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @model_validator(mode="after")
    def compute_totals(self) -> "Sale":
        """Compute total_amount from lines, then balance and status."""
        if self.lines:
            self.total_amount = round_money(sum(line.line_total for line in self.lines))
        self.amount_paid = round_money(self.amount_paid)
        self.outstanding_balance = round_money(self.total_amount - self.amount_paid)
        self.payment_status = derive_payment_status(self.total_amount, self.amount_paid)
        return self

    def to_usd(self, amount: float) -> float:
        """Convert an amount in the sale's currency at the frozen rate."""
        if self.currency == Currency.DOP:
            return amount / self.exchange_rate_used
        return amount

    @property
    def total_cost(self) -> float:
        return sum(line.cost_of_goods for line in self.lines)

    @property
    def profit_usd(self) -> float:
        return self.to_usd(self.total_amount) - self.total_cost

    def get_line(self, line_id: int) -> SaleLine | None:
        for line in self.lines:
            if line.id == line_id:
                return line
        return None


class Payment(BaseModel):
    """A payment applied to one sale line."""

    id: int | None = None
    sale_id: int
    sale_item_id: int | None = None
    amount: float = Field(..., gt=0)
    payment_method: str | None = None
    payment_date: date = Field(default_factory=date.today)
    notes: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
