"""Per-line payment math for sales."""

from scentledger.config import get_logger
from scentledger.core.entities.sale import Sale, SaleLine, round_money
from scentledger.core.exceptions import (
    PaymentExceedsTotalError,
    SaleLineNotFoundError,
    ValidationError,
)

logger = get_logger(__name__)


def backfill_line_payments(sale: Sale) -> list[SaleLine]:
    """
    Give lines without a payment figure a share of the sale-level payment.

    The unassigned part of sale.amount_paid is split across those lines by
    their share of the line totals. The last of them absorbs rounding so
    the line figures add up to the sale figure.

    Returns:
        The lines that were backfilled
    """
    pending = [line for line in sale.lines if line.amount_paid is None]
    if not pending:
        return []

    known = sum(line.amount_paid or 0.0 for line in sale.lines if line.amount_paid is not None)
    unassigned = max(round_money(sale.amount_paid - known), 0.0)
    pending_total = sum(line.line_total for line in pending)

    assigned = 0.0
    for index, line in enumerate(pending):
        if index == len(pending) - 1:
            share = round_money(unassigned - assigned)
        elif pending_total > 0:
            share = round_money(unassigned * line.line_total / pending_total)
        else:
            share = 0.0
        line.amount_paid = min(max(share, 0.0), line.line_total)
        assigned += line.amount_paid

    logger.info(
        "line_payments_backfilled",
        sale_id=sale.id,
        lines=[line.id for line in pending],
        amount=round_money(assigned),
    )
    return pending


def _refresh_sale(sale: Sale) -> None:
    sale.amount_paid = round_money(sum(line.amount_paid or 0.0 for line in sale.lines))
    sale.compute_totals()


def apply_line_payments(sale: Sale, payments: dict[int, float]) -> list[tuple[SaleLine, float]]:
    """
    Add payments to sale lines and re-derive the sale's payment state.

    Every payment is validated before any line changes, so a rejected
    request leaves the sale untouched.

    Args:
        sale: Sale with its lines loaded
        payments: Additional amount per sale line id

    Returns:
        (line, amount) for every payment applied

    Raises:
        SaleLineNotFoundError: A line id does not belong to the sale
        PaymentExceedsTotalError: A line would be paid past its total
    """
    backfill_line_payments(sale)

    applied: list[tuple[SaleLine, float]] = []
    for line_id, amount in payments.items():
        line = sale.get_line(line_id)
        if line is None:
            raise SaleLineNotFoundError(sale.id or 0, line_id)
        if amount <= 0:
            raise ValidationError("amount", "must be greater than 0", amount)
        attempted = round_money((line.amount_paid or 0.0) + amount)
        if attempted > line.line_total:
            raise PaymentExceedsTotalError(line_id, line.line_total, attempted)
        applied.append((line, round_money(amount)))

    for line, amount in applied:
        line.amount_paid = round_money((line.amount_paid or 0.0) + amount)

    _refresh_sale(sale)
    return applied


def pay_all(sale: Sale) -> list[tuple[SaleLine, float]]:
    """Settle every line in full. Returns the amount added per line."""
    backfill_line_payments(sale)

    applied: list[tuple[SaleLine, float]] = []
    for line in sale.lines:
        if line.balance > 0:
            applied.append((line, line.balance))
        line.amount_paid = line.line_total

    _refresh_sale(sale)
    return applied
