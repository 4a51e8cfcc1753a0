"""
Update Payment Use Case.

Per-line payments and pay-all.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

from scentledger.application.dto.mappers import payment_to_response, sale_to_response
from scentledger.application.dto.requests import PayAllRequest, UpdatePaymentRequest
from scentledger.application.dto.responses import UpdatePaymentResponse
from scentledger.config import get_logger
from scentledger.core.entities.sale import Payment, Sale, SaleLine
from scentledger.core.exceptions import SaleNotFoundError
from scentledger.core.interfaces.unit_of_work import IUnitOfWork
from scentledger.core.services.payments import apply_line_payments, pay_all

logger = get_logger(__name__)


@dataclass
class UpdatePaymentResult:
    """Result of a payment update."""

    sale: Sale
    payments: list[Payment] = field(default_factory=list)


class UpdatePaymentUseCase:
    """
    Add payments to sale lines and re-derive payment status.

    Lines without a payment figure (rows created before per-line tracking)
    are first given their proportional share of the sale-level amount paid.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork] | None = None):
        self._uow_factory = uow_factory

    def _get_uow_factory(self) -> Callable[[], IUnitOfWork]:
        if self._uow_factory is None:
            from scentledger.infrastructure.storage.sqlite import get_unit_of_work

            self._uow_factory = get_unit_of_work
        return self._uow_factory

    async def execute(self, sale_id: int, request: UpdatePaymentRequest) -> UpdatePaymentResult:
        """Apply per-line additional payments."""
        logger.info("update_payment_started", sale_id=sale_id, lines=len(request.payments))

        async with self._get_uow_factory()() as uow:
            sale = await uow.sales.get_sale(sale_id)
            if sale is None:
                raise SaleNotFoundError(sale_id)

            applied = apply_line_payments(
                sale, {p.sale_item_id: p.amount for p in request.payments}
            )
            payments = await self._persist(
                uow, sale, applied, request.payment_method, request.payment_date, request.notes
            )

        logger.info(
            "update_payment_complete",
            sale_id=sale_id,
            amount_paid=sale.amount_paid,
            outstanding=sale.outstanding_balance,
            status=sale.payment_status.value,
        )
        return UpdatePaymentResult(sale=sale, payments=payments)

    async def pay_all(self, sale_id: int, request: PayAllRequest | None = None) -> UpdatePaymentResult:
        """Settle every line of a sale in full."""
        request = request or PayAllRequest()

        async with self._get_uow_factory()() as uow:
            sale = await uow.sales.get_sale(sale_id)
            if sale is None:
                raise SaleNotFoundError(sale_id)

            applied = pay_all(sale)
            payments = await self._persist(
                uow, sale, applied, request.payment_method, request.payment_date, request.notes
            )

        logger.info("sale_paid_in_full", sale_id=sale_id, payments=len(payments))
        return UpdatePaymentResult(sale=sale, payments=payments)

    async def _persist(
        self,
        uow: IUnitOfWork,
        sale: Sale,
        applied: list[tuple[SaleLine, float]],
        payment_method: str | None,
        payment_date: str | None,
        notes: str | None,
    ) -> list[Payment]:
        if payment_method:
            sale.payment_method = payment_method
        sale = await uow.sales.update_payments(sale)

        paid_on = date.fromisoformat(payment_date) if payment_date else date.today()
        payments = []
        for line, amount in applied:
            payment = await uow.sales.add_payment(
                Payment(
                    sale_id=sale.id,  # type: ignore[arg-type]
                    sale_item_id=line.id,
                    amount=amount,
                    payment_method=payment_method,
                    payment_date=paid_on,
                    notes=notes,
                )
            )
            payments.append(payment)
        return payments

    def to_response(self, result: UpdatePaymentResult) -> UpdatePaymentResponse:
        """Convert result to API response."""
        return UpdatePaymentResponse(
            sale=sale_to_response(result.sale),
            payments=[payment_to_response(p) for p in result.payments],
        )
