"""Create Sale Use Case — FIFO allocation, settlement and payment tracking."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from scentledger.application.dto.mappers import sale_to_response
from scentledger.application.dto.requests import CreateSaleRequest
from scentledger.application.dto.responses import SaleResponse
from scentledger.config import get_logger, get_settings
from scentledger.core.entities.allocation import AllocationPlan
from scentledger.core.entities.product import Product, ProductIdentity
from scentledger.core.entities.sale import Customer, Payment, Sale, SaleLine, round_money
from scentledger.core.entities.settlement import ShipmentTotals
from scentledger.core.exceptions import AllocationConflictError, ProductNotFoundError
from scentledger.core.interfaces.exchange_rate import IExchangeRateProvider
from scentledger.core.interfaces.unit_of_work import IUnitOfWork
from scentledger.core.services.allocation_applier import AllocationApplier
from scentledger.core.services.fifo_allocator import FifoAllocator
from scentledger.core.services.settlement_aggregator import SettlementAggregator

logger = get_logger(__name__)


@dataclass
class CreateSaleResult:
    """Result of creating a sale."""

    sale: Sale
    shipments: list[ShipmentTotals] = field(default_factory=list)
    attempts: int = 1


def _log_conflict_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "sale_allocation_retry",
        attempt=retry_state.attempt_number,
        lot_id=getattr(exc, "details", {}).get("lot_id"),
    )


class CreateSaleUseCase:
    """
    Create a sale as one unit of work.

    1. Find or create the customer by name.
    2. Plan every line against a fresh read of the ledger; any shortfall
       aborts before anything is written.
    3. Write the sale and its lines, apply each plan, settle every
       shipment touched, record up-front payments.

    All writes share one transaction. If a lot was taken by a concurrent
    sale between planning and applying, the whole unit is rolled back and
    re-planned, up to allocation.max_attempts times.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork] | None = None,
        rate_provider: IExchangeRateProvider | None = None,
    ):
        self._uow_factory = uow_factory
        self._rate_provider = rate_provider

    def _get_uow_factory(self) -> Callable[[], IUnitOfWork]:
        if self._uow_factory is None:
            from scentledger.infrastructure.storage.sqlite import get_unit_of_work

            self._uow_factory = get_unit_of_work
        return self._uow_factory

    def _get_rate_provider(self) -> IExchangeRateProvider:
        if self._rate_provider is None:
            from scentledger.infrastructure.exchange_rate import get_exchange_rate_provider

            self._rate_provider = get_exchange_rate_provider()
        return self._rate_provider

    async def execute(self, request: CreateSaleRequest) -> CreateSaleResult:
        """Execute create sale use case."""
        logger.info(
            "create_sale_started",
            customer=request.customer_name,
            lines=len(request.lines),
            currency=request.currency.value,
        )

        sale_date = date.fromisoformat(request.sale_date) if request.sale_date else date.today()

        # Frozen into the sale; never re-read when settling
        rate = request.exchange_rate or await self._get_rate_provider().get_usd_to_dop()

        settings = get_settings().allocation
        attempts = 0
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(settings.max_attempts),
            wait=wait_exponential(
                multiplier=settings.retry_delay,
                min=settings.retry_delay,
                max=settings.retry_delay * 8,
            ),
            retry=retry_if_exception_type(AllocationConflictError),
            before_sleep=_log_conflict_retry,
            reraise=True,
        ):
            with attempt:
                attempts = attempt.retry_state.attempt_number
                result = await self._create_once(request, sale_date, rate)

        result.attempts = attempts
        logger.info(
            "sale_created",
            sale_id=result.sale.id,
            total=result.sale.total_amount,
            currency=result.sale.currency.value,
            cost_usd=result.sale.total_cost,
            shipments=[t.shipment_id for t in result.shipments],
            attempts=attempts,
        )
        return result

    async def _create_once(
        self, request: CreateSaleRequest, sale_date: date, rate: float
    ) -> CreateSaleResult:
        async with self._get_uow_factory()() as uow:
            customer = await self._resolve_customer(uow, request.customer_name)

            allocator = FifoAllocator(uow.ledger)
            reserved: dict[int, int] = {}
            planned: list[tuple[Product, AllocationPlan]] = []
            for line_req in request.lines:
                identity = ProductIdentity(
                    brand=line_req.brand, name=line_req.name, size=line_req.size
                )
                product = await uow.products.get_by_identity(identity)
                if product is None:
                    raise ProductNotFoundError(str(identity))
                plan = await allocator.allocate(identity, line_req.quantity, reserved)
                planned.append((product, plan))

            lines = [
                SaleLine(
                    product_id=product.id,
                    identity=plan.identity,
                    quantity=line_req.quantity,
                    unit_price=line_req.unit_price,
                    amount_paid=round_money(line_req.amount_paid),
                )
                for line_req, (product, plan) in zip(request.lines, planned)
            ]
            sale = Sale(
                customer_id=customer.id,
                customer_name=customer.name,
                sale_date=sale_date,
                currency=request.currency,
                exchange_rate_used=rate,
                amount_paid=sum(line.amount_paid or 0.0 for line in lines),
                payment_method=request.payment_method,
                notes=request.notes,
                lines=lines,
            )
            sale = await uow.sales.create_sale(sale)

            applier = AllocationApplier(uow.ledger)
            for line, (_, plan) in zip(sale.lines, planned):
                line.allocations = await applier.apply(line.id, plan)  # type: ignore[arg-type]

            shipments = await SettlementAggregator(uow.ledger).settle_sale(sale)

            for line in sale.lines:
                if line.amount_paid:
                    await uow.sales.add_payment(
                        Payment(
                            sale_id=sale.id,  # type: ignore[arg-type]
                            sale_item_id=line.id,
                            amount=line.amount_paid,
                            payment_method=request.payment_method,
                            payment_date=sale_date,
                            notes="initial payment",
                        )
                    )

        return CreateSaleResult(sale=sale, shipments=shipments)

    async def _resolve_customer(self, uow: IUnitOfWork, name: str) -> Customer:
        customer = await uow.customers.get_by_name(name.strip())
        if customer is None:
            customer = await uow.customers.create_customer(Customer(name=name.strip()))
        return customer

    def to_response(self, result: CreateSaleResult) -> SaleResponse:
        """Convert result to API response."""
        return sale_to_response(result.sale)
