"""
Update Shipment Status Use Case.

Forward-only lifecycle.
"""

from collections.abc import Callable
from datetime import date

from scentledger.application.dto.mappers import shipment_to_response
from scentledger.application.dto.responses import ShipmentResponse
from scentledger.config import get_logger
from scentledger.core.entities.shipment import Shipment, ShipmentStatus
from scentledger.core.exceptions import ShipmentNotFoundError, ShipmentStatusError
from scentledger.core.interfaces.unit_of_work import IUnitOfWork
from scentledger.core.services.settlement_aggregator import SettlementAggregator

logger = get_logger(__name__)


class UpdateShipmentStatusUseCase:
    """
    Move a shipment preparing -> shipped -> delivered -> settled.

    Entering shipped or delivered stamps the date if none is set. Settling
    refreshes the aggregates from the allocation records one last time.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork] | None = None):
        self._uow_factory = uow_factory

    def _get_uow_factory(self) -> Callable[[], IUnitOfWork]:
        if self._uow_factory is None:
            from scentledger.infrastructure.storage.sqlite import get_unit_of_work

            self._uow_factory = get_unit_of_work
        return self._uow_factory

    async def execute(self, shipment_id: int, status: ShipmentStatus) -> Shipment:
        """Execute status transition."""
        async with self._get_uow_factory()() as uow:
            shipment = await uow.ledger.get_shipment(shipment_id)
            if shipment is None:
                raise ShipmentNotFoundError(shipment_id)

            if not shipment.status.can_transition_to(status):
                raise ShipmentStatusError(shipment_id, shipment.status.value, status.value)

            today = date.today()
            if status.rank >= ShipmentStatus.SHIPPED.rank and shipment.shipped_date is None:
                shipment.shipped_date = today
            if status.rank >= ShipmentStatus.DELIVERED.rank and shipment.delivered_date is None:
                shipment.delivered_date = today

            previous = shipment.status
            shipment.status = status
            shipment = await uow.ledger.update_shipment_status(shipment)

            if status == ShipmentStatus.SETTLED:
                totals = await SettlementAggregator(uow.ledger).recompute(shipment_id)
                shipment.total_revenue = totals.total_revenue
                shipment.cost_of_goods_sold = totals.cost_of_goods_sold
                shipment.net_profit = totals.net_profit

        logger.info(
            "shipment_status_changed",
            shipment_id=shipment_id,
            previous=previous.value,
            status=status.value,
        )
        return shipment

    def to_response(self, shipment: Shipment) -> ShipmentResponse:
        """Convert result to API response."""
        return shipment_to_response(shipment)
