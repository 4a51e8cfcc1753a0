"""
Reconcile Shipment Use Case.

Compare stored aggregates to a full recompute.
"""

from collections.abc import Callable
from dataclasses import dataclass

from scentledger.application.dto.mappers import totals_to_response
from scentledger.application.dto.responses import (
    ReconciledShipmentResponse,
    ReconciliationResponse,
)
from scentledger.config import get_logger
from scentledger.core.entities.settlement import ShipmentTotals
from scentledger.core.exceptions import ShipmentNotFoundError
from scentledger.core.interfaces.unit_of_work import IUnitOfWork
from scentledger.core.services.settlement_aggregator import SettlementAggregator

logger = get_logger(__name__)

_PAGE = 500


@dataclass
class ReconciledShipment:
    """Stored and recomputed aggregates of one shipment."""

    shipment_id: int
    stored: ShipmentTotals
    recomputed: ShipmentTotals
    drift: dict[str, float]
    written: bool = False


class ReconcileShipmentUseCase:
    """Recompute shipment aggregates from allocation records and report drift."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork] | None = None):
        self._uow_factory = uow_factory

    def _get_uow_factory(self) -> Callable[[], IUnitOfWork]:
        if self._uow_factory is None:
            from scentledger.infrastructure.storage.sqlite import get_unit_of_work

            self._uow_factory = get_unit_of_work
        return self._uow_factory

    async def execute(
        self, shipment_id: int | None = None, write: bool = False
    ) -> list[ReconciledShipment]:
        """
        Reconcile one shipment, or every shipment when shipment_id is None.

        Args:
            shipment_id: Shipment to check
            write: Store the recomputed aggregates where they drifted
        """
        results: list[ReconciledShipment] = []

        async with self._get_uow_factory()() as uow:
            if shipment_id is not None:
                ids = [shipment_id]
            else:
                ids = []
                offset = 0
                while True:
                    page = await uow.ledger.list_shipments(limit=_PAGE, offset=offset)
                    ids.extend(s.id for s in page)  # type: ignore[misc]
                    if len(page) < _PAGE:
                        break
                    offset += _PAGE

            aggregator = SettlementAggregator(uow.ledger)
            for sid in ids:
                shipment = await uow.ledger.get_shipment(sid)
                if shipment is None:
                    raise ShipmentNotFoundError(sid)

                stored = ShipmentTotals(
                    shipment_id=sid,
                    total_cost=shipment.total_cost,
                    total_revenue=shipment.total_revenue,
                    cost_of_goods_sold=shipment.cost_of_goods_sold,
                    net_profit=shipment.net_profit,
                )
                recomputed = await aggregator.compute(sid, total_cost=shipment.compute_total_cost())
                drift = recomputed.drift_from(stored)

                written = False
                if drift and write:
                    await uow.ledger.update_shipment_aggregates(recomputed)
                    written = True
                if drift:
                    logger.warning("shipment_drift_detected", shipment_id=sid, drift=drift, written=written)

                results.append(
                    ReconciledShipment(
                        shipment_id=sid,
                        stored=stored,
                        recomputed=recomputed,
                        drift=drift,
                        written=written,
                    )
                )

        logger.info(
            "reconciliation_complete",
            shipments=len(results),
            drifted=sum(1 for r in results if r.drift),
        )
        return results

    def to_response(self, results: list[ReconciledShipment]) -> ReconciliationResponse:
        """Convert result to API response."""
        return ReconciliationResponse(
            shipments=[
                ReconciledShipmentResponse(
                    shipment_id=r.shipment_id,
                    stored=totals_to_response(r.stored),
                    recomputed=totals_to_response(r.recomputed),
                    drift=r.drift,
                    written=r.written,
                )
                for r in results
            ],
            drifted=sum(1 for r in results if r.drift),
        )
