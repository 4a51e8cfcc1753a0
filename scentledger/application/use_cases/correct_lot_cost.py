"""
Correct Lot Cost Use Case.

Fix a lot's unit cost and everything derived from it.
"""

from collections.abc import Callable
from dataclasses import dataclass

from scentledger.application.dto.requests import CorrectLotCostRequest
from scentledger.application.dto.responses import CostCorrectionResponse
from scentledger.config import get_logger
from scentledger.core.entities.settlement import ShipmentTotals
from scentledger.core.exceptions import (
    LotNotFoundError,
    ShipmentNotFoundError,
    ValidationError,
)
from scentledger.core.interfaces.unit_of_work import IUnitOfWork
from scentledger.core.services.settlement_aggregator import SettlementAggregator

logger = get_logger(__name__)


@dataclass
class CostCorrectionResult:
    """Result of a lot cost correction."""

    lot_id: int
    shipment_id: int
    previous_unit_cost: float
    new_unit_cost: float
    allocations_updated: int
    previous_net_profit: float
    totals: ShipmentTotals

    @property
    def profit_impact(self) -> float:
        return self.totals.net_profit - self.previous_net_profit


class CorrectLotCostUseCase:
    """
    Change a lot's unit cost.

    Every allocation record drawn from the lot is rewritten to the new
    cost, the shipment's total_cost is rebuilt from its lots plus shipping
    and additional costs, and its settlement is fully recomputed.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork] | None = None):
        self._uow_factory = uow_factory

    def _get_uow_factory(self) -> Callable[[], IUnitOfWork]:
        if self._uow_factory is None:
            from scentledger.infrastructure.storage.sqlite import get_unit_of_work

            self._uow_factory = get_unit_of_work
        return self._uow_factory

    async def execute(self, request: CorrectLotCostRequest) -> CostCorrectionResult:
        """Execute cost correction."""
        async with self._get_uow_factory()() as uow:
            lot = await uow.ledger.get_lot(request.lot_id)
            if lot is None:
                raise LotNotFoundError(request.lot_id)
            if request.new_unit_cost == lot.unit_cost:
                raise ValidationError("new_unit_cost", "unchanged", request.new_unit_cost)

            shipment = await uow.ledger.get_shipment(lot.shipment_id)  # type: ignore[arg-type]
            if shipment is None:
                raise ShipmentNotFoundError(lot.shipment_id)  # type: ignore[arg-type]

            await uow.ledger.update_lot_cost(lot.id, request.new_unit_cost)  # type: ignore[arg-type]
            updated = await uow.ledger.rewrite_allocation_costs(lot.id, request.new_unit_cost)  # type: ignore[arg-type]

            for shipment_lot in shipment.lots:
                if shipment_lot.id == lot.id:
                    shipment_lot.unit_cost = request.new_unit_cost

            totals = await SettlementAggregator(uow.ledger).recompute(
                shipment.id,  # type: ignore[arg-type]
                total_cost=shipment.compute_total_cost(),
            )

        result = CostCorrectionResult(
            lot_id=lot.id,  # type: ignore[arg-type]
            shipment_id=shipment.id,  # type: ignore[arg-type]
            previous_unit_cost=lot.unit_cost,
            new_unit_cost=request.new_unit_cost,
            allocations_updated=updated,
            previous_net_profit=shipment.net_profit,
            totals=totals,
        )
        logger.info(
            "lot_cost_corrected",
            lot_id=result.lot_id,
            shipment_id=result.shipment_id,
            previous_unit_cost=result.previous_unit_cost,
            new_unit_cost=result.new_unit_cost,
            allocations_updated=updated,
            profit_impact=result.profit_impact,
        )
        return result

    def to_response(self, result: CostCorrectionResult) -> CostCorrectionResponse:
        """Convert result to API response."""
        return CostCorrectionResponse(
            lot_id=result.lot_id,
            shipment_id=result.shipment_id,
            previous_unit_cost=result.previous_unit_cost,
            new_unit_cost=result.new_unit_cost,
            allocations_updated=result.allocations_updated,
            previous_net_profit=result.previous_net_profit,
            net_profit=result.totals.net_profit,
            profit_impact=result.profit_impact,
        )
