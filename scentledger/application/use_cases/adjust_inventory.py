"""
Adjust Inventory Use Case.

Manual lot count corrections.
"""

from collections.abc import Callable
from dataclasses import dataclass

from scentledger.application.dto.requests import AdjustInventoryRequest
from scentledger.application.dto.responses import AdjustmentResponse
from scentledger.config import get_logger
from scentledger.core.entities.shipment import InventoryAdjustment, ShipmentLot
from scentledger.core.exceptions import InvalidAdjustmentError, LotNotFoundError
from scentledger.core.interfaces.unit_of_work import IUnitOfWork

logger = get_logger(__name__)


@dataclass
class AdjustInventoryResult:
    """Result of adjusting a lot."""

    lot: ShipmentLot
    adjustment: InventoryAdjustment


class AdjustInventoryUseCase:
    """
    Apply a signed correction to a lot's remaining inventory.

    Going below zero is always rejected. Going above the lot's original
    quantity is rejected unless the caller confirms it.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork] | None = None):
        self._uow_factory = uow_factory

    def _get_uow_factory(self) -> Callable[[], IUnitOfWork]:
        if self._uow_factory is None:
            from scentledger.infrastructure.storage.sqlite import get_unit_of_work

            self._uow_factory = get_unit_of_work
        return self._uow_factory

    async def execute(self, request: AdjustInventoryRequest) -> AdjustInventoryResult:
        """Execute adjustment."""
        async with self._get_uow_factory()() as uow:
            lot = await uow.ledger.get_lot(request.lot_id)
            if lot is None:
                raise LotNotFoundError(request.lot_id)

            previous = lot.remaining_inventory or 0
            new_remaining = previous + request.adjustment_quantity

            if new_remaining < 0:
                raise InvalidAdjustmentError(
                    lot.id,  # type: ignore[arg-type]
                    f"would leave {new_remaining} units (only {previous} remaining)",
                )
            if new_remaining > lot.quantity and not request.confirm_exceeds_original:
                raise InvalidAdjustmentError(
                    lot.id,  # type: ignore[arg-type]
                    f"{new_remaining} units exceeds original quantity {lot.quantity}",
                    requires_confirmation=True,
                )

            if not await uow.ledger.compare_and_set_remaining(lot.id, previous, new_remaining):  # type: ignore[arg-type]
                raise InvalidAdjustmentError(
                    lot.id,  # type: ignore[arg-type]
                    "remaining inventory changed during the adjustment",
                )
            lot.remaining_inventory = new_remaining

            adjustment = await uow.ledger.add_adjustment(
                InventoryAdjustment(
                    shipment_item_id=lot.id,  # type: ignore[arg-type]
                    adjustment_quantity=request.adjustment_quantity,
                    previous_remaining=previous,
                    new_remaining=new_remaining,
                    reason=request.reason,
                    adjusted_by=request.adjusted_by,
                )
            )

        logger.info(
            "inventory_adjusted",
            lot_id=lot.id,
            delta=request.adjustment_quantity,
            previous=previous,
            remaining=new_remaining,
            reason=request.reason,
        )
        return AdjustInventoryResult(lot=lot, adjustment=adjustment)

    def to_response(self, result: AdjustInventoryResult) -> AdjustmentResponse:
        """Convert result to API response."""
        adj = result.adjustment
        return AdjustmentResponse(
            id=adj.id,  # type: ignore[arg-type]
            lot_id=adj.shipment_item_id,
            adjustment_quantity=adj.adjustment_quantity,
            previous_remaining=adj.previous_remaining,
            new_remaining=adj.new_remaining,
            reason=adj.reason,
            adjusted_by=adj.adjusted_by,
            created_at=adj.created_at,
        )
