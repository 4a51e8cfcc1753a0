"""
FIFO allocator.

Decides which lots supply a quantity of a product, oldest lot first.
Planning never writes; the plan is applied by AllocationApplier.
"""

from scentledger.config import get_logger
from scentledger.core.entities.allocation import (
    AllocationPlan,
    AvailableLot,
    PlannedAllocation,
)
from scentledger.core.entities.product import ProductIdentity
from scentledger.core.exceptions import InsufficientInventoryError, ValidationError
from scentledger.core.interfaces.ledger_store import ILedgerStore

logger = get_logger(__name__)


def plan_fifo(
    identity: ProductIdentity,
    quantity_needed: int,
    lots: list[AvailableLot],
    reserved: dict[int, int] | None = None,
) -> AllocationPlan:
    """
    Walk lots oldest-first taking min(remaining, still_needed) from each.

    Args:
        identity: Product being sold
        quantity_needed: Units to cover, must be positive
        lots: Lots with stock, in any order
        reserved: Units per lot already promised to earlier lines of the
            same sale; subtracted from each lot's remaining quantity

    Returns:
        AllocationPlan whose quantities sum exactly to quantity_needed

    Raises:
        InsufficientInventoryError: If all lots together hold less than
            quantity_needed (including when there are no lots at all)
    """
    if quantity_needed <= 0:
        raise ValidationError("quantity", "must be greater than 0", quantity_needed)

    reserved = reserved or {}
    ordered = sorted(lots, key=lambda lot: (lot.arrival_key, lot.shipment_id, lot.lot_id))
    free = [
        (lot, lot.remaining_quantity - reserved.get(lot.lot_id, 0))
        for lot in ordered
    ]
    available = sum(qty for _, qty in free if qty > 0)

    if available < quantity_needed:
        raise InsufficientInventoryError(
            identity=str(identity),
            needed=quantity_needed,
            available=available,
        )

    plan = AllocationPlan(identity=identity, quantity_needed=quantity_needed)
    still_needed = quantity_needed
    for lot, qty in free:
        if still_needed == 0:
            break
        if qty <= 0:
            continue
        taken = min(qty, still_needed)
        plan.allocations.append(
            PlannedAllocation(
                lot_id=lot.lot_id,
                shipment_id=lot.shipment_id,
                quantity=taken,
                unit_cost=lot.unit_cost,
            )
        )
        plan.total_cost += taken * lot.unit_cost
        still_needed -= taken

    return plan


class FifoAllocator:
    """Plans allocations against a fresh read of the ledger."""

    def __init__(self, ledger: ILedgerStore):
        self._ledger = ledger

    async def allocate(
        self,
        identity: ProductIdentity,
        quantity_needed: int,
        reserved: dict[int, int] | None = None,
    ) -> AllocationPlan:
        """
        Plan an allocation for one product line.

        When reserved is given, the planned quantities are added to it so
        later lines of the same sale see what this one took.
        """
        lots = await self._ledger.get_available_inventory(identity)
        plan = plan_fifo(identity, quantity_needed, lots, reserved)

        if reserved is not None:
            for entry in plan.allocations:
                reserved[entry.lot_id] = reserved.get(entry.lot_id, 0) + entry.quantity

        logger.debug(
            "allocation_planned",
            product=str(identity),
            quantity=quantity_needed,
            lots=[entry.lot_id for entry in plan.allocations],
            total_cost=plan.total_cost,
        )
        return plan
