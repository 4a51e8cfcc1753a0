"""
Allocation applier.

Writes an allocation plan: one provenance record per lot touched, then a
conditional decrement of the lot. Must run inside a unit of work so a
failure on a later lot rolls back the earlier ones.
"""

from scentledger.config import get_logger
from scentledger.core.entities.allocation import AllocationPlan, AllocationRecord
from scentledger.core.exceptions import (
    AllocationConflictError,
    AllocationWriteError,
    DatabaseError,
)
from scentledger.core.interfaces.ledger_store import ILedgerStore

logger = get_logger(__name__)


class AllocationApplier:
    """Persists allocation records and takes the units from their lots."""

    def __init__(self, ledger: ILedgerStore):
        self._ledger = ledger

    async def apply(self, sale_item_id: int, plan: AllocationPlan) -> list[AllocationRecord]:
        """
        Apply a plan for one sale line.

        The unit cost written is the one captured at planning time.

        Raises:
            AllocationConflictError: A lot no longer holds the planned units
            AllocationWriteError: The record insert or decrement was rejected
        """
        records: list[AllocationRecord] = []

        for entry in plan.allocations:
            record = AllocationRecord(
                sale_item_id=sale_item_id,
                shipment_item_id=entry.lot_id,
                shipment_id=entry.shipment_id,
                quantity=entry.quantity,
                unit_cost=entry.unit_cost,
            )
            try:
                record = await self._ledger.insert_allocation(record)
                taken = await self._ledger.decrement_lot(entry.lot_id, entry.quantity)
            except DatabaseError as e:
                logger.error(
                    "allocation_write_failed",
                    sale_item_id=sale_item_id,
                    lot_id=entry.lot_id,
                    error=e.message,
                )
                raise AllocationWriteError(entry.lot_id, e.details.get("error", e.message)) from e

            if not taken:
                logger.warning(
                    "lot_conflict",
                    sale_item_id=sale_item_id,
                    lot_id=entry.lot_id,
                    requested=entry.quantity,
                )
                raise AllocationConflictError(entry.lot_id, entry.quantity)

            records.append(record)

        logger.info(
            "allocation_applied",
            sale_item_id=sale_item_id,
            product=str(plan.identity),
            lots=len(records),
            quantity=plan.allocated_quantity,
            cost=plan.total_cost,
        )
        return records
