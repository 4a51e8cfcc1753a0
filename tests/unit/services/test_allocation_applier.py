"""Tests for applying allocation plans."""

from unittest.mock import AsyncMock

import pytest

from scentledger.core.entities import AllocationRecord
from scentledger.core.exceptions import (
    AllocationConflictError,
    AllocationWriteError,
    DatabaseError,
)
from scentledger.core.services.allocation_applier import AllocationApplier
from scentledger.core.services.fifo_allocator import plan_fifo


@pytest.fixture
def mock_ledger():
    ledger = AsyncMock()

    async def insert(record: AllocationRecord) -> AllocationRecord:
        return record.model_copy(update={"id": 100 + record.shipment_item_id})

    ledger.insert_allocation.side_effect = insert
    ledger.decrement_lot.return_value = True
    return ledger


class TestAllocationApplier:
    async def test_one_record_per_lot(self, mock_ledger, chanel_no5, two_lots):
        plan = plan_fifo(chanel_no5, 7, two_lots)
        records = await AllocationApplier(mock_ledger).apply(11, plan)

        assert [(r.shipment_item_id, r.quantity, r.unit_cost) for r in records] == [
            (1, 5, 10.0),
            (2, 2, 20.0),
        ]
        assert all(r.sale_item_id == 11 for r in records)
        assert [r.id for r in records] == [101, 102]
        assert mock_ledger.decrement_lot.await_args_list[0].args == (1, 5)
        assert mock_ledger.decrement_lot.await_args_list[1].args == (2, 2)

    async def test_records_carry_shipment(self, mock_ledger, chanel_no5, two_lots):
        plan = plan_fifo(chanel_no5, 7, two_lots)
        records = await AllocationApplier(mock_ledger).apply(11, plan)
        assert [r.shipment_id for r in records] == [1, 2]

    async def test_lost_race_raises_conflict(self, mock_ledger, chanel_no5, two_lots):
        mock_ledger.decrement_lot.side_effect = [True, False]
        plan = plan_fifo(chanel_no5, 7, two_lots)

        with pytest.raises(AllocationConflictError) as exc_info:
            await AllocationApplier(mock_ledger).apply(11, plan)
        assert exc_info.value.details == {"lot_id": 2, "requested": 2}

    async def test_write_failure_wrapped(self, mock_ledger, chanel_no5, two_lots):
        mock_ledger.insert_allocation.side_effect = DatabaseError("insert_allocation", "disk full")
        plan = plan_fifo(chanel_no5, 3, two_lots)

        with pytest.raises(AllocationWriteError) as exc_info:
            await AllocationApplier(mock_ledger).apply(11, plan)
        assert exc_info.value.details["reason"] == "disk full"
        mock_ledger.decrement_lot.assert_not_awaited()
