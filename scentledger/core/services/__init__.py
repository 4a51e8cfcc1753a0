"""Core allocation and settlement services."""

from scentledger.core.services.allocation_applier import AllocationApplier
from scentledger.core.services.fifo_allocator import FifoAllocator, plan_fifo
from scentledger.core.services.payments import (
    apply_line_payments,
    backfill_line_payments,
    pay_all,
)
from scentledger.core.services.settlement_aggregator import (
    SettlementAggregator,
    compute_deltas,
    totals_from_rows,
)

__all__ = [
    "FifoAllocator",
    "plan_fifo",
    "AllocationApplier",
    "SettlementAggregator",
    "compute_deltas",
    "totals_from_rows",
    "apply_line_payments",
    "backfill_line_payments",
    "pay_all",
]
