"""
Settlement aggregator.

Keeps shipment revenue, cost of goods sold and profit in step with the
allocation records drawn from the shipment's lots. Totals are USD; sales
in DOP are converted at the rate frozen on the sale.
"""

from scentledger.config import get_logger
from scentledger.core.entities.sale import Sale
from scentledger.core.entities.settlement import (
    SettlementDelta,
    SettlementRow,
    ShipmentTotals,
)
from scentledger.core.entities.shipment import Shipment
from scentledger.core.exceptions import ShipmentNotFoundError
from scentledger.core.interfaces.ledger_store import ILedgerStore

logger = get_logger(__name__)


def compute_deltas(sale: Sale) -> dict[int, SettlementDelta]:
    """Group a sale's allocations by owning shipment."""
    deltas: dict[int, SettlementDelta] = {}
    for line in sale.lines:
        for record in line.allocations:
            if record.shipment_id is None:
                continue
            delta = deltas.setdefault(
                record.shipment_id, SettlementDelta(shipment_id=record.shipment_id)
            )
            delta.units += record.quantity
            delta.revenue_delta += sale.to_usd(record.quantity * line.unit_price)
            delta.cost_delta += record.cost
    return deltas


def totals_from_rows(shipment: Shipment, rows: list[SettlementRow]) -> ShipmentTotals:
    """Aggregate a shipment from scratch."""
    revenue = sum(row.revenue_usd for row in rows)
    cogs = sum(row.cost for row in rows)
    return ShipmentTotals(
        shipment_id=shipment.id,
        total_cost=shipment.total_cost,
        total_revenue=revenue,
        cost_of_goods_sold=cogs,
        net_profit=revenue - shipment.total_cost,
    )


class SettlementAggregator:
    """Writes shipment aggregates incrementally or by full recompute."""

    def __init__(self, ledger: ILedgerStore):
        self._ledger = ledger

    async def _get_shipment(self, shipment_id: int) -> Shipment:
        shipment = await self._ledger.get_shipment(shipment_id)
        if shipment is None:
            raise ShipmentNotFoundError(shipment_id)
        return shipment

    async def apply_delta(self, delta: SettlementDelta) -> ShipmentTotals:
        """
        Add a delta to stored aggregates.

        net_profit is recomputed from total_revenue and total_cost,
        never incremented.
        """
        shipment = await self._get_shipment(delta.shipment_id)
        total_revenue = shipment.total_revenue + delta.revenue_delta
        totals = ShipmentTotals(
            shipment_id=delta.shipment_id,
            total_cost=shipment.total_cost,
            total_revenue=total_revenue,
            cost_of_goods_sold=shipment.cost_of_goods_sold + delta.cost_delta,
            net_profit=total_revenue - shipment.total_cost,
        )
        await self._ledger.update_shipment_aggregates(totals)

        logger.info(
            "settlement_applied",
            shipment_id=delta.shipment_id,
            units=delta.units,
            revenue_delta=delta.revenue_delta,
            cost_delta=delta.cost_delta,
            net_profit=totals.net_profit,
        )
        return totals

    async def settle_sale(self, sale: Sale) -> list[ShipmentTotals]:
        """Apply the deltas of a freshly allocated sale to every touched shipment."""
        deltas = compute_deltas(sale)
        return [await self.apply_delta(deltas[sid]) for sid in sorted(deltas)]

    async def compute(self, shipment_id: int, total_cost: float | None = None) -> ShipmentTotals:
        """
        Recompute a shipment's aggregates from its allocation records.

        Reads only stored data; the sale's frozen exchange rate is used for
        DOP revenue. Nothing is written.
        """
        shipment = await self._get_shipment(shipment_id)
        if total_cost is not None:
            shipment.total_cost = total_cost
        rows = await self._ledger.list_settlement_rows(shipment_id)
        return totals_from_rows(shipment, rows)

    async def recompute(self, shipment_id: int, total_cost: float | None = None) -> ShipmentTotals:
        """Full recompute, written back to the shipment."""
        totals = await self.compute(shipment_id, total_cost=total_cost)
        await self._ledger.update_shipment_aggregates(totals)
        logger.info(
            "settlement_recomputed",
            shipment_id=shipment_id,
            total_revenue=totals.total_revenue,
            net_profit=totals.net_profit,
        )
        return totals
