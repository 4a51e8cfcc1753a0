"""Tests for shipment settlement."""

from unittest.mock import AsyncMock

import pytest

from scentledger.core.entities import (
    AllocationRecord,
    Currency,
    Sale,
    SaleLine,
    SettlementDelta,
    SettlementRow,
    Shipment,
    ShipmentLot,
)
from scentledger.core.exceptions import ShipmentNotFoundError
from scentledger.core.services.settlement_aggregator import (
    SettlementAggregator,
    compute_deltas,
    totals_from_rows,
)


def _shipment(shipment_id=1, total_cost=160.0, revenue=0.0, cogs=0.0):
    return Shipment(
        id=shipment_id,
        shipment_number=f"SH-{shipment_id}",
        total_cost=total_cost,
        total_revenue=revenue,
        cost_of_goods_sold=cogs,
        net_profit=revenue - total_cost,
        lots=[ShipmentLot(id=1, quantity=10, unit_cost=5.0), ShipmentLot(id=2, quantity=10, unit_cost=8.0)],
    )


class TestComputeDeltas:
    def test_groups_by_shipment(self, allocated_sale):
        deltas = compute_deltas(allocated_sale)
        assert set(deltas) == {1, 2}
        assert deltas[1].units == 5
        assert deltas[1].revenue_delta == pytest.approx(150.0)
        assert deltas[1].cost_delta == pytest.approx(50.0)
        assert deltas[2].revenue_delta == pytest.approx(60.0)
        assert deltas[2].cost_delta == pytest.approx(40.0)

    def test_dop_revenue_uses_frozen_rate(self, chanel_no5):
        line = SaleLine(
            id=1,
            identity=chanel_no5,
            quantity=2,
            unit_price=1800.0,
            allocations=[AllocationRecord(sale_item_id=1, shipment_item_id=1, shipment_id=1, quantity=2, unit_cost=10.0)],
        )
        sale = Sale(currency=Currency.DOP, exchange_rate_used=60.0, lines=[line])
        assert compute_deltas(sale)[1].revenue_delta == pytest.approx(60.0)

    def test_multiple_lines_same_shipment(self, chanel_no5):
        lines = [
            SaleLine(
                id=i,
                identity=chanel_no5,
                quantity=1,
                unit_price=20.0,
                allocations=[AllocationRecord(sale_item_id=i, shipment_item_id=1, shipment_id=1, quantity=1, unit_cost=5.0)],
            )
            for i in (1, 2)
        ]
        delta = compute_deltas(Sale(exchange_rate_used=1.0, lines=lines))[1]
        assert delta.units == 2
        assert delta.revenue_delta == pytest.approx(40.0)


class TestTotalsFromRows:
    def test_profit_is_revenue_minus_total_cost(self):
        rows = [
            SettlementRow(quantity=10, unit_cost=5.0, unit_price=20.0, currency="USD", exchange_rate_used=60.0),
            SettlementRow(quantity=5, unit_cost=8.0, unit_price=20.0, currency="USD", exchange_rate_used=60.0),
        ]
        totals = totals_from_rows(_shipment(), rows)
        assert totals.total_revenue == pytest.approx(300.0)
        assert totals.cost_of_goods_sold == pytest.approx(90.0)
        assert totals.net_profit == pytest.approx(140.0)

    def test_no_sales(self):
        totals = totals_from_rows(_shipment(), [])
        assert totals.total_revenue == 0.0
        assert totals.net_profit == pytest.approx(-160.0)


class TestSettlementAggregator:
    async def test_apply_delta_accumulates(self):
        ledger = AsyncMock()
        ledger.get_shipment.return_value = _shipment(revenue=100.0, cogs=30.0)
        aggregator = SettlementAggregator(ledger)

        totals = await aggregator.apply_delta(
            SettlementDelta(shipment_id=1, units=3, revenue_delta=60.0, cost_delta=24.0)
        )

        assert totals.total_revenue == pytest.approx(160.0)
        assert totals.cost_of_goods_sold == pytest.approx(54.0)
        assert totals.net_profit == pytest.approx(0.0)
        ledger.update_shipment_aggregates.assert_awaited_once_with(totals)

    async def test_apply_delta_unknown_shipment(self):
        ledger = AsyncMock()
        ledger.get_shipment.return_value = None
        with pytest.raises(ShipmentNotFoundError):
            await SettlementAggregator(ledger).apply_delta(SettlementDelta(shipment_id=7))

    async def test_settle_sale_touches_every_shipment(self, allocated_sale):
        ledger = AsyncMock()
        ledger.get_shipment.side_effect = lambda sid: _shipment(shipment_id=sid, total_cost=100.0)
        totals = await SettlementAggregator(ledger).settle_sale(allocated_sale)

        assert [t.shipment_id for t in totals] == [1, 2]
        assert ledger.update_shipment_aggregates.await_count == 2

    async def test_compute_does_not_write(self):
        ledger = AsyncMock()
        ledger.get_shipment.return_value = _shipment()
        ledger.list_settlement_rows.return_value = [
            SettlementRow(quantity=1, unit_cost=5.0, unit_price=20.0, currency="USD", exchange_rate_used=1.0)
        ]
        totals = await SettlementAggregator(ledger).compute(1, total_cost=170.0)

        assert totals.total_cost == 170.0
        assert totals.net_profit == pytest.approx(-150.0)
        ledger.update_shipment_aggregates.assert_not_awaited()

    async def test_recompute_writes(self):
        ledger = AsyncMock()
        ledger.get_shipment.return_value = _shipment(revenue=999.0)
        ledger.list_settlement_rows.return_value = []
        totals = await SettlementAggregator(ledger).recompute(1)

        assert totals.total_revenue == 0.0
        ledger.update_shipment_aggregates.assert_awaited_once_with(totals)
