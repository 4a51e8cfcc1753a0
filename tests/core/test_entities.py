"""Unit tests for domain entities."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from scentledger.core.entities import (
    AllocationRecord,
    Currency,
    PaymentStatus,
    ProductIdentity,
    Sale,
    SaleLine,
    SettlementRow,
    Shipment,
    ShipmentLot,
    ShipmentStatus,
    ShipmentTotals,
    derive_payment_status,
    round_money,
)


class TestProductIdentity:
    def test_strips_whitespace(self):
        identity = ProductIdentity(brand="  Dior ", name=" Sauvage", size="100ml ")
        assert identity == ProductIdentity(brand="Dior", name="Sauvage", size="100ml")

    def test_str_skips_empty_size(self):
        assert str(ProductIdentity(brand="Dior", name="Sauvage")) == "Dior Sauvage"

    def test_brand_required(self):
        with pytest.raises(PydanticValidationError):
            ProductIdentity(brand="", name="Sauvage")

    def test_hashable(self):
        a = ProductIdentity(brand="Dior", name="Sauvage", size="60ml")
        b = ProductIdentity(brand="Dior", name="Sauvage", size="60ml")
        assert len({a, b}) == 1


class TestShipment:
    def test_lot_remaining_defaults_to_quantity(self):
        lot = ShipmentLot(quantity=12, unit_cost=8.5)
        assert lot.remaining_inventory == 12
        assert lot.sold_quantity == 0

    def test_lot_rejects_negative_remaining(self):
        with pytest.raises(PydanticValidationError):
            ShipmentLot(quantity=5, unit_cost=1.0, remaining_inventory=-1)

    def test_total_cost_includes_shipping_and_additional(self):
        shipment = Shipment(
            shipment_number="SH-1",
            shipping_cost=40.0,
            additional_costs=10.0,
            lots=[
                ShipmentLot(quantity=10, unit_cost=5.0),
                ShipmentLot(quantity=10, unit_cost=8.0),
            ],
        )
        assert shipment.compute_total_cost() == pytest.approx(180.0)

    def test_remaining_units(self):
        shipment = Shipment(
            shipment_number="SH-2",
            lots=[
                ShipmentLot(quantity=10, unit_cost=5.0, remaining_inventory=3),
                ShipmentLot(quantity=4, unit_cost=8.0),
            ],
        )
        assert shipment.remaining_units == 7


class TestShipmentStatus:
    def test_forward_only(self):
        assert ShipmentStatus.PREPARING.can_transition_to(ShipmentStatus.SHIPPED)
        assert ShipmentStatus.SHIPPED.can_transition_to(ShipmentStatus.SETTLED)
        assert not ShipmentStatus.DELIVERED.can_transition_to(ShipmentStatus.SHIPPED)
        assert not ShipmentStatus.SETTLED.can_transition_to(ShipmentStatus.SETTLED)


class TestPaymentStatus:
    @pytest.mark.parametrize(
        ("total", "paid", "expected"),
        [
            (100.0, 0.0, PaymentStatus.LAYAWAY),
            (100.0, 40.0, PaymentStatus.PARTIAL),
            (100.0, 100.0, PaymentStatus.PAID),
            (100.0, 99.999, PaymentStatus.PAID),
            (0.0, 0.0, PaymentStatus.PAID),
        ],
    )
    def test_derive(self, total, paid, expected):
        assert derive_payment_status(total, paid) == expected

    def test_round_money(self):
        assert round_money(10.005 + 0.001) == 10.01
        assert round_money(-0.0) == 0.0


class TestSale:
    def _line(self, identity, quantity=2, price=50.0, paid=None):
        return SaleLine(identity=identity, quantity=quantity, unit_price=price, amount_paid=paid)

    def test_line_total_computed(self, chanel_no5):
        line = self._line(chanel_no5, quantity=3, price=19.99)
        assert line.line_total == 59.97

    def test_totals_and_outstanding(self, chanel_no5):
        sale = Sale(
            exchange_rate_used=60.0,
            amount_paid=30.0,
            lines=[self._line(chanel_no5), self._line(chanel_no5, quantity=1, price=20.0)],
        )
        assert sale.total_amount == 120.0
        assert sale.outstanding_balance == 90.0
        assert sale.payment_status == PaymentStatus.PARTIAL
        assert sale.outstanding_balance + sale.amount_paid == sale.total_amount

    def test_compute_totals_rederives(self, chanel_no5):
        sale = Sale(exchange_rate_used=60.0, lines=[self._line(chanel_no5)])
        sale.amount_paid = 100.0
        sale.compute_totals()
        assert sale.payment_status == PaymentStatus.PAID
        assert sale.outstanding_balance == 0.0

    def test_rate_must_be_positive(self, chanel_no5):
        with pytest.raises(PydanticValidationError):
            Sale(exchange_rate_used=0, lines=[self._line(chanel_no5)])

    def test_dop_converted_at_frozen_rate(self, chanel_no5):
        sale = Sale(
            currency=Currency.DOP,
            exchange_rate_used=60.0,
            lines=[self._line(chanel_no5, quantity=1, price=1200.0)],
        )
        assert sale.to_usd(sale.total_amount) == pytest.approx(20.0)

    def test_cost_and_profit(self, allocated_sale):
        assert allocated_sale.total_cost == pytest.approx(90.0)
        assert allocated_sale.profit_usd == pytest.approx(210.0 - 90.0)

    def test_get_line(self, allocated_sale):
        assert allocated_sale.get_line(11) is allocated_sale.lines[0]
        assert allocated_sale.get_line(12) is None


class TestAllocationRecord:
    def test_cost(self):
        record = AllocationRecord(sale_item_id=1, shipment_item_id=2, quantity=3, unit_cost=7.5)
        assert record.cost == 22.5

    def test_quantity_positive(self):
        with pytest.raises(PydanticValidationError):
            AllocationRecord(sale_item_id=1, shipment_item_id=2, quantity=0, unit_cost=7.5)


class TestSettlement:
    def test_row_converts_dop(self):
        row = SettlementRow(quantity=2, unit_cost=10.0, unit_price=1500.0, currency="DOP", exchange_rate_used=60.0)
        assert row.revenue_usd == pytest.approx(50.0)
        assert row.cost == 20.0

    def test_row_usd_untouched(self):
        row = SettlementRow(quantity=2, unit_cost=10.0, unit_price=25.0, currency="USD", exchange_rate_used=60.0)
        assert row.revenue_usd == 50.0

    def test_drift_ignores_sub_cent_noise(self):
        a = ShipmentTotals(shipment_id=1, total_cost=100, total_revenue=300.001, cost_of_goods_sold=90, net_profit=200.001)
        b = ShipmentTotals(shipment_id=1, total_cost=100, total_revenue=300.0, cost_of_goods_sold=90, net_profit=200.0)
        assert a.drift_from(b) == {}

    def test_drift_reports_fields(self):
        a = ShipmentTotals(shipment_id=1, total_cost=100, total_revenue=320, cost_of_goods_sold=90, net_profit=220)
        b = ShipmentTotals(shipment_id=1, total_cost=100, total_revenue=300, cost_of_goods_sold=90, net_profit=200)
        assert a.drift_from(b) == {"total_revenue": 20, "net_profit": 20}
