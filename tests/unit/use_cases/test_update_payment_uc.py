"""Tests for UpdatePaymentUseCase."""

from datetime import date

import pytest

from scentledger.application.dto.requests import PayAllRequest, UpdatePaymentRequest
from scentledger.application.use_cases import UpdatePaymentUseCase
from scentledger.core.entities import PaymentStatus, Sale, SaleLine
from scentledger.core.exceptions import PaymentExceedsTotalError, SaleNotFoundError


@pytest.fixture
def sale(chanel_no5) -> Sale:
    return Sale(
        id=1,
        exchange_rate_used=60.0,
        amount_paid=10.0,
        lines=[
            SaleLine(id=11, identity=chanel_no5, quantity=2, unit_price=40.0, amount_paid=10.0),
            SaleLine(id=12, identity=chanel_no5, quantity=1, unit_price=20.0, amount_paid=0.0),
        ],
    )


@pytest.fixture
def use_case(uow, uow_factory, sale):
    uow.sales.get_sale.return_value = sale
    uow.sales.update_payments.side_effect = lambda s: s
    uow.sales.add_payment.side_effect = lambda p: p.model_copy(update={"id": 1})
    return UpdatePaymentUseCase(uow_factory=uow_factory)


class TestUpdatePaymentUseCase:
    async def test_line_payment(self, use_case, uow):
        request = UpdatePaymentRequest(
            payments=[{"sale_item_id": 12, "amount": 20.0}],
            payment_method="transfer",
            payment_date="2024-03-01",
        )
        result = await use_case.execute(1, request)

        assert result.sale.amount_paid == 30.0
        assert result.sale.outstanding_balance == 70.0
        assert result.sale.payment_status == PaymentStatus.PARTIAL
        assert result.sale.payment_method == "transfer"

        assert len(result.payments) == 1
        payment = result.payments[0]
        assert payment.sale_item_id == 12
        assert payment.payment_date == date(2024, 3, 1)
        uow.sales.update_payments.assert_awaited_once()

    async def test_overpayment_rolls_back(self, use_case, uow):
        request = UpdatePaymentRequest(payments=[{"sale_item_id": 11, "amount": 75.0}])
        with pytest.raises(PaymentExceedsTotalError):
            await use_case.execute(1, request)
        uow.sales.update_payments.assert_not_awaited()
        assert uow.rolled_back == 1

    async def test_missing_sale(self, use_case, uow):
        uow.sales.get_sale.return_value = None
        with pytest.raises(SaleNotFoundError):
            await use_case.execute(9, UpdatePaymentRequest(payments=[{"sale_item_id": 1, "amount": 1.0}]))

    async def test_pay_all(self, use_case):
        result = await use_case.pay_all(1, PayAllRequest(payment_method="cash"))

        assert result.sale.payment_status == PaymentStatus.PAID
        assert result.sale.outstanding_balance == 0.0
        assert sorted((p.sale_item_id, p.amount) for p in result.payments) == [(11, 70.0), (12, 20.0)]

    async def test_response(self, use_case):
        result = await use_case.pay_all(1)
        response = use_case.to_response(result)
        assert response.sale.payment_status == "paid"
        assert len(response.payments) == 2

    def test_duplicate_lines_rejected(self):
        with pytest.raises(ValueError):
            UpdatePaymentRequest(
                payments=[{"sale_item_id": 1, "amount": 1.0}, {"sale_item_id": 1, "amount": 2.0}]
            )
