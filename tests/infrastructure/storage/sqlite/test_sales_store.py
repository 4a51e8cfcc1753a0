"""Tests for SQLite sales and catalog stores."""

from datetime import date

import pytest

from scentledger.core.entities import (
    AllocationRecord,
    Currency,
    Customer,
    Payment,
    PaymentStatus,
    Product,
    ProductIdentity,
    Sale,
    SaleLine,
)


@pytest.fixture
async def customer(customers) -> Customer:
    return await customers.create_customer(Customer(name="Ana Pérez", phone="809-555-0101"))


def _sale(product, customer, paid=(0.0, 0.0), currency=Currency.USD) -> Sale:
    return Sale(
        customer_id=customer.id,
        sale_date=date(2024, 6, 15),
        currency=currency,
        exchange_rate_used=58.5,
        amount_paid=sum(p or 0.0 for p in paid),
        lines=[
            SaleLine(product_id=product.id, identity=product.identity, quantity=2, unit_price=45.0, amount_paid=paid[0]),
            SaleLine(product_id=product.id, identity=product.identity, quantity=1, unit_price=30.0, amount_paid=paid[1]),
        ],
    )


class TestSQLiteSalesStore:
    async def test_create_and_get(self, sales, product, customer):
        created = await sales.create_sale(_sale(product, customer, paid=(20.0, 0.0)))
        assert created.id is not None
        assert all(line.id is not None for line in created.lines)

        fetched = await sales.get_sale(created.id)
        assert fetched.customer_name == "Ana Pérez"
        assert fetched.total_amount == 120.0
        assert fetched.amount_paid == 20.0
        assert fetched.outstanding_balance == 100.0
        assert fetched.payment_status == PaymentStatus.PARTIAL
        assert [line.amount_paid for line in fetched.lines] == [20.0, 0.0]
        assert fetched.lines[0].identity == product.identity

    async def test_get_missing(self, sales):
        assert await sales.get_sale(9999) is None

    async def test_allocations_loaded_per_line(self, sales, ledger, product, customer, two_shipments):
        created = await sales.create_sale(_sale(product, customer))
        line_id = created.lines[0].id
        await ledger.insert_allocation(
            AllocationRecord(sale_item_id=line_id, shipment_item_id=two_shipments[0].lots[0].id, quantity=2, unit_cost=10.0)
        )

        fetched = await sales.get_sale(created.id)
        assert len(fetched.lines[0].allocations) == 1
        assert fetched.lines[0].allocations[0].shipment_id == two_shipments[0].id
        assert fetched.lines[1].allocations == []
        assert fetched.total_cost == 20.0

    async def test_legacy_line_payment_is_null(self, sales, product, customer):
        created = await sales.create_sale(_sale(product, customer, paid=(None, None)))
        fetched = await sales.get_sale(created.id)
        assert [line.amount_paid for line in fetched.lines] == [None, None]

    async def test_update_payments(self, sales, product, customer):
        sale = await sales.create_sale(_sale(product, customer))
        sale.lines[0].amount_paid = 90.0
        sale.lines[1].amount_paid = 30.0
        sale.amount_paid = 120.0
        sale.payment_method = "cash"
        sale.compute_totals()
        await sales.update_payments(sale)

        fetched = await sales.get_sale(sale.id)
        assert fetched.payment_status == PaymentStatus.PAID
        assert fetched.outstanding_balance == 0.0
        assert fetched.payment_method == "cash"

    async def test_list_sales_by_customer(self, sales, customers, product, customer):
        other = await customers.create_customer(Customer(name="Luis"))
        await sales.create_sale(_sale(product, customer))
        await sales.create_sale(_sale(product, other))

        listed = await sales.list_sales(customer_id=customer.id)
        assert len(listed) == 1
        assert listed[0].total_amount == 120.0
        assert len(await sales.list_sales()) == 2
        assert await sales.count_sales() == 2
        assert await sales.count_sales(customer_id=customer.id) == 1

    async def test_payments(self, sales, product, customer):
        sale = await sales.create_sale(_sale(product, customer))
        for day, amount in ((2, 15.0), (1, 10.0)):
            await sales.add_payment(
                Payment(
                    sale_id=sale.id,
                    sale_item_id=sale.lines[0].id,
                    amount=amount,
                    payment_date=date(2024, 7, day),
                )
            )
        payments = await sales.list_payments(sale.id)
        assert [p.amount for p in payments] == [10.0, 15.0]

    async def test_dop_currency_round_trip(self, sales, product, customer):
        created = await sales.create_sale(_sale(product, customer, currency=Currency.DOP))
        fetched = await sales.get_sale(created.id)
        assert fetched.currency == Currency.DOP
        assert fetched.exchange_rate_used == 58.5


class TestCatalogStores:
    async def test_product_identity_lookup(self, products, product):
        found = await products.get_by_identity(ProductIdentity(brand="CHANEL", name="no. 5", size="100ml"))
        assert found.id == product.id
        assert found.sku == "CH-5-100"
        assert await products.get_by_identity(ProductIdentity(brand="Chanel", name="No. 5", size="50ml")) is None

    async def test_list_products(self, products, product):
        await products.create_product(Product(brand="Armani", name="Code"))
        assert [p.brand for p in await products.list_products()] == ["Armani", "Chanel"]

    async def test_customer_by_name(self, customers, customer):
        found = await customers.get_by_name(" ana pérez ")
        assert found.id == customer.id
        assert (await customers.get_customer(customer.id)).phone == "809-555-0101"
        assert await customers.get_by_name("Nobody") is None
