"""Entity -> response DTO conversion shared by use cases and routes."""

from scentledger.application.dto.responses import (
    AllocationResponse,
    LotResponse,
    PaymentResponse,
    SaleLineResponse,
    SaleResponse,
    ShipmentResponse,
    ShipmentTotalsResponse,
)
from scentledger.core.entities.sale import Payment, Sale
from scentledger.core.entities.settlement import ShipmentTotals
from scentledger.core.entities.shipment import Shipment


def shipment_to_response(shipment: Shipment) -> ShipmentResponse:
    return ShipmentResponse(
        id=shipment.id,  # type: ignore[arg-type]
        shipment_number=shipment.shipment_number,
        status=shipment.status.value,
        shipped_date=shipment.shipped_date,
        delivered_date=shipment.delivered_date,
        shipping_cost=shipment.shipping_cost,
        additional_costs=shipment.additional_costs,
        total_cost=shipment.total_cost,
        total_revenue=shipment.total_revenue,
        cost_of_goods_sold=shipment.cost_of_goods_sold,
        net_profit=shipment.net_profit,
        remaining_units=shipment.remaining_units,
        notes=shipment.notes,
        lots=[
            LotResponse(
                id=lot.id,  # type: ignore[arg-type]
                shipment_id=lot.shipment_id,  # type: ignore[arg-type]
                product_id=lot.product_id,
                brand=lot.identity.brand if lot.identity else "",
                name=lot.identity.name if lot.identity else "",
                size=lot.identity.size if lot.identity else "",
                quantity=lot.quantity,
                unit_cost=lot.unit_cost,
                remaining_inventory=lot.remaining_inventory or 0,
                sold_quantity=lot.sold_quantity,
            )
            for lot in shipment.lots
        ],
        created_at=shipment.created_at,
        updated_at=shipment.updated_at,
    )


def sale_to_response(sale: Sale) -> SaleResponse:
    return SaleResponse(
        id=sale.id,  # type: ignore[arg-type]
        customer_id=sale.customer_id,
        customer_name=sale.customer_name,
        sale_date=sale.sale_date,
        currency=sale.currency.value,
        exchange_rate_used=sale.exchange_rate_used,
        total_amount=sale.total_amount,
        amount_paid=sale.amount_paid,
        outstanding_balance=sale.outstanding_balance,
        payment_status=sale.payment_status.value,
        payment_method=sale.payment_method,
        notes=sale.notes,
        total_cost=sale.total_cost,
        profit_usd=sale.profit_usd,
        lines=[
            SaleLineResponse(
                id=line.id,  # type: ignore[arg-type]
                brand=line.identity.brand,
                name=line.identity.name,
                size=line.identity.size,
                quantity=line.quantity,
                unit_price=line.unit_price,
                line_total=line.line_total,
                amount_paid=line.amount_paid,
                balance=line.balance,
                payment_status=line.payment_status.value,
                cost_of_goods=line.cost_of_goods,
                allocations=[
                    AllocationResponse(
                        lot_id=a.shipment_item_id,
                        shipment_id=a.shipment_id,
                        quantity=a.quantity,
                        unit_cost=a.unit_cost,
                    )
                    for a in line.allocations
                ],
            )
            for line in sale.lines
        ],
        created_at=sale.created_at,
    )


def payment_to_response(payment: Payment) -> PaymentResponse:
    return PaymentResponse(
        id=payment.id,  # type: ignore[arg-type]
        sale_id=payment.sale_id,
        sale_item_id=payment.sale_item_id,
        amount=payment.amount,
        payment_method=payment.payment_method,
        payment_date=payment.payment_date,
        notes=payment.notes,
    )


def totals_to_response(totals: ShipmentTotals) -> ShipmentTotalsResponse:
    return ShipmentTotalsResponse(
        total_cost=totals.total_cost,
        total_revenue=totals.total_revenue,
        cost_of_goods_sold=totals.cost_of_goods_sold,
        net_profit=totals.net_profit,
    )
