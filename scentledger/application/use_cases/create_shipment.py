"""Create Shipment Use Case — record inbound lots at their landed cost."""

from collections.abc import Callable
from dataclasses import dataclass

from scentledger.application.dto.mappers import shipment_to_response
from scentledger.application.dto.requests import CreateShipmentRequest
from scentledger.application.dto.responses import ShipmentResponse
from scentledger.config import get_logger
from scentledger.core.entities.product import Product, ProductIdentity
from scentledger.core.entities.shipment import Shipment, ShipmentLot
from scentledger.core.interfaces.unit_of_work import IUnitOfWork

logger = get_logger(__name__)


@dataclass
class CreateShipmentResult:
    """Result of creating a shipment."""

    shipment: Shipment
    products_created: int


class CreateShipmentUseCase:
    """
    Create a shipment with its lots.

    Products are found or created by (brand, name, size). Each lot starts
    with remaining_inventory == quantity. total_cost is fixed here.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork] | None = None):
        self._uow_factory = uow_factory

    def _get_uow_factory(self) -> Callable[[], IUnitOfWork]:
        if self._uow_factory is None:
            from scentledger.infrastructure.storage.sqlite import get_unit_of_work

            self._uow_factory = get_unit_of_work
        return self._uow_factory

    async def execute(self, request: CreateShipmentRequest) -> CreateShipmentResult:
        """Execute create shipment use case."""
        logger.info(
            "create_shipment_started",
            shipment_number=request.shipment_number,
            lots=len(request.lots),
        )

        products_created = 0
        async with self._get_uow_factory()() as uow:
            lots: list[ShipmentLot] = []
            for lot_req in request.lots:
                identity = ProductIdentity(brand=lot_req.brand, name=lot_req.name, size=lot_req.size)
                product = await uow.products.get_by_identity(identity)
                if product is None:
                    product = await uow.products.create_product(
                        Product(
                            sku=lot_req.sku,
                            brand=identity.brand,
                            name=identity.name,
                            size=identity.size,
                            sale_price=lot_req.sale_price,
                        )
                    )
                    products_created += 1

                lots.append(
                    ShipmentLot(
                        product_id=product.id,
                        identity=identity,
                        quantity=lot_req.quantity,
                        unit_cost=lot_req.unit_cost,
                    )
                )

            shipment = Shipment(
                shipment_number=request.shipment_number,
                shipping_cost=request.shipping_cost,
                additional_costs=request.additional_costs,
                notes=request.notes,
                lots=lots,
            )
            shipment.total_cost = shipment.compute_total_cost()
            shipment.net_profit = -shipment.total_cost

            shipment = await uow.ledger.create_shipment(shipment)

        logger.info(
            "create_shipment_complete",
            shipment_id=shipment.id,
            total_cost=shipment.total_cost,
            products_created=products_created,
        )
        return CreateShipmentResult(shipment=shipment, products_created=products_created)

    def to_response(self, result: CreateShipmentResult) -> ShipmentResponse:
        """Convert result to API response."""
        return shipment_to_response(result.shipment)
