"""Application use cases."""

from scentledger.application.use_cases.adjust_inventory import (
    AdjustInventoryResult,
    AdjustInventoryUseCase,
)
from scentledger.application.use_cases.correct_lot_cost import (
    CorrectLotCostUseCase,
    CostCorrectionResult,
)
from scentledger.application.use_cases.create_sale import CreateSaleResult, CreateSaleUseCase
from scentledger.application.use_cases.create_shipment import (
    CreateShipmentResult,
    CreateShipmentUseCase,
)
from scentledger.application.use_cases.reconcile_shipment import (
    ReconciledShipment,
    ReconcileShipmentUseCase,
)
from scentledger.application.use_cases.update_payment import (
    UpdatePaymentResult,
    UpdatePaymentUseCase,
)
from scentledger.application.use_cases.update_shipment_status import UpdateShipmentStatusUseCase

__all__ = [
    "AdjustInventoryUseCase",
    "AdjustInventoryResult",
    "CorrectLotCostUseCase",
    "CostCorrectionResult",
    "CreateSaleUseCase",
    "CreateSaleResult",
    "CreateShipmentUseCase",
    "CreateShipmentResult",
    "ReconcileShipmentUseCase",
    "ReconciledShipment",
    "UpdatePaymentUseCase",
    "UpdatePaymentResult",
    "UpdateShipmentStatusUseCase",
]
