"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from scentledger.application.dto.requests import (
    AdjustInventoryRequest,
    CorrectLotCostRequest,
    CreateSaleRequest,
    CreateShipmentRequest,
    LinePaymentRequest,
    PayAllRequest,
    SaleLineRequest,
    SetExchangeRateRequest,
    ShipmentLotRequest,
    UpdatePaymentRequest,
    UpdateShipmentStatusRequest,
)
from scentledger.application.dto.responses import (
    AdjustmentResponse,
    AvailableInventoryResponse,
    ConsolidatedInventoryResponse,
    CostCorrectionResponse,
    ErrorResponse,
    ExchangeRateResponse,
    HealthResponse,
    ReconciliationResponse,
    SaleListResponse,
    SaleResponse,
    ShipmentListResponse,
    ShipmentResponse,
    UpdatePaymentResponse,
)

__all__ = [
    # Requests
    "AdjustInventoryRequest",
    "CorrectLotCostRequest",
    "CreateSaleRequest",
    "CreateShipmentRequest",
    "LinePaymentRequest",
    "PayAllRequest",
    "SaleLineRequest",
    "SetExchangeRateRequest",
    "ShipmentLotRequest",
    "UpdatePaymentRequest",
    "UpdateShipmentStatusRequest",
    # Responses
    "AdjustmentResponse",
    "AvailableInventoryResponse",
    "ConsolidatedInventoryResponse",
    "CostCorrectionResponse",
    "ErrorResponse",
    "ExchangeRateResponse",
    "HealthResponse",
    "ReconciliationResponse",
    "SaleListResponse",
    "SaleResponse",
    "ShipmentListResponse",
    "ShipmentResponse",
    "UpdatePaymentResponse",
]
