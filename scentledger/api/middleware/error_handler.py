"""
Ledger errors as JSON.

Every failure leaves the API as an ErrorResponse: a stable error_code, the
message, a recovery hint and, for domain errors, the structured context
the exception carried (lot id, quantities, amounts).
"""

import traceback
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from scentledger.application.dto.responses import ErrorResponse
from scentledger.config import get_logger
from scentledger.core.exceptions import (
    AllocationError,
    ConfigurationError,
    ExchangeRateError,
    InvalidAdjustmentError,
    InventoryError,
    LotNotFoundError,
    PaymentError,
    ProductNotFoundError,
    SaleLineNotFoundError,
    SaleNotFoundError,
    ScentLedgerError,
    ShipmentNotFoundError,
    ShipmentStatusError,
    StorageError,
    ValidationError,
)

logger = get_logger(__name__)

# Checked in order; subclasses must precede their base
EXCEPTION_STATUS_MAP: dict[type[Exception], int] = {
    # lookups
    LotNotFoundError: status.HTTP_404_NOT_FOUND,
    ProductNotFoundError: status.HTTP_404_NOT_FOUND,
    SaleLineNotFoundError: status.HTTP_404_NOT_FOUND,
    SaleNotFoundError: status.HTTP_404_NOT_FOUND,
    ShipmentNotFoundError: status.HTTP_404_NOT_FOUND,
    # caller mistakes
    InvalidAdjustmentError: status.HTTP_400_BAD_REQUEST,
    PaymentError: status.HTTP_400_BAD_REQUEST,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ValueError: status.HTTP_400_BAD_REQUEST,
    # ledger state
    InventoryError: status.HTTP_409_CONFLICT,
    AllocationError: status.HTTP_409_CONFLICT,
    ShipmentStatusError: status.HTTP_409_CONFLICT,
    # dependencies
    ExchangeRateError: status.HTTP_503_SERVICE_UNAVAILABLE,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

HINT_MAP: dict[str, str] = {
    "INSUFFICIENT_INVENTORY": "GET /api/inventory/available shows how many units are left.",
    "PRODUCT_NOT_FOUND": "A product exists once a shipment containing it has been recorded.",
    "LOT_NOT_FOUND": "Lot IDs are listed under items on GET /api/shipments/{id}.",
    "ADJUSTMENT_NEEDS_CONFIRMATION": (
        "Pass confirm_exceeds_original=true to raise a lot above its received quantity."
    ),
    "INVALID_ADJUSTMENT": "An adjustment may not take remaining inventory below zero.",
    "ALLOCATION_CONFLICT": "Another sale took the same stock first. Retry the sale.",
    "ALLOCATION_WRITE_FAILED": "Nothing from this sale was stored. Retry, then check server logs.",
    "PAYMENT_EXCEEDS_TOTAL": "GET /api/sales/{id} shows the balance left on each line.",
    "SALE_LINE_NOT_FOUND": "Line IDs come from the items of GET /api/sales/{id}.",
    "SALE_NOT_FOUND": "GET /api/sales lists the recorded sales.",
    "SHIPMENT_NOT_FOUND": "GET /api/shipments lists the recorded shipments.",
    "INVALID_STATUS_TRANSITION": "Status only moves forward: preparing, shipped, delivered, settled.",
    "EXCHANGE_RATE_UNAVAILABLE": "PUT /api/exchange-rate/manual pins a rate until cleared.",
    "VALIDATION_ERROR": "Compare the request body with the schema at /docs.",
    "DATABASE_ERROR": "The ledger database rejected the operation. See server logs.",
    "ValueError": "One of the parameters has an invalid value.",
}

_FALLBACK_HINTS: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "Review the request parameters.",
    status.HTTP_404_NOT_FOUND: "Nothing exists at this path or ID.",
    status.HTTP_409_CONFLICT: "The ledger's current state does not allow this change.",
    status.HTTP_422_UNPROCESSABLE_ENTITY: "The input could not be parsed.",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "Unexpected server failure. See server logs.",
    status.HTTP_503_SERVICE_UNAVAILABLE: "A dependency is down. Try again shortly.",
}


def _hint(error_code: str, status_code: int) -> str:
    return HINT_MAP.get(error_code) or _FALLBACK_HINTS.get(status_code, "")


def _status_for(exc: Exception) -> int:
    return next(
        (code for exc_type, code in EXCEPTION_STATUS_MAP.items() if isinstance(exc, exc_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def _respond(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def build_error_response(request: Request, exc: Exception) -> JSONResponse:
    """ErrorResponse for any exception, logged at warning or error by status."""
    status_code = _status_for(exc)
    if isinstance(exc, ScentLedgerError):
        error_code, message, context = exc.code, exc.message, exc.details or None
    else:
        error_code, message, context = type(exc).__name__, str(exc), None

    server_fault = status_code >= 500
    (logger.error if server_fault else logger.warning)(
        "request_error",
        request_id=getattr(request.state, "request_id", None),
        path=request.url.path,
        error_code=error_code,
        error=message,
        traceback=traceback.format_exc() if server_fault else None,
    )

    return _respond(
        status_code,
        ErrorResponse(
            error_code=error_code,
            message=message,
            hint=_hint(error_code, status_code),
            path=request.url.path,
            context=context,
        ),
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Last line of defence for exceptions that escape the route handlers."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return build_error_response(request, e)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register handlers for ledger errors, bad request bodies and HTTP errors."""

    @app.exception_handler(ScentLedgerError)
    async def ledger_error(request: Request, exc: ScentLedgerError) -> JSONResponse:
        return build_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return _respond(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            ErrorResponse(
                error_code="VALIDATION_ERROR",
                message="Request validation failed",
                hint=HINT_MAP["VALIDATION_ERROR"],
                detail=problems,
                path=request.url.path,
            ),
        )

    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException) -> JSONResponse:
        error_code = "NOT_FOUND" if exc.status_code == status.HTTP_404_NOT_FOUND else "HTTP_ERROR"
        return _respond(
            exc.status_code,
            ErrorResponse(
                error_code=error_code,
                message=str(exc.detail or "Request failed"),
                hint=_hint(error_code, exc.status_code),
                path=request.url.path,
            ),
        )
