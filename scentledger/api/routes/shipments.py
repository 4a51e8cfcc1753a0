"""Shipment endpoints: create, read, status lifecycle, reconciliation."""

from fastapi import APIRouter, Depends

from scentledger.api.dependencies import (
    get_create_shipment_use_case,
    get_ledger,
    get_reconcile_use_case,
    get_update_shipment_status_use_case,
)
from scentledger.application.dto.mappers import shipment_to_response
from scentledger.application.dto.requests import (
    CreateShipmentRequest,
    UpdateShipmentStatusRequest,
)
from scentledger.application.dto.responses import (
    ErrorResponse,
    ReconciliationResponse,
    ShipmentListResponse,
    ShipmentResponse,
)
from scentledger.application.use_cases import (
    CreateShipmentUseCase,
    ReconcileShipmentUseCase,
    UpdateShipmentStatusUseCase,
)
from scentledger.core.entities.shipment import ShipmentStatus
from scentledger.core.exceptions import ShipmentNotFoundError
from scentledger.infrastructure.storage.sqlite import SQLiteLedgerStore

router = APIRouter(prefix="/api/shipments", tags=["shipments"])


@router.post(
    "",
    response_model=ShipmentResponse,
    status_code=201,
    responses={422: {"model": ErrorResponse}},
)
async def create_shipment(
    request: CreateShipmentRequest,
    use_case: CreateShipmentUseCase = Depends(get_create_shipment_use_case),
) -> ShipmentResponse:
    """Record an inbound shipment with its lots."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("", response_model=ShipmentListResponse)
async def list_shipments(
    status: ShipmentStatus | None = None,
    limit: int = 100,
    offset: int = 0,
    ledger: SQLiteLedgerStore = Depends(get_ledger),
) -> ShipmentListResponse:
    """List shipments, newest first."""
    shipments = await ledger.list_shipments(status=status, limit=limit, offset=offset)
    return ShipmentListResponse(
        shipments=[shipment_to_response(s) for s in shipments],
        total=await ledger.count_shipments(status=status),
    )


@router.post(
    "/reconcile",
    response_model=ReconciliationResponse,
)
async def reconcile_all(
    write: bool = False,
    use_case: ReconcileShipmentUseCase = Depends(get_reconcile_use_case),
) -> ReconciliationResponse:
    """Recompute every shipment from its allocation records."""
    results = await use_case.execute(write=write)
    return use_case.to_response(results)


@router.get(
    "/{shipment_id}",
    response_model=ShipmentResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_shipment(
    shipment_id: int,
    ledger: SQLiteLedgerStore = Depends(get_ledger),
) -> ShipmentResponse:
    """Shipment with its lots and aggregates."""
    shipment = await ledger.get_shipment(shipment_id)
    if shipment is None:
        raise ShipmentNotFoundError(shipment_id)
    return shipment_to_response(shipment)


@router.patch(
    "/{shipment_id}/status",
    response_model=ShipmentResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_status(
    shipment_id: int,
    request: UpdateShipmentStatusRequest,
    use_case: UpdateShipmentStatusUseCase = Depends(get_update_shipment_status_use_case),
) -> ShipmentResponse:
    """Move a shipment forward in its lifecycle."""
    shipment = await use_case.execute(shipment_id, request.status)
    return use_case.to_response(shipment)


@router.post(
    "/{shipment_id}/reconcile",
    response_model=ReconciliationResponse,
    responses={404: {"model": ErrorResponse}},
)
async def reconcile_shipment(
    shipment_id: int,
    write: bool = False,
    use_case: ReconcileShipmentUseCase = Depends(get_reconcile_use_case),
) -> ReconciliationResponse:
    """Compare stored aggregates to a full recompute."""
    results = await use_case.execute(shipment_id=shipment_id, write=write)
    return use_case.to_response(results)
