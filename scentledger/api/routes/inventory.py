"""Inventory endpoints: FIFO availability, consolidated stock, corrections."""

from fastapi import APIRouter, Depends, Query, status

from scentledger.api.dependencies import (
    get_adjust_inventory_use_case,
    get_correct_lot_cost_use_case,
    get_ledger,
)
from scentledger.application.dto.requests import AdjustInventoryRequest, CorrectLotCostRequest
from scentledger.application.dto.responses import (
    AdjustmentResponse,
    AvailableInventoryResponse,
    AvailableLotResponse,
    ConsolidatedInventoryResponse,
    CostCorrectionResponse,
    ErrorResponse,
    InventorySummaryResponse,
)
from scentledger.application.use_cases import AdjustInventoryUseCase, CorrectLotCostUseCase
from scentledger.core.entities.product import ProductIdentity
from scentledger.infrastructure.storage.sqlite import SQLiteLedgerStore

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


@router.get("/available", response_model=AvailableInventoryResponse)
async def get_available(
    brand: str = Query(..., min_length=1),
    name: str = Query(..., min_length=1),
    size: str = "",
    ledger: SQLiteLedgerStore = Depends(get_ledger),
) -> AvailableInventoryResponse:
    """Lots of a product with stock left, in the order a sale would draw them."""
    identity = ProductIdentity(brand=brand, name=name, size=size)
    lots = await ledger.get_available_inventory(identity)
    return AvailableInventoryResponse(
        product=str(identity),
        total_available=sum(lot.remaining_quantity for lot in lots),
        lots=[AvailableLotResponse(**lot.model_dump()) for lot in lots],
    )


@router.get("/consolidated", response_model=ConsolidatedInventoryResponse)
async def get_consolidated(
    ledger: SQLiteLedgerStore = Depends(get_ledger),
) -> ConsolidatedInventoryResponse:
    """Remaining stock per product across all shipments."""
    summaries = await ledger.consolidated_inventory()
    return ConsolidatedInventoryResponse(
        products=[
            InventorySummaryResponse(
                brand=s.identity.brand,
                name=s.identity.name,
                size=s.identity.size,
                total_remaining=s.total_remaining,
                lot_count=s.lot_count,
                next_unit_cost=s.next_unit_cost,
            )
            for s in summaries
        ],
        total_units=sum(s.total_remaining for s in summaries),
    )


@router.post(
    "/adjust",
    response_model=AdjustmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def adjust_inventory(
    request: AdjustInventoryRequest,
    use_case: AdjustInventoryUseCase = Depends(get_adjust_inventory_use_case),
) -> AdjustmentResponse:
    """Correct a lot's remaining count."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.post(
    "/cost-correction",
    response_model=CostCorrectionResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def correct_lot_cost(
    request: CorrectLotCostRequest,
    use_case: CorrectLotCostUseCase = Depends(get_correct_lot_cost_use_case),
) -> CostCorrectionResponse:
    """Fix a lot's unit cost and recompute everything derived from it."""
    result = await use_case.execute(request)
    return use_case.to_response(result)
