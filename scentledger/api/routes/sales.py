"""Sales endpoints: create with FIFO allocation, read, payments."""

from fastapi import APIRouter, Depends, status

from scentledger.api.dependencies import (
    get_create_sale_use_case,
    get_sales,
    get_update_payment_use_case,
)
from scentledger.application.dto.mappers import payment_to_response, sale_to_response
from scentledger.application.dto.requests import (
    CreateSaleRequest,
    PayAllRequest,
    UpdatePaymentRequest,
)
from scentledger.application.dto.responses import (
    ErrorResponse,
    PaymentResponse,
    SaleListResponse,
    SaleResponse,
    UpdatePaymentResponse,
)
from scentledger.application.use_cases import CreateSaleUseCase, UpdatePaymentUseCase
from scentledger.core.exceptions import SaleNotFoundError
from scentledger.infrastructure.storage.sqlite import SQLiteSalesStore

router = APIRouter(prefix="/api/sales", tags=["sales"])


@router.post(
    "",
    response_model=SaleResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def create_sale(
    request: CreateSaleRequest,
    use_case: CreateSaleUseCase = Depends(get_create_sale_use_case),
) -> SaleResponse:
    """Create a sale; every line is allocated FIFO or nothing is saved."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("", response_model=SaleListResponse)
async def list_sales(
    customer_id: int | None = None,
    limit: int = 100,
    offset: int = 0,
    store: SQLiteSalesStore = Depends(get_sales),
) -> SaleListResponse:
    """List sales, newest first (headers only). `total` counts every match, not just this page."""
    sales = await store.list_sales(customer_id=customer_id, limit=limit, offset=offset)
    return SaleListResponse(
        sales=[sale_to_response(s) for s in sales],
        total=await store.count_sales(customer_id=customer_id),
    )


@router.get(
    "/{sale_id}",
    response_model=SaleResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_sale(
    sale_id: int,
    store: SQLiteSalesStore = Depends(get_sales),
) -> SaleResponse:
    """Sale with lines and the lots each line drew from."""
    sale = await store.get_sale(sale_id)
    if sale is None:
        raise SaleNotFoundError(sale_id)
    return sale_to_response(sale)


@router.get(
    "/{sale_id}/payments",
    response_model=list[PaymentResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_payments(
    sale_id: int,
    store: SQLiteSalesStore = Depends(get_sales),
) -> list[PaymentResponse]:
    """Payment history of a sale."""
    if await store.get_sale(sale_id) is None:
        raise SaleNotFoundError(sale_id)
    return [payment_to_response(p) for p in await store.list_payments(sale_id)]


@router.post(
    "/{sale_id}/payments",
    response_model=UpdatePaymentResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_payment(
    sale_id: int,
    request: UpdatePaymentRequest,
    use_case: UpdatePaymentUseCase = Depends(get_update_payment_use_case),
) -> UpdatePaymentResponse:
    """Add payments to individual sale lines."""
    result = await use_case.execute(sale_id, request)
    return use_case.to_response(result)


@router.post(
    "/{sale_id}/pay-all",
    response_model=UpdatePaymentResponse,
    responses={404: {"model": ErrorResponse}},
)
async def pay_all(
    sale_id: int,
    request: PayAllRequest | None = None,
    use_case: UpdatePaymentUseCase = Depends(get_update_payment_use_case),
) -> UpdatePaymentResponse:
    """Settle every line of a sale in full."""
    result = await use_case.pay_all(sale_id, request)
    return use_case.to_response(result)
