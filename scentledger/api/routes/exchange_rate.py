"""Exchange rate endpoints."""

from fastapi import APIRouter, Depends

from scentledger.api.dependencies import get_rate_provider
from scentledger.application.dto.requests import SetExchangeRateRequest
from scentledger.application.dto.responses import ErrorResponse, ExchangeRateResponse
from scentledger.core.interfaces import ExchangeRateSnapshot, IExchangeRateProvider

router = APIRouter(prefix="/api/exchange-rate", tags=["exchange-rate"])


def _to_response(snapshot: ExchangeRateSnapshot) -> ExchangeRateResponse:
    return ExchangeRateResponse(
        usd_to_dop=snapshot.usd_to_dop,
        source=snapshot.source,
        is_manual=snapshot.is_manual,
        fetched_at=snapshot.fetched_at,
    )


@router.get("", response_model=ExchangeRateResponse)
async def get_rate(
    provider: IExchangeRateProvider = Depends(get_rate_provider),
) -> ExchangeRateResponse:
    """Rate a new sale would freeze right now."""
    await provider.get_usd_to_dop()
    return _to_response(provider.snapshot())


@router.post(
    "/refresh",
    response_model=ExchangeRateResponse,
    responses={503: {"model": ErrorResponse}},
)
async def refresh_rate(
    provider: IExchangeRateProvider = Depends(get_rate_provider),
) -> ExchangeRateResponse:
    """Force a live fetch."""
    await provider.fetch_rate()
    return _to_response(provider.snapshot())


@router.put("/manual", response_model=ExchangeRateResponse)
async def set_manual_rate(
    request: SetExchangeRateRequest,
    provider: IExchangeRateProvider = Depends(get_rate_provider),
) -> ExchangeRateResponse:
    """Pin a manual rate; live fetching stops until cleared."""
    provider.set_manual_rate(request.usd_to_dop)
    return _to_response(provider.snapshot())


@router.delete("/manual", response_model=ExchangeRateResponse)
async def clear_manual_rate(
    provider: IExchangeRateProvider = Depends(get_rate_provider),
) -> ExchangeRateResponse:
    """Return to the live rate."""
    provider.clear_manual_rate()
    await provider.get_usd_to_dop()
    return _to_response(provider.snapshot())
