"""
USD -> DOP rate supplier backed by CurrencyAPI.

The live rate is cached for a configurable TTL. A manual rate overrides
fetching entirely. When a fetch fails the last good rate (or the
configured default) is served so a sale is never blocked on the network.
"""

import time
from datetime import datetime
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from scentledger.config import get_logger, get_settings
from scentledger.config.settings import ExchangeRateSettings
from scentledger.core.exceptions import ExchangeRateError, ValidationError
from scentledger.core.interfaces.exchange_rate import (
    ExchangeRateSnapshot,
    IExchangeRateProvider,
)

logger = get_logger(__name__)


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning(
        "exchange_rate_retry",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
    )


def _dop_value(payload: Any) -> float | None:
    """data.DOP.value when it is a positive number, else None."""
    node = payload
    for key in ("data", "DOP", "value"):
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    if isinstance(node, bool) or not isinstance(node, (int, float)) or node <= 0:
        return None
    return float(node)


class CurrencyAPIRateProvider(IExchangeRateProvider):
    """Cached CurrencyAPI client with manual override."""

    def __init__(
        self,
        settings: ExchangeRateSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self._settings = settings or get_settings().exchange_rate
        self._client = client

        self._manual_rate: float | None = self._settings.manual_rate
        self._cached_rate: float | None = None
        self._cached_at: float | None = None  # monotonic
        self._fetched_at: datetime | None = None

    def _cache_fresh(self) -> bool:
        if self._cached_rate is None or self._cached_at is None:
            return False
        return time.monotonic() - self._cached_at < self._settings.cache_ttl_seconds

    async def _request(self) -> dict[str, Any]:
        params = {"currencies": "DOP", "base_currency": "USD"}
        if self._settings.api_key:
            params["apikey"] = self._settings.api_key

        if self._client is not None:
            response = await self._client.get(self._settings.api_url, params=params)
        else:
            async with httpx.AsyncClient(timeout=self._settings.timeout) as client:
                response = await client.get(self._settings.api_url, params=params)
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as e:
            logger.error("exchange_rate_unreadable_body", body=response.text[:200])
            raise ExchangeRateError("response is not JSON") from e

    async def fetch_rate(self) -> float:
        """
        Fetch the live rate, retrying network errors.

        Raises:
            ExchangeRateError: On HTTP errors, network failures after all
                retries, or a payload without a usable rate
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._settings.max_retries),
                wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
                retry=retry_if_exception_type(httpx.TransportError),
                before_sleep=_log_retry,
                reraise=True,
            ):
                with attempt:
                    data = await self._request()
        except httpx.HTTPStatusError as e:
            logger.error("exchange_rate_http_error", status=e.response.status_code)
            raise ExchangeRateError(f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error("exchange_rate_network_error", error=str(e))
            raise ExchangeRateError(str(e)) from e

        rate = _dop_value(data)
        if rate is None:
            logger.error("exchange_rate_invalid_payload", payload=data)
            raise ExchangeRateError("invalid rate in response")

        self._cached_rate = float(rate)
        self._cached_at = time.monotonic()
        self._fetched_at = datetime.utcnow()
        logger.info("exchange_rate_fetched", usd_to_dop=self._cached_rate)
        return self._cached_rate

    async def get_usd_to_dop(self) -> float:
        """Manual rate, else fresh cache, else live, else last known or default."""
        if self._manual_rate is not None:
            return self._manual_rate
        if self._cache_fresh():
            return self._cached_rate  # type: ignore[return-value]

        try:
            return await self.fetch_rate()
        except ExchangeRateError as e:
            fallback = self._cached_rate or self._settings.default_usd_to_dop
            logger.warning(
                "exchange_rate_fallback",
                error=e.message,
                usd_to_dop=fallback,
                source="cache" if self._cached_rate else "default",
            )
            return fallback

    def snapshot(self) -> ExchangeRateSnapshot:
        if self._manual_rate is not None:
            return ExchangeRateSnapshot(usd_to_dop=self._manual_rate, source="manual", is_manual=True)
        if self._cached_rate is not None:
            return ExchangeRateSnapshot(
                usd_to_dop=self._cached_rate,
                source="live" if self._cache_fresh() else "cache",
                fetched_at=self._fetched_at,
            )
        return ExchangeRateSnapshot(usd_to_dop=self._settings.default_usd_to_dop, source="default")

    def set_manual_rate(self, rate: float) -> None:
        if rate <= 0:
            raise ValidationError("rate", "must be greater than 0", rate)
        self._manual_rate = rate
        logger.info("exchange_rate_manual_set", usd_to_dop=rate)

    def clear_manual_rate(self) -> None:
        self._manual_rate = None
        logger.info("exchange_rate_manual_cleared")


_provider: CurrencyAPIRateProvider | None = None


def get_exchange_rate_provider() -> CurrencyAPIRateProvider:
    """Get singleton rate provider."""
    global _provider
    if _provider is None:
        _provider = CurrencyAPIRateProvider()
    return _provider


def reset_exchange_rate_provider() -> None:
    """Drop the singleton (tests)."""
    global _provider
    _provider = None
