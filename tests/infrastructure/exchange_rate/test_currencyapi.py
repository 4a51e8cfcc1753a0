"""Tests for the CurrencyAPI rate provider."""

import httpx
import pytest

from scentledger.config.settings import ExchangeRateSettings
from scentledger.core.exceptions import ExchangeRateError, ValidationError
from scentledger.infrastructure.exchange_rate import CurrencyAPIRateProvider


def _payload(rate):
    return {"meta": {"last_updated_at": "2024-06-01T00:00:00Z"}, "data": {"DOP": {"code": "DOP", "value": rate}}}


def _provider(handler, **overrides) -> tuple[CurrencyAPIRateProvider, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    settings = ExchangeRateSettings(api_key="test-key", max_retries=1, **overrides)
    client = httpx.AsyncClient(transport=httpx.MockTransport(recording))
    return CurrencyAPIRateProvider(settings=settings, client=client), seen


class TestCurrencyAPIRateProvider:
    async def test_fetches_and_caches(self):
        provider, seen = _provider(lambda r: httpx.Response(200, json=_payload(58.75)))

        assert await provider.get_usd_to_dop() == 58.75
        assert await provider.get_usd_to_dop() == 58.75
        assert len(seen) == 1
        assert seen[0].url.params["apikey"] == "test-key"
        assert seen[0].url.params["base_currency"] == "USD"
        assert provider.snapshot().source == "live"

    async def test_expired_cache_refetches(self):
        provider, seen = _provider(lambda r: httpx.Response(200, json=_payload(59.0)), cache_ttl_seconds=0)
        await provider.get_usd_to_dop()
        await provider.get_usd_to_dop()
        assert len(seen) == 2

    async def test_manual_rate_skips_network(self):
        provider, seen = _provider(lambda r: httpx.Response(200, json=_payload(58.0)))
        provider.set_manual_rate(61.5)

        assert await provider.get_usd_to_dop() == 61.5
        assert seen == []
        snapshot = provider.snapshot()
        assert snapshot.is_manual is True
        assert snapshot.source == "manual"

        provider.clear_manual_rate()
        assert await provider.get_usd_to_dop() == 58.0

    def test_manual_rate_must_be_positive(self):
        provider, _ = _provider(lambda r: httpx.Response(200, json=_payload(58.0)))
        with pytest.raises(ValidationError):
            provider.set_manual_rate(0)

    async def test_http_error_falls_back_to_default(self):
        provider, _ = _provider(lambda r: httpx.Response(500), default_usd_to_dop=60.0)

        assert await provider.get_usd_to_dop() == 60.0
        assert provider.snapshot().source == "default"

    async def test_failure_keeps_last_good_rate(self):
        responses = iter([httpx.Response(200, json=_payload(58.5)), httpx.Response(503)])
        provider, _ = _provider(lambda r: next(responses), cache_ttl_seconds=0)

        assert await provider.get_usd_to_dop() == 58.5
        assert await provider.get_usd_to_dop() == 58.5
        assert provider.snapshot().source == "cache"

    async def test_invalid_payload(self):
        provider, _ = _provider(lambda r: httpx.Response(200, json={"data": {}}))
        with pytest.raises(ExchangeRateError):
            await provider.fetch_rate()

    async def test_network_error(self):
        def fail(request):
            raise httpx.ConnectError("unreachable", request=request)

        provider, _ = _provider(fail)
        with pytest.raises(ExchangeRateError):
            await provider.fetch_rate()

    async def test_non_json_body(self):
        provider, _ = _provider(lambda r: httpx.Response(200, text="<html>maintenance</html>"))
        with pytest.raises(ExchangeRateError):
            await provider.fetch_rate()

    @pytest.mark.parametrize(
        "payload",
        [{"data": {"DOP": None}}, {"data": None}, {"data": {"DOP": {"value": "62.1"}}}, []],
    )
    async def test_malformed_payload_falls_back_to_default(self, payload):
        provider, _ = _provider(lambda r: httpx.Response(200, json=payload), default_usd_to_dop=62.25)

        assert await provider.get_usd_to_dop() == 62.25
        assert provider.snapshot().source == "default"

    async def test_maintenance_page_falls_back_to_default(self):
        provider, _ = _provider(
            lambda r: httpx.Response(200, text="<html>maintenance</html>"),
            default_usd_to_dop=62.25,
        )
        assert await provider.get_usd_to_dop() == 62.25
