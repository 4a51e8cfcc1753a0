"""Fixtures for API tests: the real app on a temporary ledger."""

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from scentledger.api.dependencies import get_rate_provider
from scentledger.api.main import app
from scentledger.config.settings import ExchangeRateSettings
from scentledger.infrastructure.exchange_rate import CurrencyAPIRateProvider


@pytest.fixture
def fx_handler():
    """Set status_code or payload to change what the fake CurrencyAPI returns."""

    class Handler:
        status_code = 200
        payload: dict = {"data": {"DOP": {"code": "DOP", "value": 60.0}}}

        def __call__(self, request: httpx.Request) -> httpx.Response:
            return httpx.Response(self.status_code, json=self.payload)

    return Handler()


@pytest.fixture
def rate_provider(fx_handler) -> CurrencyAPIRateProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(fx_handler))
    return CurrencyAPIRateProvider(
        settings=ExchangeRateSettings(max_retries=1, cache_ttl_seconds=0, default_usd_to_dop=62.0),
        client=client,
    )


@pytest.fixture
async def client(ledger_db, rate_provider):
    app.dependency_overrides[get_rate_provider] = lambda: rate_provider
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_rate_provider, None)


@pytest.fixture
async def stocked(client):
    """Two shipments of Acqua di Gio: 10 @ $5 then 10 @ $8."""
    ids = []
    for number, cost in (("A", 5.0), ("B", 8.0)):
        response = await client.post(
            "/api/shipments",
            json={
                "shipment_number": number,
                "lots": [{"brand": "Armani", "name": "Acqua di Gio", "size": "100ml", "quantity": 10, "unit_cost": cost}],
            },
        )
        assert response.status_code == 201
        ids.append(response.json()["id"])
    return ids
