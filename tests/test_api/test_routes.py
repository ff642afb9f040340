"""Tests for the HTTP API routes with a mocked QueryService and collector."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from pricefeed.api.app import create_app
from pricefeed.config import ApiSettings
from pricefeed.exceptions import NoDataError, StoreError
from pricefeed.models import Candle, CurrentPrice
from pricefeed.query import QueryService


@pytest.fixture
def query_service() -> AsyncMock:
    service = AsyncMock(spec=QueryService)
    service.get_candles.return_value = [
        Candle(time=0, open=Decimal("10"), high=Decimal("12"), low=Decimal("10"), close=Decimal("12")),
        Candle(time=60, open=Decimal("9"), high=Decimal("9"), low=Decimal("9"), close=Decimal("9")),
    ]
    service.get_current_price.return_value = CurrentPrice(
        token="WATER",
        price=Decimal("0.0011"),
        price_change_24h_percent=Decimal("10"),
        timestamp_ms=1_700_000_000_000,
    )
    return service


@pytest.fixture
def app(query_service: AsyncMock):
    app = create_app(ApiSettings(default_interval="1h", default_limit=100))
    app.state.query_service = query_service
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


class TestOhlcv:
    def test_returns_candles(self, client, query_service) -> None:
        response = client.get("/api/ohlcv/water", params={"interval": "1m", "limit": "50"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["token"] == "water"
        assert body["interval"] == "1m"
        assert body["candles"][0] == {
            "time": 0, "open": 10.0, "high": 12.0, "low": 10.0, "close": 12.0, "volume": 0.0,
        }
        query_service.get_candles.assert_awaited_once_with("water", "1m", 50)

    def test_defaults(self, client, query_service) -> None:
        response = client.get("/api/ohlcv/WATER")
        assert response.json()["interval"] == "1h"
        query_service.get_candles.assert_awaited_once_with("WATER", "1h", 100)

    def test_empty_candles_is_success(self, client, query_service) -> None:
        query_service.get_candles.return_value = []
        response = client.get("/api/ohlcv/WATER")
        assert response.status_code == 200
        assert response.json()["candles"] == []

    @pytest.mark.parametrize("limit", ["0", "-3", "abc"])
    def test_invalid_limit_is_400(self, client, query_service, limit: str) -> None:
        response = client.get("/api/ohlcv/WATER", params={"limit": limit})
        assert response.status_code == 400
        assert response.json()["success"] is False
        query_service.get_candles.assert_not_awaited()

    def test_store_error_is_500(self, client, query_service) -> None:
        query_service.get_candles.side_effect = StoreError("db locked")
        response = client.get("/api/ohlcv/WATER")
        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "db locked"}


class TestPrice:
    def test_returns_price(self, client) -> None:
        response = client.get("/api/price/water")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["token"] == "water"
        assert body["price"] == pytest.approx(0.0011)
        assert body["priceChange24hPercent"] == 10.0
        assert body["timestamp"] == "2023-11-14T22:13:20+00:00"

    def test_no_data_is_404(self, client, query_service) -> None:
        query_service.get_current_price.side_effect = NoDataError("none")
        response = client.get("/api/price/NOPE")
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "No data found for token"}

    def test_store_error_is_500(self, client, query_service) -> None:
        query_service.get_current_price.side_effect = StoreError("db locked")
        response = client.get("/api/price/WATER")
        assert response.status_code == 500
        assert response.json()["success"] is False


class TestHealthAndStatus:
    def test_health_independent_of_core(self, client, query_service) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        query_service.get_current_price.assert_not_awaited()

    def test_collector_status_disabled(self, client) -> None:
        assert client.get("/api/collector/status").json() == {"enabled": False}

    def test_collector_status(self, app, client) -> None:
        collector = MagicMock()
        collector.status.return_value = {"running": True, "rounds_completed": 3}
        app.state.collector = collector

        body = client.get("/api/collector/status").json()
        assert body == {"enabled": True, "running": True, "rounds_completed": 3}

    def test_cors_header(self, client) -> None:
        response = client.get("/health", headers={"Origin": "http://example.com"})
        assert response.headers["access-control-allow-origin"] == "*"
