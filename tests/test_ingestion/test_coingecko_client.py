"""
Tests for crypto_forecaster/ingestion/coingecko_client.py.

All HTTP is served by ``httpx.MockTransport`` — no network access.

What we test
------------
fetch_price_history():
  - Sends the market_chart path with vs_currency / days query params.
  - Parses ``prices`` pairs into a time-sorted PriceSeries.
  - Sends the demo API key header only when a key is configured.
  - HTTP errors → PriceHistoryError carrying the status code.
  - Transport errors, non-JSON bodies, missing ``prices`` and non-positive
    prices → PriceHistoryError.
"""

from __future__ import annotations

import httpx
import pytest

from crypto_forecaster.errors import PriceHistoryError
from crypto_forecaster.ingestion.coingecko_client import CoinGeckoClient

_PRICES = [
    [1_700_000_000_000, 35000.5],
    [1_700_003_600_000, 35100.0],
    [1_700_007_200_000, 34980.25],
]


def _client(handler, api_key: str = "") -> CoinGeckoClient:
    return CoinGeckoClient(
        base_url="https://api.example.test/api/v3",
        api_key=api_key,
        transport=httpx.MockTransport(handler),
    )


class TestFetchPriceHistory:
    def test_request_shape(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"prices": _PRICES})

        with _client(handler) as client:
            client.fetch_price_history("bitcoin", days=30, vs_currency="INR")

        req = seen[0]
        assert req.url.path == "/api/v3/coins/bitcoin/market_chart"
        assert req.url.params["vs_currency"] == "inr"
        assert req.url.params["days"] == "30"
        assert "x-cg-demo-api-key" not in req.headers

    def test_parses_prices(self):
        def handler(request):
            return httpx.Response(
                200, json={"prices": _PRICES, "market_caps": [], "total_volumes": []}
            )

        with _client(handler) as client:
            series = client.fetch_price_history("bitcoin")

        assert len(series) == 3
        assert series.values == [35000.5, 35100.0, 34980.25]
        assert series.points[0].timestamp_ms == 1_700_000_000_000

    def test_unsorted_prices_are_sorted(self):
        def handler(request):
            return httpx.Response(200, json={"prices": list(reversed(_PRICES))})

        with _client(handler) as client:
            series = client.fetch_price_history("bitcoin")

        assert series.values == [35000.5, 35100.0, 34980.25]

    def test_api_key_header(self):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"prices": _PRICES})

        with _client(handler, api_key="demo-key") as client:
            client.fetch_price_history("ethereum")

        assert seen[0].headers["x-cg-demo-api-key"] == "demo-key"

    def test_http_error_raises_with_status(self):
        def handler(request):
            return httpx.Response(404, json={"error": "coin not found"})

        with _client(handler) as client:
            with pytest.raises(PriceHistoryError) as exc_info:
                client.fetch_price_history("not-a-coin")

        assert exc_info.value.status_code == 404
        assert exc_info.value.coin_id == "not-a-coin"

    def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with _client(handler) as client:
            with pytest.raises(PriceHistoryError) as exc_info:
                client.fetch_price_history("bitcoin")

        assert exc_info.value.status_code is None

    def test_non_json_body_raises(self):
        def handler(request):
            return httpx.Response(200, text="<html>rate limited</html>")

        with _client(handler) as client:
            with pytest.raises(PriceHistoryError):
                client.fetch_price_history("bitcoin")

    def test_missing_prices_raises(self):
        def handler(request):
            return httpx.Response(200, json={"market_caps": []})

        with _client(handler) as client:
            with pytest.raises(PriceHistoryError):
                client.fetch_price_history("bitcoin")

    def test_non_positive_price_raises(self):
        def handler(request):
            return httpx.Response(200, json={"prices": [[1, 10.0], [2, 0.0]]})

        with _client(handler) as client:
            with pytest.raises(PriceHistoryError):
                client.fetch_price_history("bitcoin")
