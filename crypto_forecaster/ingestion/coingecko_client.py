"""
CoinGecko price-history client.

API:   https://api.coingecko.com/api/v3
Docs:  https://docs.coingecko.com/reference/coins-id-market-chart

Endpoint used::

    GET /coins/{coin_id}/market_chart?vs_currency={currency}&days={days}

The response carries ``prices`` as ``[[timestamp_ms, price], ...]``.  For a
2–90 day range CoinGecko returns hourly points, which is what the analysis
windows (24 points ≈ 24h) assume.

Credential setup (.env, gitignored — optional, raises rate limits):
  COINGECKO_API_KEY=your_demo_key_here
"""

from __future__ import annotations

import logging
import os
from typing import Any, ClassVar, Optional

import httpx
from pydantic import ValidationError

from crypto_forecaster.errors import PriceHistoryError
from crypto_forecaster.models.price import PriceSeries

logger = logging.getLogger(__name__)


class CoinGeckoClient:
    """Thin synchronous client for CoinGecko historical prices.

    Usage::

        with CoinGeckoClient() as client:
            series = client.fetch_price_history("bitcoin", days=30, vs_currency="usd")

    Attributes:
        base_url: API root, e.g. ``https://api.coingecko.com/api/v3``.
        api_key:  Optional demo API key (``COINGECKO_API_KEY``).
    """

    DEFAULT_BASE_URL: ClassVar[str] = "https://api.coingecko.com/api/v3"
    USER_AGENT: ClassVar[str] = "crypto-forecaster/0.1"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        api_key: Optional[str] = None,
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialise the client.

        Args:
            base_url:        API root URL.
            api_key:         Demo API key; falls back to ``COINGECKO_API_KEY``.
            timeout_seconds: Per-request timeout.
            transport:       Optional httpx transport (tests use MockTransport).
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key if api_key is not None else os.environ.get("COINGECKO_API_KEY")

        headers = {"Accept": "application/json", "User-Agent": self.USER_AGENT}
        if self.api_key:
            headers["x-cg-demo-api-key"] = self.api_key

        self._client = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout_seconds,
            transport=transport,
        )

    def fetch_price_history(
        self,
        coin_id: str,
        days: int = 30,
        vs_currency: str = "usd",
    ) -> PriceSeries:
        """Fetch the historical price series for one asset.

        Args:
            coin_id:     CoinGecko asset id (e.g. ``"bitcoin"``).
            days:        History length in days.
            vs_currency: Quote currency code (e.g. ``"usd"``, ``"inr"``).

        Returns:
            ``PriceSeries`` sorted by timestamp.

        Raises:
            PriceHistoryError: HTTP error, transport failure, or malformed body.
        """
        try:
            resp = self._client.get(
                f"/coins/{coin_id}/market_chart",
                params={"vs_currency": vs_currency.lower(), "days": days},
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise PriceHistoryError(
                coin_id,
                f"HTTP {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise PriceHistoryError(coin_id, f"request failed: {exc}") from exc

        try:
            payload = resp.json()
        except ValueError as exc:
            raise PriceHistoryError(coin_id, "response is not valid JSON") from exc

        series = self._parse_prices(coin_id, payload)
        logger.debug(
            "CoinGeckoClient: %d price points for %s/%s over %dd",
            len(series), coin_id, vs_currency, days,
        )
        return series

    def _parse_prices(self, coin_id: str, payload: Any) -> PriceSeries:
        """Extract ``prices`` pairs from a market_chart body."""
        if not isinstance(payload, dict) or not isinstance(payload.get("prices"), list):
            raise PriceHistoryError(coin_id, "response has no 'prices' array")

        pairs = [
            p for p in payload["prices"]
            if isinstance(p, (list, tuple)) and len(p) == 2 and p[1] is not None
        ]
        pairs.sort(key=lambda p: p[0])
        try:
            return PriceSeries.from_pairs(pairs)
        except (ValidationError, TypeError, ValueError) as exc:
            raise PriceHistoryError(coin_id, f"malformed price points: {exc}") from exc

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "CoinGeckoClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
