"""
Shared pytest fixtures for the Crypto Forecaster test suite.

Provides:
  - ``make_series``: factory building a ``PriceSeries`` from plain prices
    with hourly timestamps.
  - ``make_forecast``: factory building a ``ForecastResult`` with a chosen
    ML change, for tests that must not depend on stochastic training.
  - ``default_config``: an all-defaults ``AppConfig``.
"""

from __future__ import annotations

from typing import Callable, Sequence

import pytest

from crypto_forecaster.config import AppConfig
from crypto_forecaster.models.price import PricePoint, PriceSeries
from crypto_forecaster.models.recommendation import ForecastResult

HOUR_MS = 3_600_000
START_MS = 1_700_000_000_000


def build_series(prices: Sequence[float], step_ms: int = HOUR_MS) -> PriceSeries:
    return PriceSeries(
        points=tuple(
            PricePoint(timestamp_ms=START_MS + i * step_ms, price=p)
            for i, p in enumerate(prices)
        )
    )


def build_forecast(change_pct: float, current_price: float = 100.0) -> ForecastResult:
    return ForecastResult(
        predicted_price=current_price * (1.0 + change_pct / 100.0),
        ml_prediction_change_pct=change_pct,
        training_examples=20,
        final_loss=1.0,
    )


@pytest.fixture
def make_series() -> Callable[..., PriceSeries]:
    """Factory: ``make_series([100.0, 101.0, ...])`` → hourly ``PriceSeries``."""
    return build_series


@pytest.fixture
def make_forecast() -> Callable[..., ForecastResult]:
    """Factory: ``make_forecast(3.0)`` → ``ForecastResult`` with +3% change."""
    return build_forecast


@pytest.fixture
def default_config() -> AppConfig:
    return AppConfig()
