"""
Technical features: 24h change, moving-average crossover, volatility proxy.

How it works
------------
All features are computed on the price projection of the series
(``PriceSeries.values``) with explicit bounds-clamped slicing, so a short
series is a normal input shape rather than an error:

1.  **24h change**: ``recent`` is the last ``change_window`` prices and
    ``older`` the (up to) ``change_window`` prices immediately before it::

        recent = values[max(0, n - w) : n]
        older  = values[max(0, n - 2w) : max(0, n - w)]

    ``(mean(recent) - mean(older)) / mean(older) * 100``.  Either window empty,
    or ``mean(older) == 0`` → the feature is ``None``.

2.  **Moving averages**: short / long means over the last 7 / 30 prices.
    Windows truncate at the series start (mean over what exists).

3.  **MA signal**: ``bullish`` iff ``short_ma > long_ma``.  Equality is
    ``bearish``.

4.  **Volatility**: ``abs(price_change_24h)``.  This is a proxy, NOT a
    dispersion statistic — it ignores intra-window spread entirely.  Every
    volatility threshold in the fusion cascade is calibrated against this
    definition, so swapping in a standard deviation would change outputs.

Determinism
-----------
Pure functions of the input; no hidden state.  Two calls on the same series
return bit-identical results.
"""

from __future__ import annotations

import logging
from typing import Sequence

from crypto_forecaster.config import AnalysisConfig
from crypto_forecaster.models.price import PriceSeries
from crypto_forecaster.models.recommendation import FeatureSet, MASignal

logger = logging.getLogger(__name__)


def compute_features(series: PriceSeries, config: AnalysisConfig) -> FeatureSet:
    """Compute the technical ``FeatureSet`` for a price series.

    Args:
        series: Time-ordered price series.  Must contain at least one point
                (the analysis guard enforces ``min_points`` before this runs).
        config: Analysis configuration carrying the window sizes.

    Returns:
        ``FeatureSet``; ``price_change_24h`` and ``volatility`` are ``None``
        when the change windows cannot be filled.

    Raises:
        ValueError: If the series is empty.
    """
    values = series.values
    if not values:
        raise ValueError("compute_features() needs at least one price point.")

    change = price_change_pct(values, config.change_window)
    short_ma = trailing_mean(values, config.short_ma_window)
    long_ma = trailing_mean(values, config.long_ma_window)
    signal = MASignal.BULLISH if short_ma > long_ma else MASignal.BEARISH
    volatility = abs(change) if change is not None else None

    if change is None:
        logger.info(
            "24h change unavailable for %d-point series (window=%d)",
            len(values), config.change_window,
        )

    return FeatureSet(
        price_change_24h=change,
        ma_signal=signal,
        volatility=volatility,
        short_ma=short_ma,
        long_ma=long_ma,
    )


def price_change_pct(values: Sequence[float], window: int) -> float | None:
    """Percent change between the last ``window`` prices and the ones before.

    Returns ``None`` when either window is empty or the older mean is zero.
    """
    n = len(values)
    recent = values[max(0, n - window) : n]
    older = values[max(0, n - 2 * window) : max(0, n - window)]
    if not recent or not older:
        return None

    older_mean = _mean(older)
    if older_mean == 0.0:
        return None
    return (_mean(recent) - older_mean) / older_mean * 100.0


def trailing_mean(values: Sequence[float], window: int) -> float:
    """Mean of the last ``window`` values, truncated at the series start."""
    tail = values[max(0, len(values) - window) :]
    if not tail:
        raise ValueError("trailing_mean() needs at least one value.")
    return _mean(tail)


def _mean(xs: Sequence[float]) -> float:
    return sum(xs) / len(xs)
