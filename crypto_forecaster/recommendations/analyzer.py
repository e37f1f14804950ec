"""
``analyze()`` — the single entry point of the analysis engine.

Flow
----
1.  Guard: fewer than ``min_points`` prices → ``Unavailable(insufficient_data)``.
2.  Feature extraction (deterministic) and forecast training (stochastic) both
    read the same immutable series; neither depends on the other.
3.  ``fuse_signals()`` merges them into a ``Recommendation``.

Failure handling
----------------
Every failure is local to the call and degrades to "no recommendation":

  InsufficientDataError  → Unavailable(insufficient_data)
  TrainingFailureError   → Unavailable(training_failure)
  forecast is None       → Unavailable(insufficient_data)
  degenerate feature     → that rule is skipped (see features.technical)

``fuse_signals()`` itself still accepts a missing forecast and caps
confidence at Low; ``analyze()`` never hands it one.

``AnalysisCancelled`` is re-raised: the caller abandoned the call and owns
what happens next.  Nothing is retried here — re-running a stochastic
training is a caller-level policy.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional, Union

from crypto_forecaster.config import AppConfig
from crypto_forecaster.errors import InsufficientDataError, TrainingFailureError
from crypto_forecaster.features.technical import compute_features
from crypto_forecaster.ml.predictor import run_forecast
from crypto_forecaster.models.price import PriceSeries
from crypto_forecaster.models.recommendation import (
    Recommendation,
    Unavailable,
    UnavailableReason,
)
from crypto_forecaster.recommendations.fusion import fuse_signals

logger = logging.getLogger(__name__)

AnalysisResult = Union[Recommendation, Unavailable]


def analyze(
    series: PriceSeries,
    config: Optional[AppConfig] = None,
    cancel_event: Optional[threading.Event] = None,
) -> AnalysisResult:
    """Analyse a price series and return a recommendation.

    Args:
        series:       Time-ordered price series in the caller's currency.
        config:       Application config; ``AppConfig()`` defaults when omitted.
        cancel_event: Optional event; when set, training stops before the
                      next epoch and ``AnalysisCancelled`` is raised.

    Returns:
        ``Recommendation`` on success, ``Unavailable`` otherwise.

    Raises:
        AnalysisCancelled: ``cancel_event`` was set during training.
    """
    config = config or AppConfig()

    try:
        _require_points(series, config.analysis.min_points)
    except InsufficientDataError as exc:
        logger.info("No recommendation: %s", exc)
        return Unavailable(reason=UnavailableReason.INSUFFICIENT_DATA, detail=str(exc))

    features = compute_features(series, config.analysis)

    try:
        forecast = run_forecast(series.values, config.forecast, cancel_event=cancel_event)
    except TrainingFailureError as exc:
        logger.warning("No recommendation: training failed (%s)", exc)
        return Unavailable(reason=UnavailableReason.TRAINING_FAILURE, detail=str(exc))

    if forecast is None:
        detail = (
            f"Insufficient data: fewer than {config.forecast.min_training_examples} "
            f"training examples from {len(series)} price points."
        )
        logger.info("No recommendation: %s", detail)
        return Unavailable(reason=UnavailableReason.INSUFFICIENT_DATA, detail=detail)

    recommendation = fuse_signals(features, forecast, config.analysis)
    logger.info(
        "Recommendation: %s (%s confidence) from %d points",
        recommendation.recommendation, recommendation.confidence, len(series),
    )
    return recommendation


def _require_points(series: PriceSeries, required: int) -> None:
    if len(series) < required:
        raise InsufficientDataError(n_points=len(series), required=required)
