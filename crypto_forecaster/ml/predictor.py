"""
Forecast runner: train a fresh regressor on one series and predict the next price.

Each call builds its own ``LinearPriceRegressor``, trains it, runs one
inference, and releases it before returning.  There is deliberately no
module-level model cache: a stale analysis (e.g. the user switched coin or
currency) can be abandoned at any epoch boundary without leaving shared state
behind.
"""

from __future__ import annotations

import logging
import math
import threading
from typing import Optional, Sequence

from crypto_forecaster.config import ForecastConfig
from crypto_forecaster.errors import TrainingFailureError
from crypto_forecaster.ml.dataset import build_training_windows, latest_window
from crypto_forecaster.ml.linear_model import LinearPriceRegressor
from crypto_forecaster.models.recommendation import ForecastResult

logger = logging.getLogger(__name__)


def run_forecast(
    values: Sequence[float],
    config: ForecastConfig,
    cancel_event: Optional[threading.Event] = None,
) -> Optional[ForecastResult]:
    """Train on ``values`` and forecast the next price.

    Args:
        values:       Price projection of the series, oldest first.
        config:       Forecast configuration (lookback, epochs, optimiser, seed).
        cancel_event: Optional event checked before each training epoch.

    Returns:
        ``ForecastResult``, or ``None`` when fewer than
        ``config.min_training_examples`` examples can be built.

    Raises:
        TrainingFailureError: Non-finite loss, non-finite prediction, or a
            non-finite or non-positive current price.
        AnalysisCancelled:    ``cancel_event`` was set during training.
    """
    inputs, labels = build_training_windows(values, config.lookback)
    if len(inputs) < config.min_training_examples:
        logger.info(
            "Forecast skipped: %d training examples (< %d required)",
            len(inputs), config.min_training_examples,
        )
        return None

    current_price = float(values[-1])
    if not (math.isfinite(current_price) and current_price > 0.0):
        raise TrainingFailureError(
            f"Current price must be finite and positive, got {current_price}."
        )

    # Train on prices relative to the latest one; the fit is the same for any
    # price level and the output is scaled back below.
    scaled_inputs = [[v / current_price for v in window] for window in inputs]
    scaled_labels = [v / current_price for v in labels]
    scaled_window = [v / current_price for v in latest_window(values, config.lookback)]

    model = LinearPriceRegressor(
        n_inputs=config.lookback,
        learning_rate=config.learning_rate,
        epochs=config.epochs,
        batch_size=config.batch_size,
        seed=config.seed,
    )
    try:
        final_loss = model.fit(scaled_inputs, scaled_labels, cancel_event=cancel_event)
        predicted = model.predict(scaled_window) * current_price
    finally:
        model.close()

    if not math.isfinite(predicted):
        raise TrainingFailureError(f"Non-finite predicted price: {predicted}.")

    change_pct = (predicted - current_price) / current_price * 100.0
    if not math.isfinite(change_pct):
        raise TrainingFailureError(f"Non-finite predicted change: {change_pct}.")

    logger.debug(
        "Forecast: %d examples, final loss %.6f, predicted %.6f (%+.2f%%)",
        len(inputs), final_loss, predicted, change_pct,
    )
    return ForecastResult(
        predicted_price=predicted,
        ml_prediction_change_pct=change_pct,
        training_examples=len(inputs),
        final_loss=final_loss,
    )
