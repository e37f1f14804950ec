"""
Analysis output models.

``FeatureSet`` and ``ForecastResult`` are the intermediate products of the two
analysis stages; they are created fresh per ``analyze()`` call and never
persisted.  ``Recommendation`` is the sole externally visible output;
``Unavailable`` is returned in its place when no prediction can be made.

All models are frozen.  ``Recommendation`` stores its three percentage fields
as strings rendered with exactly two decimals, matching what the presentation
layer displays, and serialises with camelCase aliases
(``model_dump(by_alias=True)``).
"""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MASignal(StrEnum):
    """Moving-average crossover direction."""

    BULLISH = "bullish"
    BEARISH = "bearish"


class Action(StrEnum):
    """Recommended trading action."""

    BUY = "Buy"
    SELL = "Sell"
    HOLD = "Hold"


class Confidence(StrEnum):
    """Coarse agreement indicator; not a calibrated probability."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class UnavailableReason(StrEnum):
    INSUFFICIENT_DATA = "insufficient_data"
    TRAINING_FAILURE = "training_failure"


def format_pct(value: float | None) -> str | None:
    """Render a percentage with exactly two decimals (``5 → "5.00"``)."""
    if value is None:
        return None
    return f"{value:.2f}"


class FeatureSet(BaseModel):
    """Technical features derived from one read of a price series.

    ``None`` marks a degenerate feature (empty window or zero mean) that the
    fusion cascade must skip.

    Attributes:
        price_change_24h: Mean of the recent window vs the one before it, in %.
        ma_signal: Short vs long moving-average crossover direction.
        volatility: ``abs(price_change_24h)`` — a proxy, not a dispersion measure.
        short_ma: Mean of the short MA window.
        long_ma: Mean of the long MA window (truncated at series start).
    """

    model_config = ConfigDict(frozen=True)

    price_change_24h: Optional[float]
    ma_signal: MASignal
    volatility: Optional[float]
    short_ma: float
    long_ma: float

    @field_validator("volatility")
    @classmethod
    def validate_volatility_nonnegative(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0.0:
            raise ValueError(f"volatility must be >= 0, got {v}.")
        return v


class ForecastResult(BaseModel):
    """Next-point regression forecast.

    Attributes:
        predicted_price: Model output for the most recent lookback window.
        ml_prediction_change_pct: ``(predicted - current) / current * 100``.
        training_examples: Number of sliding-window examples trained on.
        final_loss: Mean MSE over the last training epoch, on prices divided
            by the latest price.
    """

    model_config = ConfigDict(frozen=True)

    predicted_price: float
    ml_prediction_change_pct: float
    training_examples: int
    final_loss: float


class Recommendation(BaseModel):
    """Fused buy/sell/hold recommendation.

    Attributes:
        recommendation: ``Buy``, ``Sell`` or ``Hold``.
        confidence: ``Low``, ``Medium`` or ``High``.
        price_change_24h: 24h change in %, two decimals; ``None`` if unavailable.
        ml_prediction: ML forecast change in %, two decimals; ``None`` if absent.
        ma_signal: ``bullish`` or ``bearish``.
        volatility: Volatility proxy in %, two decimals; ``None`` if unavailable.
        reasoning: Human-readable reasons, in the order the rules fired.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    recommendation: Action
    confidence: Confidence
    price_change_24h: Optional[str] = Field(default=None, alias="priceChange24h")
    ml_prediction: Optional[str] = Field(default=None, alias="mlPrediction")
    ma_signal: MASignal = Field(alias="maSignal")
    volatility: Optional[str] = None
    reasoning: tuple[str, ...] = ()


class Unavailable(BaseModel):
    """Returned by ``analyze()`` when no recommendation can be produced.

    Callers render a neutral "cannot predict" state — never a default Buy/Sell.
    """

    model_config = ConfigDict(frozen=True)

    reason: UnavailableReason
    detail: str = ""
