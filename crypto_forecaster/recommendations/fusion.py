"""
Signal fusion: combines the ML forecast and technical features into one
Buy/Sell/Hold recommendation with confidence and reasoning.

Rule cascade (evaluated in order — later rules may override direction)
----------------------------------------------------------------------
    1. START : Hold / Low, no reasons.
    2. ML    : change >  2%  → Buy  / Medium  "ML predicts X% price increase"
               change < -2%  → Sell / Medium  "ML predicts X% price decrease"
    3. 24H   : change >  5%  → Buy  / Medium  "Strong 24h price increase"
               change < -5%  → Sell / Medium  "Significant 24h price drop"
    4. MA    : bullish and rec != Sell → Buy   "Short-term MA above long-term MA"
               bearish and rec != Buy  → Sell  "Short-term MA below long-term MA"
               (confidence untouched; an exact tie reports ``bearish`` but
               fires neither branch, since the short MA is not below)
    5. VOL   : volatility > 10% → "High volatility - potential growth opportunity";
               if rec == Buy, confidence → High
    6. CAP   : no ML forecast → confidence capped at Low

This is NOT a weighted score.  Rule 3 overrides rule 2 unconditionally; rule
4 only blocks a flip in the opposite direction; rule 5 can only raise
confidence.  Reasons are appended, never replaced, so the reasoning list is
a trace of which rules fired.

A rule whose input is unavailable (``None``) is skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from crypto_forecaster.config import AnalysisConfig
from crypto_forecaster.models.recommendation import (
    Action,
    Confidence,
    FeatureSet,
    ForecastResult,
    MASignal,
    Recommendation,
    format_pct,
)

REASON_ML_INCREASE = "ML predicts {pct}% price increase"
REASON_ML_DECREASE = "ML predicts {pct}% price decrease"
REASON_STRONG_RISE = "Strong 24h price increase"
REASON_SHARP_DROP = "Significant 24h price drop"
REASON_MA_ABOVE = "Short-term MA above long-term MA"
REASON_MA_BELOW = "Short-term MA below long-term MA"
REASON_HIGH_VOLATILITY = "High volatility - potential growth opportunity"


@dataclass
class _CascadeState:
    action: Action = Action.HOLD
    confidence: Confidence = Confidence.LOW
    reasoning: list[str] = field(default_factory=list)


def fuse_signals(
    features: FeatureSet,
    forecast: Optional[ForecastResult],
    config: AnalysisConfig,
) -> Recommendation:
    """Run the fusion cascade and build the final ``Recommendation``.

    Args:
        features: Technical features for the series.
        forecast: ML forecast, or ``None`` if it could not be produced.
        config:   Analysis configuration carrying the thresholds.

    Returns:
        Frozen ``Recommendation`` with percentage fields at two decimals.
    """
    state = _CascadeState()
    ml_change = forecast.ml_prediction_change_pct if forecast is not None else None

    _apply_ml_rule(state, ml_change, config.ml_threshold_pct)
    _apply_change_rule(state, features.price_change_24h, config.change_threshold_pct)
    _apply_ma_rule(state, features)
    _apply_volatility_rule(state, features.volatility, config.volatility_threshold_pct)

    if forecast is None:
        state.confidence = Confidence.LOW

    return Recommendation(
        recommendation=state.action,
        confidence=state.confidence,
        price_change_24h=format_pct(features.price_change_24h),
        ml_prediction=format_pct(ml_change),
        ma_signal=features.ma_signal,
        volatility=format_pct(features.volatility),
        reasoning=tuple(state.reasoning),
    )


# ── Rules ─────────────────────────────────────────────────────────────────────


def _apply_ml_rule(state: _CascadeState, ml_change: float | None, threshold: float) -> None:
    if ml_change is None:
        return
    if ml_change > threshold:
        state.action = Action.BUY
        state.confidence = Confidence.MEDIUM
        state.reasoning.append(REASON_ML_INCREASE.format(pct=format_pct(ml_change)))
    elif ml_change < -threshold:
        state.action = Action.SELL
        state.confidence = Confidence.MEDIUM
        state.reasoning.append(REASON_ML_DECREASE.format(pct=format_pct(ml_change)))


def _apply_change_rule(state: _CascadeState, change: float | None, threshold: float) -> None:
    if change is None:
        return
    if change > threshold:
        state.action = Action.BUY
        state.confidence = Confidence.MEDIUM
        state.reasoning.append(REASON_STRONG_RISE)
    elif change < -threshold:
        state.action = Action.SELL
        state.confidence = Confidence.MEDIUM
        state.reasoning.append(REASON_SHARP_DROP)


def _apply_ma_rule(state: _CascadeState, features: FeatureSet) -> None:
    # A tie is reported as bearish but is not "below"; no rule fires on it.
    if features.ma_signal == MASignal.BULLISH and state.action != Action.SELL:
        state.action = Action.BUY
        state.reasoning.append(REASON_MA_ABOVE)
    elif (
        features.ma_signal == MASignal.BEARISH
        and features.short_ma < features.long_ma
        and state.action != Action.BUY
    ):
        state.action = Action.SELL
        state.reasoning.append(REASON_MA_BELOW)


def _apply_volatility_rule(
    state: _CascadeState, volatility: float | None, threshold: float
) -> None:
    if volatility is None or not volatility > threshold:
        return
    state.reasoning.append(REASON_HIGH_VOLATILITY)
    if state.action == Action.BUY:
        state.confidence = Confidence.HIGH
