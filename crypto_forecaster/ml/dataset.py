"""
Supervised training-set construction for the next-price regressor.

A sliding window of ``lookback`` consecutive prices is the input; the price
immediately after the window is the label::

    i = 0 .. N - lookback - 1
    input_i = values[i : i + lookback]
    label_i = values[i + lookback]

For ``lookback = 5`` a series of N prices yields ``N - 5`` examples, the last
one labelled with the most recent price.
"""

from __future__ import annotations

from typing import Sequence


def build_training_windows(
    values: Sequence[float],
    lookback: int,
) -> tuple[list[list[float]], list[float]]:
    """Build ``(inputs, labels)`` sliding-window examples.

    Args:
        values:   Price projection of the series, oldest first.
        lookback: Window length (model input width).

    Returns:
        Tuple ``(inputs, labels)`` of equal length ``max(0, N - lookback)``.
    """
    if lookback < 1:
        raise ValueError(f"lookback must be >= 1, got {lookback}.")

    inputs: list[list[float]] = []
    labels: list[float] = []
    for i in range(max(0, len(values) - lookback)):
        inputs.append([float(v) for v in values[i : i + lookback]])
        labels.append(float(values[i + lookback]))
    return inputs, labels


def latest_window(values: Sequence[float], lookback: int) -> list[float]:
    """The most recent ``lookback`` prices — the inference input."""
    if len(values) < lookback:
        raise ValueError(
            f"latest_window() needs >= {lookback} values; got {len(values)}."
        )
    return [float(v) for v in values[len(values) - lookback :]]
