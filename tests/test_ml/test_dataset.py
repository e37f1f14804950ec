"""Tests for crypto_forecaster.ml.dataset."""

from __future__ import annotations

import pytest

from crypto_forecaster.ml.dataset import build_training_windows, latest_window


def test_yields_n_minus_lookback_examples() -> None:
    values = [float(v) for v in range(10)]
    inputs, labels = build_training_windows(values, lookback=5)
    assert len(inputs) == len(labels) == 5


def test_first_and_last_examples() -> None:
    values = [float(v) for v in range(10, 22)]
    inputs, labels = build_training_windows(values, lookback=5)
    assert inputs[0] == [10.0, 11.0, 12.0, 13.0, 14.0]
    assert labels[0] == 15.0
    # the last label is the most recent price
    assert inputs[-1] == values[-6:-1]
    assert labels[-1] == values[-1]


def test_series_not_longer_than_lookback_yields_nothing() -> None:
    assert build_training_windows([1.0, 2.0, 3.0, 4.0, 5.0], lookback=5) == ([], [])
    assert build_training_windows([], lookback=5) == ([], [])


def test_invalid_lookback_raises() -> None:
    with pytest.raises(ValueError):
        build_training_windows([1.0, 2.0], lookback=0)


def test_latest_window() -> None:
    assert latest_window([1.0, 2.0, 3.0, 4.0, 5.0, 6.0], 5) == [2.0, 3.0, 4.0, 5.0, 6.0]


def test_latest_window_too_short_raises() -> None:
    with pytest.raises(ValueError):
        latest_window([1.0, 2.0], 5)
