"""
Tests for crypto_forecaster/ml/linear_model.py.

What we test
------------
LinearPriceRegressor.is_fitted:
  - False before fit(), True after fit(), False after close().

LinearPriceRegressor.fit():
  - Returns a finite final loss and records one loss per epoch.
  - Training loss decreases on a learnable target.
  - Raises ValueError on empty / mismatched / mis-shaped data.
  - Raises TrainingFailureError when the loss becomes non-finite.
  - Checks the cancel event before every epoch (AnalysisCancelled).

LinearPriceRegressor.predict():
  - Raises RuntimeError before fit() and after close().
  - Raises ValueError for the wrong window length.
  - Same seed → identical predictions.

Randomness:
  - Construction, fit() and predict() leave the global torch RNG untouched.
"""

from __future__ import annotations

import math
import threading

import pytest
import torch

from crypto_forecaster.errors import AnalysisCancelled, TrainingFailureError
from crypto_forecaster.ml.dataset import build_training_windows
from crypto_forecaster.ml.linear_model import LinearPriceRegressor


# ── Fixtures ──────────────────────────────────────────────────────────────────

def _wave(n: int = 40) -> list[float]:
    return [1.0 + 0.1 * (i % 6) + 0.01 * i for i in range(n)]


def _data(n: int = 40) -> tuple[list[list[float]], list[float]]:
    return build_training_windows(_wave(n), lookback=5)


class _EventAfter:
    """Cancel event that reports set after ``n`` checks."""

    def __init__(self, n: int) -> None:
        self.n = n
        self.calls = 0

    def is_set(self) -> bool:
        self.calls += 1
        return self.calls > self.n


# ── fit ───────────────────────────────────────────────────────────────────────

class TestFit:
    def test_not_fitted_initially(self):
        assert not LinearPriceRegressor(seed=1).is_fitted

    def test_fit_returns_finite_loss(self):
        inputs, labels = _data()
        model = LinearPriceRegressor(epochs=10, seed=1)
        loss = model.fit(inputs, labels)
        assert math.isfinite(loss)
        assert model.is_fitted
        assert len(model.loss_history) == 10
        assert model.loss_history[-1] == pytest.approx(loss)

    def test_loss_decreases_on_learnable_target(self):
        inputs, labels = _data(60)
        model = LinearPriceRegressor(learning_rate=0.05, epochs=200, seed=7)
        model.fit(inputs, labels)
        history = model.loss_history
        assert history[-1] < history[0]

    def test_empty_data_raises(self):
        with pytest.raises(ValueError):
            LinearPriceRegressor(seed=1).fit([], [])

    def test_mismatched_lengths_raise(self):
        inputs, labels = _data()
        with pytest.raises(ValueError):
            LinearPriceRegressor(seed=1).fit(inputs, labels[:-1])

    def test_wrong_input_width_raises(self):
        with pytest.raises(ValueError):
            LinearPriceRegressor(n_inputs=5, seed=1).fit([[1.0, 2.0]], [3.0])

    def test_non_finite_loss_raises_training_failure(self):
        inputs = [[1.0, 1.0, 1.0, 1.0, 1.0]] * 6
        labels = [float("inf")] * 6
        with pytest.raises(TrainingFailureError) as exc_info:
            LinearPriceRegressor(epochs=5, seed=1).fit(inputs, labels)
        assert exc_info.value.epoch == 1


# ── cancellation ──────────────────────────────────────────────────────────────

class TestCancellation:
    def test_preset_event_cancels_before_first_epoch(self):
        inputs, labels = _data()
        event = threading.Event()
        event.set()
        model = LinearPriceRegressor(epochs=10, seed=1)
        with pytest.raises(AnalysisCancelled) as exc_info:
            model.fit(inputs, labels, cancel_event=event)
        assert exc_info.value.completed_epochs == 0
        assert not model.is_fitted

    def test_cancel_between_epochs(self):
        inputs, labels = _data()
        model = LinearPriceRegressor(epochs=10, seed=1)
        with pytest.raises(AnalysisCancelled) as exc_info:
            model.fit(inputs, labels, cancel_event=_EventAfter(3))
        assert exc_info.value.completed_epochs == 3
        assert len(model.loss_history) == 3

    def test_unset_event_runs_all_epochs(self):
        inputs, labels = _data()
        model = LinearPriceRegressor(epochs=4, seed=1)
        model.fit(inputs, labels, cancel_event=threading.Event())
        assert len(model.loss_history) == 4


# ── predict / close ───────────────────────────────────────────────────────────

class TestPredict:
    def test_predict_before_fit_raises(self):
        with pytest.raises(RuntimeError):
            LinearPriceRegressor(seed=1).predict([1.0] * 5)

    def test_predict_wrong_length_raises(self):
        inputs, labels = _data()
        model = LinearPriceRegressor(epochs=2, seed=1)
        model.fit(inputs, labels)
        with pytest.raises(ValueError):
            model.predict([1.0] * 4)

    def test_predict_returns_float(self):
        inputs, labels = _data()
        model = LinearPriceRegressor(epochs=5, seed=1)
        model.fit(inputs, labels)
        value = model.predict(_wave()[-5:])
        assert isinstance(value, float)
        assert math.isfinite(value)

    def test_same_seed_same_prediction(self):
        inputs, labels = _data()
        window = _wave()[-5:]
        preds = []
        for _ in range(2):
            with LinearPriceRegressor(epochs=20, seed=42) as model:
                model.fit(inputs, labels)
                preds.append(model.predict(window))
        assert preds[0] == preds[1]

    def test_close_releases_model(self):
        inputs, labels = _data()
        model = LinearPriceRegressor(epochs=2, seed=1)
        model.fit(inputs, labels)
        model.close()
        assert not model.is_fitted
        with pytest.raises(RuntimeError):
            model.predict([1.0] * 5)
        model.close()   # idempotent


# ── randomness ────────────────────────────────────────────────────────────────

class TestRandomness:
    def test_global_rng_untouched(self):
        inputs, labels = _data()
        before = torch.get_rng_state()
        with LinearPriceRegressor(epochs=3, seed=5) as model:
            model.fit(inputs, labels)
            model.predict(_wave()[-5:])
        assert torch.equal(torch.get_rng_state(), before)

    def test_initial_weights_follow_seed(self):
        first = LinearPriceRegressor(seed=11)._layer.weight.detach().clone()
        second = LinearPriceRegressor(seed=11)._layer.weight.detach().clone()
        assert torch.equal(first, second)
