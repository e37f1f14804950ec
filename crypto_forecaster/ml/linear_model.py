"""
Single-layer linear price regressor (PyTorch).

Model
-----
One ``torch.nn.Linear(lookback, 1)`` — a plain linear map from the last
``lookback`` prices to the next one, with no hidden layers or activation.
Weights are Glorot-uniform initialised and the bias starts at zero.

Training
--------
Mean squared error, Adam optimiser, a fixed number of epochs over the full
training set in shuffled mini-batches.  No early stopping and no validation
split.  The model sees whatever scale the caller passes in; ``run_forecast``
divides every window by the latest price so the fit is scale-free.

Statelessness
-------------
Instances are meant to live for exactly one analysis call: build, ``fit()``,
``predict()``, ``close()``.  Randomness (weight init, batch shuffling) comes
from a per-instance ``torch.Generator``.  The layer is allocated with
``torch.nn.utils.skip_init`` so torch's default initialiser never runs and
the global torch RNG is never touched; concurrent analyses cannot interfere
with each other.

Cancellation
------------
``fit()`` checks the optional cancel event before every epoch and raises
``AnalysisCancelled``.  An epoch in progress always runs to completion.
"""

from __future__ import annotations

import logging
import math
import threading
from typing import Optional, Sequence

import torch

from crypto_forecaster.errors import AnalysisCancelled, TrainingFailureError

logger = logging.getLogger(__name__)


class LinearPriceRegressor:
    """Per-call linear regressor for next-price forecasting.

    Attributes:
        n_inputs:      Input width (lookback window length).
        learning_rate: Adam step size.
        epochs:        Full passes over the training set per ``fit()``.
        batch_size:    Mini-batch size.
    """

    def __init__(
        self,
        n_inputs: int = 5,
        learning_rate: float = 0.05,
        epochs: int = 100,
        batch_size: int = 32,
        seed: Optional[int] = None,
    ) -> None:
        self.n_inputs = n_inputs
        self.learning_rate = learning_rate
        self.epochs = epochs
        self.batch_size = batch_size

        self._generator = torch.Generator()
        if seed is not None:
            self._generator.manual_seed(seed)
        else:
            self._generator.seed()

        self._layer: Optional[torch.nn.Linear] = torch.nn.utils.skip_init(
            torch.nn.Linear, n_inputs, 1
        )
        limit = math.sqrt(6.0 / (n_inputs + 1))
        with torch.no_grad():
            self._layer.weight.uniform_(-limit, limit, generator=self._generator)
            self._layer.bias.zero_()

        self._fitted = False
        self._loss_history: list[float] = []

    # ── Properties ────────────────────────────────────────────────────────────

    @property
    def is_fitted(self) -> bool:
        """True after fit() has completed all epochs."""
        return self._fitted and self._layer is not None

    @property
    def loss_history(self) -> list[float]:
        """Mean training loss per completed epoch."""
        return list(self._loss_history)

    # ── Training ──────────────────────────────────────────────────────────────

    def fit(
        self,
        inputs: Sequence[Sequence[float]],
        labels: Sequence[float],
        cancel_event: Optional[threading.Event] = None,
    ) -> float:
        """Train for ``self.epochs`` epochs.

        Args:
            inputs:       ``(n_examples, n_inputs)`` price windows.
            labels:       ``n_examples`` next prices.
            cancel_event: Checked before each epoch; set → ``AnalysisCancelled``.

        Returns:
            Mean MSE of the final epoch.

        Raises:
            ValueError:           Empty or mis-shaped training data.
            AnalysisCancelled:    The cancel event was set.
            TrainingFailureError: An epoch loss was NaN or infinite.
        """
        if self._layer is None:
            raise RuntimeError("LinearPriceRegressor has been closed.")
        if not inputs or len(inputs) != len(labels):
            raise ValueError(
                f"fit() needs matching non-empty inputs/labels; "
                f"got {len(inputs)} inputs, {len(labels)} labels."
            )

        x = torch.tensor(inputs, dtype=torch.float32)
        y = torch.tensor(labels, dtype=torch.float32).unsqueeze(1)
        if x.shape[1] != self.n_inputs:
            raise ValueError(f"Expected {self.n_inputs} inputs per example, got {x.shape[1]}.")

        optimizer = torch.optim.Adam(self._layer.parameters(), lr=self.learning_rate)
        criterion = torch.nn.MSELoss()
        n = x.shape[0]
        epoch_loss = float("nan")

        self._layer.train()
        try:
            for epoch in range(self.epochs):
                if cancel_event is not None and cancel_event.is_set():
                    raise AnalysisCancelled(completed_epochs=epoch)

                order = torch.randperm(n, generator=self._generator)
                total = 0.0
                for start in range(0, n, self.batch_size):
                    idx = order[start : start + self.batch_size]
                    optimizer.zero_grad()
                    loss = criterion(self._layer(x[idx]), y[idx])
                    loss.backward()
                    optimizer.step()
                    total += loss.item() * len(idx)

                epoch_loss = total / n
                if not math.isfinite(epoch_loss):
                    raise TrainingFailureError(
                        f"Non-finite training loss at epoch {epoch + 1}.", epoch=epoch + 1
                    )
                self._loss_history.append(epoch_loss)

                if (epoch + 1) % 25 == 0:
                    logger.debug("Epoch %d/%d, loss: %.6f", epoch + 1, self.epochs, epoch_loss)
        finally:
            optimizer.zero_grad(set_to_none=True)
            del x, y, optimizer

        self._fitted = True
        return epoch_loss

    # ── Inference ─────────────────────────────────────────────────────────────

    def predict(self, window: Sequence[float]) -> float:
        """Predict the next price from the most recent ``n_inputs`` prices.

        Raises:
            RuntimeError: If the model is not fitted (or has been closed).
            ValueError:   If ``window`` has the wrong length.
        """
        if not self.is_fitted:
            raise RuntimeError("predict() called before fit().")
        if len(window) != self.n_inputs:
            raise ValueError(f"Expected {self.n_inputs} prices, got {len(window)}.")

        self._layer.eval()
        x = torch.tensor([list(window)], dtype=torch.float32)
        try:
            with torch.no_grad():
                out = self._layer(x)
                value = float(out.item())
        finally:
            del x
        return value

    # ── Cleanup ───────────────────────────────────────────────────────────────

    def close(self) -> None:
        """Release the layer and its parameters.  Safe to call twice."""
        self._layer = None
        self._fitted = False

    def __enter__(self) -> "LinearPriceRegressor":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
