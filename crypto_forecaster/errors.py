"""
Exceptions raised by the analysis engine and the price-history client.

``analyze()`` converts ``InsufficientDataError`` and ``TrainingFailureError``
into an ``Unavailable`` result; callers never see them from that entry point.
``AnalysisCancelled`` always propagates — abandoning a stale analysis is the
caller's decision, not a failed prediction.
"""

from __future__ import annotations


class InsufficientDataError(ValueError):
    """Raised when a price series is too short to analyse.

    Attributes:
        n_points: Number of points supplied.
        required: Minimum number of points needed.
    """

    def __init__(self, n_points: int, required: int) -> None:
        self.n_points = n_points
        self.required = required
        super().__init__(
            f"Insufficient data: {n_points} price points, need at least {required}."
        )


class TrainingFailureError(RuntimeError):
    """Raised when regression training or inference produces non-finite numbers.

    Attributes:
        epoch: Epoch at which the failure was detected (``None`` for inference).
    """

    def __init__(self, message: str, epoch: int | None = None) -> None:
        self.epoch = epoch
        super().__init__(message)


class AnalysisCancelled(RuntimeError):
    """Raised between training epochs when the caller's cancel event is set.

    Attributes:
        completed_epochs: Epochs fully completed before cancellation.
    """

    def __init__(self, completed_epochs: int) -> None:
        self.completed_epochs = completed_epochs
        super().__init__(f"Analysis cancelled after {completed_epochs} epoch(s).")


class PriceHistoryError(RuntimeError):
    """Raised when the price-history provider fails or returns unusable data.

    Attributes:
        coin_id:     Asset identifier that was requested.
        status_code: HTTP status code, or ``None`` for transport/parse errors.
    """

    def __init__(self, coin_id: str, message: str, status_code: int | None = None) -> None:
        self.coin_id = coin_id
        self.status_code = status_code
        super().__init__(f"Price history for '{coin_id}' unavailable: {message}")
