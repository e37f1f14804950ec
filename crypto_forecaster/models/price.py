"""
Price history models — the input side of the analysis engine.

``PricePoint`` is one ``(timestamp_ms, price)`` observation already denominated
in the caller's chosen currency.  ``PriceSeries`` is the time-ordered sequence
the engine analyses.

Both models are frozen (immutable) after construction.  The engine only reads
slices of ``PriceSeries.values``; it never mutates the caller's series.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from pydantic import BaseModel, ConfigDict, field_validator


class PricePoint(BaseModel):
    """A single historical price observation.

    Attributes:
        timestamp_ms: Unix epoch time in milliseconds.
        price: Price in the quote currency; finite and strictly positive.
    """

    model_config = ConfigDict(frozen=True)

    timestamp_ms: int
    price: float

    @field_validator("price")
    @classmethod
    def validate_price_finite_positive(cls, v: float) -> float:
        if not (math.isfinite(v) and v > 0.0):
            raise ValueError(f"price must be finite and positive, got {v}.")
        return v


class PriceSeries(BaseModel):
    """Time-ordered sequence of price points.

    Ordering is non-decreasing by ``timestamp_ms``; duplicate timestamps are
    permitted and kept as-is.  An empty series is valid (the analysis guard
    rejects it later as insufficient data).

    Attributes:
        points: The observations, oldest first.
    """

    model_config = ConfigDict(frozen=True)

    points: tuple[PricePoint, ...] = ()

    @field_validator("points")
    @classmethod
    def validate_time_ordered(cls, v: tuple[PricePoint, ...]) -> tuple[PricePoint, ...]:
        for prev, cur in zip(v, v[1:]):
            if cur.timestamp_ms < prev.timestamp_ms:
                raise ValueError(
                    f"points must be ordered by timestamp; {cur.timestamp_ms} "
                    f"follows {prev.timestamp_ms}."
                )
        return v

    @classmethod
    def from_pairs(cls, pairs: Iterable[Sequence[float]]) -> "PriceSeries":
        """Build a series from ``[timestamp_ms, price]`` pairs.

        This is the shape of the ``prices`` array in a CoinGecko
        ``market_chart`` response.
        """
        return cls(
            points=tuple(
                PricePoint(timestamp_ms=int(ts), price=float(price)) for ts, price in pairs
            )
        )

    @property
    def values(self) -> list[float]:
        """Price projection of the series (timestamps dropped)."""
        return [p.price for p in self.points]

    def __len__(self) -> int:
        return len(self.points)
