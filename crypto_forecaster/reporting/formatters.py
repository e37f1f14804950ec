"""
ASCII terminal formatters for the ``analyze`` CLI command.

All formatters accept analysis results and return plain multi-line strings
suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Layout
------
::

  AI Prediction Analysis -- bitcoin (USD)
  ========================================
    Signal:      Buy
    Confidence:  Medium

    24h Change:     +6.12%
    ML Prediction:  -0.41%
    Trend:          bullish
    Volatility:     6.12%

  Analysis:
    - Strong 24h price increase
    - Short-term MA above long-term MA

  * This is a basic technical analysis. ...

Unavailable values render as ``n/a``.
"""

from __future__ import annotations

from crypto_forecaster.models.recommendation import Recommendation, Unavailable

TITLE = "AI Prediction Analysis"
UNAVAILABLE_MESSAGE = "Unable to generate prediction at this time."
DISCLAIMER = (
    "* This is a basic technical analysis. Cryptocurrency investments are highly "
    "volatile.\n  Always do your own research and consider consulting financial advisors."
)


def format_pct_field(value: str | None, signed: bool = False) -> str:
    """Render a two-decimal percentage string for display.

    ``signed=True`` prefixes non-negative values with ``+`` so gains and
    losses line up visually.
    """
    if value is None:
        return "n/a"
    if signed and not value.startswith("-"):
        return f"+{value}%"
    return f"{value}%"


def format_title(coin_id: str = "", currency: str = "") -> str:
    """Title line plus underline."""
    title = TITLE
    if coin_id:
        title += f" -- {coin_id}"
        if currency:
            title += f" ({currency.upper()})"
    return f"{title}\n{'=' * len(title)}"


def format_recommendation(
    rec: Recommendation,
    coin_id: str = "",
    currency: str = "",
) -> str:
    """Format a ``Recommendation`` as the prediction panel.

    Args:
        rec:      The recommendation to render.
        coin_id:  Asset id shown in the title (optional).
        currency: Quote currency shown in the title (optional).

    Returns:
        Multi-line string; reasoning bullets appear in cascade order.
    """
    lines = [
        format_title(coin_id, currency),
        f"  Signal:      {rec.recommendation}",
        f"  Confidence:  {rec.confidence}",
        "",
        f"  24h Change:     {format_pct_field(rec.price_change_24h, signed=True)}",
        f"  ML Prediction:  {format_pct_field(rec.ml_prediction, signed=True)}",
        f"  Trend:          {rec.ma_signal}",
        f"  Volatility:     {format_pct_field(rec.volatility)}",
        "",
        "Analysis:",
    ]
    if rec.reasoning:
        lines.extend(f"  - {reason}" for reason in rec.reasoning)
    else:
        lines.append("  - No strong signals")
    lines.append("")
    lines.append(DISCLAIMER)
    return "\n".join(lines)


def format_unavailable(
    result: Unavailable,
    coin_id: str = "",
    currency: str = "",
    verbose: bool = False,
) -> str:
    """Format the neutral "cannot predict" panel.

    The detail (e.g. "Insufficient data: 7 price points ...") is only shown
    with ``verbose=True``; the default panel stays neutral.
    """
    lines = [format_title(coin_id, currency), f"  {UNAVAILABLE_MESSAGE}"]
    if verbose and result.detail:
        lines.append(f"  ({result.reason}: {result.detail})")
    return "\n".join(lines)
