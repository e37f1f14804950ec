"""
Crypto Forecaster — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (fetch price history, analyse).
  5. Report result to stdout.

Install and run::

    pip install -e .
    crypto-forecaster --help
    crypto-forecaster validate-config
    crypto-forecaster analyze bitcoin
    crypto-forecaster analyze ethereum --currency eur --days 14 --json
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="crypto-forecaster",
    help="Cryptocurrency price analysis — technical signals plus a short-horizon ML forecast.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from crypto_forecaster.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from crypto_forecaster.utils.logging import configure_logging
    configure_logging(config.logging)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Provider:         {config.provider.base_url}")
    typer.echo(f"  Default currency: {config.provider.vs_currency}")
    typer.echo(f"  History window:   {config.provider.days}d")
    typer.echo(
        f"  MA windows:       {config.analysis.short_ma_window} / "
        f"{config.analysis.long_ma_window}"
    )
    typer.echo(f"  Training epochs:  {config.forecast.epochs}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("analyze")
def analyze_coin(
    coin_id: str = typer.Argument(..., help="CoinGecko asset id, e.g. 'bitcoin'."),
    currency: Optional[str] = typer.Option(
        None,
        "--currency",
        "-c",
        help="Quote currency code (default: provider.vs_currency from config).",
    ),
    days: Optional[int] = typer.Option(
        None,
        "--days",
        "-d",
        help="History window in days (default: provider.days from config).",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the result as JSON instead of the ASCII panel.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Fetch price history for COIN_ID and print a Buy/Sell/Hold analysis.

    An unavailable prediction (too little history, failed training) is not
    an error: the neutral panel is printed and the exit code is 0.  Provider
    failures exit with code 1.
    """
    from crypto_forecaster.errors import PriceHistoryError
    from crypto_forecaster.ingestion.coingecko_client import CoinGeckoClient
    from crypto_forecaster.models.recommendation import Recommendation
    from crypto_forecaster.recommendations.analyzer import analyze
    from crypto_forecaster.reporting.formatters import (
        format_recommendation,
        format_unavailable,
    )

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    vs_currency = (currency or config.provider.vs_currency).lower()
    window_days = days if days is not None else config.provider.days
    if window_days < 1:
        typer.echo(f"[ERROR] --days must be >= 1, got {window_days}.", err=True)
        raise typer.Exit(code=1)

    try:
        with CoinGeckoClient(
            base_url=config.provider.base_url,
            timeout_seconds=config.provider.timeout_seconds,
        ) as client:
            series = client.fetch_price_history(
                coin_id, days=window_days, vs_currency=vs_currency
            )
    except PriceHistoryError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    result = analyze(series, config)

    if as_json:
        payload = {"coin": coin_id, "currency": vs_currency, "points": len(series)}
        if isinstance(result, Recommendation):
            payload["prediction"] = result.model_dump(mode="json", by_alias=True)
        else:
            payload["unavailable"] = result.model_dump(mode="json")
        typer.echo(json.dumps(payload, indent=2))
        return

    if isinstance(result, Recommendation):
        typer.echo(format_recommendation(result, coin_id, vs_currency))
    else:
        typer.echo(format_unavailable(result, coin_id, vs_currency, verbose=config.debug))


if __name__ == "__main__":
    app()
