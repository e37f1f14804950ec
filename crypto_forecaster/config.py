"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``CRYPTO_FORECASTER_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The analysis engine, price client and CLI all receive an ``AppConfig``
section — never raw dicts or individual env var lookups scattered through
the codebase.  Every section has working defaults, so ``AppConfig()`` is a
valid configuration on its own (used by library callers and tests).
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class AnalysisConfig(BaseModel):
    """Feature windows and fusion thresholds.

    Window sizes are in price points (CoinGecko returns hourly points for
    ranges of 2–90 days, so 24 points ≈ 24h).  Thresholds are percentages.
    """

    model_config = ConfigDict(frozen=True)

    min_points: int = 10
    change_window: int = 24
    short_ma_window: int = 7
    long_ma_window: int = 30
    ml_threshold_pct: float = 2.0
    change_threshold_pct: float = 5.0
    volatility_threshold_pct: float = 10.0

    @field_validator("min_points", "change_window", "short_ma_window", "long_ma_window")
    @classmethod
    def validate_positive_window(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"window sizes must be >= 1, got {v}.")
        return v

    @model_validator(mode="after")
    def validate_ma_windows(self) -> "AnalysisConfig":
        if self.short_ma_window >= self.long_ma_window:
            raise ValueError(
                f"short_ma_window ({self.short_ma_window}) must be < "
                f"long_ma_window ({self.long_ma_window})."
            )
        return self


class ForecastConfig(BaseModel):
    """Per-call linear regression training parameters."""

    model_config = ConfigDict(frozen=True)

    lookback: int = 5
    epochs: int = 100
    batch_size: int = 32
    learning_rate: float = 0.05
    min_training_examples: int = 5
    seed: Optional[int] = None

    @field_validator("lookback", "epochs", "batch_size", "min_training_examples")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"must be >= 1, got {v}.")
        return v

    @field_validator("learning_rate")
    @classmethod
    def validate_learning_rate(cls, v: float) -> float:
        if v <= 0.0:
            raise ValueError(f"learning_rate must be > 0, got {v}.")
        return v


class ProviderConfig(BaseModel):
    """CoinGecko price-history provider settings."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://api.coingecko.com/api/v3"
    vs_currency: str = "usd"
    days: int = 30
    timeout_seconds: float = 30.0

    @field_validator("vs_currency")
    @classmethod
    def normalise_currency(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("vs_currency must not be empty.")
        return v.strip().lower()

    @field_validator("days")
    @classmethod
    def validate_days(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"days must be >= 1, got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env, or directly
    as ``AppConfig()`` for all-default settings.
    """

    model_config = ConfigDict(frozen=True)

    analysis: AnalysisConfig = AnalysisConfig()
    forecast: ForecastConfig = ForecastConfig()
    provider: ProviderConfig = ProviderConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply CRYPTO_FORECASTER_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply CRYPTO_FORECASTER_* env vars to the raw config dict.

    Supported overrides:
      CRYPTO_FORECASTER_LOG_LEVEL    → raw["logging"]["level"]
      CRYPTO_FORECASTER_VS_CURRENCY  → raw["provider"]["vs_currency"]
      CRYPTO_FORECASTER_SEED         → raw["forecast"]["seed"]
      CRYPTO_FORECASTER_DEBUG        → raw["debug"]
    """
    if log_level := os.environ.get("CRYPTO_FORECASTER_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if currency := os.environ.get("CRYPTO_FORECASTER_VS_CURRENCY"):
        raw.setdefault("provider", {})["vs_currency"] = currency

    if seed := os.environ.get("CRYPTO_FORECASTER_SEED"):
        raw.setdefault("forecast", {})["seed"] = int(seed)

    if debug := os.environ.get("CRYPTO_FORECASTER_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        analysis=AnalysisConfig(**raw.get("analysis", {})),
        forecast=ForecastConfig(**raw.get("forecast", {})),
        provider=ProviderConfig(**raw.get("provider", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
