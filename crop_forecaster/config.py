"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local overrides (gitignored)
  4. Environment variables        — ``CROP_FORECASTER_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The engine and every CLI command receive an ``AppConfig`` instance — never
raw dicts or individual env var lookups scattered through the codebase.
When no config file is wanted (library use, tests), ``AppConfig()`` carries
the same defaults as ``config/default.toml``.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class ModelConfig(BaseModel):
    """Predictor architecture and training budget.

    ``random_state`` is unset by default: training is stochastic and exact
    forecast numbers are not reproducible across runs. Set it to pin them.
    """

    model_config = ConfigDict(frozen=True)

    window_size: int = 7
    hidden_layers: list[int] = [64, 32, 16]
    l2_penalty: float = 0.001
    learning_rate: float = 0.01
    max_batch_size: int = 16
    epochs: int = 30
    validation_fraction: float = 0.2
    random_state: Optional[int] = None

    @field_validator("window_size")
    @classmethod
    def validate_window_size(cls, v: int) -> int:
        if v < 2:
            raise ValueError(f"window_size must be >= 2, got {v}.")
        return v

    @field_validator("hidden_layers")
    @classmethod
    def validate_hidden_layers(cls, v: list[int]) -> list[int]:
        if len(v) < 2 or any(units < 1 for units in v):
            raise ValueError(
                f"hidden_layers needs at least two positive widths, got {v}."
            )
        return v

    @field_validator("epochs")
    @classmethod
    def validate_epochs(cls, v: int) -> int:
        if not 1 <= v <= 200:
            raise ValueError(f"epochs must be in [1, 200], got {v}.")
        return v

    @field_validator("validation_fraction")
    @classmethod
    def validate_validation_fraction(cls, v: float) -> float:
        if not 0.0 < v < 0.5:
            raise ValueError(f"validation_fraction must be in (0.0, 0.5), got {v}.")
        return v


class ForecastConfig(BaseModel):
    """Forecast defaults and the thresholds behind trend labels and factors."""

    model_config = ConfigDict(frozen=True)

    default_horizon_days: int = 14
    default_seasonal_weight: float = 0.5
    default_trend_weight: float = 0.5
    min_training_sequences: int = 3
    high_volatility_pct: float = 10.0
    adjustment_note_weight: float = 0.3
    trend_threshold_pct: float = 2.0

    @field_validator("default_seasonal_weight", "default_trend_weight")
    @classmethod
    def validate_weight(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"Default weights must be in [0.0, 1.0], got {v}.")
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
    """Complete application configuration — the single source of truth."""

    model_config = ConfigDict(frozen=True)

    model: ModelConfig = ModelConfig()
    forecast: ForecastConfig = ForecastConfig()
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
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply CROP_FORECASTER_* environment variable overrides
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
    """Apply CROP_FORECASTER_* env vars to the raw config dict.

    Supported overrides:
      CROP_FORECASTER_LOG_LEVEL     → raw["logging"]["level"]
      CROP_FORECASTER_EPOCHS        → raw["model"]["epochs"]
      CROP_FORECASTER_RANDOM_STATE  → raw["model"]["random_state"]
      CROP_FORECASTER_DEBUG         → raw["debug"]
    """
    if log_level := os.environ.get("CROP_FORECASTER_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if epochs := os.environ.get("CROP_FORECASTER_EPOCHS"):
        raw.setdefault("model", {})["epochs"] = int(epochs)

    if seed := os.environ.get("CROP_FORECASTER_RANDOM_STATE"):
        raw.setdefault("model", {})["random_state"] = int(seed)

    if debug := os.environ.get("CROP_FORECASTER_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        model=ModelConfig(**raw.get("model", {})),
        forecast=ForecastConfig(**raw.get("forecast", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
