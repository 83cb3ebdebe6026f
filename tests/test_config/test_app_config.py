"""
Tests for crop_forecaster.config — layered TOML/env configuration.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from crop_forecaster.config import (
    AppConfig,
    ForecastConfig,
    LoggingConfig,
    ModelConfig,
    _deep_merge,
    load_config,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in (
        "CROP_FORECASTER_LOG_LEVEL",
        "CROP_FORECASTER_EPOCHS",
        "CROP_FORECASTER_RANDOM_STATE",
        "CROP_FORECASTER_DEBUG",
    ):
        monkeypatch.delenv(var, raising=False)


# ── Defaults ──────────────────────────────────────────────────────────────────

def test_defaults_match_default_toml():
    assert load_config() == AppConfig()


def test_default_model_architecture():
    cfg = AppConfig()
    assert cfg.model.window_size == 7
    assert cfg.model.hidden_layers == [64, 32, 16]
    assert cfg.model.random_state is None
    assert cfg.forecast.min_training_sequences == 3


# ── Loading ───────────────────────────────────────────────────────────────────

def test_load_explicit_file(tmp_path):
    cfg_file = tmp_path / "custom.toml"
    cfg_file.write_text(
        "[project]\ndebug = true\n[model]\nepochs = 5\n[logging]\nlevel = 'debug'\n",
        encoding="utf-8",
    )
    cfg = load_config(cfg_file)
    assert cfg.debug is True
    assert cfg.model.epochs == 5
    assert cfg.logging.level == "DEBUG"


def test_local_toml_overrides(tmp_path):
    (tmp_path / "default.toml").write_text("[model]\nepochs = 5\nwindow_size = 5\n", encoding="utf-8")
    (tmp_path / "local.toml").write_text("[model]\nepochs = 9\n", encoding="utf-8")
    cfg = load_config(tmp_path / "default.toml")
    assert cfg.model.epochs == 9
    assert cfg.model.window_size == 5


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.toml")


def test_env_overrides(tmp_path, monkeypatch):
    cfg_file = tmp_path / "c.toml"
    cfg_file.write_text("[model]\nepochs = 5\n", encoding="utf-8")
    monkeypatch.setenv("CROP_FORECASTER_EPOCHS", "12")
    monkeypatch.setenv("CROP_FORECASTER_RANDOM_STATE", "42")
    monkeypatch.setenv("CROP_FORECASTER_LOG_LEVEL", "warning")
    monkeypatch.setenv("CROP_FORECASTER_DEBUG", "yes")
    cfg = load_config(cfg_file)
    assert cfg.model.epochs == 12
    assert cfg.model.random_state == 42
    assert cfg.logging.level == "WARNING"
    assert cfg.debug is True


def test_deep_merge_nested():
    merged = _deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4})
    assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}


# ── Validation ────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "kwargs",
    [
        {"window_size": 1},
        {"hidden_layers": [64]},
        {"hidden_layers": [64, 0]},
        {"epochs": 0},
        {"epochs": 500},
        {"validation_fraction": 0.5},
        {"validation_fraction": 0.0},
    ],
)
def test_model_config_rejects(kwargs):
    with pytest.raises(ValidationError):
        ModelConfig(**kwargs)


def test_forecast_config_rejects_bad_weight():
    with pytest.raises(ValidationError):
        ForecastConfig(default_trend_weight=1.5)


def test_logging_config_rejects_bad_level():
    with pytest.raises(ValidationError):
        LoggingConfig(level="LOUD")


def test_config_is_frozen():
    cfg = AppConfig()
    with pytest.raises(ValidationError):
        cfg.debug = True
