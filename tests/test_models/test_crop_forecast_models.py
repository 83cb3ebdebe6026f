"""
Tests for crop_forecaster.models — Commodity, PriceSeries, ForecastParameters,
Forecast.

Covers:
  - Commodity id validation and frozen-ness
  - PriceSeries.from_prices() dating and valid_prices()
  - ForecastParameters.clamped()
  - Forecast invariants enforced by the model validator
"""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from crop_forecaster.models.crop import Commodity, PriceSeries
from crop_forecaster.models.forecast import Forecast, ForecastParameters, ForecastPath
from crop_forecaster.taxonomy import TrendDirection


def _forecast(**overrides) -> Forecast:
    fields = dict(
        commodity_id="wheat",
        path=ForecastPath.FULL_PIPELINE,
        predictions=[100.0, 101.0],
        confidence=80,
        trend=TrendDirection.UP,
        volatility=3.2,
        moving_average=[99.0, 100.0],
        upper_band=[106.0, 107.0],
        lower_band=[94.0, 95.0],
        factors=["Feed-forward neural network analysis"],
    )
    fields.update(overrides)
    return Forecast(**fields)


# ── Commodity ─────────────────────────────────────────────────────────────────

def test_commodity_strips_id():
    assert Commodity(id="  wheat ").id == "wheat"


def test_commodity_empty_id_rejected():
    with pytest.raises(ValidationError):
        Commodity(id="   ")


def test_commodity_is_frozen():
    c = Commodity(id="rice")
    with pytest.raises(ValidationError):
        c.current_price = 10.0


def test_commodity_accepts_unknown_category():
    assert Commodity(id="saffron", category="Spices").category == "Spices"


def test_commodity_trend_from_string():
    assert Commodity(id="rice", trend="up").trend == TrendDirection.UP


# ── PriceSeries ───────────────────────────────────────────────────────────────

def test_from_prices_assigns_consecutive_dates():
    s = PriceSeries.from_prices([1.0, None, 3.0], start=date(2024, 2, 28))
    assert [p.observed_on for p in s.points] == [
        date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1),
    ]
    assert len(s) == 3


def test_valid_prices_skips_missing():
    s = PriceSeries.from_prices([1.0, None, 3.0])
    assert s.valid_prices() == [1.0, 3.0]


def test_empty_series():
    assert len(PriceSeries()) == 0
    assert PriceSeries().valid_prices() == []


# ── ForecastParameters ────────────────────────────────────────────────────────

def test_parameter_defaults():
    p = ForecastParameters()
    assert (p.horizon_days, p.seasonal_weight, p.trend_weight) == (14, 0.5, 0.5)


@pytest.mark.parametrize(
    "given, expected",
    [
        ((3, -1.0, 2.0), (7, 0.0, 1.0)),
        ((45, 0.3, 0.7), (30, 0.3, 0.7)),
        ((21, 1.2, -0.2), (21, 1.0, 0.0)),
    ],
)
def test_clamped(given, expected):
    p = ForecastParameters.clamped(*given)
    assert (p.horizon_days, p.seasonal_weight, p.trend_weight) == expected


# ── Forecast ──────────────────────────────────────────────────────────────────

def test_valid_forecast():
    f = _forecast()
    assert f.horizon_days == 2
    assert not f.is_fallback


def test_fallback_flag():
    assert _forecast(path=ForecastPath.LOW_TRAINING_DATA).is_fallback


def test_band_length_mismatch_rejected():
    with pytest.raises(ValidationError, match="must match predictions"):
        _forecast(upper_band=[106.0])


def test_band_ordering_rejected():
    with pytest.raises(ValidationError, match="Band ordering violated at step 1"):
        _forecast(lower_band=[94.0, 102.0])


@pytest.mark.parametrize("confidence", [-1, 101])
def test_confidence_range_rejected(confidence):
    with pytest.raises(ValidationError, match="confidence"):
        _forecast(confidence=confidence)


def test_negative_volatility_rejected():
    with pytest.raises(ValidationError, match="volatility"):
        _forecast(volatility=-0.1)


def test_forecast_json_dump_uses_enum_values():
    payload = _forecast().model_dump(mode="json")
    assert payload["path"] == "full_pipeline"
    assert payload["trend"] == "up"
