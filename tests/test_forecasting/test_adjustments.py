"""
Tests for the post-model adjustment stages:

  - crop_forecaster.forecasting.seasonal   (monthly multipliers by category)
  - crop_forecaster.forecasting.momentum   (linear trend weighting)
  - crop_forecaster.forecasting.confidence (MAPE + volatility score)
  - crop_forecaster.forecasting.bands      (uncertainty bands)
"""

from __future__ import annotations

import pytest

from crop_forecaster.forecasting.bands import band_multiplier, compute_bands, fixed_bands
from crop_forecaster.forecasting.confidence import (
    DEFAULT_CONFIDENCE,
    estimate_confidence,
    volatility_penalty,
)
from crop_forecaster.forecasting.momentum import apply_trend_weight, average_daily_change
from crop_forecaster.forecasting.seasonal import (
    DEFAULT_CATEGORY,
    SEASONAL_MULTIPLIERS,
    apply_seasonal,
    monthly_multipliers,
    resolve_category,
)
from crop_forecaster.taxonomy import CropCategory


# ── Seasonal ──────────────────────────────────────────────────────────────────

def test_every_category_has_twelve_multipliers():
    assert set(SEASONAL_MULTIPLIERS) == set(CropCategory)
    for values in SEASONAL_MULTIPLIERS.values():
        assert len(values) == 12
        assert all(0.8 <= v <= 1.2 for v in values)


def test_resolve_category_is_case_insensitive():
    assert resolve_category("cash crops") == CropCategory.CASH_CROPS
    assert resolve_category(" VEGETABLES ") == CropCategory.VEGETABLES


def test_unknown_category_uses_default_table():
    assert resolve_category("Spices") == DEFAULT_CATEGORY
    assert monthly_multipliers("Spices") == SEASONAL_MULTIPLIERS[CropCategory.CEREALS]


def test_seasonal_zero_weight_is_identity():
    raw = [1234.56, 1240.2, 1250.9]
    assert apply_seasonal(raw, 5, "Vegetables", 0.0) == raw


def test_seasonal_full_weight_applies_multipliers():
    # Cereals Jan, Feb, Mar: 1.02, 1.01, 0.98
    assert apply_seasonal([1000.0] * 3, 0, "Cereals", 1.0) == [1020.0, 1010.0, 980.0]


def test_seasonal_half_weight_blends():
    assert apply_seasonal([1000.0] * 3, 0, "Cereals", 0.5) == [1010.0, 1005.0, 990.0]


def test_seasonal_month_wraps_past_december():
    # Vegetables Dec 1.15 → Jan 1.15 → Feb 1.10
    assert apply_seasonal([1000.0] * 3, 11, "Vegetables", 1.0) == [1150.0, 1150.0, 1100.0]


def test_seasonal_rejects_bad_month_index():
    with pytest.raises(ValueError, match="month_index"):
        apply_seasonal([1000.0], 12, "Cereals", 0.5)


# ── Momentum ──────────────────────────────────────────────────────────────────

def test_average_daily_change():
    assert average_daily_change([100.0, 110.0]) == pytest.approx(0.05)


@pytest.mark.parametrize("prices", [[], [100.0], [0.0, 50.0]])
def test_average_daily_change_guards(prices):
    assert average_daily_change(prices) == 0.0


def test_trend_weight_grows_with_step():
    assert apply_trend_weight([100.0, 100.0, 100.0], 0.05, 1.0) == [105.0, 110.0, 115.0]


def test_trend_weight_zero_is_identity():
    values = [101.4, 99.6]
    assert apply_trend_weight(values, 0.05, 0.0) == values


def test_negative_momentum_pulls_down():
    out = apply_trend_weight([1000.0] * 5, -0.01, 1.0)
    assert out == sorted(out, reverse=True)
    assert out[-1] < 1000.0


# ── Confidence ────────────────────────────────────────────────────────────────

def test_confidence_capped_at_95():
    assert estimate_confidence([100.0, 100.0], [100.0, 100.0], 0.0) == 95


def test_confidence_floored_at_50():
    assert estimate_confidence([10.0, 10.0], [100.0, 100.0], 30.0) == 50


def test_confidence_default_with_too_few_actuals():
    assert estimate_confidence([100.0], [100.0], 0.0) == DEFAULT_CONFIDENCE


def test_confidence_all_zero_actuals_uses_fallback_mape():
    assert estimate_confidence([5.0, 5.0], [0.0, 0.0], 0.0) == 90


def test_confidence_subtracts_mape_and_volatility():
    # mape 10, penalty 4 → 86
    assert estimate_confidence([110.0, 90.0], [100.0, 100.0], 8.0) == 86


def test_volatility_penalty_capped():
    assert volatility_penalty(8.0) == 4.0
    assert volatility_penalty(100.0) == 15.0


# ── Bands ─────────────────────────────────────────────────────────────────────

def test_band_multiplier():
    assert band_multiplier(0.0) == 1.0
    assert band_multiplier(10.0) == pytest.approx(1.2)


def test_compute_bands_values():
    upper, lower = compute_bands([1000.0], 10.0)
    assert upper == [1200.0]
    assert lower == [833.0]


def test_compute_bands_ordering():
    preds = [0.0, 15.0, 980.0, 2410.0, 7777.0]
    upper, lower = compute_bands(preds, 23.7)
    for lo, p, hi in zip(lower, preds, upper):
        assert lo <= p <= hi


def test_compute_bands_width_independent_of_step():
    upper, lower = compute_bands([1000.0] * 30, 5.0)
    assert len(set(upper)) == 1
    assert len(set(lower)) == 1


def test_fixed_bands():
    upper, lower = fixed_bands([100.0, 200.0], 0.05, 0.05)
    assert upper == [105.0, 210.0]
    assert lower == [95.0, 190.0]
