"""
Tests for crop_forecaster.reporting.formatters.
"""

from __future__ import annotations

from datetime import date

from crop_forecaster.analytics.correlation_matrix import correlation_matrix
from crop_forecaster.models.forecast import Forecast, ForecastPath
from crop_forecaster.recommendations.signal import recommend
from crop_forecaster.reporting.formatters import (
    format_correlation_matrix,
    format_forecast_table,
)
from crop_forecaster.taxonomy import TrendDirection


def _forecast() -> Forecast:
    return Forecast(
        commodity_id="wheat",
        path=ForecastPath.FULL_PIPELINE,
        predictions=[2410.0, 2420.0, 2430.0],
        confidence=82,
        trend=TrendDirection.UP,
        volatility=6.25,
        moving_average=[2400.0],
        upper_band=[2700.0, 2710.0, 2720.0],
        lower_band=[2150.0, 2160.0, 2170.0],
        factors=["Feed-forward neural network analysis", "Seasonal adjustment factors applied"],
    )


# ── format_forecast_table ─────────────────────────────────────────────────────

def test_forecast_table_header():
    out = format_forecast_table(_forecast())
    assert "=== Forecast: wheat ===" in out
    assert "full_pipeline" in out
    assert "Confidence: 82%" in out
    assert "Volatility: 6.2%" in out or "Volatility: 6.3%" in out


def test_forecast_table_one_row_per_day():
    out = format_forecast_table(_forecast())
    rows = [line for line in out.splitlines() if line.strip().startswith(("1 ", "2 ", "3 "))]
    assert len(rows) == 3
    assert "2410" in rows[0]
    assert "2720" in rows[2]


def test_forecast_table_dates():
    out = format_forecast_table(_forecast(), start_date=date(2024, 12, 31))
    assert "2024-12-31" in out
    assert "2025-01-02" in out


def test_forecast_table_lists_factors():
    out = format_forecast_table(_forecast())
    assert "    - Seasonal adjustment factors applied" in out


def test_forecast_table_with_recommendation():
    f = _forecast()
    out = format_forecast_table(f, recommendation=recommend(f))
    assert "Signal:     BUY" in out


# ── format_correlation_matrix ─────────────────────────────────────────────────

def test_correlation_matrix_grid():
    cells = correlation_matrix({
        "wheat": [1.0, 2.0, 3.0, 4.0],
        "rice":  [2.0, 4.0, 6.0, 8.0],
    })
    out = format_correlation_matrix(cells)
    lines = out.splitlines()
    assert "=== Price Correlation ===" in lines
    assert "wheat" in lines[2] and "rice" in lines[2]
    assert lines[3].strip().startswith("wheat")
    assert lines[3].count("1.00") == 2


def test_correlation_matrix_empty():
    assert "no series" in format_correlation_matrix([])
