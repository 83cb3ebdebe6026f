"""
Forecast confidence score.

    mape     = MAPE(first predictions, most recent actuals)   # 0–100 scale
    penalty  = min(volatility * 0.5, 15)
    score    = round(clamp(100 - mape - penalty, 50, 95))

With fewer than 2 actuals there is nothing to score against and the default
of 75 is returned. When every actual is zero, MAPE falls back to 10.
"""

from __future__ import annotations

from collections.abc import Sequence

from crop_forecaster.analytics.series_stats import mape

DEFAULT_CONFIDENCE = 75
MIN_CONFIDENCE = 50
MAX_CONFIDENCE = 95
FALLBACK_MAPE = 10.0
MAX_VOLATILITY_PENALTY = 15.0


def volatility_penalty(volatility: float) -> float:
    return min(volatility * 0.5, MAX_VOLATILITY_PENALTY)


def estimate_confidence(
    predicted: Sequence[float],
    actual: Sequence[float],
    volatility: float,
) -> int:
    """Score forecast reliability from recent error and volatility.

    Args:
        predicted: Near-term predictions (first steps of the horizon).
        actual: Most recent actual prices, same length as ``predicted``.
        volatility: Historical volatility in percent.

    Returns:
        Integer confidence in [50, 95], or 75 when ``actual`` has < 2 points.
    """
    if len(actual) < 2:
        return DEFAULT_CONFIDENCE

    error = mape(predicted, actual)
    if error is None:
        error = FALLBACK_MAPE

    score = 100 - error - volatility_penalty(volatility)
    return round(min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, score)))
