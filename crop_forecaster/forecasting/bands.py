"""
Volatility-scaled uncertainty bands around the predictions.

    multiplier = 1 + volatility / 100 * 2
    upper[i]   = round(prediction[i] * multiplier)
    lower[i]   = round(prediction[i] / multiplier)

Bands are multiplicative, so they never cross zero for non-negative
predictions. They widen with measured historical volatility only, not with
step distance: step 30 gets the same relative band as step 1.
"""

from __future__ import annotations

from collections.abc import Sequence


def band_multiplier(volatility: float) -> float:
    return 1 + (max(0.0, volatility) / 100) * 2


def compute_bands(
    predictions: Sequence[float],
    volatility: float,
) -> tuple[list[float], list[float]]:
    """Return ``(upper_band, lower_band)`` parallel to ``predictions``."""
    m = band_multiplier(volatility)
    upper = [float(round(p * m)) for p in predictions]
    lower = [float(round(p / m)) for p in predictions]
    return upper, lower


def fixed_bands(
    predictions: Sequence[float],
    upper_pct: float,
    lower_pct: float,
) -> tuple[list[float], list[float]]:
    """Fixed-percentage bands used by the fallback paths (e.g. +5%/-5%)."""
    upper = [float(round(p * (1 + upper_pct))) for p in predictions]
    lower = [float(round(p * (1 - lower_pct))) for p in predictions]
    return upper, lower
