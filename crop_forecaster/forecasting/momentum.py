"""
Linear momentum adjustment from the historical average daily change.

    avg_change = (last - first) / first / n_points
    result[i]  = round(value[i] * (1 + avg_change * weight * (i + 1)))

The adjustment grows linearly with the forecast step. ``weight == 0`` is a
no-op.
"""

from __future__ import annotations

from collections.abc import Sequence


def average_daily_change(prices: Sequence[float]) -> float:
    """Return the mean relative change per observation over the full history.

    0.0 for fewer than 2 points or a zero first price.
    """
    if len(prices) < 2 or prices[0] == 0:
        return 0.0
    return (prices[-1] - prices[0]) / prices[0] / len(prices)


def apply_trend_weight(
    values: Sequence[float],
    avg_change: float,
    weight: float,
) -> list[float]:
    """Scale each step by the weighted, step-compounded momentum."""
    if weight == 0:
        return list(values)
    return [
        float(round(v * (1 + avg_change * weight * (i + 1))))
        for i, v in enumerate(values)
    ]
