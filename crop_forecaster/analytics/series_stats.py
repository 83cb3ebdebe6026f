"""
Pure statistics over price series.

Every function here fails closed: degenerate input (too few points, zero
mean, zero variance) returns a guarded default instead of raising, so the
forecasting pipeline never crashes on well-formed numbers.

Volatility
  Population standard deviation over mean, in percent (coefficient of
  variation × 100). ``[100, 100, 100]`` → 0.0; ``[800, 1200] * n`` → 20.0.

Correlation
  Pearson correlation over the first ``min(len(a), len(b))`` pairs. Needs at
  least 3 pairs; a flat series has no defined correlation and yields 0.0.

MAPE
  Mean absolute percentage error on a 0–100 scale, pairing by position and
  skipping zero actuals.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

MIN_CORRELATION_PAIRS = 3


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def volatility(prices: Sequence[float]) -> float:
    """Return the coefficient of variation of ``prices`` in percent.

    Args:
        prices: Price observations (no missing values).

    Returns:
        ``population_std / mean * 100``, or 0.0 for fewer than 2 points or a
        zero mean.
    """
    if len(prices) < 2:
        return 0.0
    mu = mean(prices)
    if mu == 0:
        return 0.0
    variance = sum((p - mu) ** 2 for p in prices) / len(prices)
    return abs(math.sqrt(variance) / mu * 100)


def correlation(a: Sequence[float], b: Sequence[float]) -> float:
    """Pearson correlation of two series, truncated to the shorter one.

    Args:
        a: First series.
        b: Second series.

    Returns:
        Correlation in [-1, 1]; 0.0 when fewer than 3 pairs are available,
        either series has zero variance, or the sums are not finite (NaN
        input or overflow).
    """
    n = min(len(a), len(b))
    if n < MIN_CORRELATION_PAIRS:
        return 0.0

    xs, ys = a[:n], b[:n]
    mean_x = sum(xs) / n
    mean_y = sum(ys) / n

    numerator = 0.0
    ss_x = 0.0
    ss_y = 0.0
    for x, y in zip(xs, ys):
        dx = x - mean_x
        dy = y - mean_y
        numerator += dx * dy
        ss_x += dx * dx
        ss_y += dy * dy

    denominator = math.sqrt(ss_x * ss_y)
    if denominator == 0 or not math.isfinite(denominator):
        return 0.0
    r = numerator / denominator
    if not math.isfinite(r):
        return 0.0
    # Float rounding can push |r| a hair past 1.
    return max(-1.0, min(1.0, r))


def moving_average(prices: Sequence[float], window: int = 7) -> list[float]:
    """Trailing moving average, rounded to whole price units.

    The first ``window - 1`` entries average over the points available so
    far, so the output is always as long as the input.
    """
    result: list[float] = []
    for i in range(len(prices)):
        start = max(0, i - window + 1)
        chunk = prices[start : i + 1]
        result.append(float(round(sum(chunk) / len(chunk))))
    return result


def mape(predicted: Sequence[float], actual: Sequence[float]) -> float | None:
    """Mean absolute percentage error in percent, or ``None`` if nothing pairs.

    Pairs by position over the shorter sequence; zero actuals are skipped.
    """
    terms = [
        abs((a - p) / a)
        for p, a in zip(predicted, actual)
        if a != 0
    ]
    if not terms:
        return None
    return sum(terms) / len(terms) * 100
