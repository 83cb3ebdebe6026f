"""
Min/max normalization of price series for model input and output.

The range is taken once per forecast call from the full valid history and
is not updated mid-call. A flat series (``hi == lo``) uses a range of 1, so
every normalized value becomes 0 and denormalization maps back to ``lo``.
"""

from __future__ import annotations

from collections.abc import Sequence


def _span(lo: float, hi: float) -> float:
    return (hi - lo) or 1.0


def price_range(prices: Sequence[float]) -> tuple[float, float]:
    """Return ``(min, max)`` of a non-empty price sequence."""
    if not prices:
        raise ValueError("price_range() needs at least one price.")
    return min(prices), max(prices)


def normalize(values: Sequence[float], lo: float, hi: float) -> list[float]:
    """Linearly rescale ``values`` so that ``lo → 0`` and ``hi → 1``."""
    span = _span(lo, hi)
    return [(v - lo) / span for v in values]


def denormalize(values: Sequence[float], lo: float, hi: float) -> list[float]:
    """Inverse of :func:`normalize` for the same ``lo``/``hi``."""
    span = _span(lo, hi)
    return [v * span + lo for v in values]
