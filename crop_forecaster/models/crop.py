"""
Commodity reference data and price history models.

``Commodity`` is owned by the catalog subsystem; the forecasting core only
reads it. ``PriceSeries`` is the chronologically ordered price history the
storage layer hands to the engine for one forecast call.

Missing observations are kept as ``price=None`` points so the caller can pass
raw history through untouched; the engine filters them before any numeric
work. Range checks on prices (NaN, negative) are left to the engine boundary
so that every malformed input surfaces as a ``ForecastValidationError``.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from crop_forecaster.taxonomy import TrendDirection


class Commodity(BaseModel):
    """A tradable crop as described by the catalog.

    Attributes:
        id: Stable identifier, e.g. ``"wheat"``. Model cache key.
        name: Display name, e.g. ``"Wheat"``.
        category: Raw category label, e.g. ``"Cereals"``. Unknown labels are
            accepted here and resolved by the seasonal adjuster.
        current_price: Latest catalog price, used when the history is empty.
        trend: Catalog trend label; only used by the sparse-data fallback.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: Optional[str] = None
    category: str = "Cereals"
    current_price: float = 0.0
    trend: TrendDirection = TrendDirection.STABLE

    @field_validator("id")
    @classmethod
    def validate_id_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Commodity id must not be empty.")
        return v.strip()


class PricePoint(BaseModel):
    """One daily observation; ``price=None`` marks a missing value."""

    model_config = ConfigDict(frozen=True)

    observed_on: date
    price: Optional[float] = None


class PriceSeries(BaseModel):
    """Chronologically ordered price history for one commodity.

    Attributes:
        points: Observations in insertion (= chronological) order.
    """

    model_config = ConfigDict(frozen=True)

    points: tuple[PricePoint, ...] = ()

    def __len__(self) -> int:
        return len(self.points)

    def valid_prices(self) -> list[float]:
        """Return the defined prices in chronological order."""
        return [p.price for p in self.points if p.price is not None]

    @classmethod
    def from_prices(
        cls,
        prices: Iterable[Optional[float]],
        start: date | None = None,
    ) -> "PriceSeries":
        """Build a daily series from bare prices.

        Args:
            prices: Prices oldest-first; ``None`` entries are missing days.
            start: Date of the first price. Defaults to ``2024-01-01``.

        Returns:
            A ``PriceSeries`` with one point per input price.
        """
        first = start or date(2024, 1, 1)
        return cls(
            points=tuple(
                PricePoint(observed_on=first + timedelta(days=i), price=p)
                for i, p in enumerate(prices)
            )
        )
