"""
Forecast input parameters and forecast output model.

``ForecastParameters`` is caller-supplied and never persisted. Range checks
live in ``ForecastEngine`` so that every malformed input surfaces as a
``ForecastValidationError``; UI callers driving sliders can use
``ForecastParameters.clamped()`` to coerce values into range up front.

``Forecast`` is frozen and freshly built per call. Its model validator
enforces the output invariants (parallel lengths, band ordering, confidence
and volatility ranges), so a corrupt result can never be handed back.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, model_validator

from crop_forecaster.taxonomy import TrendDirection

MIN_HORIZON_DAYS = 7
MAX_HORIZON_DAYS = 30


class ForecastPath(StrEnum):
    """Which branch of the engine produced a forecast."""

    INSUFFICIENT_DATA = "insufficient_data"
    LOW_TRAINING_DATA = "low_training_data"
    FULL_PIPELINE = "full_pipeline"


class ForecastParameters(BaseModel):
    """Per-request forecast settings.

    Attributes:
        horizon_days: Number of future days to forecast (7–30).
        seasonal_weight: Blend weight of the seasonal adjustment (0–1).
        trend_weight: Scale of the momentum adjustment (0–1).
    """

    model_config = ConfigDict(frozen=True)

    horizon_days: int = 14
    seasonal_weight: float = 0.5
    trend_weight: float = 0.5

    @classmethod
    def clamped(
        cls,
        horizon_days: int = 14,
        seasonal_weight: float = 0.5,
        trend_weight: float = 0.5,
    ) -> "ForecastParameters":
        """Build parameters with every value clamped into its valid range."""
        return cls(
            horizon_days=min(MAX_HORIZON_DAYS, max(MIN_HORIZON_DAYS, int(horizon_days))),
            seasonal_weight=min(1.0, max(0.0, float(seasonal_weight))),
            trend_weight=min(1.0, max(0.0, float(trend_weight))),
        )


class Forecast(BaseModel):
    """Multi-day price forecast for one commodity.

    Attributes:
        commodity_id: Commodity the forecast belongs to.
        path: Engine branch that produced it (full pipeline or a fallback).
        predictions: One price per forecast day.
        confidence: Reliability score, 0–100.
        trend: Overall direction of the forecast.
        volatility: Historical volatility in percent.
        moving_average: Smoothed historical prices.
        upper_band: Upper uncertainty bound, parallel to ``predictions``.
        lower_band: Lower uncertainty bound, parallel to ``predictions``.
        factors: Human-readable notes on what the forecast is based on.
    """

    model_config = ConfigDict(frozen=True)

    commodity_id: str
    path: ForecastPath
    predictions: list[float]
    confidence: int
    trend: TrendDirection
    volatility: float
    moving_average: list[float]
    upper_band: list[float]
    lower_band: list[float]
    factors: list[str]

    @property
    def horizon_days(self) -> int:
        return len(self.predictions)

    @property
    def is_fallback(self) -> bool:
        return self.path != ForecastPath.FULL_PIPELINE

    @model_validator(mode="after")
    def validate_forecast_invariants(self) -> "Forecast":
        n = len(self.predictions)
        if len(self.upper_band) != n or len(self.lower_band) != n:
            raise ValueError(
                f"upper_band ({len(self.upper_band)}) and lower_band "
                f"({len(self.lower_band)}) must match predictions ({n})."
            )
        for i, (lo, p, hi) in enumerate(
            zip(self.lower_band, self.predictions, self.upper_band)
        ):
            if not lo <= p <= hi:
                raise ValueError(
                    f"Band ordering violated at step {i}: "
                    f"lower={lo}, prediction={p}, upper={hi}."
                )
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"confidence must be in [0, 100], got {self.confidence}.")
        if self.volatility < 0:
            raise ValueError(f"volatility must be non-negative, got {self.volatility}.")
        return self
