"""
Degraded forecasts for series the model cannot be trained on.

Two fallbacks, both returning a complete, valid ``Forecast``:

INSUFFICIENT_DATA  (fewer than ``window_size + 2`` valid prices)
    Geometric extrapolation from the last known price (or the catalog's
    current price when there is no history) using a daily multiplier chosen
    from the catalog trend label: 1.005 up, 0.995 down, 1.0 stable.
    Confidence 70, volatility 5, bands ±5%.

LOW_TRAINING_DATA  (fewer than ``min_training_sequences`` training pairs, or
the model failed numerically)
    Flat repetition of the last price. Confidence 65, volatility measured
    from the data, bands +8%/-8%, trend stable.

Both report the last 14 valid prices as the moving average.
"""

from __future__ import annotations

from collections.abc import Sequence

from crop_forecaster.analytics.series_stats import volatility as series_volatility
from crop_forecaster.forecasting.bands import fixed_bands
from crop_forecaster.models.crop import Commodity
from crop_forecaster.models.forecast import Forecast, ForecastPath
from crop_forecaster.taxonomy import TrendDirection

INSUFFICIENT_DATA_CONFIDENCE = 70
INSUFFICIENT_DATA_VOLATILITY = 5.0
INSUFFICIENT_DATA_BAND_PCT = 0.05

LOW_TRAINING_CONFIDENCE = 65
LOW_TRAINING_BAND_PCT = 0.08

FALLBACK_HISTORY_POINTS = 14

_TREND_DAILY_MULTIPLIER: dict[TrendDirection, float] = {
    TrendDirection.UP:     1.005,
    TrendDirection.DOWN:   0.995,
    TrendDirection.STABLE: 1.0,
}

INSUFFICIENT_DATA_FACTOR = "Insufficient historical data - using trend extrapolation"
LOW_TRAINING_FACTOR = "Limited training data - predictions may be less accurate"
UNSTABLE_MODEL_FACTOR = "Model training was unstable - fell back to last known price"


def insufficient_data_forecast(
    prices: Sequence[float],
    commodity: Commodity,
    horizon_days: int,
) -> Forecast:
    """Extrapolate from the last price along the catalog trend label."""
    base = prices[-1] if prices else commodity.current_price
    daily = _TREND_DAILY_MULTIPLIER[commodity.trend]
    predictions = [float(round(base * daily ** (i + 1))) for i in range(horizon_days)]
    upper, lower = fixed_bands(
        predictions, INSUFFICIENT_DATA_BAND_PCT, INSUFFICIENT_DATA_BAND_PCT
    )
    return Forecast(
        commodity_id=commodity.id,
        path=ForecastPath.INSUFFICIENT_DATA,
        predictions=predictions,
        confidence=INSUFFICIENT_DATA_CONFIDENCE,
        trend=commodity.trend,
        volatility=INSUFFICIENT_DATA_VOLATILITY,
        moving_average=list(prices[-FALLBACK_HISTORY_POINTS:]),
        upper_band=upper,
        lower_band=lower,
        factors=[INSUFFICIENT_DATA_FACTOR],
    )


def low_training_data_forecast(
    prices: Sequence[float],
    commodity: Commodity,
    horizon_days: int,
    extra_factors: Sequence[str] = (),
) -> Forecast:
    """Repeat the last known price across the horizon.

    Args:
        prices: Valid prices, oldest first (non-empty).
        commodity: Commodity being forecast.
        horizon_days: Forecast length.
        extra_factors: Additional notes, e.g. why the model was bypassed.
    """
    last = float(round(prices[-1]))
    predictions = [last] * horizon_days
    upper, lower = fixed_bands(predictions, LOW_TRAINING_BAND_PCT, LOW_TRAINING_BAND_PCT)
    return Forecast(
        commodity_id=commodity.id,
        path=ForecastPath.LOW_TRAINING_DATA,
        predictions=predictions,
        confidence=LOW_TRAINING_CONFIDENCE,
        trend=TrendDirection.STABLE,
        volatility=series_volatility(prices),
        moving_average=list(prices[-FALLBACK_HISTORY_POINTS:]),
        upper_band=upper,
        lower_band=lower,
        factors=[LOW_TRAINING_FACTOR, *extra_factors],
    )
