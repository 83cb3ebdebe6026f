"""
ForecastEngine — one ``forecast(series, commodity, params)`` call per request.

Decision logic (evaluated once per call, W = window size = 7)
-------------------------------------------------------------
    1. < W + 2 valid prices            → INSUFFICIENT_DATA fallback
    2. < min_training_sequences pairs  → LOW_TRAINING_DATA fallback
    3. otherwise                       → FULL_PIPELINE:
         cached-or-trained model → autoregressive rollout → denormalize
         → seasonal blend → trend weighting → round, floor at 0
         → volatility, confidence, moving average, bands, trend, factors

Error policy
------------
Malformed input raises ``ForecastValidationError`` before any computation.
Prices (and the catalog price) must lie in [0, ``MAX_PRICE``]; the ceiling
keeps every later product and sum finite.
``ComputationFault`` from the predictor is absorbed: the faulty model is
discarded (never cached; evicted if it came from the cache) and the call
answers with the LOW_TRAINING_DATA fallback. Nothing else is caught here.

Concurrency
-----------
The engine's only shared mutable state is its ``ModelCache`` (and a
training counter), both lock-protected. ``forecast`` may be called from
several threads; ``forecast_async`` trains cooperatively, yielding between
epochs, and publishes to the cache only after training has completed, so a
cancelled call never leaves a half-trained model behind.
"""

from __future__ import annotations

import logging
import math
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from numbers import Real
from typing import Optional, Union

from crop_forecaster.analytics.series_stats import (
    correlation as series_correlation,
    mean,
    moving_average,
    volatility as series_volatility,
)
from crop_forecaster.config import AppConfig
from crop_forecaster.exceptions import ComputationFault, ForecastValidationError
from crop_forecaster.forecasting.bands import compute_bands
from crop_forecaster.forecasting.confidence import estimate_confidence
from crop_forecaster.forecasting.fallback import (
    UNSTABLE_MODEL_FACTOR,
    insufficient_data_forecast,
    low_training_data_forecast,
)
from crop_forecaster.forecasting.momentum import apply_trend_weight, average_daily_change
from crop_forecaster.forecasting.seasonal import apply_seasonal
from crop_forecaster.ml.model_cache import ModelCache
from crop_forecaster.ml.normalizer import denormalize, normalize, price_range
from crop_forecaster.ml.predictor import MLPPricePredictor
from crop_forecaster.ml.sequences import TrainingSequences, build_sequences
from crop_forecaster.models.crop import Commodity, PricePoint, PriceSeries
from crop_forecaster.models.forecast import (
    MAX_HORIZON_DAYS,
    MIN_HORIZON_DAYS,
    Forecast,
    ForecastParameters,
    ForecastPath,
)
from crop_forecaster.taxonomy import TrendDirection

logger = logging.getLogger(__name__)

SeriesInput = Union[PriceSeries, Sequence[PricePoint], Sequence[Optional[float]]]

# Upper bound on any accepted price; keeps band and average arithmetic finite.
MAX_PRICE = 1e12
MOVING_AVERAGE_WINDOW = 7
CONFIDENCE_SAMPLE_POINTS = 5
MODEL_FACTOR = "Feed-forward neural network analysis"


@dataclass(frozen=True)
class _Request:
    """A validated forecast request with its normalized training data."""

    commodity: Commodity
    params: ForecastParameters
    prices: list[float]
    lo: float = 0.0
    hi: float = 0.0
    normalized: tuple[float, ...] = ()
    sequences: Optional[TrainingSequences] = None


class ForecastEngine:
    """Per-commodity price forecaster with a shared model cache.

    Args:
        config: Application config; ``AppConfig()`` defaults when omitted.
        cache: Model cache to use; a private one is created when omitted.
        predictor_factory: Builds an untrained predictor. Defaults to
            ``MLPPricePredictor.from_config(config.model)``.
        clock: Returns "today"; its month drives the seasonal table.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        cache: ModelCache | None = None,
        predictor_factory: Callable[[], MLPPricePredictor] | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.config = config or AppConfig()
        self.cache = cache if cache is not None else ModelCache()
        self._predictor_factory = predictor_factory or (
            lambda: MLPPricePredictor.from_config(self.config.model)
        )
        self._clock = clock
        self._counter_lock = threading.Lock()
        self._training_runs = 0

    @property
    def window_size(self) -> int:
        return self.config.model.window_size

    @property
    def training_runs(self) -> int:
        """Number of training runs completed by this engine."""
        with self._counter_lock:
            return self._training_runs

    def default_parameters(self) -> ForecastParameters:
        fc = self.config.forecast
        return ForecastParameters(
            horizon_days=fc.default_horizon_days,
            seasonal_weight=fc.default_seasonal_weight,
            trend_weight=fc.default_trend_weight,
        )

    # ── Public API ────────────────────────────────────────────────────────────

    def forecast(
        self,
        series: SeriesInput,
        commodity: Commodity,
        params: ForecastParameters | None = None,
    ) -> Forecast:
        """Forecast prices for one commodity.

        Args:
            series: Price history, oldest first. ``None`` prices are missing.
            commodity: Catalog entry for the commodity.
            params: Horizon and adjustment weights; config defaults if omitted.

        Returns:
            A complete ``Forecast`` (possibly a fallback, see ``Forecast.path``).

        Raises:
            ForecastValidationError: On malformed parameters or prices.
        """
        request = self._prepare(series, commodity, params)
        if request.sequences is None:
            return self._early_fallback(request)

        lookup = self.cache.lookup(commodity.id)
        model = lookup.model
        try:
            if model is None:
                model = self._new_predictor()
                try:
                    model.fit(request.sequences)
                except ComputationFault:
                    model.dispose()
                    raise
                self._record_training(request, model, lookup.generation)
            return self._full_pipeline(request, model)
        except ComputationFault as exc:
            return self._fault_fallback(request, exc, model)

    async def forecast_async(
        self,
        series: SeriesInput,
        commodity: Commodity,
        params: ForecastParameters | None = None,
    ) -> Forecast:
        """Coroutine version of :meth:`forecast`.

        Training yields to the event loop between epochs. If the caller
        cancels while training, ``CancelledError`` propagates and nothing is
        cached.
        """
        request = self._prepare(series, commodity, params)
        if request.sequences is None:
            return self._early_fallback(request)

        lookup = self.cache.lookup(commodity.id)
        model = lookup.model
        try:
            if model is None:
                model = self._new_predictor()
                try:
                    await model.fit_async(request.sequences)
                except ComputationFault:
                    model.dispose()
                    raise
                self._record_training(request, model, lookup.generation)
            return self._full_pipeline(request, model)
        except ComputationFault as exc:
            return self._fault_fallback(request, exc, model)

    def invalidate(self, commodity_id: Optional[str] = None) -> int:
        """Drop the cached model for one commodity, or all models.

        Call after new ground-truth prices are recorded so the next forecast
        retrains on the updated history.

        Returns:
            Number of cached models evicted.
        """
        return self.cache.invalidate(commodity_id)

    @staticmethod
    def correlation(series_a: Sequence[float], series_b: Sequence[float]) -> float:
        """Pearson correlation of two price series, in [-1, 1]."""
        return series_correlation(series_a, series_b)

    # ── Validation & preparation ──────────────────────────────────────────────

    def _prepare(
        self,
        series: SeriesInput,
        commodity: Commodity,
        params: ForecastParameters | None,
    ) -> _Request:
        params = params if params is not None else self.default_parameters()
        self._validate_params(params)
        self._validate_commodity(commodity)
        prices = _valid_prices(series)

        w = self.window_size
        if len(prices) < w + 2:
            return _Request(commodity=commodity, params=params, prices=prices)

        lo, hi = price_range(prices)
        normalized = normalize(prices, lo, hi)
        sequences = build_sequences(normalized, w)
        if len(sequences) < self.config.forecast.min_training_sequences:
            return _Request(
                commodity=commodity, params=params, prices=prices, lo=lo, hi=hi,
                normalized=tuple(normalized),
            )
        return _Request(
            commodity=commodity, params=params, prices=prices, lo=lo, hi=hi,
            normalized=tuple(normalized), sequences=sequences,
        )

    @staticmethod
    def _validate_params(params: ForecastParameters) -> None:
        horizon = params.horizon_days
        if isinstance(horizon, bool) or not isinstance(horizon, int):
            raise ForecastValidationError(
                "horizon_days", f"must be an integer, got {horizon!r}."
            )
        if not MIN_HORIZON_DAYS <= horizon <= MAX_HORIZON_DAYS:
            raise ForecastValidationError(
                "horizon_days",
                f"must be in [{MIN_HORIZON_DAYS}, {MAX_HORIZON_DAYS}], got {horizon}.",
            )
        for name in ("seasonal_weight", "trend_weight"):
            value = getattr(params, name)
            if not math.isfinite(value) or not 0.0 <= value <= 1.0:
                raise ForecastValidationError(name, f"must be in [0, 1], got {value}.")

    @staticmethod
    def _validate_commodity(commodity: Commodity) -> None:
        price = commodity.current_price
        if not math.isfinite(price) or not 0 <= price <= MAX_PRICE:
            raise ForecastValidationError(
                "current_price",
                f"commodity '{commodity.id}' has invalid current price {price}.",
            )

    # ── Pipeline ──────────────────────────────────────────────────────────────

    def _early_fallback(self, request: _Request) -> Forecast:
        horizon = request.params.horizon_days
        if len(request.prices) < self.window_size + 2:
            logger.info(
                "Forecast [%s] path=%s valid_points=%d",
                request.commodity.id, ForecastPath.INSUFFICIENT_DATA.value,
                len(request.prices),
            )
            return insufficient_data_forecast(request.prices, request.commodity, horizon)
        logger.info(
            "Forecast [%s] path=%s valid_points=%d",
            request.commodity.id, ForecastPath.LOW_TRAINING_DATA.value,
            len(request.prices),
        )
        return low_training_data_forecast(request.prices, request.commodity, horizon)

    def _fault_fallback(
        self,
        request: _Request,
        exc: ComputationFault,
        model: Optional[MLPPricePredictor],
    ) -> Forecast:
        logger.warning(
            "Forecast [%s] computation fault, using fallback: %s",
            request.commodity.id, exc,
        )
        if model is not None:
            self.cache.discard(request.commodity.id, model)
        return low_training_data_forecast(
            request.prices,
            request.commodity,
            request.params.horizon_days,
            extra_factors=[UNSTABLE_MODEL_FACTOR],
        )

    def _new_predictor(self) -> MLPPricePredictor:
        return self._predictor_factory()

    def _record_training(
        self,
        request: _Request,
        model: MLPPricePredictor,
        generation: int,
    ) -> None:
        with self._counter_lock:
            self._training_runs += 1
        cached = self.cache.publish(request.commodity.id, model, generation)
        logger.info(
            "Trained model for '%s' on %d sequences | val_mse=%s cached=%s",
            request.commodity.id, len(request.sequences) if request.sequences is not None else 0,
            model.val_metrics.get("val_mse"), cached,
        )

    def _full_pipeline(self, request: _Request, model: MLPPricePredictor) -> Forecast:
        params = request.params
        prices = request.prices
        rollout = model.forecast_steps(
            request.normalized[-self.window_size:], params.horizon_days
        )
        values = denormalize(rollout, request.lo, request.hi)
        values = apply_seasonal(
            values,
            self._clock().month - 1,
            request.commodity.category,
            params.seasonal_weight,
        )
        values = apply_trend_weight(
            values, average_daily_change(prices), params.trend_weight
        )
        predictions = [max(0.0, float(round(v))) for v in values]

        vol = series_volatility(prices)
        confidence = estimate_confidence(
            predictions[:CONFIDENCE_SAMPLE_POINTS],
            prices[-CONFIDENCE_SAMPLE_POINTS:],
            vol,
        )
        upper, lower = compute_bands(predictions, vol)

        logger.info(
            "Forecast [%s] path=%s valid_points=%d horizon=%d confidence=%d",
            request.commodity.id, ForecastPath.FULL_PIPELINE.value,
            len(prices), params.horizon_days, confidence,
        )
        return Forecast(
            commodity_id=request.commodity.id,
            path=ForecastPath.FULL_PIPELINE,
            predictions=predictions,
            confidence=confidence,
            trend=self._classify_trend(predictions, prices[-1]),
            volatility=vol,
            moving_average=moving_average(prices, MOVING_AVERAGE_WINDOW),
            upper_band=upper,
            lower_band=lower,
            factors=self._factors(len(prices), vol, params),
        )

    def _classify_trend(
        self,
        predictions: Sequence[float],
        last_price: float,
    ) -> TrendDirection:
        avg = mean(predictions)
        threshold = self.config.forecast.trend_threshold_pct
        if last_price == 0:
            return TrendDirection.UP if avg > 0 else TrendDirection.STABLE
        change_pct = (avg - last_price) / last_price * 100
        if change_pct > threshold:
            return TrendDirection.UP
        if change_pct < -threshold:
            return TrendDirection.DOWN
        return TrendDirection.STABLE

    def _factors(
        self,
        n_points: int,
        vol: float,
        params: ForecastParameters,
    ) -> list[str]:
        fc = self.config.forecast
        factors = [
            MODEL_FACTOR,
            f"{self.window_size}-day sliding window pattern recognition",
            f"{n_points} historical data points processed",
        ]
        if vol > fc.high_volatility_pct:
            factors.append(f"High volatility detected ({vol:.1f}%)")
        if params.seasonal_weight > fc.adjustment_note_weight:
            factors.append("Seasonal adjustment factors applied")
        if params.trend_weight > fc.adjustment_note_weight:
            factors.append("Historical trend momentum weighted")
        return factors


def _valid_prices(series: SeriesInput) -> list[float]:
    """Flatten a series input to its defined prices, rejecting bad values.

    Raises:
        ForecastValidationError: On NaN, infinite, negative, non-numeric or
            above-``MAX_PRICE`` prices.
    """
    if isinstance(series, PriceSeries):
        raw: Sequence[object] = [p.price for p in series.points]
    else:
        raw = [p.price if isinstance(p, PricePoint) else p for p in series]

    prices: list[float] = []
    for i, value in enumerate(raw):
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, Real):
            raise ForecastValidationError(
                "series", f"price at index {i} is not a number: {value!r}."
            )
        price = float(value)
        if not math.isfinite(price):
            raise ForecastValidationError(
                "series", f"price at index {i} is not finite: {price}."
            )
        if price < 0:
            raise ForecastValidationError(
                "series", f"price at index {i} is negative: {price}."
            )
        if price > MAX_PRICE:
            raise ForecastValidationError(
                "series", f"price at index {i} exceeds {MAX_PRICE:g}: {price}."
            )
        prices.append(price)
    return prices
