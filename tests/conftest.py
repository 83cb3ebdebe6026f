"""
Shared pytest fixtures for the Crop Price Forecaster test suite.

Provides:
  - Sample domain objects (``wheat``, price series builders).
  - Deterministic stand-in predictors so engine tests do not depend on
    stochastic neural-network training:
      ``FixedOutputPredictor``  always predicts the same normalized value.
      ``FaultingPredictor``     raises ``ComputationFault`` at inference.
      ``DivergingPredictor``    raises ``ComputationFault`` during training.
      ``RecordingPredictor``    records each input window, predicts last + step.
  - ``fixed_clock``: a June date, so the seasonal month is deterministic.
"""

from __future__ import annotations

import logging
from datetime import date
from types import SimpleNamespace

import pytest

from crop_forecaster.config import AppConfig, ModelConfig
from crop_forecaster.exceptions import ComputationFault
from crop_forecaster.forecasting.engine import ForecastEngine
from crop_forecaster.ml.predictor import EpochResult, MLPPricePredictor
from crop_forecaster.models.crop import Commodity, PriceSeries
from crop_forecaster.taxonomy import TrendDirection


# ── Stand-in predictors ───────────────────────────────────────────────────────

class FixedOutputPredictor(MLPPricePredictor):
    """Predictor whose "training" is instant and whose output is constant."""

    def __init__(self, value: float = 0.5, window_size: int = 7, epochs: int = 3) -> None:
        super().__init__(window_size=window_size, epochs=epochs)
        self.value = value
        self.predict_calls = 0

    def iter_fit(self, sequences):
        if len(sequences) < 2:
            raise ValueError("need >= 2 sequences")
        for epoch in range(1, self.epochs + 1):
            yield EpochResult(epoch=epoch, train_loss=0.0, val_mse=0.0)
        self._estimator = "fixed"
        self._val_metrics = {"val_mse": 0.0}

    def predict_next(self, window):
        if not self.is_fitted:
            raise RuntimeError("not fitted")
        if len(window) != self.window_size:
            raise ValueError("bad window")
        self.predict_calls += 1
        return self.value


class FaultingPredictor(FixedOutputPredictor):
    """Trains fine, then produces a non-finite value at inference."""

    def predict_next(self, window):
        raise ComputationFault("Predictor produced a non-finite value: nan.")


class RecordingPredictor(FixedOutputPredictor):
    """Logs every window it sees and predicts the last value plus ``step``."""

    def __init__(self, step: float = 0.01, **kwargs) -> None:
        super().__init__(**kwargs)
        self.step = step
        self.windows: list[list[float]] = []

    def predict_next(self, window):
        super().predict_next(window)
        self.windows.append(list(window))
        return window[-1] + self.step


class DivergingPredictor(FixedOutputPredictor):
    """Training blows up on the first epoch."""

    def iter_fit(self, sequences):
        raise ComputationFault("Non-finite loss at epoch 1.")
        yield  # pragma: no cover


@pytest.fixture
def stubs() -> SimpleNamespace:
    """The stand-in predictor classes, for tests that build their own."""
    return SimpleNamespace(
        fixed=FixedOutputPredictor,
        faulting=FaultingPredictor,
        diverging=DivergingPredictor,
        recording=RecordingPredictor,
    )


# ── Domain objects ────────────────────────────────────────────────────────────

@pytest.fixture
def wheat() -> Commodity:
    """A cereal commodity with a stable catalog trend."""
    return Commodity(
        id="wheat",
        name="Wheat",
        category="Cereals",
        current_price=2400.0,
        trend=TrendDirection.STABLE,
    )


@pytest.fixture
def ramp_prices() -> list[float]:
    """30 prices rising linearly from 1000 to 1290."""
    return [1000.0 + 10.0 * i for i in range(30)]


@pytest.fixture
def ramp_series(ramp_prices) -> PriceSeries:
    return PriceSeries.from_prices(ramp_prices, start=date(2024, 5, 1))


# ── Engines ───────────────────────────────────────────────────────────────────

@pytest.fixture
def fixed_clock():
    """Clock pinned to 15 June 2024 (seasonal month index 5)."""
    return lambda: date(2024, 6, 15)


@pytest.fixture
def seeded_config() -> AppConfig:
    """Default config with a fixed training seed and a short training budget."""
    return AppConfig(model=ModelConfig(random_state=0, epochs=10))


@pytest.fixture
def stub_engine(fixed_clock) -> ForecastEngine:
    """Engine whose predictor always outputs the mid-range value 0.5."""
    return ForecastEngine(
        predictor_factory=lambda: FixedOutputPredictor(value=0.5),
        clock=fixed_clock,
    )


@pytest.fixture
def mlp_engine(seeded_config, fixed_clock) -> ForecastEngine:
    """Engine training the real scikit-learn network (seeded)."""
    return ForecastEngine(config=seeded_config, clock=fixed_clock)


# ── Logging ───────────────────────────────────────────────────────────────────

@pytest.fixture
def restore_root_logger():
    """Undo ``configure_logging()`` side effects on the root logger."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
