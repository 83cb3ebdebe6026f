"""
Exception types raised by the forecasting core.

Only ``ForecastValidationError`` ever crosses the ``ForecastEngine`` boundary.
``ComputationFault`` is raised inside the predictor and absorbed by the engine,
which answers with a degraded fallback forecast instead.
"""

from __future__ import annotations


class ForecastValidationError(ValueError):
    """Malformed forecast input (parameters or price series).

    Attributes:
        field: Name of the offending input, e.g. ``"horizon_days"``.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")


class ComputationFault(RuntimeError):
    """Numeric failure while training or running the predictor.

    Typical causes: a training run diverging to non-finite loss or weights,
    or a rollout producing NaN/inf values.
    """
