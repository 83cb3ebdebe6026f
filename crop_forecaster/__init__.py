"""
Crop Price Forecaster — per-commodity price forecasting core.

Public entry point::

    from crop_forecaster.config import load_config
    from crop_forecaster.forecasting.engine import ForecastEngine

    engine = ForecastEngine(load_config())
    forecast = engine.forecast(series, commodity, params)
"""

__version__ = "0.3.0"
