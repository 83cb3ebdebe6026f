"""
Forecast orchestration and post-processing.

seasonal   : per-category monthly multipliers, blended by seasonal weight.
momentum   : linear momentum from the historical average daily change.
confidence : MAPE + volatility penalty → 50–95 confidence score.
bands      : volatility-scaled upper/lower bands.
fallback   : INSUFFICIENT_DATA and LOW_TRAINING_DATA forecasts.
engine     : ForecastEngine — validation, path selection, model cache use.
"""
