"""
ML forecasting layer — feed-forward price predictor for one commodity series.

Modules
-------
normalizer  : Min/max rescaling of a price series to [0, 1] and back.
sequences   : Sliding-window (input window, next value) training pairs.
predictor   : MLPPricePredictor — epoch-wise training with a time-ordered
              validation split, one-step prediction, autoregressive rollout.
model_cache : ModelCache — per-commodity trained models behind a lock, with
              generation counters so invalidation beats in-flight training.
"""
