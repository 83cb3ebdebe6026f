"""
Trading signal derived from a forecast.

Action determination (priority order)
--------------------------------------
    1. BUY  : trend up   AND confidence > 80
    2. SELL : trend down AND confidence > 75
    3. HOLD : all other cases (including every fallback forecast, whose
              confidence never exceeds 70)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from crop_forecaster.models.forecast import Forecast
from crop_forecaster.taxonomy import TrendDirection

SignalAction = Literal["buy", "sell", "hold"]

BUY_MIN_CONFIDENCE = 80
SELL_MIN_CONFIDENCE = 75

_REASONING: dict[str, str] = {
    "buy":  "Strong Buy Signal - Prices expected to rise. Consider holding inventory.",
    "sell": "Sell Signal - Prices may decline. Consider selling current stock.",
    "hold": "Hold Position - Market conditions are uncertain. Monitor closely.",
}


@dataclass(frozen=True)
class Recommendation:
    """A buy/sell/hold signal for one commodity.

    Attributes:
        commodity_id:    Commodity the signal applies to.
        action:          ``"buy"``, ``"sell"`` or ``"hold"``.
        reasoning:       Human-readable explanation.
        expected_change_pct: Mean forecast vs first forecast day, in percent.
    """

    commodity_id: str
    action: SignalAction
    reasoning: str
    expected_change_pct: float


def determine_action(trend: TrendDirection, confidence: int) -> SignalAction:
    if trend == TrendDirection.UP and confidence > BUY_MIN_CONFIDENCE:
        return "buy"
    if trend == TrendDirection.DOWN and confidence > SELL_MIN_CONFIDENCE:
        return "sell"
    return "hold"


def recommend(forecast: Forecast) -> Recommendation:
    """Turn a forecast into a trading recommendation."""
    action = determine_action(forecast.trend, forecast.confidence)
    first = forecast.predictions[0] if forecast.predictions else 0.0
    if first:
        avg = sum(forecast.predictions) / len(forecast.predictions)
        change_pct = (avg - first) / first * 100
    else:
        change_pct = 0.0
    return Recommendation(
        commodity_id=forecast.commodity_id,
        action=action,
        reasoning=_REASONING[action],
        expected_change_pct=round(change_pct, 2),
    )
