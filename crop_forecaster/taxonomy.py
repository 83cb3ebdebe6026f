"""
Crop categories and trend labels.

``CropCategory`` selects the seasonal multiplier table; the set is fixed and
every member must have a row in ``forecasting.seasonal.SEASONAL_MULTIPLIERS``
(``tests/test_forecasting/test_adjustments.py`` verifies this).

This module has NO imports from any other ``crop_forecaster`` package.
"""

from enum import StrEnum


class CropCategory(StrEnum):
    """Commodity category used for seasonal adjustment."""

    CEREALS = "Cereals"
    """Wheat, rice, maize. Narrow seasonal swing, peaks before the rabi harvest."""

    CASH_CROPS = "Cash Crops"
    """Cotton, sugarcane. Mild mid-year premium."""

    VEGETABLES = "Vegetables"
    """Potato, onion, tomato. Widest swing; winter highs, summer lows."""

    OILSEEDS = "Oilseeds"
    """Soybean, groundnut. Small post-monsoon premium."""


class TrendDirection(StrEnum):
    """Direction of an expected or observed price movement."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"
