"""
Seasonal adjustment of raw predictions by crop category.

Each category has 12 monthly multipliers centred near 1.0; vegetables swing
widest, cereals and oilseeds least. Forecast step ``i`` uses the multiplier
for month ``(month_index + i) % 12`` where ``month_index`` is 0 for January.

The adjusted value is blended with the raw prediction::

    seasonal[i] = round(raw[i] * multiplier)
    result[i]   = round(raw[i] * (1 - w) + seasonal[i] * w)

``w == 0`` returns the input unchanged (no rounding either).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from crop_forecaster.taxonomy import CropCategory

logger = logging.getLogger(__name__)

#                 Jan   Feb   Mar   Apr   May   Jun   Jul   Aug   Sep   Oct   Nov   Dec
SEASONAL_MULTIPLIERS: dict[CropCategory, tuple[float, ...]] = {
    CropCategory.CEREALS:    (1.02, 1.01, 0.98, 0.97, 0.96, 0.95, 0.98, 1.00, 1.02, 1.04, 1.03, 1.02),
    CropCategory.CASH_CROPS: (0.98, 0.97, 0.99, 1.01, 1.02, 1.03, 1.02, 1.00, 0.98, 0.97, 0.98, 0.99),
    CropCategory.VEGETABLES: (1.15, 1.10, 1.00, 0.90, 0.85, 0.88, 0.95, 1.00, 1.05, 1.10, 1.12, 1.15),
    CropCategory.OILSEEDS:   (1.01, 1.00, 0.99, 0.98, 0.97, 0.98, 1.00, 1.02, 1.03, 1.02, 1.01, 1.01),
}

DEFAULT_CATEGORY = CropCategory.CEREALS

_BY_LABEL: dict[str, CropCategory] = {c.value.lower(): c for c in CropCategory}


def resolve_category(label: str | CropCategory) -> CropCategory:
    """Map a raw catalog label to a ``CropCategory``.

    Matching is case-insensitive on the category value (``"cash crops"`` →
    ``CASH_CROPS``). Unknown labels resolve to ``DEFAULT_CATEGORY``.
    """
    if isinstance(label, CropCategory):
        return label
    category = _BY_LABEL.get(label.strip().lower())
    if category is None:
        logger.debug(
            "Unknown crop category '%s'; using %s seasonal table.",
            label, DEFAULT_CATEGORY.value,
        )
        return DEFAULT_CATEGORY
    return category


def monthly_multipliers(category: str | CropCategory) -> tuple[float, ...]:
    """Return the 12 monthly multipliers for a (possibly unknown) category."""
    return SEASONAL_MULTIPLIERS[resolve_category(category)]


def apply_seasonal(
    predictions: Sequence[float],
    month_index: int,
    category: str | CropCategory,
    weight: float,
) -> list[float]:
    """Blend predictions with their seasonally adjusted values.

    Args:
        predictions: Denormalized predictions, nearest step first.
        month_index: Month of the first forecast step, 0 = January.
        category: Crop category label.
        weight: Seasonal weight in [0, 1].

    Returns:
        Adjusted predictions, same length as the input.
    """
    if weight == 0:
        return list(predictions)
    if not 0 <= month_index <= 11:
        raise ValueError(f"month_index must be in [0, 11], got {month_index}.")

    multipliers = monthly_multipliers(category)
    result: list[float] = []
    for i, raw in enumerate(predictions):
        seasonal = round(raw * multipliers[(month_index + i) % 12])
        result.append(float(round(raw * (1 - weight) + seasonal * weight)))
    return result
