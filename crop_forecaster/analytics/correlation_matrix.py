"""
Pairwise correlation matrix across commodities, for the heatmap view.

Every ordered pair is emitted (including both ``(a, b)`` and ``(b, a)``) so
the collaborator can render a full grid without mirroring. Diagonal cells are
fixed at 1.0, even for flat series where Pearson correlation is undefined.

Label thresholds
----------------
    r >=  0.7  Strong positive
    r >=  0.4  Moderate positive
    r >=  0.1  Weak positive
    r >= -0.1  No correlation
    r >= -0.4  Weak negative
    r >= -0.7  Moderate negative
    otherwise  Strong negative
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from crop_forecaster.analytics.series_stats import correlation

_LABEL_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (0.7, "Strong positive"),
    (0.4, "Moderate positive"),
    (0.1, "Weak positive"),
    (-0.1, "No correlation"),
    (-0.4, "Weak negative"),
    (-0.7, "Moderate negative"),
)


@dataclass(frozen=True)
class CorrelationCell:
    """One cell of the correlation grid.

    Attributes:
        row_id:      Commodity id of the row.
        col_id:      Commodity id of the column.
        correlation: Pearson r rounded to 2 decimals.
        label:       Human-readable strength label.
    """

    row_id: str
    col_id: str
    correlation: float
    label: str


def correlation_label(value: float) -> str:
    """Map a correlation coefficient to a strength label."""
    for threshold, label in _LABEL_THRESHOLDS:
        if value >= threshold:
            return label
    return "Strong negative"


def correlation_matrix(
    histories: Mapping[str, Sequence[float]],
) -> list[CorrelationCell]:
    """Build the full correlation grid for a set of price histories.

    Args:
        histories: Commodity id → prices, oldest first. Iteration order of
            the mapping is the row/column order of the grid.

    Returns:
        ``len(histories) ** 2`` cells in row-major order.
    """
    ids = list(histories)
    cells: list[CorrelationCell] = []
    for row_id in ids:
        for col_id in ids:
            if row_id == col_id:
                r = 1.0
            else:
                r = round(correlation(histories[row_id], histories[col_id]), 2)
            cells.append(
                CorrelationCell(
                    row_id=row_id,
                    col_id=col_id,
                    correlation=r,
                    label=correlation_label(r),
                )
            )
    return cells
