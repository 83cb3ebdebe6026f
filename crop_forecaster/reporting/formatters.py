"""
ASCII terminal formatters for CLI commands.

All formatters accept domain objects and return plain multi-line strings
suitable for ``typer.echo()``. Prices are shown in whole currency units;
the dashboard collaborator is responsible for currency symbols.

No third-party dependencies (no ``rich``, no ``colorama``).
"""

from __future__ import annotations

from datetime import date, timedelta

from crop_forecaster.analytics.correlation_matrix import CorrelationCell
from crop_forecaster.models.forecast import Forecast
from crop_forecaster.recommendations.signal import Recommendation


# ── Forecast ──────────────────────────────────────────────────────────────────


def format_forecast_table(
    forecast: Forecast,
    start_date: date | None = None,
    recommendation: Recommendation | None = None,
) -> str:
    """Format a forecast as a header block plus one row per forecast day::

        Day  Date          Lower   Predicted     Upper
        ----------------------------------------------
          1  2024-10-01     2280        2410      2540

    Args:
        forecast:       Forecast to render.
        start_date:     Date of the first forecast day; the Date column is
                        omitted when ``None``.
        recommendation: Optional signal shown under the header.

    Returns:
        Multi-line string.
    """
    lines: list[str] = []
    lines.append("")
    lines.append(f"=== Forecast: {forecast.commodity_id} ===")
    lines.append(f"  Path:       {forecast.path.value}")
    lines.append(f"  Horizon:    {forecast.horizon_days} days")
    lines.append(f"  Trend:      {forecast.trend.value}")
    lines.append(f"  Confidence: {forecast.confidence}%")
    lines.append(f"  Volatility: {forecast.volatility:.1f}%")
    if recommendation is not None:
        lines.append(
            f"  Signal:     {recommendation.action.upper()}: {recommendation.reasoning}"
        )

    lines.append("")
    date_col = f"  {'Date':<10}" if start_date else ""
    header = f"  {'Day':>3}{date_col}  {'Lower':>9}  {'Predicted':>9}  {'Upper':>9}"
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for i, (lo, p, hi) in enumerate(
        zip(forecast.lower_band, forecast.predictions, forecast.upper_band)
    ):
        day_date = (
            f"  {(start_date + timedelta(days=i)).isoformat():<10}" if start_date else ""
        )
        lines.append(f"  {i + 1:>3}{day_date}  {lo:>9.0f}  {p:>9.0f}  {hi:>9.0f}")

    lines.append("")
    lines.append("  Factors:")
    for factor in forecast.factors:
        lines.append(f"    - {factor}")
    return "\n".join(lines)


# ── Correlation ───────────────────────────────────────────────────────────────


def format_correlation_matrix(cells: list[CorrelationCell]) -> str:
    """Format a correlation grid with commodity ids as row/column headers."""
    ids: list[str] = []
    for cell in cells:
        if cell.row_id not in ids:
            ids.append(cell.row_id)

    if not ids:
        return "\n  (no series to correlate)"

    lookup = {(c.row_id, c.col_id): c.correlation for c in cells}
    width = max(8, max(len(i) for i in ids) + 2)

    lines: list[str] = ["", "=== Price Correlation ==="]
    lines.append("  " + " " * width + "".join(f"{i[:width - 1]:>{width}}" for i in ids))
    for row in ids:
        values = "".join(f"{lookup[(row, col)]:>{width}.2f}" for col in ids)
        lines.append(f"  {row[:width - 1]:<{width}}{values}")
    return "\n".join(lines)
