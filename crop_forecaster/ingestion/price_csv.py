"""
CSV import parser for commodity price histories.

Format — comma delimited, with a header row.
Required columns:
  date, price

Rules:
  date   → YYYY-MM-DD; must be unique within the file
  price  → decimal number; an empty cell marks a missing observation

Rows may appear in any order; the returned series is sorted by date. Range
checks on prices (negative, NaN) are left to the forecast engine, which
rejects them with a ``ForecastValidationError``.

Example::

    date,price
    2024-09-01,2410
    2024-09-02,
    2024-09-03,2432.5
"""

from __future__ import annotations

import csv
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from crop_forecaster.models.crop import PricePoint, PriceSeries

logger = logging.getLogger(__name__)

REQUIRED_CSV_COLUMNS = frozenset({"date", "price"})


def parse_price_csv(path: Path) -> PriceSeries:
    """Parse a ``date,price`` CSV file into a chronologically sorted series.

    All rows are validated before anything is returned. If **any** row fails,
    a single :class:`ValueError` is raised listing the first 10 failures.

    Args:
        path: Path to the CSV file (must exist).

    Returns:
        ``PriceSeries`` sorted by date.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If required columns are missing or any row fails validation.
    """
    if not path.exists():
        raise FileNotFoundError(f"Price CSV file not found: {path}")

    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)

        if reader.fieldnames is None:
            raise ValueError(f"CSV file is empty or has no header row: {path}")

        actual_cols = {c.strip() for c in reader.fieldnames}
        missing = REQUIRED_CSV_COLUMNS - actual_cols
        if missing:
            raise ValueError(
                f"CSV missing required columns: {sorted(missing)}\n"
                f"Found columns: {sorted(actual_cols)}"
            )

        rows = [{k.strip(): (v or "") for k, v in row.items() if k} for row in reader]

    if not rows:
        logger.warning("Price CSV is empty (header only): %s", path)
        return PriceSeries()

    points: list[PricePoint] = []
    errors: list[tuple[int, str]] = []
    seen: set[date] = set()

    for i, row in enumerate(rows):
        line_no = i + 2  # 1-based, skip header row
        try:
            point = _row_to_point(row)
            if point.observed_on in seen:
                raise ValueError(f"Duplicate date {point.observed_on.isoformat()}.")
            seen.add(point.observed_on)
            points.append(point)
        except (ValueError, ValidationError) as exc:
            errors.append((line_no, str(exc)))

    if errors:
        max_shown = 10
        detail = "\n".join(f"  Row {ln}: {msg}" for ln, msg in errors[:max_shown])
        suffix = f"\n  … and {len(errors) - max_shown} more" if len(errors) > max_shown else ""
        raise ValueError(
            f"{len(errors)} row(s) failed validation in {path.name}:\n{detail}{suffix}"
        )

    points.sort(key=lambda p: p.observed_on)
    logger.info("Parsed %d price points from %s", len(points), path.name)
    return PriceSeries(points=tuple(points))


# ── Private helpers ────────────────────────────────────────────────────────────

def _row_to_point(row: dict[str, str]) -> PricePoint:
    return PricePoint(
        observed_on=_parse_date(row.get("date", "")),
        price=_parse_price(row.get("price", "")),
    )


def _parse_date(raw: str) -> date:
    v = raw.strip()
    if not v:
        raise ValueError("Required field 'date' is empty.")
    try:
        return date.fromisoformat(v)
    except ValueError:
        raise ValueError(f"Invalid date '{v}' (expected YYYY-MM-DD).") from None


def _parse_price(raw: str) -> Optional[float]:
    v = raw.strip()
    if not v:
        return None
    try:
        return float(v)
    except ValueError:
        raise ValueError(f"Invalid price '{v}' (expected a number).") from None
