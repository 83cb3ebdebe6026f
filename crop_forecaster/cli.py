"""
Crop Price Forecaster — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (forecast, correlation).
  5. Report result to stdout.

Install and run::

    pip install -e .
    crop-forecaster --help
    crop-forecaster validate-config
    crop-forecaster forecast data/wheat.csv --crop-id wheat --horizon 14
    crop-forecaster correlate data/wheat.csv data/rice.csv data/maize.csv
"""

from __future__ import annotations

import json
from datetime import timedelta
from pathlib import Path
from typing import Optional

import typer

from crop_forecaster.taxonomy import TrendDirection

app = typer.Typer(
    name="crop-forecaster",
    help="Crop commodity price forecaster — neural-network forecasts from price CSVs.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from crop_forecaster.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from crop_forecaster.utils.logging import configure_logging
    configure_logging(config.logging)


def _read_series_or_exit(csv_path: str):
    from crop_forecaster.ingestion.price_csv import parse_price_csv

    try:
        return parse_price_csv(Path(csv_path))
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Window size:      {config.model.window_size}")
    typer.echo(f"  Hidden layers:    {config.model.hidden_layers}")
    typer.echo(f"  Training epochs:  {config.model.epochs}")
    typer.echo(f"  Random state:     {config.model.random_state}")
    typer.echo(f"  Default horizon:  {config.forecast.default_horizon_days} days")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("forecast")
def forecast(
    prices_csv: str = typer.Argument(
        ...,
        help="CSV file with 'date,price' columns (oldest to newest in any order).",
    ),
    crop_id: Optional[str] = typer.Option(
        None,
        "--crop-id",
        help="Commodity id. Defaults to the CSV file name without extension.",
    ),
    category: str = typer.Option(
        "Cereals",
        "--category",
        help="Seasonal category (Cereals, Cash Crops, Vegetables, Oilseeds).",
    ),
    trend: TrendDirection = typer.Option(
        TrendDirection.STABLE,
        "--trend",
        help="Catalog trend label, used only for very short histories.",
    ),
    current_price: Optional[float] = typer.Option(
        None,
        "--current-price",
        help="Catalog price used when the history has no prices. Defaults to the last price.",
    ),
    horizon: Optional[int] = typer.Option(
        None,
        "--horizon",
        help="Forecast horizon in days (7-30). Uses config default if omitted.",
    ),
    seasonal_weight: Optional[float] = typer.Option(
        None,
        "--seasonal-weight",
        help="Seasonal adjustment weight in [0, 1].",
    ),
    trend_weight: Optional[float] = typer.Option(
        None,
        "--trend-weight",
        help="Trend momentum weight in [0, 1].",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the forecast as JSON instead of a table.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Forecast prices for one commodity from its CSV price history.

    Exits with code 1 on unreadable input or invalid parameters.
    """
    from crop_forecaster.exceptions import ForecastValidationError
    from crop_forecaster.forecasting.engine import ForecastEngine
    from crop_forecaster.models.crop import Commodity
    from crop_forecaster.models.forecast import ForecastParameters
    from crop_forecaster.recommendations.signal import recommend
    from crop_forecaster.reporting.formatters import format_forecast_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    series = _read_series_or_exit(prices_csv)
    valid = series.valid_prices()

    engine = ForecastEngine(config)
    defaults = engine.default_parameters()

    try:
        commodity = Commodity(
            id=crop_id or Path(prices_csv).stem,
            category=category,
            current_price=(
                current_price if current_price is not None
                else (valid[-1] if valid else 0.0)
            ),
            trend=trend,
        )
        params = ForecastParameters(
            horizon_days=horizon if horizon is not None else defaults.horizon_days,
            seasonal_weight=(
                seasonal_weight if seasonal_weight is not None
                else defaults.seasonal_weight
            ),
            trend_weight=trend_weight if trend_weight is not None else defaults.trend_weight,
        )
        result = engine.forecast(series, commodity, params)
    except (ForecastValidationError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    signal = recommend(result)

    if as_json:
        payload = result.model_dump(mode="json")
        payload["recommendation"] = {
            "action": signal.action,
            "reasoning": signal.reasoning,
            "expected_change_pct": signal.expected_change_pct,
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    start = series.points[-1].observed_on + timedelta(days=1) if len(series) else None
    typer.echo(format_forecast_table(result, start_date=start, recommendation=signal))


@app.command("correlate")
def correlate(
    csv_files: list[str] = typer.Argument(
        ...,
        help="Two or more price CSV files. Each file name (without extension) is the commodity id.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Print the pairwise price-correlation matrix of several commodities."""
    from crop_forecaster.analytics.correlation_matrix import correlation_matrix
    from crop_forecaster.reporting.formatters import format_correlation_matrix

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    if len(csv_files) < 2:
        typer.echo("[ERROR] Provide at least two CSV files to correlate.", err=True)
        raise typer.Exit(code=1)

    histories: dict[str, list[float]] = {}
    for csv_path in csv_files:
        series = _read_series_or_exit(csv_path)
        histories[Path(csv_path).stem] = series.valid_prices()

    typer.echo(format_correlation_matrix(correlation_matrix(histories)))


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
