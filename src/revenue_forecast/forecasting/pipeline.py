"""CLI wrapper for the revenue forecasting service.

This module provides a command-line interface for running forecasts.
All core forecasting logic is in revenue_forecast.forecasting.api.
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence

from revenue_forecast.exceptions import RevenueForecastError
from revenue_forecast.forecasting.api import ServiceConfig, create_revenue_forecasting_service
from revenue_forecast.forecasting.config import (
    DEFAULT_CONFIDENCE_LEVEL,
    DEFAULT_FORECAST_PERIODS,
    DEFAULT_METHOD,
    ENSEMBLE_METHOD,
)
from revenue_forecast.forecasting.data.loaders import load_revenue_history
from revenue_forecast.forecasting.data.preparation import build_revenue_input
from revenue_forecast.forecasting.formatters.console import format_forecast_for_console
from revenue_forecast.forecasting.models.registry import (
    get_strategy_by_name,
    registered_strategy_names,
)
from revenue_forecast.forecasting.types import Granularity


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a revenue forecast from a CSV file.")
    parser.add_argument(
        "--file",
        type=str,
        required=True,
        help="Path to a CSV with one row per period (columns: date, revenue, ...)",
    )
    parser.add_argument(
        "--clinic-id",
        type=str,
        default="clinic",
        help="Clinic identifier shown in the output (default: clinic)",
    )
    parser.add_argument(
        "--granularity",
        type=str,
        default=Granularity.MONTHLY.value,
        choices=[g.value for g in Granularity],
        help="Period length of each row (default: monthly)",
    )
    parser.add_argument(
        "--currency",
        type=str,
        default="EUR",
        help="ISO currency code of the revenue amounts (default: EUR)",
    )
    parser.add_argument(
        "--method",
        type=str,
        default=DEFAULT_METHOD,
        choices=[*registered_strategy_names(), ENSEMBLE_METHOD],
        help=f"Forecasting method (default: {DEFAULT_METHOD})",
    )
    parser.add_argument(
        "--periods",
        type=int,
        default=DEFAULT_FORECAST_PERIODS,
        help=f"Number of periods to forecast ahead (default: {DEFAULT_FORECAST_PERIODS})",
    )
    parser.add_argument(
        "--confidence",
        type=float,
        default=DEFAULT_CONFIDENCE_LEVEL,
        help=f"Confidence level of the intervals (default: {DEFAULT_CONFIDENCE_LEVEL})",
    )
    parser.add_argument(
        "--no-seasonality",
        action="store_true",
        help="Do not apply monthly seasonal factors",
    )
    parser.add_argument(
        "--with-arima",
        action="store_true",
        help="Include the ARIMA strategy in the ensemble",
    )
    parser.add_argument(
        "--ascii",
        action="store_true",
        help="Print ASCII-only output (for consoles without Unicode support)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Main CLI entry point for revenue forecasting.

    Parses command-line arguments, loads the CSV, runs the forecast and
    prints the formatted result.
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 60)
    print("Revenue Forecasting")
    print("=" * 60)

    try:
        print("\n[1/3] Loading revenue data...")
        print(f"  Reading from: {args.file}")
        df = load_revenue_history(args.file)
        history = build_revenue_input(
            df,
            clinic_id=args.clinic_id,
            granularity=args.granularity,
            currency=args.currency.upper(),
        )
        print(f"[OK] Loaded {len(history.data_points)} periods")

        print(f"\n[2/3] Forecasting {args.periods} periods using {args.method}...")
        service = create_revenue_forecasting_service(ServiceConfig())
        if args.with_arima:
            service.add_strategy(get_strategy_by_name("arima"))
        output = service.forecast(
            history,
            method=args.method,
            forecast_periods=args.periods,
            confidence_level=args.confidence,
            apply_seasonality=not args.no_seasonality,
        )
        print(f"[OK] Strategies available: {', '.join(service.available_strategies())}")

        print("\n[3/3] Formatting results...")
        print("\n" + "=" * 60)
        print(format_forecast_for_console(output, ascii_only=args.ascii))
        print("=" * 60)

        print("\n[OK] Forecast completed successfully")

    except (RevenueForecastError, FileNotFoundError) as e:
        print(f"\n[ERROR] Forecast failed: {e}")
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
