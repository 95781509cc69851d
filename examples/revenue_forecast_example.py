"""Example: Revenue forecasting workflow

This example demonstrates how to forecast the next six months of clinic
revenue, compare strategies, and score a past forecast against actual revenue.

Prerequisites:
- A CSV with one row per month and at least the columns 'date' and 'revenue'
  (modify csv_path below), or run as-is to use synthetic data
"""

from pathlib import Path

import numpy as np
import pandas as pd

from revenue_forecast.forecasting import (
    ARIMAStrategy,
    compare_forecast_to_actual,
    create_revenue_forecasting_service,
)
from revenue_forecast.forecasting.data import build_revenue_input, load_revenue_history
from revenue_forecast.forecasting.formatters import format_forecast_for_console

csv_path = Path("data/clinic_revenue.csv")  # MODIFY AS NEEDED

if csv_path.exists():
    print(f"Loading revenue history from {csv_path}...")
    revenue_df = load_revenue_history(csv_path)
else:
    print("No CSV found, generating 24 months of synthetic revenue...")
    rng = np.random.default_rng(0)
    months = pd.date_range("2023-01-01", periods=24, freq="MS")
    revenue_df = pd.DataFrame(
        {
            "date": months,
            "revenue": 40_000 + 650 * np.arange(24) + rng.normal(0, 1_500, 24),
            "cases_completed": rng.integers(60, 90, 24),
        }
    )

history = build_revenue_input(revenue_df, clinic_id="clinic-demo", granularity="monthly")
print(f"Loaded {len(history.data_points)} periods of historical data")

# Default ensemble (moving average, exponential smoothing, linear regression)
service = create_revenue_forecasting_service()
output = service.forecast(history, forecast_periods=6, debug=True)

print()
print(format_forecast_for_console(output))

print("\nEnsemble weights:")
for name, weight in output.debug["ensemble"].data["weights"].items():
    print(f"  {name}: {weight:.2f}")

# Compare every strategy on the same history
print("\nTotal forecast per strategy:")
service.add_strategy(ARIMAStrategy())
for method in [*service.available_strategies(), "ensemble"]:
    result = service.forecast(history, method=method, forecast_periods=6)
    print(
        f"  {method:<22} {result.total_predicted_revenue:>12,.0f}  "
        f"R2={result.model_fit.r_squared:.2f}  confidence={result.confidence_level.value}"
    )

# Score the first forecasted month once the actual revenue is known
first = output.forecasts[0]
actual = first.predicted * 1.07  # REPLACE with the observed revenue
accuracy = compare_forecast_to_actual(first.predicted, actual, first.confidence_interval)
print(
    f"\nAccuracy for {first.date}: {accuracy.percentage_error:.1f}% error "
    f"({accuracy.assessment.value}), recalibration needed: {accuracy.needs_recalibration}"
)
