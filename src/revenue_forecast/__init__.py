"""Revenue Forecast - multi-strategy forecasting of periodic clinic revenue.

This package predicts future revenue from a clinic's historical per-period
revenue and reports point forecasts, confidence intervals, trend diagnostics,
fit statistics, a summary and recommended actions.

Module Structure:
    revenue_forecast.forecasting: Forecasting service, analysis and accuracy
    revenue_forecast.forecasting.models: Forecasting strategies and registry
    revenue_forecast.forecasting.data: CSV loading and input preparation
    revenue_forecast.exceptions: Error hierarchy

Quick Start:
    >>> from revenue_forecast.forecasting import create_revenue_forecasting_service
    >>> from revenue_forecast.forecasting.data import build_revenue_input, load_revenue_history
    >>>
    >>> df = load_revenue_history("revenue.csv")
    >>> history = build_revenue_input(df, clinic_id="clinic-1", granularity="monthly")
    >>>
    >>> service = create_revenue_forecasting_service()
    >>> output = service.forecast(history, forecast_periods=6)
    >>> print(output.summary)

Strategies:
    - moving_average: flat mean of the most recent periods
    - exponential_smoothing: Holt's level + trend smoothing
    - linear_regression: OLS trend line
    - arima: ARIMA(p, d, q) with AIC order selection (opt-in for the ensemble)
    - ensemble: R-squared weighted blend of the service's strategies
"""

__version__ = "2.0.0"

from revenue_forecast.exceptions import (
    ConfigError,
    DataQualityError,
    InsufficientDataError,
    InvalidRevenueDataError,
    RevenueForecastError,
)

__all__ = [
    "ConfigError",
    "DataQualityError",
    "InsufficientDataError",
    "InvalidRevenueDataError",
    "RevenueForecastError",
    "__version__",
]
