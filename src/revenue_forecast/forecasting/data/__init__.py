"""Data loading and preparation utilities."""

from revenue_forecast.forecasting.data.loaders import load_revenue_history
from revenue_forecast.forecasting.data.preparation import build_revenue_input

__all__ = ["build_revenue_input", "load_revenue_history"]
