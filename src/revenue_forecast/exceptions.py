"""Domain-specific exceptions for Revenue Forecast.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from RevenueForecastError for easy catching, and each
carries a stable machine-readable ``code`` for API callers.
"""


class RevenueForecastError(Exception):
    """Base exception for all Revenue Forecast errors.

    Users can catch this exception to handle any error raised by the package.
    """

    code = "REVENUE_FORECAST_ERROR"


class ConfigError(RevenueForecastError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Invalid configuration values are provided (e.g. confidence level outside (0, 1))
    - Unknown configuration overrides are passed to a forecast call
    - A forecasting method name is not registered
    """

    code = "INVALID_CONFIG"


class DataQualityError(RevenueForecastError):
    """Raised when input data checks fail.

    This exception is raised when:
    - Required columns are missing from tabular input
    - Dates or revenue values cannot be parsed
    """

    code = "DATA_QUALITY"


class InsufficientDataError(DataQualityError):
    """Raised when fewer historical points are supplied than the configured minimum."""

    code = "INSUFFICIENT_DATA"


class InvalidRevenueDataError(DataQualityError):
    """Raised when historical revenue contains negative values."""

    code = "INVALID_REVENUE_DATA"
