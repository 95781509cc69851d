"""Shared types for revenue forecasting.

All records are frozen dataclasses: inputs are never mutated by the engine and
outputs are built fresh for every call.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from datetime import date
from enum import Enum
from typing import Any

from revenue_forecast.exceptions import ConfigError, DataQualityError
from revenue_forecast.forecasting.config import (
    DEFAULT_CONFIDENCE_LEVEL,
    DEFAULT_FORECAST_PERIODS,
    DEFAULT_METHOD,
    DEFAULT_MIN_DATA_POINTS,
    DEFAULT_MOVING_AVERAGE_WINDOW,
    DEFAULT_SEASONAL_FACTORS,
    DEFAULT_SMOOTHING_ALPHA,
)

MONTH_NAMES = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)


class Granularity(str, Enum):
    """Time granularity of a revenue series."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"

    @property
    def unit_label(self) -> str:
        """Plural label of one period, e.g. 'months'."""
        return {
            Granularity.DAILY: "days",
            Granularity.WEEKLY: "weeks",
            Granularity.MONTHLY: "months",
            Granularity.QUARTERLY: "quarters",
        }[self]


class TrendDirection(str, Enum):
    GROWING = "GROWING"
    STABLE = "STABLE"
    DECLINING = "DECLINING"
    VOLATILE = "VOLATILE"


class ConfidenceLevel(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


@dataclass(frozen=True)
class HistoricalRevenuePoint:
    """Revenue aggregated over one historical period.

    Attributes:
        date: First day (or representative day) of the period.
        revenue: Revenue for the period, must be >= 0.
        cases_completed: Number of cases completed in the period.
        new_patients: Number of new patients in the period.
        collection_rate: Optional collection rate in percent.
        avg_case_value: Optional average case value.
        high_value_revenue: Optional revenue from high-value cases.
    """

    date: date
    revenue: float
    cases_completed: int = 0
    new_patients: int = 0
    collection_rate: float | None = None
    avg_case_value: float | None = None
    high_value_revenue: float | None = None


@dataclass(frozen=True)
class HistoricalRevenueInput:
    """Historical revenue series for one clinic."""

    clinic_id: str
    data_points: tuple[HistoricalRevenuePoint, ...]
    granularity: Granularity = Granularity.MONTHLY
    currency: str = "EUR"

    def __post_init__(self) -> None:
        object.__setattr__(self, "data_points", tuple(self.data_points))
        try:
            object.__setattr__(self, "granularity", Granularity(self.granularity))
        except ValueError as e:
            raise DataQualityError(f"Unknown granularity: {self.granularity!r}") from e


@dataclass(frozen=True)
class SeasonalFactors:
    """Multiplicative demand adjustment for each calendar month."""

    january: float
    february: float
    march: float
    april: float
    may: float
    june: float
    july: float
    august: float
    september: float
    october: float
    november: float
    december: float

    def __post_init__(self) -> None:
        for name in MONTH_NAMES:
            value = getattr(self, name)
            if not _is_number(value) or not math.isfinite(value) or value <= 0:
                raise ConfigError(f"Seasonal factor for {name} must be a positive number, got {value!r}")

    @classmethod
    def from_mapping(cls, factors: Mapping[str, float]) -> SeasonalFactors:
        """Build factors from a ``{month_name: factor}`` mapping.

        Raises:
            ConfigError: If a month is missing or an unknown key is present.
        """
        keys = {key.lower() for key in factors}
        missing = [name for name in MONTH_NAMES if name not in keys]
        unknown = sorted(keys - set(MONTH_NAMES))
        if missing or unknown:
            raise ConfigError(
                f"Seasonal factors need exactly the twelve month names. "
                f"Missing: {missing}, unknown: {unknown}"
            )
        try:
            values = {key.lower(): float(value) for key, value in factors.items()}
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Seasonal factors must be numbers: {e}") from e
        return cls(**values)

    @classmethod
    def default(cls) -> SeasonalFactors:
        return cls.from_mapping(DEFAULT_SEASONAL_FACTORS)

    def for_month(self, month: int) -> float:
        """Return the factor for a 1-based calendar month."""
        return getattr(self, MONTH_NAMES[month - 1])


@dataclass(frozen=True)
class ForecastConfig:
    """Per-call forecasting configuration.

    Instances are validated on construction and never mutated; use
    :meth:`merged` to derive a configuration with overrides applied.

    Attributes:
        method: Registered strategy name, or "ensemble".
        forecast_periods: Number of periods to forecast ahead.
        confidence_level: Two-sided interval coverage in (0, 1).
        apply_seasonality: Whether monthly seasonal factors are applied.
        seasonal_factors: Custom seasonal table. If None, the default table is used.
        moving_average_window: Window length for the moving average strategy.
        smoothing_alpha: Level smoothing coefficient in (0, 1).
        include_trend: Whether exponential smoothing tracks a trend.
        min_data_points: Minimum number of historical points required.
        granularity: Period length, set from the input series by the service.
    """

    method: str = DEFAULT_METHOD
    forecast_periods: int = DEFAULT_FORECAST_PERIODS
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL
    apply_seasonality: bool = True
    seasonal_factors: SeasonalFactors | None = None
    moving_average_window: int = DEFAULT_MOVING_AVERAGE_WINDOW
    smoothing_alpha: float = DEFAULT_SMOOTHING_ALPHA
    include_trend: bool = True
    min_data_points: int = DEFAULT_MIN_DATA_POINTS
    granularity: Granularity = Granularity.MONTHLY

    def __post_init__(self) -> None:
        if isinstance(self.seasonal_factors, Mapping):
            object.__setattr__(
                self, "seasonal_factors", SeasonalFactors.from_mapping(self.seasonal_factors)
            )
        try:
            object.__setattr__(self, "granularity", Granularity(self.granularity))
        except ValueError as e:
            raise ConfigError(f"Unknown granularity: {self.granularity!r}") from e
        self.validate()

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ConfigError: If any value is out of range.
        """
        if not isinstance(self.method, str) or not self.method:
            raise ConfigError(f"method must be a non-empty string, got {self.method!r}")
        if not _is_int(self.forecast_periods) or self.forecast_periods <= 0:
            raise ConfigError(f"forecast_periods must be > 0, got {self.forecast_periods!r}")
        if not _is_number(self.confidence_level) or not 0 < self.confidence_level < 1:
            raise ConfigError(f"confidence_level must be in (0, 1), got {self.confidence_level!r}")
        if not _is_number(self.smoothing_alpha) or not 0 < self.smoothing_alpha < 1:
            raise ConfigError(f"smoothing_alpha must be in (0, 1), got {self.smoothing_alpha!r}")
        if not _is_int(self.moving_average_window) or self.moving_average_window < 1:
            raise ConfigError(
                f"moving_average_window must be >= 1, got {self.moving_average_window!r}"
            )
        if not _is_int(self.min_data_points) or self.min_data_points < 2:
            raise ConfigError(f"min_data_points must be >= 2, got {self.min_data_points!r}")
        if self.seasonal_factors is not None and not isinstance(
            self.seasonal_factors, SeasonalFactors
        ):
            raise ConfigError("seasonal_factors must be a SeasonalFactors or a month mapping")

    def merged(self, **overrides: Any) -> ForecastConfig:
        """Return a new validated config with ``overrides`` applied.

        Raises:
            ConfigError: If an override names an unknown field or a value is invalid.
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigError(f"Unknown forecast config fields: {unknown}")
        return replace(self, **overrides)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class ConfidenceInterval:
    lower: float
    upper: float
    level: float


@dataclass(frozen=True)
class ForecastedRevenuePoint:
    """Prediction for a single future period."""

    date: date
    predicted: float
    confidence_interval: ConfidenceInterval
    seasonal_factor: float | None = None
    trend_component: float | None = None
    high_uncertainty: bool = False


@dataclass(frozen=True)
class ModelFitStatistics:
    """In-sample goodness of fit, computed from fitted vs. actual values."""

    r_squared: float
    mae: float
    mape: float
    rmse: float
    data_points_used: int
    aic: float | None = None
    degrees_of_freedom: int | None = None


@dataclass(frozen=True)
class TrendAnalysis:
    direction: TrendDirection
    monthly_growth_rate: float
    annualized_growth_rate: float
    is_significant: bool
    volatility: float


@dataclass(frozen=True)
class ModelDebugInfo:
    """Generic container for strategy-specific debug information.

    Attributes:
        model_name: Strategy name, e.g. "arima", "moving_average".
        version: Optional version string if strategy behavior changes over time.
        data: Strategy-specific payload of JSON-like values.
    """

    model_name: str
    version: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RevenueForecastOutput:
    """Complete result of one forecast call.

    ``calculated_at`` and ``debug`` are excluded from equality so that two
    calls with identical input and configuration compare equal.
    """

    clinic_id: str
    method: str
    confidence_level: ConfidenceLevel
    forecasts: tuple[ForecastedRevenuePoint, ...]
    total_predicted_revenue: float
    total_confidence_interval: ConfidenceInterval
    model_fit: ModelFitStatistics
    trend_analysis: TrendAnalysis
    summary: str
    recommended_actions: tuple[str, ...]
    insights: tuple[str, ...]
    model_version: str
    calculated_at: str = field(default="", compare=False)
    debug: Mapping[str, ModelDebugInfo] | None = field(default=None, compare=False)
