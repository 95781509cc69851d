"""Base strategy interface for forecasting algorithms.

This module defines the abstract base class that all forecasting strategies must
implement, enabling a consistent interface for different algorithms (moving
average, exponential smoothing, regression, ARIMA, ...).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar

from revenue_forecast.forecasting.types import (
    ForecastConfig,
    ForecastedRevenuePoint,
    HistoricalRevenuePoint,
    ModelDebugInfo,
    ModelFitStatistics,
)


@dataclass(frozen=True)
class StrategyResult:
    """Output of a single strategy run.

    Attributes:
        forecasts: One point per horizon step, in chronological order.
        model_fit: In-sample fit statistics.
        debug: Strategy-specific introspection payload.
    """

    forecasts: tuple[ForecastedRevenuePoint, ...]
    model_fit: ModelFitStatistics
    debug: ModelDebugInfo | None = None


class ForecastingStrategy(ABC):
    """Abstract base class for forecasting strategies.

    Strategies are registered by ``name`` and must be stateless: every call to
    calculate() depends only on its arguments, so a single instance can be
    shared across threads and services.
    """

    name: ClassVar[str]

    @abstractmethod
    def calculate(
        self,
        history: Sequence[HistoricalRevenuePoint],
        values: Sequence[float],
        config: ForecastConfig,
    ) -> StrategyResult:
        """Forecast ``config.forecast_periods`` periods ahead.

        Args:
            history: Historical points sorted chronologically.
            values: Revenue of each point in ``history`` (same length and order).
            config: Validated forecast configuration.

        Returns:
            StrategyResult with exactly ``config.forecast_periods`` forecasts.
            Numerical degeneracy (zero variance, singular systems) must degrade
            the fit statistics rather than raise.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
