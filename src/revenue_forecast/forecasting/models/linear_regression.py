"""Ordinary least squares trend-line forecasting strategy."""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import date

import numpy as np

from revenue_forecast.forecasting.models.base import ForecastingStrategy, StrategyResult
from revenue_forecast.forecasting.models.utils import (
    build_forecast_point,
    calculate_model_fit,
    generate_forecast_points,
    get_z_score,
    seasonal_factor_for,
)
from revenue_forecast.forecasting.types import (
    ForecastConfig,
    ForecastedRevenuePoint,
    HistoricalRevenuePoint,
    ModelDebugInfo,
)


def fit_trend_line(values: Sequence[float]) -> tuple[float, float]:
    """Closed-form OLS ``(slope, intercept)`` of values on their index 0..n-1.

    A series with fewer than two points has slope 0.
    """
    y = np.asarray(values, dtype=float)
    n = len(y)
    if n == 0:
        return 0.0, 0.0
    x = np.arange(n, dtype=float)

    sum_x = float(x.sum())
    sum_y = float(y.sum())
    sum_xy = float(x @ y)
    sum_x2 = float(x @ x)

    denominator = n * sum_x2 - sum_x * sum_x
    slope = (n * sum_xy - sum_x * sum_y) / denominator if denominator != 0 else 0.0
    intercept = (sum_y - slope * sum_x) / n
    return slope, intercept


class LinearRegressionStrategy(ForecastingStrategy):
    """Straight trend line with classical prediction intervals.

    The half-width at index x is ``z * se * sqrt(1 + 1/n + (x - x_mean)^2 / Sxx)``,
    so intervals widen faster the further the forecast extrapolates.
    """

    name = "linear_regression"

    def calculate(
        self,
        history: Sequence[HistoricalRevenuePoint],
        values: Sequence[float],
        config: ForecastConfig,
    ) -> StrategyResult:
        data = np.asarray(values, dtype=float)
        n = len(data)
        x = np.arange(n, dtype=float)

        slope, intercept = fit_trend_line(data)
        fitted = intercept + slope * x
        residuals = data - fitted

        degrees_of_freedom = n - 2
        std_error = (
            math.sqrt(float(residuals @ residuals) / degrees_of_freedom)
            if degrees_of_freedom > 0
            else 0.0
        )
        x_mean = float(x.mean())
        sxx = float(((x - x_mean) ** 2).sum())
        z_score = get_z_score(config.confidence_level)

        def build(index: int, when: date) -> ForecastedRevenuePoint:
            horizon = index + 1
            position = n - 1 + horizon
            factor = seasonal_factor_for(when, config)
            leverage = 1 + 1 / n + ((position - x_mean) ** 2 / sxx if sxx > 0 else 0.0)
            half_width = z_score * std_error * math.sqrt(leverage) * factor
            return build_forecast_point(
                when,
                (intercept + slope * position) * factor,
                half_width,
                config,
                index,
                seasonal_factor=factor,
                trend_component=slope * horizon,
            )

        return StrategyResult(
            forecasts=generate_forecast_points(history, config, build),
            model_fit=calculate_model_fit(
                data, fitted, degrees_of_freedom=max(degrees_of_freedom, 0)
            ),
            debug=ModelDebugInfo(
                model_name=self.name,
                data={"slope": slope, "intercept": intercept, "std_error": std_error},
            ),
        )
