"""Simple moving average forecasting strategy."""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import date

import pandas as pd

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


class MovingAverageStrategy(ForecastingStrategy):
    """Flat baseline: the mean of the most recent periods.

    Every horizon step gets the same point estimate. The interval comes from
    the standard deviation of the window and widens with ``sqrt(1 + h / window)``.
    """

    name = "moving_average"

    def calculate(
        self,
        history: Sequence[HistoricalRevenuePoint],
        values: Sequence[float],
        config: ForecastConfig,
    ) -> StrategyResult:
        series = pd.Series(values, dtype=float)
        window = max(1, min(config.moving_average_window, len(series)))

        recent = series.iloc[-window:]
        level = float(recent.mean())
        spread = float(recent.std(ddof=1)) if window > 1 else 0.0
        z_score = get_z_score(config.confidence_level)

        def build(index: int, when: date) -> ForecastedRevenuePoint:
            horizon = index + 1
            factor = seasonal_factor_for(when, config)
            half_width = z_score * spread * math.sqrt(1 + horizon / window) * factor
            return build_forecast_point(
                when, level * factor, half_width, config, index, seasonal_factor=factor
            )

        forecasts = generate_forecast_points(history, config, build)

        # Expanding mean until the window fills, rolling mean afterwards
        fitted = series.rolling(window=window, min_periods=1).mean()
        model_fit = calculate_model_fit(series.to_numpy(), fitted.to_numpy())

        return StrategyResult(
            forecasts=forecasts,
            model_fit=model_fit,
            debug=ModelDebugInfo(
                model_name=self.name,
                data={"window": window, "level": level, "window_std": spread},
            ),
        )
