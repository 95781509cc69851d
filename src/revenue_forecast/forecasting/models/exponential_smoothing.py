"""Holt's exponential smoothing (level + trend) forecasting strategy."""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import date

import numpy as np

from revenue_forecast.forecasting.config import HOLT_BETA
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


class ExponentialSmoothingStrategy(ForecastingStrategy):
    """Holt's linear method.

    The level is smoothed with ``config.smoothing_alpha`` and the trend with a
    fixed beta of 0.1. With ``include_trend`` disabled the trend stays at zero
    and the method reduces to simple exponential smoothing.

    Intervals use the RMS of the one-step-ahead residuals, widened by
    ``sqrt(1 + 0.1 h)`` to reflect trend extrapolation risk.
    """

    name = "exponential_smoothing"

    def calculate(
        self,
        history: Sequence[HistoricalRevenuePoint],
        values: Sequence[float],
        config: ForecastConfig,
    ) -> StrategyResult:
        data = np.asarray(values, dtype=float)
        n = len(data)
        alpha = config.smoothing_alpha

        level = float(data[0])
        trend = float(data[1] - data[0]) if config.include_trend and n > 1 else 0.0

        fitted = np.empty(n)
        fitted[0] = data[0]
        for t in range(1, n):
            fitted[t] = level + trend
            previous_level = level
            level = alpha * data[t] + (1 - alpha) * (level + trend)
            if config.include_trend:
                trend = HOLT_BETA * (level - previous_level) + (1 - HOLT_BETA) * trend

        residuals = data[1:] - fitted[1:]
        std_error = float(np.sqrt(np.mean(residuals**2))) if len(residuals) else 0.0
        z_score = get_z_score(config.confidence_level)

        def build(index: int, when: date) -> ForecastedRevenuePoint:
            horizon = index + 1
            factor = seasonal_factor_for(when, config)
            predicted = (level + trend * horizon) * factor
            half_width = z_score * std_error * math.sqrt(1 + 0.1 * horizon) * factor
            return build_forecast_point(
                when,
                predicted,
                half_width,
                config,
                index,
                seasonal_factor=factor,
                trend_component=trend * horizon,
            )

        return StrategyResult(
            forecasts=generate_forecast_points(history, config, build),
            model_fit=calculate_model_fit(data, fitted),
            debug=ModelDebugInfo(
                model_name=self.name,
                data={
                    "alpha": alpha,
                    "beta": HOLT_BETA,
                    "level": level,
                    "trend": trend,
                    "std_error": std_error,
                },
            ),
        )
