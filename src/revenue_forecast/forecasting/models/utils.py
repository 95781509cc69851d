"""Numeric helpers shared by all forecasting strategies."""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from datetime import date

import numpy as np
import pandas as pd
from scipy.stats import norm

from revenue_forecast.forecasting.types import (
    ConfidenceInterval,
    ForecastConfig,
    ForecastedRevenuePoint,
    Granularity,
    HistoricalRevenuePoint,
    ModelFitStatistics,
    SeasonalFactors,
)

_DEFAULT_SEASONAL_FACTORS = SeasonalFactors.default()

_GRANULARITY_STEPS = {
    Granularity.DAILY: ("days", 1),
    Granularity.WEEKLY: ("weeks", 1),
    Granularity.MONTHLY: ("months", 1),
    Granularity.QUARTERLY: ("months", 3),
}


def get_z_score(confidence_level: float) -> float:
    """Two-sided standard normal quantile for a confidence level (0.95 -> 1.96)."""
    return float(norm.ppf(0.5 + confidence_level / 2.0))


def get_seasonal_factor(when: date, factors: SeasonalFactors | None = None) -> float:
    """Look up the monthly seasonal factor for ``when``.

    Args:
        when: Date whose calendar month selects the factor.
        factors: Custom seasonal table. If None, the default clinic table is used.
    """
    table = factors if factors is not None else _DEFAULT_SEASONAL_FACTORS
    return table.for_month(when.month)


def seasonal_factor_for(when: date, config: ForecastConfig) -> float:
    """Seasonal factor for ``when``, or 1.0 when seasonality is disabled."""
    if not config.apply_seasonality:
        return 1.0
    return get_seasonal_factor(when, config.seasonal_factors)


def round_amount(value: float) -> float:
    """Round a currency amount to whole units."""
    return float(round(value))


def calculate_model_fit(
    actual: Sequence[float],
    fitted: Sequence[float],
    aic: float | None = None,
    degrees_of_freedom: int | None = None,
) -> ModelFitStatistics:
    """Compute R-squared, MAE, MAPE and RMSE of in-sample fitted values.

    R-squared is clipped to [0, 1] and reported as 0 for a zero-variance series.
    MAPE only considers periods with non-zero actual revenue.
    """
    actual_arr = np.asarray(actual, dtype=float)
    fitted_arr = np.asarray(fitted, dtype=float)
    n = len(actual_arr)
    if n == 0:
        return ModelFitStatistics(
            r_squared=0.0, mae=0.0, mape=0.0, rmse=0.0, data_points_used=0, aic=aic,
            degrees_of_freedom=degrees_of_freedom,
        )

    errors = actual_arr - fitted_arr
    ss_res = float(np.sum(errors**2))
    ss_tot = float(np.sum((actual_arr - actual_arr.mean()) ** 2))

    r_squared = 1.0 - ss_res / ss_tot if ss_tot > 0 else 0.0
    if not math.isfinite(r_squared):
        r_squared = 0.0
    r_squared = min(1.0, max(0.0, r_squared))

    nonzero = actual_arr != 0
    if nonzero.any():
        mape = float(np.mean(np.abs(errors[nonzero] / actual_arr[nonzero])) * 100)
    else:
        mape = 0.0

    return ModelFitStatistics(
        r_squared=round(r_squared, 4),
        mae=round(float(np.mean(np.abs(errors))), 2),
        mape=round(mape, 2),
        rmse=round(math.sqrt(ss_res / n), 2),
        data_points_used=n,
        aic=round(aic, 2) if aic is not None else None,
        degrees_of_freedom=degrees_of_freedom,
    )


def forecast_dates(last_date: date, granularity: Granularity, periods: int) -> list[date]:
    """Dates of the ``periods`` steps following ``last_date``.

    Each step is measured from ``last_date`` so month-end dates do not drift
    (Jan 31 -> Feb 28 -> Mar 31).
    """
    start = pd.Timestamp(last_date)
    unit, size = _GRANULARITY_STEPS[Granularity(granularity)]
    return [
        (start + pd.DateOffset(**{unit: size * step})).date() for step in range(1, periods + 1)
    ]


def is_high_uncertainty(index: int, periods: int) -> bool:
    """The second half of the horizon is flagged as high uncertainty."""
    return index >= periods / 2


def build_forecast_point(
    when: date,
    predicted: float,
    half_width: float,
    config: ForecastConfig,
    index: int,
    seasonal_factor: float | None = None,
    trend_component: float | None = None,
) -> ForecastedRevenuePoint:
    """Round and clamp a raw prediction into a forecast point.

    The result always satisfies ``0 <= lower <= predicted <= upper``.
    """
    if not math.isfinite(predicted):
        predicted = 0.0
    half_width = abs(half_width) if math.isfinite(half_width) else 0.0

    point = max(0.0, round_amount(predicted))
    lower = min(point, max(0.0, round_amount(predicted - half_width)))
    upper = max(point, round_amount(predicted + half_width))

    if trend_component is not None:
        trend_component = round_amount(trend_component) if math.isfinite(trend_component) else 0.0

    return ForecastedRevenuePoint(
        date=when,
        predicted=point,
        confidence_interval=ConfidenceInterval(
            lower=lower, upper=upper, level=config.confidence_level
        ),
        seasonal_factor=seasonal_factor,
        trend_component=trend_component,
        high_uncertainty=is_high_uncertainty(index, config.forecast_periods),
    )


def generate_forecast_points(
    history: Sequence[HistoricalRevenuePoint],
    config: ForecastConfig,
    build: Callable[[int, date], ForecastedRevenuePoint],
) -> tuple[ForecastedRevenuePoint, ...]:
    """Call ``build(index, date)`` for every step of the horizon.

    Dates continue the historical series by one ``config.granularity`` unit per step.
    """
    last_date = history[-1].date
    dates = forecast_dates(last_date, config.granularity, config.forecast_periods)
    return tuple(build(index, when) for index, when in enumerate(dates))
