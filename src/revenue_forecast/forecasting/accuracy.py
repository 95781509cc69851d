"""Compare a past forecast with the revenue that actually came in."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from revenue_forecast.exceptions import ConfigError, InvalidRevenueDataError
from revenue_forecast.forecasting.config import DEFAULT_RECALIBRATION_THRESHOLD
from revenue_forecast.forecasting.types import ConfidenceInterval

logger = logging.getLogger(__name__)


class ForecastAssessment(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"


@dataclass(frozen=True)
class ForecastAccuracy:
    """Accuracy of one forecasted period.

    Attributes:
        forecasted_revenue: Predicted revenue for the period.
        actual_revenue: Observed revenue for the period.
        absolute_error: ``|forecast - actual|`` rounded to whole units.
        percentage_error: Absolute error relative to actual, in percent (1 dp).
        within_confidence_interval: Whether actual fell inside the forecast interval.
        bias: ``forecast - actual``; positive means the forecast was too high.
        needs_recalibration: Whether the percentage error exceeds the threshold.
        assessment: Quality grade derived from the percentage error.
    """

    forecasted_revenue: float
    actual_revenue: float
    absolute_error: float
    percentage_error: float
    within_confidence_interval: bool
    bias: float
    needs_recalibration: bool
    assessment: ForecastAssessment


def assess_percentage_error(percentage_error: float) -> ForecastAssessment:
    if percentage_error <= 5:
        return ForecastAssessment.EXCELLENT
    if percentage_error <= 10:
        return ForecastAssessment.GOOD
    if percentage_error <= 20:
        return ForecastAssessment.FAIR
    return ForecastAssessment.POOR


def compare_forecast_to_actual(
    forecasted_revenue: float,
    actual_revenue: float,
    interval: ConfidenceInterval,
    recalibration_threshold: float = DEFAULT_RECALIBRATION_THRESHOLD,
) -> ForecastAccuracy:
    """Score a forecast against the observed revenue.

    Args:
        forecasted_revenue: Predicted revenue for the period.
        actual_revenue: Observed revenue for the period.
        interval: Confidence interval that was published with the forecast.
        recalibration_threshold: Percentage error above which the model should
            be recalibrated.

    Returns:
        ForecastAccuracy. When actual revenue is 0 the percentage error is 100
        unless the forecast was also 0.

    Raises:
        InvalidRevenueDataError: If either amount is negative or not finite.
        ConfigError: If the recalibration threshold is negative.
    """
    for label, amount in (("forecasted", forecasted_revenue), ("actual", actual_revenue)):
        if not math.isfinite(amount) or amount < 0:
            raise InvalidRevenueDataError(f"{label} revenue must be a finite amount >= 0, got {amount!r}")
    if recalibration_threshold < 0:
        raise ConfigError(f"recalibration_threshold must be >= 0, got {recalibration_threshold!r}")

    absolute_error = abs(forecasted_revenue - actual_revenue)
    if actual_revenue != 0:
        percentage_error = absolute_error * 100 / actual_revenue
    elif forecasted_revenue != 0:
        percentage_error = 100.0
    else:
        percentage_error = 0.0

    accuracy = ForecastAccuracy(
        forecasted_revenue=forecasted_revenue,
        actual_revenue=actual_revenue,
        absolute_error=float(round(absolute_error)),
        percentage_error=round(percentage_error, 1),
        within_confidence_interval=interval.lower <= actual_revenue <= interval.upper,
        bias=float(round(forecasted_revenue - actual_revenue)),
        needs_recalibration=percentage_error > recalibration_threshold,
        assessment=assess_percentage_error(percentage_error),
    )

    logger.info(
        "Forecast accuracy: %.1f%% error (%s), recalibration needed: %s",
        accuracy.percentage_error,
        accuracy.assessment.value,
        accuracy.needs_recalibration,
    )
    return accuracy
