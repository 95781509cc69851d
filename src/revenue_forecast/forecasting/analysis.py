"""Trend diagnostics and narrative output for revenue forecasts.

Everything here is a pure function of the historical values and the combined
forecast, so the same input always yields the same text and actions.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import assert_never

import numpy as np

from revenue_forecast.forecasting.config import (
    FAST_GROWTH_ANNUAL_RATE,
    GROWTH_THRESHOLD,
    HIGH_CONFIDENCE_MIN_POINTS,
    HIGH_CONFIDENCE_R_SQUARED,
    LARGE_REVENUE_TOTAL,
    MEDIUM_CONFIDENCE_MIN_POINTS,
    MEDIUM_CONFIDENCE_R_SQUARED,
    STEEP_DECLINE_ANNUAL_RATE,
    VOLATILITY_THRESHOLD,
)
from revenue_forecast.forecasting.models.linear_regression import fit_trend_line
from revenue_forecast.forecasting.types import (
    ConfidenceLevel,
    Granularity,
    ModelFitStatistics,
    TrendAnalysis,
    TrendDirection,
)

CURRENCY_SYMBOLS = {"EUR": "€", "USD": "$", "GBP": "£"}

_TREND_TEXT = {
    TrendDirection.GROWING: "showing growth",
    TrendDirection.STABLE: "remaining stable",
    TrendDirection.DECLINING: "experiencing decline",
    TrendDirection.VOLATILE: "highly variable",
}

_CONFIDENCE_TEXT = {
    ConfidenceLevel.HIGH: "high confidence",
    ConfidenceLevel.MEDIUM: "moderate confidence",
    ConfidenceLevel.LOW: "low confidence (limited data)",
}


def analyze_trend(values: Sequence[float]) -> TrendAnalysis:
    """Classify the historical revenue trend.

    The per-period growth rate is the OLS slope relative to the mean level.
    Volatility is the population coefficient of variation in percent and takes
    precedence over growth when it exceeds 30%.

    Args:
        values: Historical revenue in chronological order.

    Returns:
        TrendAnalysis with rates rounded to one decimal. Fewer than two values
        are reported as a stable trend with zero rates.
    """
    data = np.asarray(values, dtype=float)
    n = len(data)
    if n < 2:
        return TrendAnalysis(
            direction=TrendDirection.STABLE,
            monthly_growth_rate=0.0,
            annualized_growth_rate=0.0,
            is_significant=False,
            volatility=0.0,
        )

    slope, _ = fit_trend_line(data)
    mean = float(data.mean())

    monthly = slope / mean * 100 if mean > 0 else 0.0
    annualized = math.pow(1 + monthly / 100, 12) * 100 - 100 if monthly > -100 else -100.0
    volatility = float(data.std(ddof=0)) / mean * 100 if mean > 0 else 0.0

    if volatility > VOLATILITY_THRESHOLD:
        direction = TrendDirection.VOLATILE
    elif monthly > GROWTH_THRESHOLD:
        direction = TrendDirection.GROWING
    elif monthly < -GROWTH_THRESHOLD:
        direction = TrendDirection.DECLINING
    else:
        direction = TrendDirection.STABLE

    return TrendAnalysis(
        direction=direction,
        monthly_growth_rate=round(monthly, 1),
        annualized_growth_rate=round(annualized, 1),
        is_significant=abs(monthly) > volatility / math.sqrt(n),
        volatility=round(volatility, 1),
    )


def determine_confidence_level(model_fit: ModelFitStatistics, data_points: int) -> ConfidenceLevel:
    """Grade the forecast by fit quality and history length."""
    if model_fit.r_squared >= HIGH_CONFIDENCE_R_SQUARED and data_points >= HIGH_CONFIDENCE_MIN_POINTS:
        return ConfidenceLevel.HIGH
    if (
        model_fit.r_squared >= MEDIUM_CONFIDENCE_R_SQUARED
        and data_points >= MEDIUM_CONFIDENCE_MIN_POINTS
    ):
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def format_amount(amount: float, currency: str) -> str:
    """Format a whole currency amount with a thousands separator, e.g. '€12,500'."""
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency} ")
    return f"{symbol}{amount:,.0f}"


def generate_summary(
    total_revenue: float,
    trend: TrendAnalysis,
    confidence: ConfidenceLevel,
    periods: int,
    granularity: Granularity = Granularity.MONTHLY,
    currency: str = "EUR",
) -> str:
    """One-sentence narrative of the forecast total, trend and confidence."""
    return (
        f"Forecasted revenue of {format_amount(total_revenue, currency)} over {periods} "
        f"{Granularity(granularity).unit_label}, {_TREND_TEXT[trend.direction]} at "
        f"{abs(trend.annualized_growth_rate):.1f}% annually. "
        f"Prediction made with {_CONFIDENCE_TEXT[confidence]}."
    )


def generate_recommended_actions(
    trend: TrendAnalysis,
    confidence: ConfidenceLevel,
    total_revenue: float,
) -> list[str]:
    """Recommended action codes for downstream planning.

    Trend actions come first, followed by data-quality actions for low
    confidence and a planning review for large forecast totals.
    """
    actions: list[str] = []

    direction = trend.direction
    if direction is TrendDirection.GROWING:
        actions.extend(["maintain_current_strategies", "invest_in_capacity_expansion"])
        if trend.annualized_growth_rate > FAST_GROWTH_ANNUAL_RATE:
            actions.append("hire_additional_staff")
    elif direction is TrendDirection.DECLINING:
        actions.extend(
            [
                "review_marketing_effectiveness",
                "analyze_patient_retention",
                "consider_promotional_campaigns",
            ]
        )
        if trend.annualized_growth_rate < STEEP_DECLINE_ANNUAL_RATE:
            actions.append("urgent_revenue_recovery_plan")
    elif direction is TrendDirection.STABLE:
        actions.extend(["optimize_operational_efficiency", "explore_new_service_offerings"])
    elif direction is TrendDirection.VOLATILE:
        actions.extend(
            [
                "stabilize_revenue_streams",
                "diversify_patient_base",
                "implement_recurring_revenue_programs",
            ]
        )
    else:
        assert_never(direction)

    if confidence is ConfidenceLevel.LOW:
        actions.extend(["improve_data_collection", "track_more_revenue_metrics"])

    if total_revenue > LARGE_REVENUE_TOTAL:
        actions.append("consider_financial_planning_review")

    return actions


def generate_insights(
    trend: TrendAnalysis,
    confidence: ConfidenceLevel,
    model_fit: ModelFitStatistics,
) -> list[str]:
    """Short human-readable observations for dashboards."""
    insights: list[str] = []
    rate = abs(trend.annualized_growth_rate)

    direction = trend.direction
    if direction is TrendDirection.GROWING:
        insights.append(f"Revenue is growing at {rate:.1f}% annually")
        if trend.annualized_growth_rate > FAST_GROWTH_ANNUAL_RATE:
            insights.append("Consider expanding capacity to meet increasing demand")
    elif direction is TrendDirection.DECLINING:
        insights.append(f"Revenue is declining at {rate:.1f}% annually")
        insights.append("Review marketing strategies and patient retention programs")
    elif direction is TrendDirection.STABLE:
        insights.append("Revenue is stable with minimal fluctuation")
        insights.append("Good time to invest in growth initiatives")
    elif direction is TrendDirection.VOLATILE:
        insights.append("Revenue shows high volatility")
        insights.append("Consider diversifying revenue streams for stability")
    else:
        assert_never(direction)

    if confidence is ConfidenceLevel.LOW:
        insights.append("Forecast confidence is low due to limited historical data")

    if model_fit.r_squared < MEDIUM_CONFIDENCE_R_SQUARED:
        insights.append("Model fit indicates irregular revenue patterns")

    return insights
