"""Revenue forecasting module.

This module provides multi-strategy forecasting of periodic clinic revenue.

Example:
    >>> from datetime import date
    >>> from revenue_forecast.forecasting import (
    ...     HistoricalRevenueInput,
    ...     HistoricalRevenuePoint,
    ...     create_revenue_forecasting_service,
    ... )
    >>>
    >>> points = [
    ...     HistoricalRevenuePoint(date=date(2024, month, 1), revenue=10_000 + 250 * month)
    ...     for month in range(1, 13)
    ... ]
    >>> history = HistoricalRevenueInput(clinic_id="clinic-1", data_points=points)
    >>>
    >>> # Ensemble of moving average, exponential smoothing and linear regression
    >>> service = create_revenue_forecasting_service()
    >>> output = service.forecast(history, forecast_periods=6)
    >>>
    >>> # Access results
    >>> print(output.total_predicted_revenue)
    >>> print(output.trend_analysis.direction)
    >>>
    >>> # Single strategy with per-call overrides
    >>> arima = service.forecast(history, method="arima", apply_seasonality=False, debug=True)
    >>> print(arima.debug["arima"].data["order"])

"""

from revenue_forecast.forecasting.accuracy import (
    ForecastAccuracy,
    ForecastAssessment,
    compare_forecast_to_actual,
)
from revenue_forecast.forecasting.analysis import (
    analyze_trend,
    determine_confidence_level,
    generate_insights,
    generate_recommended_actions,
    generate_summary,
)
from revenue_forecast.forecasting.api import (
    RevenueForecastingService,
    ServiceConfig,
    calculate_ensemble_weights,
    create_revenue_forecasting_service,
)
from revenue_forecast.forecasting.models import (
    ARIMAStrategy,
    ExponentialSmoothingStrategy,
    ForecastingStrategy,
    LinearRegressionStrategy,
    MovingAverageStrategy,
    StrategyResult,
    get_strategy_by_name,
    register_strategy,
)
from revenue_forecast.forecasting.types import (
    ConfidenceInterval,
    ConfidenceLevel,
    ForecastConfig,
    ForecastedRevenuePoint,
    Granularity,
    HistoricalRevenueInput,
    HistoricalRevenuePoint,
    ModelDebugInfo,
    ModelFitStatistics,
    RevenueForecastOutput,
    SeasonalFactors,
    TrendAnalysis,
    TrendDirection,
)

__all__ = [
    "ARIMAStrategy",
    "ConfidenceInterval",
    "ConfidenceLevel",
    "ExponentialSmoothingStrategy",
    "ForecastAccuracy",
    "ForecastAssessment",
    "ForecastConfig",
    "ForecastedRevenuePoint",
    "ForecastingStrategy",
    "Granularity",
    "HistoricalRevenueInput",
    "HistoricalRevenuePoint",
    "LinearRegressionStrategy",
    "ModelDebugInfo",
    "ModelFitStatistics",
    "MovingAverageStrategy",
    "RevenueForecastOutput",
    "RevenueForecastingService",
    "SeasonalFactors",
    "ServiceConfig",
    "StrategyResult",
    "TrendAnalysis",
    "TrendDirection",
    "analyze_trend",
    "calculate_ensemble_weights",
    "compare_forecast_to_actual",
    "create_revenue_forecasting_service",
    "determine_confidence_level",
    "generate_insights",
    "generate_recommended_actions",
    "generate_summary",
    "get_strategy_by_name",
    "register_strategy",
]
