"""Public API for revenue forecasting.

This module provides the forecasting service: it validates a clinic's
historical revenue, runs one strategy or a weighted ensemble of strategies,
and assembles the result with trend diagnostics and narrative output.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any

import numpy as np

from revenue_forecast.exceptions import ConfigError, InsufficientDataError, InvalidRevenueDataError
from revenue_forecast.forecasting.analysis import (
    analyze_trend,
    determine_confidence_level,
    generate_insights,
    generate_recommended_actions,
    generate_summary,
)
from revenue_forecast.forecasting.config import (
    DEFAULT_CONFIDENCE_LEVEL,
    DEFAULT_FORECAST_PERIODS,
    DEFAULT_METHOD,
    DEFAULT_MODEL_VERSION,
    DEFAULT_MOVING_AVERAGE_WINDOW,
    DEFAULT_SMOOTHING_ALPHA,
    ENSEMBLE_METHOD,
    ENSEMBLE_WEIGHT_FLOOR,
)
from revenue_forecast.forecasting.models.base import ForecastingStrategy, StrategyResult
from revenue_forecast.forecasting.models.registry import (
    create_default_strategies,
    get_strategy_by_name,
)
from revenue_forecast.forecasting.models.utils import round_amount
from revenue_forecast.forecasting.types import (
    ConfidenceInterval,
    ForecastConfig,
    ForecastedRevenuePoint,
    HistoricalRevenueInput,
    HistoricalRevenuePoint,
    ModelDebugInfo,
    ModelFitStatistics,
    RevenueForecastOutput,
)

logger = logging.getLogger(__name__)

# Strategies whose components are reported on ensemble points
_SEASONAL_SOURCE = "moving_average"
_TREND_SOURCE = "linear_regression"


@dataclass(frozen=True)
class ServiceConfig:
    """Construction-time configuration of a RevenueForecastingService.

    Attributes:
        default_method: Method used when a call does not override it.
        default_forecast_periods: Default horizon length.
        default_confidence_level: Default interval coverage.
        default_moving_average_window: Default moving average window.
        default_smoothing_alpha: Default exponential smoothing alpha.
        model_version: Version string stamped on every output.
        strategies: Strategies used by the ensemble. If None, moving average,
            exponential smoothing and linear regression are used.
    """

    default_method: str = DEFAULT_METHOD
    default_forecast_periods: int = DEFAULT_FORECAST_PERIODS
    default_confidence_level: float = DEFAULT_CONFIDENCE_LEVEL
    default_moving_average_window: int = DEFAULT_MOVING_AVERAGE_WINDOW
    default_smoothing_alpha: float = DEFAULT_SMOOTHING_ALPHA
    model_version: str = DEFAULT_MODEL_VERSION
    strategies: Sequence[ForecastingStrategy] | None = None


def calculate_ensemble_weights(fits: Sequence[ModelFitStatistics]) -> np.ndarray:
    """Normalised ensemble weights ``max(0.1, R^2_i) / sum_j max(0.1, R^2_j)``.

    The floor keeps every strategy in the blend, even one that explains none
    of the variance.
    """
    raw = np.array([max(ENSEMBLE_WEIGHT_FLOOR, fit.r_squared) for fit in fits], dtype=float)
    return raw / raw.sum()


def _weighted(values: Sequence[float], weights: np.ndarray) -> float:
    return float(np.dot(np.asarray(values, dtype=float), weights))


def _combine_points(
    points: Sequence[ForecastedRevenuePoint],
    names: Sequence[str],
    weights: np.ndarray,
    config: ForecastConfig,
    index: int,
) -> ForecastedRevenuePoint:
    predicted = round_amount(_weighted([p.predicted for p in points], weights))
    lower = round_amount(_weighted([p.confidence_interval.lower for p in points], weights))
    upper = round_amount(_weighted([p.confidence_interval.upper for p in points], weights))

    seasonal = points[names.index(_SEASONAL_SOURCE)] if _SEASONAL_SOURCE in names else points[0]
    trend = points[names.index(_TREND_SOURCE)] if _TREND_SOURCE in names else points[0]

    return ForecastedRevenuePoint(
        date=points[0].date,
        predicted=predicted,
        confidence_interval=ConfidenceInterval(
            lower=max(0.0, min(lower, predicted)),
            upper=max(upper, predicted),
            level=config.confidence_level,
        ),
        seasonal_factor=seasonal.seasonal_factor,
        trend_component=trend.trend_component,
        high_uncertainty=index >= config.forecast_periods / 2,
    )


def _combine_fits(
    fits: Sequence[ModelFitStatistics], weights: np.ndarray, data_points_used: int
) -> ModelFitStatistics:
    return ModelFitStatistics(
        r_squared=round(_weighted([f.r_squared for f in fits], weights), 4),
        mae=round(_weighted([f.mae for f in fits], weights), 2),
        mape=round(_weighted([f.mape for f in fits], weights), 2),
        rmse=round(_weighted([f.rmse for f in fits], weights), 2),
        data_points_used=data_points_used,
    )


class RevenueForecastingService:
    """Forecast clinic revenue with pluggable strategies.

    Example:
        >>> service = create_revenue_forecasting_service()
        >>> output = service.forecast(history, forecast_periods=3)
        >>> output.total_predicted_revenue
    """

    def __init__(self, config: ServiceConfig | None = None) -> None:
        self.config = config if config is not None else ServiceConfig()
        self._default_config = ForecastConfig(
            method=self.config.default_method,
            forecast_periods=self.config.default_forecast_periods,
            confidence_level=self.config.default_confidence_level,
            moving_average_window=self.config.default_moving_average_window,
            smoothing_alpha=self.config.default_smoothing_alpha,
        )

        strategies = (
            self.config.strategies
            if self.config.strategies is not None
            else create_default_strategies()
        )
        if not strategies:
            raise ConfigError("At least one forecasting strategy is required")
        self._strategies: dict[str, ForecastingStrategy] = {}
        for strategy in strategies:
            self.add_strategy(strategy)

    @property
    def model_version(self) -> str:
        return self.config.model_version

    @property
    def default_config(self) -> ForecastConfig:
        return self._default_config

    def add_strategy(self, strategy: ForecastingStrategy) -> None:
        """Add ``strategy`` to this service's ensemble, replacing one with the same name.

        Raises:
            ConfigError: If the strategy is unnamed or uses the reserved ensemble name.
        """
        name = getattr(strategy, "name", "")
        if not name:
            raise ConfigError(f"Strategy {strategy!r} has no name")
        if name == ENSEMBLE_METHOD:
            raise ConfigError(f"Strategy name {ENSEMBLE_METHOD!r} is reserved")
        self._strategies[name] = strategy

    def available_strategies(self) -> list[str]:
        return list(self._strategies)

    def get_strategy(self, name: str) -> ForecastingStrategy:
        """Resolve a method name: own strategies first, then the global registry.

        Raises:
            ConfigError: If the name is unknown to both.
        """
        strategy = self._strategies.get(name)
        if strategy is not None:
            return strategy
        return get_strategy_by_name(name)

    def forecast(
        self,
        history: HistoricalRevenueInput,
        *,
        debug: bool = False,
        **overrides: Any,
    ) -> RevenueForecastOutput:
        """Forecast revenue for the periods following ``history``.

        Args:
            history: Historical revenue of one clinic. Points may be in any order.
            debug: If True, strategy debug payloads are returned in ``output.debug``.
            **overrides: ForecastConfig fields overriding the service defaults
                for this call only (e.g. ``method="arima"``, ``forecast_periods=12``).

        Returns:
            RevenueForecastOutput with exactly ``forecast_periods`` forecasts.

        Raises:
            ConfigError: If an override is unknown or invalid, or the method is
                not registered.
            InsufficientDataError: If fewer than ``min_data_points`` points are given.
            InvalidRevenueDataError: If any revenue is negative or not finite.
        """
        config = self._default_config.merged(**overrides)
        self._validate_input(history, config)

        points = sorted(history.data_points, key=lambda p: p.date)
        values = [float(p.revenue) for p in points]
        config = replace(config, granularity=history.granularity)

        logger.info(
            "Forecasting %s: method=%s, periods=%d, data_points=%d",
            history.clinic_id,
            config.method,
            config.forecast_periods,
            len(points),
        )

        debug_info: dict[str, ModelDebugInfo] = {}
        if config.method == ENSEMBLE_METHOD:
            forecasts, model_fit = self._ensemble_forecast(points, values, config, debug_info)
        else:
            strategy = self.get_strategy(config.method)
            result = strategy.calculate(points, values, config)
            forecasts, model_fit = result.forecasts, result.model_fit
            if result.debug is not None:
                debug_info[strategy.name] = result.debug

        trend_analysis = analyze_trend(values)
        total_predicted = round_amount(sum(f.predicted for f in forecasts))
        total_interval = ConfidenceInterval(
            lower=round_amount(sum(f.confidence_interval.lower for f in forecasts)),
            upper=round_amount(sum(f.confidence_interval.upper for f in forecasts)),
            level=config.confidence_level,
        )
        confidence_level = determine_confidence_level(model_fit, len(points))

        output = RevenueForecastOutput(
            clinic_id=history.clinic_id,
            method=config.method,
            confidence_level=confidence_level,
            forecasts=tuple(forecasts),
            total_predicted_revenue=total_predicted,
            total_confidence_interval=total_interval,
            model_fit=model_fit,
            trend_analysis=trend_analysis,
            summary=generate_summary(
                total_predicted,
                trend_analysis,
                confidence_level,
                config.forecast_periods,
                granularity=history.granularity,
                currency=history.currency,
            ),
            recommended_actions=tuple(
                generate_recommended_actions(trend_analysis, confidence_level, total_predicted)
            ),
            insights=tuple(generate_insights(trend_analysis, confidence_level, model_fit)),
            model_version=self.model_version,
            calculated_at=datetime.now(timezone.utc).isoformat(),
            debug=MappingProxyType(debug_info) if debug else None,
        )

        logger.info(
            "Forecast for %s: total=%.0f, trend=%s, confidence=%s",
            history.clinic_id,
            output.total_predicted_revenue,
            trend_analysis.direction.value,
            confidence_level.value,
        )
        return output

    def _validate_input(self, history: HistoricalRevenueInput, config: ForecastConfig) -> None:
        n = len(history.data_points)
        if n < config.min_data_points:
            raise InsufficientDataError(
                f"Minimum {config.min_data_points} data points required, got {n}"
            )
        bad = [
            p.date.isoformat()
            for p in history.data_points
            if not math.isfinite(p.revenue) or p.revenue < 0
        ]
        if bad:
            raise InvalidRevenueDataError(
                f"Revenue values must be finite and non-negative. Invalid periods: {bad}"
            )

    def _ensemble_forecast(
        self,
        points: Sequence[HistoricalRevenuePoint],
        values: Sequence[float],
        config: ForecastConfig,
        debug_info: dict[str, ModelDebugInfo],
    ) -> tuple[tuple[ForecastedRevenuePoint, ...], ModelFitStatistics]:
        """Run every strategy of this service and blend them by R-squared."""
        results: dict[str, StrategyResult] = {}
        for name in sorted(self._strategies):
            results[name] = self._strategies[name].calculate(points, values, config)

        names = list(results)
        weights = calculate_ensemble_weights([r.model_fit for r in results.values()])
        logger.debug(
            "Ensemble weights: %s",
            ", ".join(f"{name}={weight:.3f}" for name, weight in zip(names, weights)),
        )

        forecasts = tuple(
            _combine_points(
                [results[name].forecasts[i] for name in names], names, weights, config, i
            )
            for i in range(config.forecast_periods)
        )
        model_fit = _combine_fits([r.model_fit for r in results.values()], weights, len(values))

        for name, result in results.items():
            if result.debug is not None:
                debug_info[name] = result.debug
        debug_info[ENSEMBLE_METHOD] = ModelDebugInfo(
            model_name=ENSEMBLE_METHOD,
            data={"weights": {name: float(w) for name, w in zip(names, weights)}},
        )
        return forecasts, model_fit


def create_revenue_forecasting_service(
    config: ServiceConfig | None = None,
) -> RevenueForecastingService:
    """Create a forecasting service with the given configuration (defaults if None)."""
    return RevenueForecastingService(config)
