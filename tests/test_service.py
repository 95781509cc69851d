"""Tests for the revenue forecasting service and ensemble."""

import random
from dataclasses import dataclass
from datetime import date, datetime, timedelta

import numpy as np
import pytest

from revenue_forecast.exceptions import (
    ConfigError,
    DataQualityError,
    InsufficientDataError,
    InvalidRevenueDataError,
)
from revenue_forecast.forecasting import (
    ARIMAStrategy,
    ConfidenceLevel,
    ForecastingStrategy,
    Granularity,
    HistoricalRevenueInput,
    HistoricalRevenuePoint,
    ModelFitStatistics,
    MovingAverageStrategy,
    RevenueForecastingService,
    ServiceConfig,
    StrategyResult,
    TrendDirection,
    calculate_ensemble_weights,
    create_revenue_forecasting_service,
)
from revenue_forecast.forecasting.models.utils import (
    build_forecast_point,
    calculate_model_fit,
    generate_forecast_points,
)
from revenue_forecast.forecasting.types import MONTH_NAMES


def _history(
    values: list[float],
    granularity: Granularity = Granularity.MONTHLY,
    currency: str = "EUR",
) -> HistoricalRevenueInput:
    if granularity is Granularity.WEEKLY:
        dates = [date(2024, 1, 1) + timedelta(weeks=i) for i in range(len(values))]
    else:
        dates = [date(2023 + i // 12, i % 12 + 1, 1) for i in range(len(values))]
    return HistoricalRevenueInput(
        clinic_id="clinic-1",
        data_points=tuple(
            HistoricalRevenuePoint(date=d, revenue=v) for d, v in zip(dates, values)
        ),
        granularity=granularity,
        currency=currency,
    )


def _growing() -> list[float]:
    return [1000.0 + 100 * i for i in range(12)]


def _fit(r_squared: float) -> ModelFitStatistics:
    return ModelFitStatistics(r_squared=r_squared, mae=0.0, mape=0.0, rmse=0.0, data_points_used=6)


@dataclass
class FlatStrategy(ForecastingStrategy):
    """Test strategy forecasting a fixed amount."""

    amount: float = 500.0
    name = "flat"

    def calculate(self, history, values, config) -> StrategyResult:
        forecasts = generate_forecast_points(
            history,
            config,
            lambda index, when: build_forecast_point(when, self.amount, 50.0, config, index),
        )
        return StrategyResult(
            forecasts=forecasts,
            model_fit=calculate_model_fit(values, [self.amount] * len(values)),
        )


# ============================================================================
# VALIDATION
# ============================================================================


def test_insufficient_data() -> None:
    """Test that fewer points than min_data_points raise InsufficientDataError."""
    service = create_revenue_forecasting_service()
    with pytest.raises(InsufficientDataError, match="Minimum 6 data points required, got 5") as exc:
        service.forecast(_history([100.0] * 5))
    assert exc.value.code == "INSUFFICIENT_DATA"
    assert isinstance(exc.value, DataQualityError)


def test_min_data_points_override() -> None:
    """Test that min_data_points can be lowered per call."""
    output = create_revenue_forecasting_service().forecast(
        _history([100.0, 110.0, 120.0]), min_data_points=3
    )
    assert len(output.forecasts) == 6


def test_negative_revenue() -> None:
    """Test that negative revenue raises InvalidRevenueDataError."""
    values = _growing()
    values[3] = -1.0
    with pytest.raises(InvalidRevenueDataError) as exc:
        create_revenue_forecasting_service().forecast(_history(values))
    assert exc.value.code == "INVALID_REVENUE_DATA"


def test_non_finite_revenue() -> None:
    """Test that NaN revenue is rejected."""
    values = _growing()
    values[0] = float("nan")
    with pytest.raises(InvalidRevenueDataError):
        create_revenue_forecasting_service().forecast(_history(values))


def test_insufficient_data_checked_first() -> None:
    """Test that the length check precedes the revenue check."""
    with pytest.raises(InsufficientDataError):
        create_revenue_forecasting_service().forecast(_history([100.0, -5.0]))


def test_unknown_override() -> None:
    """Test that unknown configuration overrides raise ConfigError."""
    with pytest.raises(ConfigError, match="Unknown forecast config fields"):
        create_revenue_forecasting_service().forecast(_history(_growing()), horizon=3)


@pytest.mark.parametrize(
    "overrides",
    [
        {"confidence_level": 1.5},
        {"forecast_periods": 0},
        {"smoothing_alpha": 0.0},
        {"moving_average_window": 0},
        {"min_data_points": 1},
        {"confidence_level": "0.9"},
        {"smoothing_alpha": None},
    ],
)
def test_invalid_overrides(overrides: dict) -> None:
    """Test that out-of-range values raise ConfigError."""
    with pytest.raises(ConfigError):
        create_revenue_forecasting_service().forecast(_history(_growing()), **overrides)


@pytest.mark.parametrize("bad_factor", [float("nan"), float("inf")])
def test_non_finite_seasonal_factor(bad_factor: float) -> None:
    """Test that a seasonal table with a non-finite factor is rejected."""
    factors = {name: 1.0 for name in MONTH_NAMES} | {"january": bad_factor}
    with pytest.raises(ConfigError, match="january"):
        create_revenue_forecasting_service().forecast(
            _history(_growing()), method="moving_average", seasonal_factors=factors
        )


def test_unknown_method() -> None:
    """Test that an unregistered method name raises ConfigError."""
    with pytest.raises(ConfigError, match="Unknown forecasting method"):
        create_revenue_forecasting_service().forecast(_history(_growing()), method="prophet")


def test_invalid_service_config() -> None:
    """Test that invalid service defaults fail at construction."""
    with pytest.raises(ConfigError):
        RevenueForecastingService(ServiceConfig(default_confidence_level=0.0))
    with pytest.raises(ConfigError):
        RevenueForecastingService(ServiceConfig(strategies=[]))


# ============================================================================
# OUTPUT INVARIANTS
# ============================================================================


@pytest.mark.parametrize(
    "method", ["ensemble", "moving_average", "exponential_smoothing", "linear_regression", "arima"]
)
def test_output_invariants(method: str) -> None:
    """Test horizon length, date spacing, interval ordering and totals for every method."""
    values = [1000.0 + 80 * i + (150 if i % 3 == 0 else -40) for i in range(15)]
    output = create_revenue_forecasting_service().forecast(
        _history(values), method=method, forecast_periods=8
    )

    assert output.method == method
    assert len(output.forecasts) == 8
    assert [f.date for f in output.forecasts] == [
        date(2024, 4, 1),
        date(2024, 5, 1),
        date(2024, 6, 1),
        date(2024, 7, 1),
        date(2024, 8, 1),
        date(2024, 9, 1),
        date(2024, 10, 1),
        date(2024, 11, 1),
    ]
    for forecast in output.forecasts:
        interval = forecast.confidence_interval
        assert 0 <= interval.lower <= forecast.predicted <= interval.upper
        assert interval.level == 0.95
    assert [f.high_uncertainty for f in output.forecasts] == [False] * 4 + [True] * 4

    assert output.total_predicted_revenue == sum(f.predicted for f in output.forecasts)
    assert output.total_confidence_interval.lower == sum(
        f.confidence_interval.lower for f in output.forecasts
    )
    assert output.total_confidence_interval.upper == sum(
        f.confidence_interval.upper for f in output.forecasts
    )
    assert 0 <= output.model_fit.r_squared <= 1
    assert output.model_fit.data_points_used == 15
    assert output.model_version == "2.0.0"


def test_forecast_is_deterministic() -> None:
    """Test that identical calls produce equal outputs."""
    service = create_revenue_forecasting_service()
    history = _history(_growing())
    assert service.forecast(history) == service.forecast(history)


def test_forecast_ignores_input_order() -> None:
    """Test that unsorted input gives the same result as sorted input."""
    history = _history(_growing())
    shuffled_points = list(history.data_points)
    random.Random(3).shuffle(shuffled_points)
    shuffled = HistoricalRevenueInput(clinic_id="clinic-1", data_points=tuple(shuffled_points))

    service = create_revenue_forecasting_service()
    assert service.forecast(shuffled) == service.forecast(history)
    # Input is left untouched
    assert list(shuffled.data_points) == shuffled_points


def test_calculated_at_is_utc_iso() -> None:
    """Test the calculation timestamp format."""
    output = create_revenue_forecasting_service().forecast(_history(_growing()))
    assert datetime.fromisoformat(output.calculated_at).utcoffset() == timedelta(0)


def test_weekly_granularity() -> None:
    """Test that weekly history is forecast in weekly steps."""
    output = create_revenue_forecasting_service().forecast(
        _history([2000.0] * 8, granularity=Granularity.WEEKLY),
        forecast_periods=3,
        apply_seasonality=False,
    )
    assert [f.date for f in output.forecasts] == [
        date(2024, 2, 26),
        date(2024, 3, 4),
        date(2024, 3, 11),
    ]
    assert "over 3 weeks" in output.summary


# ============================================================================
# SCENARIOS
# ============================================================================


def test_constant_series_moving_average() -> None:
    """Test a flat revenue history."""
    output = create_revenue_forecasting_service().forecast(
        _history([10_000.0] * 12), method="moving_average", apply_seasonality=False
    )

    assert [f.predicted for f in output.forecasts] == [10_000.0] * 6
    assert output.total_predicted_revenue == 60_000.0
    assert output.trend_analysis.direction is TrendDirection.STABLE
    assert output.trend_analysis.volatility == 0.0
    assert output.confidence_level is ConfidenceLevel.LOW
    assert output.summary == (
        "Forecasted revenue of €60,000 over 6 months, remaining stable at 0.0% annually. "
        "Prediction made with low confidence (limited data)."
    )
    assert output.recommended_actions == (
        "optimize_operational_efficiency",
        "explore_new_service_offerings",
        "improve_data_collection",
        "track_more_revenue_metrics",
    )


def test_growing_series_ensemble() -> None:
    """Test a steadily growing history with the default ensemble."""
    output = create_revenue_forecasting_service().forecast(_history(_growing()))

    assert output.trend_analysis.direction is TrendDirection.GROWING
    assert output.trend_analysis.monthly_growth_rate == 6.5
    trends = [f.trend_component for f in output.forecasts]
    assert trends == [100.0 * h for h in range(1, 7)]
    assert "maintain_current_strategies" in output.recommended_actions
    assert "hire_additional_staff" in output.recommended_actions
    assert output.insights[0].startswith("Revenue is growing at")


def test_perfect_line_gives_high_confidence() -> None:
    """Test that an exact fit on twelve points is graded HIGH."""
    output = create_revenue_forecasting_service().forecast(
        _history(_growing()), method="linear_regression"
    )
    assert output.model_fit.r_squared == 1.0
    assert output.confidence_level is ConfidenceLevel.HIGH
    assert output.summary.endswith("Prediction made with high confidence.")


def test_alternating_series_is_volatile() -> None:
    """Test a history that swings between two levels."""
    output = create_revenue_forecasting_service().forecast(_history([1000.0, 9000.0] * 6))

    assert output.trend_analysis.direction is TrendDirection.VOLATILE
    assert output.trend_analysis.volatility == 80.0
    assert output.recommended_actions[:3] == (
        "stabilize_revenue_streams",
        "diversify_patient_base",
        "implement_recurring_revenue_programs",
    )


def test_currency_in_summary() -> None:
    """Test that the summary uses the input currency."""
    output = create_revenue_forecasting_service().forecast(
        _history([10_000.0] * 12, currency="USD"), apply_seasonality=False
    )
    assert output.summary.startswith("Forecasted revenue of $60,000 over 6 months")


# ============================================================================
# ENSEMBLE
# ============================================================================


def test_calculate_ensemble_weights() -> None:
    """Test R-squared weighting with the 0.1 floor."""
    weights = calculate_ensemble_weights([_fit(0.9), _fit(0.0), _fit(0.5)])
    assert weights == pytest.approx([0.6, 0.1 / 1.5, 0.5 / 1.5])
    assert weights.sum() == pytest.approx(1.0)


def test_ensemble_debug_info() -> None:
    """Test that every strategy and the ensemble weights are exposed with debug=True."""
    output = create_revenue_forecasting_service().forecast(_history(_growing()), debug=True)

    assert output.debug is not None
    assert set(output.debug) == {
        "ensemble",
        "exponential_smoothing",
        "linear_regression",
        "moving_average",
    }
    weights = output.debug["ensemble"].data["weights"]
    assert sorted(weights) == ["exponential_smoothing", "linear_regression", "moving_average"]
    assert sum(weights.values()) == pytest.approx(1.0)


def test_debug_disabled_by_default() -> None:
    """Test that debug info is omitted unless requested."""
    output = create_revenue_forecasting_service().forecast(_history(_growing()))
    assert output.debug is None


def test_ensemble_weighted_average() -> None:
    """Test the blend of two fixed strategies with equal floor weights."""
    service = RevenueForecastingService(
        ServiceConfig(strategies=[FlatStrategy(1000.0), MovingAverageStrategy()])
    )
    output = service.forecast(_history([3000.0] * 6), apply_seasonality=False, forecast_periods=2)

    # Both fits have R-squared 0, so each strategy gets half the weight
    assert [f.predicted for f in output.forecasts] == [2000.0, 2000.0]
    assert [f.confidence_interval.lower for f in output.forecasts] == [1975.0, 1975.0]
    assert [f.confidence_interval.upper for f in output.forecasts] == [2025.0, 2025.0]
    # Components come from moving_average when it is present
    assert [f.seasonal_factor for f in output.forecasts] == [1.0, 1.0]


def test_ensemble_with_arima() -> None:
    """Test adding ARIMA to a service's ensemble."""
    service = create_revenue_forecasting_service()
    service.add_strategy(ARIMAStrategy())

    assert service.available_strategies() == [
        "moving_average",
        "exponential_smoothing",
        "linear_regression",
        "arima",
    ]
    output = service.forecast(_history(_growing()), debug=True)
    assert output.debug is not None
    assert "arima" in output.debug["ensemble"].data["weights"]
    assert len(output.forecasts) == 6


def test_named_method_falls_back_to_registry() -> None:
    """Test that a method not added to the service is resolved globally."""
    service = RevenueForecastingService(ServiceConfig(strategies=[MovingAverageStrategy()]))
    output = service.forecast(_history(_growing()), method="linear_regression")
    assert output.method == "linear_regression"


def test_custom_strategy_by_name() -> None:
    """Test calling a service-level custom strategy by name."""
    service = create_revenue_forecasting_service()
    service.add_strategy(FlatStrategy(750.0))

    output = service.forecast(_history(_growing()), method="flat", apply_seasonality=False)
    assert all(f.predicted == 750.0 for f in output.forecasts)


def test_reserved_strategy_name() -> None:
    """Test that a strategy cannot shadow the ensemble."""

    class Impostor(FlatStrategy):
        name = "ensemble"

    with pytest.raises(ConfigError, match="reserved"):
        create_revenue_forecasting_service().add_strategy(Impostor())


def test_service_defaults() -> None:
    """Test that ServiceConfig defaults apply to calls without overrides."""
    service = RevenueForecastingService(
        ServiceConfig(default_method="linear_regression", default_forecast_periods=3, model_version="9.9")
    )
    output = service.forecast(_history(_growing()))

    assert output.method == "linear_regression"
    assert len(output.forecasts) == 3
    assert output.model_version == "9.9"
    assert service.model_version == "9.9"


def test_ensemble_weights_are_array() -> None:
    """Test the return type of calculate_ensemble_weights."""
    assert isinstance(calculate_ensemble_weights([_fit(0.5)]), np.ndarray)


def test_debug_info_is_read_only() -> None:
    """Test that the debug mapping of an output cannot be modified."""
    output = create_revenue_forecasting_service().forecast(_history(_growing()), debug=True)

    assert output.debug is not None
    with pytest.raises(TypeError):
        output.debug["extra"] = output.debug["ensemble"]  # type: ignore[index]
    assert "extra" not in output.debug
