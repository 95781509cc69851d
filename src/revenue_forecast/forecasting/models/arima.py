"""ARIMA(p, d, q) forecasting strategy.

This module implements a bounded ARIMA model fitted by conditional least squares:

- p: order of the autoregressive (AR) component
- d: degree of differencing (I) used to remove trend
- q: order of the moving average (MA) component

Orders are chosen from a short fixed candidate list by AIC. Coefficients are
refined iteratively: AR by least squares on the lagged series, MA by a
gradient step on the residual lag covariance.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from typing import NamedTuple

import numpy as np
from statsmodels.tsa.arima_process import arma2ma

from revenue_forecast.forecasting.config import (
    ARIMA_CANDIDATE_ORDERS,
    ARIMA_FALLBACK_ORDER,
    ARIMA_INITIAL_MA,
    ARIMA_MA_BOUND,
    ARIMA_MA_LEARNING_RATE,
    ARIMA_MAX_ITERATIONS,
    ARIMA_MIN_SEARCH_POINTS,
    ARIMA_SMALL_SAMPLE_ORDER,
    ARIMA_TOLERANCE,
)
from revenue_forecast.forecasting.models.base import ForecastingStrategy, StrategyResult
from revenue_forecast.forecasting.models.linalg import solve_normal_equations, yule_walker
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

logger = logging.getLogger(__name__)


class ARIMAOrder(NamedTuple):
    p: int
    d: int
    q: int


@dataclass(frozen=True)
class ARIMACoefficients:
    """Fitted coefficients of an ARMA model on the differenced series.

    Attributes:
        ar: AR coefficients (phi_1 .. phi_p).
        ma: MA coefficients (theta_1 .. theta_q).
        constant: Intercept of the differenced series.
        sigma2: Residual variance.
        iterations: Number of refinement passes run.
        converged: Whether the residual variance settled within tolerance.
    """

    ar: np.ndarray
    ma: np.ndarray
    constant: float
    sigma2: float
    iterations: int = 0
    converged: bool = False

    @property
    def is_finite(self) -> bool:
        return (
            math.isfinite(self.sigma2)
            and math.isfinite(self.constant)
            and bool(np.all(np.isfinite(self.ar)))
            and bool(np.all(np.isfinite(self.ma)))
        )


# ============================================================================
# DIFFERENCING
# ============================================================================


def difference(values: Sequence[float], d: int) -> tuple[np.ndarray, list[float]]:
    """Apply ``d`` rounds of first differencing.

    Returns:
        Tuple of (differenced series, last value at each differencing level).
        The retained values let undifference() continue the series forward.
    """
    current = np.asarray(values, dtype=float)
    original_last: list[float] = []
    for _ in range(d):
        original_last.append(float(current[-1]) if len(current) else 0.0)
        current = np.diff(current)
    return current, original_last


def undifference(forecasts: Sequence[float], original_last: Sequence[float], d: int) -> np.ndarray:
    """Reverse ``d`` rounds of differencing by cumulative summation.

    Each level is rebuilt by adding the differences, in order, onto the value
    retained for that level by difference().
    """
    current = np.asarray(forecasts, dtype=float)
    for level in range(d - 1, -1, -1):
        anchor = original_last[level] if level < len(original_last) else 0.0
        current = np.cumsum(np.concatenate(([anchor], current)))[1:]
    return current


# ============================================================================
# FITTING
# ============================================================================


def calculate_aic(n: int, order: ARIMAOrder, sigma2: float) -> float:
    """Akaike Information Criterion ``n ln(sigma2) + 2 (p + q + 1)``."""
    return n * math.log(max(sigma2, 1e-10)) + 2 * (order.p + order.q + 1)


def compute_residuals(
    values: np.ndarray,
    order: ARIMAOrder,
    ar: np.ndarray,
    ma: np.ndarray,
    constant: float,
) -> np.ndarray:
    """One-step-ahead residuals of an ARMA(p, q) model on ``values``.

    The first ``max(p, q)`` residuals are 0.
    """
    n = len(values)
    residuals = np.zeros(n)
    for t in range(max(order.p, order.q), n):
        prediction = constant
        prediction += float(ar[: order.p] @ values[t - order.p : t][::-1])
        prediction += float(ma[: order.q] @ residuals[t - order.q : t][::-1])
        residuals[t] = values[t] - prediction
    return residuals


def _variance(values: np.ndarray) -> float:
    if len(values) < 2:
        return 0.0
    return float(np.var(values, ddof=1))


def _update_ar(values: np.ndarray, residuals: np.ndarray, p: int, constant: float) -> np.ndarray:
    if p == 0:
        return np.zeros(0)
    adjusted = values - constant - residuals
    n = len(adjusted)
    if n <= p:
        return np.zeros(p)
    design = np.column_stack([adjusted[p - lag : n - lag] for lag in range(1, p + 1)])
    return solve_normal_equations(design, adjusted[p:], p)


def _update_ma(residuals: np.ndarray, ma: np.ndarray) -> np.ndarray:
    n = len(residuals)
    updated = ma.copy()
    if n == 0:
        return updated
    for j in range(len(ma)):
        gradient = 2.0 * float(residuals[j + 1 :] @ residuals[: n - j - 1]) / n
        updated[j] = np.clip(
            updated[j] - ARIMA_MA_LEARNING_RATE * gradient, -ARIMA_MA_BOUND, ARIMA_MA_BOUND
        )
    return updated


def fit_coefficients(
    differenced: np.ndarray,
    order: ARIMAOrder,
    max_iterations: int = ARIMA_MAX_ITERATIONS,
    tolerance: float = ARIMA_TOLERANCE,
) -> ARIMACoefficients:
    """Fit ARMA(p, q) coefficients on an already differenced series.

    AR starts from the Yule-Walker solution, MA from 0.1 and the constant from
    the series mean. Each pass recomputes residuals, re-estimates AR by least
    squares, takes one clamped gradient step for MA and resets the constant to
    ``mean * (1 - sum(ar))``. Stops when the residual variance changes by less
    than ``tolerance`` or after ``max_iterations`` passes.
    """
    values = np.asarray(differenced, dtype=float)
    mean = float(values.mean()) if len(values) else 0.0

    ar = yule_walker(values, order.p)
    ma = np.full(order.q, ARIMA_INITIAL_MA)
    constant = mean
    previous_sigma2 = math.inf

    with np.errstate(over="ignore", invalid="ignore"):
        for iteration in range(1, max_iterations + 1):
            residuals = compute_residuals(values, order, ar, ma, constant)
            ar = _update_ar(values, residuals, order.p, constant)
            ma = _update_ma(residuals, ma)
            constant = mean * (1 - float(ar.sum()))

            sigma2 = _variance(residuals)
            if abs(sigma2 - previous_sigma2) < tolerance:
                return ARIMACoefficients(ar, ma, constant, sigma2, iteration, True)
            previous_sigma2 = sigma2

        residuals = compute_residuals(values, order, ar, ma, constant)
        return ARIMACoefficients(ar, ma, constant, _variance(residuals), max_iterations, False)


def psi_weights(coefficients: ARIMACoefficients, periods: int) -> np.ndarray:
    """First ``periods`` weights of the MA(infinity) representation (psi_1 ..)."""
    ar_poly = np.r_[1.0, -coefficients.ar]
    ma_poly = np.r_[1.0, coefficients.ma]
    return np.asarray(arma2ma(ar_poly, ma_poly, lags=periods + 1), dtype=float)[1:]


def forecast_error_variances(coefficients: ARIMACoefficients, periods: int) -> np.ndarray:
    """Error variance per horizon: ``sigma2 * (1 + sum_{i<h} psi_i^2)``."""
    psi = psi_weights(coefficients, periods)
    cumulative = np.concatenate(([0.0], np.cumsum(psi**2)))[:periods]
    return coefficients.sigma2 * (1.0 + cumulative)


def project_differenced(
    differenced: np.ndarray,
    residuals: np.ndarray,
    coefficients: ARIMACoefficients,
    order: ARIMAOrder,
    periods: int,
) -> np.ndarray:
    """Recursive multi-step forecast of the differenced series.

    Future residuals are taken as 0, so the MA terms only see in-sample errors.
    """
    extended = list(differenced)
    n_residuals = len(residuals)
    projections = []
    for h in range(periods):
        value = coefficients.constant
        for i in range(order.p):
            if i < len(extended):
                value += coefficients.ar[i] * extended[-1 - i]
        for i in range(h, order.q):
            index = n_residuals - 1 - i + h
            if index >= 0:
                value += coefficients.ma[i] * residuals[index]
        extended.append(value)
        projections.append(value)
    return np.asarray(projections, dtype=float)


# ============================================================================
# STRATEGY
# ============================================================================


class ARIMAStrategy(ForecastingStrategy):
    """ARIMA forecasting strategy with automatic order selection.

    Series shorter than ``min_search_points`` use ARIMA(1,1,1). Longer series
    try every candidate order and keep the one with the lowest AIC.
    Candidates that are too long for the data, or whose fit diverges, are
    skipped rather than failing the call.
    """

    name = "arima"

    def __init__(
        self,
        candidate_orders: Sequence[tuple[int, int, int]] = ARIMA_CANDIDATE_ORDERS,
        max_iterations: int = ARIMA_MAX_ITERATIONS,
        tolerance: float = ARIMA_TOLERANCE,
        min_search_points: int = ARIMA_MIN_SEARCH_POINTS,
    ) -> None:
        """Initialize ARIMAStrategy with order search settings.

        Args:
            candidate_orders: (p, d, q) orders evaluated by AIC.
            max_iterations: Cap on coefficient refinement passes.
            tolerance: Convergence tolerance on the residual variance.
            min_search_points: Below this many observations, ARIMA(1,1,1) is used.
        """
        self.candidate_orders = tuple(ARIMAOrder(*order) for order in candidate_orders)
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.min_search_points = min_search_points

    def select_order(self, values: Sequence[float]) -> ARIMAOrder:
        """Pick the candidate order with the lowest AIC."""
        n = len(values)
        if n < self.min_search_points:
            return ARIMAOrder(*ARIMA_SMALL_SAMPLE_ORDER)

        best_order = ARIMAOrder(*ARIMA_FALLBACK_ORDER)
        best_aic = math.inf
        for order in self.candidate_orders:
            differenced, _ = difference(values, order.d)
            if len(differenced) < order.p + order.q + 2:
                logger.debug(
                    "Skipping ARIMA%s: only %d differenced points", tuple(order), len(differenced)
                )
                continue

            coefficients = self._fit(differenced, order)
            if not coefficients.is_finite:
                logger.warning("Skipping ARIMA%s: fit diverged", tuple(order))
                continue

            aic = calculate_aic(n, order, coefficients.sigma2)
            logger.debug("ARIMA%s aic=%.3f", tuple(order), aic)
            if aic < best_aic:
                best_aic = aic
                best_order = order

        return best_order

    def _fit(self, differenced: np.ndarray, order: ARIMAOrder) -> ARIMACoefficients:
        return fit_coefficients(differenced, order, self.max_iterations, self.tolerance)

    def calculate(
        self,
        history: Sequence[HistoricalRevenuePoint],
        values: Sequence[float],
        config: ForecastConfig,
    ) -> StrategyResult:
        data = np.asarray(values, dtype=float)
        n = len(data)

        order = self.select_order(data)
        differenced, original_last = difference(data, order.d)
        coefficients = self._fit(differenced, order)

        if not coefficients.is_finite:
            # Random walk with drift on the differenced scale
            logger.warning("ARIMA%s fit diverged, falling back to drift model", tuple(order))
            coefficients = ARIMACoefficients(
                ar=np.zeros(order.p),
                ma=np.zeros(order.q),
                constant=float(differenced.mean()) if len(differenced) else 0.0,
                sigma2=_variance(differenced),
            )

        residuals = compute_residuals(
            differenced, order, coefficients.ar, coefficients.ma, coefficients.constant
        )

        # One-step-ahead error is the same on the differenced and original scale
        fitted = data - np.concatenate((np.zeros(n - len(residuals)), residuals))

        projected = undifference(
            project_differenced(
                differenced, residuals, coefficients, order, config.forecast_periods
            ),
            original_last,
            order.d,
        )
        variances = forecast_error_variances(coefficients, config.forecast_periods)
        z_score = get_z_score(config.confidence_level)

        def build(index: int, when: date) -> ForecastedRevenuePoint:
            factor = seasonal_factor_for(when, config)
            half_width = z_score * math.sqrt(max(float(variances[index]), 0.0)) * factor
            trend = float(projected[index] - projected[index - 1]) if index > 0 else 0.0
            return build_forecast_point(
                when,
                float(projected[index]) * factor,
                half_width,
                config,
                index,
                seasonal_factor=factor,
                trend_component=trend,
            )

        forecasts = generate_forecast_points(history, config, build)

        aic = calculate_aic(n, order, coefficients.sigma2)
        model_fit = calculate_model_fit(
            data,
            fitted,
            aic=aic,
            degrees_of_freedom=max(n - order.d - (order.p + order.q + 1), 0),
        )

        logger.debug(
            "ARIMA%s fitted in %d iterations (converged=%s, sigma2=%.3f)",
            tuple(order),
            coefficients.iterations,
            coefficients.converged,
            coefficients.sigma2,
        )

        return StrategyResult(
            forecasts=forecasts,
            model_fit=model_fit,
            debug=ModelDebugInfo(
                model_name=self.name,
                data={
                    "order": tuple(order),
                    "ar": coefficients.ar.tolist(),
                    "ma": coefficients.ma.tolist(),
                    "constant": coefficients.constant,
                    "sigma2": coefficients.sigma2,
                    "aic": aic,
                    "iterations": coefficients.iterations,
                    "converged": coefficients.converged,
                },
            ),
        )
