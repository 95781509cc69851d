"""Small dense linear algebra used by the ARIMA fitter.

Systems here are at most 2x2 (AR order <= 2), so plain elimination is enough.
"""

from __future__ import annotations

import numpy as np
from statsmodels.tsa.stattools import acovf, levinson_durbin

from revenue_forecast.forecasting.config import PIVOT_EPSILON


def gaussian_elimination(matrix: np.ndarray, rhs: np.ndarray) -> np.ndarray:
    """Solve ``matrix @ x = rhs`` by Gaussian elimination with partial pivoting.

    Columns whose pivot is below ``PIVOT_EPSILON`` are skipped and the
    corresponding unknown is set to 0 instead of failing.
    """
    b = np.asarray(rhs, dtype=float)
    n = len(b)
    if n == 0:
        return np.zeros(0)
    augmented = np.column_stack([np.asarray(matrix, dtype=float), b])

    for col in range(n):
        pivot_row = col + int(np.argmax(np.abs(augmented[col:, col])))
        if pivot_row != col:
            augmented[[col, pivot_row]] = augmented[[pivot_row, col]]

        pivot = augmented[col, col]
        if abs(pivot) < PIVOT_EPSILON:
            continue

        factors = augmented[col + 1 :, col] / pivot
        augmented[col + 1 :, col:] -= np.outer(factors, augmented[col, col:])

    solution = np.zeros(n)
    for row in range(n - 1, -1, -1):
        remainder = augmented[row, n] - augmented[row, row + 1 : n] @ solution[row + 1 :]
        diagonal = augmented[row, row]
        solution[row] = remainder / diagonal if abs(diagonal) > PIVOT_EPSILON else 0.0
    return solution


def solve_normal_equations(design: np.ndarray, target: np.ndarray, n_params: int) -> np.ndarray:
    """Least-squares coefficients from ``(X'X) b = X'y``."""
    design = np.asarray(design, dtype=float)
    if n_params == 0 or design.size == 0:
        return np.zeros(n_params)
    return gaussian_elimination(design.T @ design, design.T @ np.asarray(target, dtype=float))


def yule_walker(values: np.ndarray, order: int) -> np.ndarray:
    """AR(order) coefficients from the Yule-Walker equations.

    Sample autocovariances (divided by n) are solved with the Levinson-Durbin
    recursion. Degenerate inputs (too short, zero variance) give zeros.
    """
    if order == 0:
        return np.zeros(0)
    series = np.asarray(values, dtype=float)
    if len(series) <= order:
        return np.zeros(order)

    autocov = acovf(series, nlag=order, fft=False)
    if autocov[0] <= 0:
        return np.zeros(order)

    with np.errstate(divide="ignore", invalid="ignore"):
        _, ar_coefs, _, _, _ = levinson_durbin(autocov, nlags=order, isacov=True)
    return np.nan_to_num(np.asarray(ar_coefs, dtype=float), nan=0.0, posinf=0.0, neginf=0.0)
