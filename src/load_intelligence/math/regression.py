"""Ordinary least squares helpers shared by the causal estimators."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class OLSFit:
    """Coefficients, residual sum of squares and standard errors of a fit."""

    coefficients: np.ndarray
    rss: float
    n_obs: int
    n_params: int
    standard_errors: np.ndarray

    @property
    def dof(self) -> int:
        return self.n_obs - self.n_params


def design_matrix(*columns: np.ndarray) -> np.ndarray:
    """Stack predictors column-wise behind an intercept column."""
    n = len(columns[0]) if columns else 0
    return np.column_stack([np.ones(n)] + [np.asarray(c, dtype=np.float64) for c in columns])


def fit_ols(X: np.ndarray, y: np.ndarray) -> OLSFit:
    """Least squares fit of y on X (X already includes any intercept column)."""
    X = np.asarray(X, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    coefficients, _, rank, _ = np.linalg.lstsq(X, y, rcond=None)
    residuals = y - X @ coefficients
    rss = float(residuals @ residuals)
    n_obs, n_params = X.shape
    dof = n_obs - n_params
    if dof > 0 and rank == n_params:
        sigma2 = rss / dof
        covariance = sigma2 * np.linalg.pinv(X.T @ X)
        standard_errors = np.sqrt(np.clip(np.diag(covariance), 0.0, None))
    else:
        standard_errors = np.full(n_params, np.nan)
    return OLSFit(
        coefficients=coefficients,
        rss=rss,
        n_obs=n_obs,
        n_params=n_params,
        standard_errors=standard_errors,
    )


def lagged_matrix(series: np.ndarray, lag: int) -> np.ndarray:
    """Columns series[t-1], ..., series[t-lag] for t = lag .. n-1."""
    n = len(series)
    return np.column_stack([series[lag - k : n - k] for k in range(1, lag + 1)])


def relative_slope(values: np.ndarray) -> float | None:
    """Least-squares slope per step, relative to the series mean.

    Returns None with fewer than two points or a zero mean.
    """
    values = np.asarray(values, dtype=np.float64)
    if len(values) < 2:
        return None
    mean = float(values.mean())
    if abs(mean) < 1e-9:
        return None
    slope = float(np.polyfit(np.arange(len(values), dtype=np.float64), values, 1)[0])
    return slope / abs(mean)
