"""Granger causality F-test.

Compares a restricted model (y on its own lags) to an unrestricted model
(y on its own lags plus lags of x):

    F = ((RSS_r - RSS_u) / lag) / (RSS_u / (n - 2·lag - 1))

with an exact F(lag, n - 2·lag - 1) p-value.

Reference:
    Granger (1969). Investigating causal relations by econometric models
    and cross-spectral methods. Econometrica 37(3):424-438.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
from scipy import stats

from load_intelligence.causal._common import as_series, check_sample, two_sided_confidence
from load_intelligence.math.regression import design_matrix, fit_ols, lagged_matrix
from load_intelligence.models.causal import GrangerOutcome, GrangerResult, InsufficientData
from load_intelligence.models.enums import SIGNIFICANCE_LEVEL

logger = logging.getLogger(__name__)

_RSS_EPSILON = 1e-12


def granger_causality(
    x: Sequence[float] | np.ndarray,
    y: Sequence[float] | np.ndarray,
    lag: int = 1,
    cause: str = "x",
    effect: str = "y",
    minimum: int | None = None,
) -> GrangerOutcome:
    """Test whether lagged ``x`` improves prediction of ``y`` beyond y's own lags."""
    xs, ys = as_series(x), as_series(y)
    insufficient = check_sample(xs, ys, minimum=minimum, label="paired observations")
    if insufficient is not None:
        return insufficient
    if lag < 1:
        logger.debug("Granger test for %s -> %s skipped: lag %d", cause, effect, lag)
        return InsufficientData(
            reason=f"Lag must be at least 1 (got {lag})",
            required=1,
            available=max(0, lag),
        )

    n_eff = len(ys) - lag
    dof = n_eff - 2 * lag - 1
    if dof < 1:
        return InsufficientData(
            reason=f"Lag {lag} leaves no residual degrees of freedom",
            required=3 * lag + 2,
            available=len(ys),
        )

    target = ys[lag:]
    y_lags = lagged_matrix(ys, lag)
    x_lags = lagged_matrix(xs, lag)
    restricted = fit_ols(design_matrix(*y_lags.T), target)
    unrestricted = fit_ols(design_matrix(*y_lags.T, *x_lags.T), target)

    improvement = max(0.0, restricted.rss - unrestricted.rss)
    if unrestricted.rss <= _RSS_EPSILON:
        f_statistic = float("inf") if improvement > _RSS_EPSILON else 0.0
        p_value = 0.0 if improvement > _RSS_EPSILON else 1.0
    else:
        f_statistic = (improvement / lag) / (unrestricted.rss / dof)
        p_value = float(stats.f.sf(f_statistic, lag, dof))

    effect_estimate = float(np.sum(unrestricted.coefficients[1 + lag :]))
    is_causal = p_value < SIGNIFICANCE_LEVEL
    direction = "higher" if effect_estimate > 0 else "lower"
    if is_causal:
        interpretation = (
            f"Past {cause} significantly predicts {effect} (F={f_statistic:.2f}, p={p_value:.3f}): "
            f"higher {cause} tends to be followed by {direction} {effect}."
        )
    else:
        interpretation = (
            f"No evidence that past {cause} predicts {effect} beyond its own history "
            f"(F={f_statistic:.2f}, p={p_value:.3f})."
        )
    logger.debug("Granger %s -> %s: F=%.3f p=%.4f", cause, effect, f_statistic, p_value)
    return GrangerResult(
        cause=cause,
        effect=effect,
        lag=lag,
        f_statistic=float(f_statistic),
        p_value=p_value,
        effect_estimate=effect_estimate,
        is_causal=is_causal,
        confidence=two_sided_confidence(p_value),
        n_obs=n_eff,
        interpretation=interpretation,
    )
