"""Instrumental variables via two-stage least squares (Wald estimator for a binary instrument).

A first-stage F below 10 flags a weak instrument (Staiger & Stock, 1997).
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

import numpy as np
from scipy import stats

from load_intelligence.causal._common import as_series, check_sample, two_sided_confidence
from load_intelligence.math.regression import design_matrix, fit_ols
from load_intelligence.models.causal import (
    IVOutcome,
    InstrumentalVariableResult,
    InsufficientData,
)
from load_intelligence.models.enums import MIN_IV_OBSERVATIONS, SIGNIFICANCE_LEVEL, WEAK_INSTRUMENT_F

logger = logging.getLogger(__name__)


def instrumental_variable(
    instrument: Sequence[float] | np.ndarray,
    treatment: Sequence[float] | np.ndarray,
    outcome: Sequence[float] | np.ndarray,
    instrument_name: str = "z",
    treatment_name: str = "x",
    outcome_name: str = "y",
    minimum: int = MIN_IV_OBSERVATIONS,
) -> IVOutcome:
    """Effect of ``treatment`` on ``outcome`` identified through ``instrument``."""
    zs, xs, ys = as_series(instrument), as_series(treatment), as_series(outcome)
    insufficient = check_sample(zs, xs, ys, minimum=minimum)
    if insufficient is not None:
        return insufficient
    if np.ptp(zs) == 0:
        return InsufficientData(
            reason=f"Instrument {instrument_name} does not vary",
            required=minimum,
            available=len(zs),
        )

    first = fit_ols(design_matrix(zs), xs)
    se_z = first.standard_errors[1]
    if not np.isfinite(se_z) or se_z == 0:
        first_stage_f = math.inf if first.coefficients[1] != 0 else 0.0
    else:
        first_stage_f = float((first.coefficients[1] / se_z) ** 2)
    weak = first_stage_f < WEAK_INSTRUMENT_F

    fitted = first.coefficients[0] + first.coefficients[1] * zs
    spread = float(np.sum((fitted - fitted.mean()) ** 2))
    if spread <= 1e-12:
        return InsufficientData(
            reason=f"Instrument {instrument_name} does not move {treatment_name}",
            required=minimum,
            available=len(zs),
        )

    second = fit_ols(design_matrix(fitted), ys)
    estimate = float(second.coefficients[1])
    residuals = ys - (second.coefficients[0] + estimate * xs)
    dof = len(ys) - 2
    sigma2 = float(residuals @ residuals) / dof
    se = math.sqrt(sigma2 / spread)
    if se > 0:
        p_value = float(2.0 * stats.t.sf(abs(estimate / se), dof))
    else:
        p_value = 0.0 if estimate != 0 else 1.0
    is_significant = p_value < SIGNIFICANCE_LEVEL and not weak

    if weak:
        interpretation = (
            f"{instrument_name.capitalize()} is a weak instrument for {treatment_name} "
            f"(first-stage F={first_stage_f:.1f} < {WEAK_INSTRUMENT_F:g}); the estimate is unreliable."
        )
    elif is_significant:
        interpretation = (
            f"Using {instrument_name} as an instrument, one unit of {treatment_name} changes "
            f"{outcome_name} by {estimate:+.3g} (p={p_value:.3f})."
        )
    else:
        interpretation = (
            f"Instrumented effect of {treatment_name} on {outcome_name} is not significant "
            f"({estimate:+.3g}, p={p_value:.3f})."
        )
    logger.debug("IV %s: beta=%.4f F=%.2f", treatment_name, estimate, first_stage_f)
    return InstrumentalVariableResult(
        instrument=instrument_name,
        treatment=treatment_name,
        outcome=outcome_name,
        estimate=estimate,
        standard_error=se,
        first_stage_f=first_stage_f,
        weak_instrument=weak,
        p_value=p_value,
        is_significant=is_significant,
        confidence=two_sided_confidence(p_value),
        n_obs=len(ys),
        interpretation=interpretation,
    )
