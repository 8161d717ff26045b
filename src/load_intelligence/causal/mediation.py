"""Mediation analysis: X → M → Y.

    c  : Y ~ X          (total effect)
    a  : M ~ X
    b, c': Y ~ X + M    (b = mediator path, c' = direct effect)
    indirect = a·b

Inference on a·b uses both the Sobel z-test and a seeded percentile
bootstrap; with session counts in the tens the bootstrap interval decides
significance.

References:
    - Baron & Kenny (1986). J Pers Soc Psychol 51(6):1173-1182.
    - Preacher & Hayes (2008). Behav Res Methods 40(3):879-891.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

import numpy as np
from scipy import stats

from load_intelligence import config
from load_intelligence.causal._common import as_series, check_sample, two_sided_confidence
from load_intelligence.math.regression import design_matrix, fit_ols
from load_intelligence.models.causal import MediationOutcome, MediationResult
from load_intelligence.models.enums import DOMINANT_MEDIATION_SHARE

logger = logging.getLogger(__name__)


def _paths(xs: np.ndarray, ms: np.ndarray, ys: np.ndarray) -> tuple[float, float, float, float, float, float]:
    """(total, a, b, direct, se_a, se_b)."""
    total = fit_ols(design_matrix(xs), ys)
    a_fit = fit_ols(design_matrix(xs), ms)
    b_fit = fit_ols(design_matrix(xs, ms), ys)
    return (
        float(total.coefficients[1]),
        float(a_fit.coefficients[1]),
        float(b_fit.coefficients[2]),
        float(b_fit.coefficients[1]),
        float(a_fit.standard_errors[1]),
        float(b_fit.standard_errors[2]),
    )


def mediation_analysis(
    x: Sequence[float] | np.ndarray,
    mediator: Sequence[float] | np.ndarray,
    y: Sequence[float] | np.ndarray,
    treatment: str = "x",
    mediator_name: str = "m",
    outcome: str = "y",
    n_bootstrap: int | None = None,
    seed: int | None = None,
    minimum: int | None = None,
) -> MediationOutcome:
    """Decompose the effect of ``x`` on ``y`` into direct and mediated parts."""
    xs, ms, ys = as_series(x), as_series(mediator), as_series(y)
    insufficient = check_sample(xs, ms, ys, minimum=minimum)
    if insufficient is not None:
        return insufficient

    total, a, b, direct, se_a, se_b = _paths(xs, ms, ys)
    indirect = a * b

    sobel_se = math.sqrt(b * b * se_a * se_a + a * a * se_b * se_b) if np.isfinite(se_a) and np.isfinite(se_b) else 0.0
    if sobel_se > 0:
        sobel_z = indirect / sobel_se
        p_value = float(2.0 * stats.norm.sf(abs(sobel_z)))
    else:
        sobel_z = 0.0
        p_value = 1.0

    rng = np.random.default_rng(config.RANDOM_SEED if seed is None else seed)
    samples = config.BOOTSTRAP_SAMPLES if n_bootstrap is None else n_bootstrap
    n = len(xs)
    draws = []
    for _ in range(samples):
        idx = rng.integers(0, n, size=n)
        if np.ptp(xs[idx]) == 0:
            continue
        _, a_s, b_s, _, _, _ = _paths(xs[idx], ms[idx], ys[idx])
        draws.append(a_s * b_s)
    if draws:
        ci_low, ci_high = (float(v) for v in np.percentile(draws, [2.5, 97.5]))
    else:
        ci_low = ci_high = indirect

    is_significant = bool(draws) and (ci_low > 0 or ci_high < 0)
    proportion = 0.0 if abs(total) < 1e-12 else min(1.0, max(0.0, abs(indirect / total)))

    if not is_significant:
        interpretation = (
            f"No reliable mediation: the indirect effect of {treatment} on {outcome} "
            f"through {mediator_name} is indistinguishable from zero "
            f"(95% CI {ci_low:.3g} to {ci_high:.3g})."
        )
    elif proportion > DOMINANT_MEDIATION_SHARE:
        interpretation = (
            f"{mediator_name.capitalize()} is the dominant pathway: {proportion:.0%} of the effect of "
            f"{treatment} on {outcome} runs through it."
        )
    else:
        interpretation = (
            f"Partial mediation: {proportion:.0%} of the effect of {treatment} on {outcome} runs "
            f"through {mediator_name}; the direct path dominates."
        )

    logger.debug("Mediation %s->%s->%s: ab=%.4f c=%.4f", treatment, mediator_name, outcome, indirect, total)
    return MediationResult(
        treatment=treatment,
        mediator=mediator_name,
        outcome=outcome,
        total_effect=total,
        direct_effect=direct,
        indirect_effect=indirect,
        a_path=a,
        b_path=b,
        sobel_z=float(sobel_z),
        p_value=p_value,
        ci_low=ci_low,
        ci_high=ci_high,
        proportion_mediated=proportion,
        is_significant=is_significant,
        confidence=two_sided_confidence(p_value),
        n_obs=n,
        interpretation=interpretation,
    )
