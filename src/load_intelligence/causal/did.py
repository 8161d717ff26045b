"""Difference-in-differences.

    DiD = (mean T_after - mean T_before) - (mean C_after - mean C_before)

Standard error from the four group variances (Welch), degrees of freedom by
Welch-Satterthwaite, p-value from the t distribution.

Reference:
    Angrist & Pischke (2009). Mostly Harmless Econometrics, ch. 5.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

import numpy as np
from scipy import stats

from load_intelligence.causal._common import as_series, two_sided_confidence
from load_intelligence.models.causal import DiDOutcome, DiDResult, InsufficientData
from load_intelligence.models.enums import SIGNIFICANCE_LEVEL

logger = logging.getLogger(__name__)

MIN_GROUP_SIZE = 2


def difference_in_differences(
    treatment_before: Sequence[float] | np.ndarray,
    treatment_after: Sequence[float] | np.ndarray,
    control_before: Sequence[float] | np.ndarray,
    control_after: Sequence[float] | np.ndarray,
    min_group: int = MIN_GROUP_SIZE,
) -> DiDOutcome:
    """Effect of a regime change on the treatment series, net of the control trend."""
    groups = [as_series(g) for g in (treatment_before, treatment_after, control_before, control_after)]
    smallest = min(len(g) for g in groups)
    if smallest < max(min_group, MIN_GROUP_SIZE):
        return InsufficientData(
            reason=f"Each before/after group needs at least {max(min_group, MIN_GROUP_SIZE)} observations",
            required=max(min_group, MIN_GROUP_SIZE),
            available=smallest,
        )
    if any(not np.all(np.isfinite(g)) for g in groups):
        return InsufficientData(
            reason="Groups contain non-finite values",
            required=max(min_group, MIN_GROUP_SIZE),
            available=smallest,
        )

    tb, ta, cb, ca = groups
    treatment_change = float(ta.mean() - tb.mean())
    control_change = float(ca.mean() - cb.mean())
    estimate = treatment_change - control_change

    components = [float(g.var(ddof=1)) / len(g) for g in groups]
    variance = sum(components)
    se = math.sqrt(variance)
    if se > 0:
        dof = variance**2 / sum(c**2 / (len(g) - 1) for c, g in zip(components, groups))
        t_statistic = estimate / se
        p_value = float(2.0 * stats.t.sf(abs(t_statistic), dof))
    else:
        dof = float(sum(len(g) for g in groups) - 4)
        t_statistic = 0.0 if estimate == 0 else math.copysign(math.inf, estimate)
        p_value = 1.0 if estimate == 0 else 0.0
    is_significant = p_value < SIGNIFICANCE_LEVEL

    if is_significant:
        interpretation = (
            f"The regime change shifted the outcome by {estimate:+.2f} beyond the underlying "
            f"trend (p={p_value:.3f})."
        )
    else:
        interpretation = (
            f"No significant change beyond the underlying trend ({estimate:+.2f}, p={p_value:.3f})."
        )
    logger.debug("DiD estimate=%.4f se=%.4f df=%.1f", estimate, se, dof)
    return DiDResult(
        estimate=estimate,
        standard_error=se,
        t_statistic=float(t_statistic),
        degrees_of_freedom=float(dof),
        p_value=p_value,
        treatment_change=treatment_change,
        control_change=control_change,
        is_significant=is_significant,
        confidence=two_sided_confidence(p_value),
        interpretation=interpretation,
    )
