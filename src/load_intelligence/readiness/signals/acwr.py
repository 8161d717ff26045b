"""SAFETY signal: workload spike risk from the Acute:Chronic Workload Ratio.

Reference:
    Gabbett (2016). The training-injury prevention paradox: should athletes
    be training smarter and harder? Br J Sports Med 50(5):273-280.

Scores:
    ACWR > 2.0   → 2.0
    ACWR > 1.5   → 3.5  high risk
    ACWR 1.3-1.5 → 6.0  caution
    ACWR 0.8-1.3 → 10.0 optimal
    ACWR 0.5-0.8 → 7.5  undertrained
    ACWR < 0.5   → 6.0  detraining
"""

from __future__ import annotations

from load_intelligence.models.enums import (
    ACWR_DANGER_THRESHOLD,
    ACWR_OPTIMAL_HIGH,
    ACWR_OPTIMAL_LOW,
    MONOTONY_WARNING_THRESHOLD,
    READINESS_WEIGHTS,
    ACWRStatus,
    SignalPriority,
)
from load_intelligence.models.readiness import ReadinessContext, SignalAssessment
from load_intelligence.readiness.signals.base import ReadinessSignal

ACWR_EXTREME_SPIKE = 2.0
ACWR_DETRAINING = 0.5


class ACWRSignal(ReadinessSignal):
    """Penalizes sudden increases (and deep drops) in weekly training load."""

    signal_id = "acwr"
    version = "1.0.0"
    priority = SignalPriority.SAFETY
    weight = READINESS_WEIGHTS["acwr"]
    required_data = ["acwr"]

    def evaluate(self, context: ReadinessContext) -> SignalAssessment | None:
        acwr = context.acwr
        if acwr is None or acwr.value is None:
            return None  # No chronic load to compare against

        ratio = acwr.value
        warnings: list[str] = []
        recommendations: list[str] = []

        if ratio > ACWR_EXTREME_SPIKE:
            score = 2.0
            warnings.append(
                f"Training load has more than doubled (ACWR={ratio:.2f}). Injury risk is very high."
            )
            recommendations.append("Plan a deload week: cut volume by 40-50% for the next sessions.")
        elif acwr.status == ACWRStatus.HIGH_RISK:
            score = 3.5
            warnings.append(
                f"ACWR={ratio:.2f} exceeds {ACWR_DANGER_THRESHOLD}: workload spike, elevated injury risk."
            )
            recommendations.append("Reduce session volume by 20-30% and avoid max-effort sets.")
        elif acwr.status == ACWRStatus.CAUTION:
            score = 6.0
            warnings.append(
                f"ACWR={ratio:.2f} is above the {ACWR_OPTIMAL_HIGH} sweet spot. Load is climbing quickly."
            )
            recommendations.append("Hold volume steady this week rather than adding more.")
        elif acwr.status == ACWRStatus.OPTIMAL:
            score = 10.0
        elif ratio < ACWR_DETRAINING:
            score = 6.0
            warnings.append(
                f"ACWR={ratio:.2f}: recent training is far below your usual load (detraining)."
            )
            recommendations.append("Ease back in: rebuild volume gradually over 1-2 weeks.")
        else:
            score = 7.5
            recommendations.append(
                f"ACWR={ratio:.2f} is below {ACWR_OPTIMAL_LOW}; you can safely add some volume."
            )

        if acwr.monotony > MONOTONY_WARNING_THRESHOLD:
            warnings.append(
                f"Training monotony is high ({acwr.monotony:.1f}); vary session load across the week."
            )

        return SignalAssessment(
            signal_id=self.signal_id,
            score=score,
            weight=self.weight,
            warnings=tuple(warnings),
            recommendations=tuple(recommendations),
            explanation=f"ACWR={ratio:.2f} ({acwr.status.value}). Ref: Gabbett (2016).",
        )
