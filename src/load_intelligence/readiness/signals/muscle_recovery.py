"""RECOVERY signal: how recovered the muscles to be trained are.

Reference:
    Schoenfeld et al. (2016). Effects of resistance training frequency on
    measures of muscle hypertrophy. Sports Med 46(11):1689-1697.
"""

from __future__ import annotations

from load_intelligence.models.enums import READINESS_WEIGHTS, RecoveryStatus, SignalPriority
from load_intelligence.models.readiness import ReadinessContext, SignalAssessment
from load_intelligence.readiness.signals.base import ReadinessSignal


class MuscleRecoverySignal(ReadinessSignal):
    """Mean readiness of the considered muscles; warns about the least recovered."""

    signal_id = "muscle_recovery"
    version = "1.0.0"
    priority = SignalPriority.RECOVERY
    weight = READINESS_WEIGHTS["muscle_recovery"]
    required_data = ["muscle_recovery"]

    def evaluate(self, context: ReadinessContext) -> SignalAssessment | None:
        muscles = context.muscle_recovery
        score = sum(m.readiness for m in muscles) / len(muscles)

        warnings: list[str] = []
        recommendations: list[str] = []
        for m in sorted(muscles, key=lambda m: (m.readiness, m.muscle)):
            if m.status == RecoveryStatus.FATIGUED:
                warnings.append(
                    f"{m.muscle.title()} is still fatigued ({m.recovery_percent:.0f}% recovered, "
                    f"~{m.hours_until_ready:.0f}h until ready)."
                )
            elif m.status == RecoveryStatus.RECOVERING:
                warnings.append(
                    f"{m.muscle.title()} is still recovering ({m.recovery_percent:.0f}% recovered)."
                )

        fatigued = [m.muscle for m in muscles if m.status == RecoveryStatus.FATIGUED]
        if fatigued:
            recommendations.append(
                f"Reduce volume for {', '.join(sorted(fatigued))} or train other muscle groups today."
            )

        return SignalAssessment(
            signal_id=self.signal_id,
            score=score,
            weight=self.weight,
            warnings=tuple(warnings),
            recommendations=tuple(recommendations),
            explanation=f"Average muscle readiness {score:.1f}/10 across {len(muscles)} group(s).",
        )
