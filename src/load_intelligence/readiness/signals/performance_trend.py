"""PERFORMANCE signal: direction of the per-session performance proxy."""

from __future__ import annotations

from load_intelligence.models.enums import READINESS_WEIGHTS, SignalPriority
from load_intelligence.models.readiness import ReadinessContext, SignalAssessment
from load_intelligence.readiness.signals.base import ReadinessSignal

# Score gained per unit of relative slope (per session)
TREND_SCORE_GAIN = 50.0
TREND_NEUTRAL_SCORE = 7.0
DECLINE_WARNING_SLOPE = -0.03


class PerformanceTrendSignal(ReadinessSignal):
    """Rising performance nudges readiness up; a sustained decline pulls it down."""

    signal_id = "performance_trend"
    version = "1.0.0"
    priority = SignalPriority.PERFORMANCE
    weight = READINESS_WEIGHTS["performance_trend"]
    required_data = ["performance_trend"]

    def evaluate(self, context: ReadinessContext) -> SignalAssessment | None:
        slope = context.performance_trend
        score = max(0.0, min(10.0, TREND_NEUTRAL_SCORE + TREND_SCORE_GAIN * slope))

        warnings: tuple[str, ...] = ()
        recommendations: tuple[str, ...] = ()
        if slope <= DECLINE_WARNING_SLOPE:
            warnings = (
                f"Performance has declined about {abs(slope) * 100:.0f}% per session recently.",
            )
            recommendations = (
                "Prioritize recovery (sleep, nutrition) and keep today's session lighter.",
            )

        return SignalAssessment(
            signal_id=self.signal_id,
            score=score,
            weight=self.weight,
            warnings=warnings,
            recommendations=recommendations,
            explanation=f"Performance trend {slope * 100:+.1f}% per session.",
        )
