"""ReadinessScorer: blends readiness signals into one 0-10 score."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Sequence

from load_intelligence.catalog import ExerciseCatalog
from load_intelligence.models.enums import (
    READINESS_FULL_HISTORY_SESSIONS,
    READINESS_HIGH_THRESHOLD,
    READINESS_MODERATE_THRESHOLD,
    READINESS_NEUTRAL_SCORE,
    ReadinessStatus,
)
from load_intelligence.models.readiness import ReadinessResult, SignalAssessment
from load_intelligence.models.records import SessionRecord, ensure_utc
from load_intelligence.readiness.context import build_context
from load_intelligence.readiness.registry import SignalRegistry

logger = logging.getLogger(__name__)


def classify_readiness(score: float) -> ReadinessStatus:
    if score >= READINESS_HIGH_THRESHOLD:
        return ReadinessStatus.HIGH
    if score >= READINESS_MODERATE_THRESHOLD:
        return ReadinessStatus.MODERATE
    return ReadinessStatus.LOW


class ReadinessScorer:
    """Evaluates every registered signal and blends the results.

    Usage:
        scorer = ReadinessScorer()
        result = scorer.score(history, catalog, planned_exercise_ids={"squat"})
    """

    def __init__(self, registry: SignalRegistry | None = None) -> None:
        self.registry = registry or SignalRegistry()
        if registry is None:
            self.registry.discover_signals()

    def score(
        self,
        history: Sequence[SessionRecord],
        catalog: ExerciseCatalog,
        planned_exercise_ids: Iterable[str] = (),
        now: datetime | None = None,
    ) -> ReadinessResult:
        """Score readiness for a session planned at ``now``.

        The overall score is the weight-renormalized mean of the signals that
        had data; warnings and recommendations are ordered from the most
        adverse signal down.
        """
        moment = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
        context = build_context(history, catalog, moment, planned_exercise_ids)

        signals = self.registry.get_all_signals()
        assessments: list[SignalAssessment] = []
        for signal in signals:
            if not signal.has_required_data(context):
                logger.debug("Readiness signal %s lacks data", signal.signal_id)
                continue
            assessment = signal.evaluate(context)
            if assessment is not None:
                assessments.append(assessment)

        weights = self.registry.weights(a.signal_id for a in assessments)
        if weights:
            overall = sum(a.score * weights[a.signal_id] for a in assessments if a.signal_id in weights)
        else:
            overall = READINESS_NEUTRAL_SCORE
        overall = round(max(0.0, min(10.0, overall)), 2)

        ordered = sorted(assessments, key=lambda a: (a.score, self.registry.priority_of(a.signal_id)))
        warnings = tuple(w for a in ordered for w in a.warnings)
        recommendations = tuple(r for a in ordered for r in a.recommendations)
        status = classify_readiness(overall)
        if not recommendations and status == ReadinessStatus.HIGH:
            recommendations = ("Ready to train as planned.",)

        coverage = len(assessments) / len(signals) if signals else 0.0
        depth = min(1.0, context.n_sessions / READINESS_FULL_HISTORY_SESSIONS)
        confidence = max(0.0, min(1.0, coverage * depth))

        logger.info(
            "Readiness %.1f (%s) from %d signal(s), confidence %.2f",
            overall,
            status.value,
            len(assessments),
            confidence,
        )
        return ReadinessResult(
            overall_score=overall,
            overall_status=status,
            acwr=context.acwr,
            muscle_recovery=context.muscle_recovery,
            warnings=warnings,
            recommendations=recommendations,
            confidence=confidence,
            signals=tuple(assessments),
            is_fallback=False,
            evaluated_at=moment,
        )
