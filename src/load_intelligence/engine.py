"""IntelligenceEngine: the facade the consuming application calls in-process."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Mapping, Sequence

from load_intelligence.catalog import ExerciseCatalog
from load_intelligence.causal.suite import run_causal_suite
from load_intelligence.fatigue.model import analyze_rpe_calibration
from load_intelligence.fatigue.monitor import assess_session
from load_intelligence.models.causal import CausalInsights, InsufficientData
from load_intelligence.models.fatigue import MuscleFatigueState, RPECalibration, SessionFatigueResult
from load_intelligence.models.readiness import ReadinessResult
from load_intelligence.models.recommendation import RecommendationResult
from load_intelligence.models.records import (
    ExerciseCatalogEntry,
    SessionRecord,
    SetRecord,
    UserMaxRecord,
    ensure_utc,
)
from load_intelligence.readiness.scorer import ReadinessScorer
from load_intelligence.readiness.service import fallback_result
from load_intelligence.recommendation.recommender import recommend

logger = logging.getLogger(__name__)


class IntelligenceEngine:
    """Stateless entry point over one catalog and one set of user maxes.

    Every call is a pure function of its arguments plus the catalog; no
    per-request state survives a call, so concurrent calls are independent.

    Usage:
        engine = IntelligenceEngine(catalog_entries, user_maxes)
        rec = engine.recommend("bench-press", 5, 8.0, session_sets, history)
        readiness = engine.assess_readiness(history, {"squat"})
    """

    def __init__(
        self,
        catalog: ExerciseCatalog | Iterable[ExerciseCatalogEntry] = (),
        user_maxes: Mapping[str, UserMaxRecord] | None = None,
        scorer: ReadinessScorer | None = None,
    ) -> None:
        self.catalog = catalog if isinstance(catalog, ExerciseCatalog) else ExerciseCatalog(catalog)
        self.user_maxes = dict(user_maxes or {})
        self.scorer = scorer or ReadinessScorer()

    def recommend(
        self,
        exercise_id: str,
        target_reps: int,
        target_rpe: float | None,
        session_sets: Sequence[SetRecord],
        history: Sequence[SessionRecord],
        percent_of_1rm: float | None = None,
        exercise_name: str | None = None,
        now: datetime | None = None,
    ) -> RecommendationResult | None:
        """Weight/rep suggestion for the next set, or None when nothing can be said."""
        try:
            return recommend(
                exercise_id,
                target_reps,
                target_rpe,
                session_sets,
                history,
                self.catalog,
                user_maxes=self.user_maxes,
                percent_of_1rm=percent_of_1rm,
                exercise_name=exercise_name,
                now=now,
            )
        except Exception:
            logger.exception("Recommendation for %s failed", exercise_id)
            return None

    def session_fatigue(
        self,
        session_sets: Sequence[SetRecord],
        next_exercise_id: str | None = None,
        next_exercise_name: str | None = None,
        now: datetime | None = None,
    ) -> SessionFatigueResult:
        """Session fatigue; a failure yields an inactive, no-reduction result."""
        try:
            return assess_session(
                session_sets, self.catalog, next_exercise_id, next_exercise_name, now=now
            )
        except Exception:
            logger.exception("Session fatigue assessment failed")
            moment = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
            return SessionFatigueResult(
                should_reduce_weight=False,
                state=MuscleFatigueState(evaluated_at=moment),
                reasoning="Session fatigue unavailable.",
            )

    def rpe_calibration(self, sets: Iterable[SetRecord]) -> tuple[RPECalibration, ...]:
        return analyze_rpe_calibration(sets)

    def assess_readiness(
        self,
        history: Sequence[SessionRecord],
        planned_exercise_ids: Iterable[str] = (),
        now: datetime | None = None,
    ) -> ReadinessResult:
        """Synchronous readiness; use ReadinessService for the time-bounded async path.

        A failure is logged and answered with the neutral fallback result.
        """
        try:
            return self.scorer.score(history, self.catalog, planned_exercise_ids, now)
        except Exception:
            logger.exception("Readiness assessment failed")
            return fallback_result(ensure_utc(now) if now is not None else datetime.now(timezone.utc))

    def causal_insights(
        self, history: Sequence[SessionRecord], seed: int | None = None
    ) -> CausalInsights | InsufficientData:
        """All causal estimators; an unexpected numerical failure becomes InsufficientData."""
        try:
            return run_causal_suite(history, seed=seed)
        except (ValueError, ArithmeticError, IndexError) as exc:
            logger.exception("Causal analysis failed")
            return InsufficientData(
                reason=f"Causal analysis unavailable: {exc}",
                required=0,
                available=len(history),
            )
