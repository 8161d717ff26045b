"""Session Fatigue Monitor: re-derives fatigue for the in-progress session."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Sequence

from load_intelligence.aggregation.history import most_recent_working_set
from load_intelligence.catalog import ExerciseCatalog
from load_intelligence.fatigue.model import evaluate_alert, fatigue_state
from load_intelligence.models.enums import (
    SESSION_FAILURE_POINTS,
    SESSION_FORM_BREAKDOWN_POINTS,
    SESSION_FULL_CONFIDENCE_SETS,
    SESSION_OVERSHOOT_POINTS_PER_RPE,
    SESSION_VOLUME_POINTS_CAP,
    SESSION_VOLUME_POINTS_PER_1000_LBS,
    UNINTENTIONAL_FAILURE_MAX_RPE,
    FatigueSeverity,
)
from load_intelligence.models.fatigue import FatigueAlert, SessionFatigueIndicators, SessionFatigueResult
from load_intelligence.models.records import SetRecord, ensure_utc

logger = logging.getLogger(__name__)

REDUCE_WEIGHT_SEVERITY = FatigueSeverity.MODERATE


def assess_session(
    session_sets: Sequence[SetRecord],
    catalog: ExerciseCatalog,
    next_exercise_id: str | None = None,
    next_exercise_name: str | None = None,
    now: datetime | None = None,
) -> SessionFatigueResult:
    """Recompute fatigue from the full list of the session's sets.

    Call after every logged set with the complete list; nothing is carried
    over between calls. With ``next_exercise_id`` only the muscles that
    exercise trains are considered, otherwise the whole session is.
    ``should_reduce_weight`` is True once severity reaches moderate.
    """
    completed = [s for s in session_sets if s.completed]
    if now is not None:
        moment = ensure_utc(now)
    else:
        moment = max((s.timestamp for s in completed), default=datetime.now(timezone.utc))
    state = fatigue_state(completed, catalog, moment)

    muscles = None
    reference_weight = None
    if next_exercise_id is not None:
        muscles = catalog.muscles_for(next_exercise_id, next_exercise_name)
        reference = most_recent_working_set(s for s in completed if s.exercise_id == next_exercise_id)
        if reference is not None:
            reference_weight = reference.actual.weight

    alert = evaluate_alert(state, muscles=muscles, reference_weight=reference_weight)
    should_reduce = alert is not None and alert.severity >= REDUCE_WEIGHT_SEVERITY
    if should_reduce:
        logger.info(
            "Session fatigue %s on %s; recommending a %.0f%% load reduction",
            alert.severity.label,
            ", ".join(sorted(alert.affected_muscles)),
            alert.suggested_reduction * 100,
        )

    indicators = session_indicators(completed)
    overall = session_fatigue_score(indicators)
    return SessionFatigueResult(
        should_reduce_weight=should_reduce,
        state=state,
        alert=alert,
        completed_sets=len(completed),
        indicators=indicators,
        overall_fatigue=overall,
        reduction_percent=alert.suggested_reduction * 100 if should_reduce else 0.0,
        confidence=min(1.0, len(completed) / SESSION_FULL_CONFIDENCE_SETS),
        reasoning=_reasoning(indicators, overall, alert),
    )


def is_unintentional_failure(s: SetRecord) -> bool:
    """Failure on a set whose target (or, lacking one, reported) effort left reps in reserve."""
    if not s.actual.reached_failure:
        return False
    target = s.prescribed.effective_rpe
    if target is None:
        target = s.rpe
    return target is None or target <= UNINTENTIONAL_FAILURE_MAX_RPE


def session_indicators(sets: Sequence[SetRecord]) -> SessionFatigueIndicators:
    completed = [s for s in sets if s.completed]
    overshoots = [s.rpe_overshoot for s in completed if s.rpe_overshoot is not None]
    return SessionFatigueIndicators(
        mean_rpe_overshoot=sum(overshoots) / len(overshoots) if overshoots else 0.0,
        form_breakdown_sets=sum(1 for s in completed if s.actual.form_breakdown),
        unintentional_failure_sets=sum(1 for s in completed if is_unintentional_failure(s)),
        volume_load_lbs=sum(s.volume_load_lbs or 0.0 for s in completed),
    )


def session_fatigue_score(indicators: SessionFatigueIndicators) -> float:
    """0-100 session fatigue; negative mean overshoot contributes nothing."""
    score = min(
        SESSION_VOLUME_POINTS_CAP,
        indicators.volume_load_lbs / 1000.0 * SESSION_VOLUME_POINTS_PER_1000_LBS,
    )
    score += max(0.0, indicators.mean_rpe_overshoot * SESSION_OVERSHOOT_POINTS_PER_RPE)
    score += indicators.form_breakdown_sets * SESSION_FORM_BREAKDOWN_POINTS
    score += indicators.unintentional_failure_sets * SESSION_FAILURE_POINTS
    return round(min(100.0, score), 2)


def _reasoning(indicators: SessionFatigueIndicators, overall: float, alert: FatigueAlert | None) -> str:
    reasons = []
    if indicators.form_breakdown_sets:
        reasons.append(f"{indicators.form_breakdown_sets} set(s) with form breakdown")
    if indicators.unintentional_failure_sets:
        reasons.append(f"{indicators.unintentional_failure_sets} unintended failure(s)")
    if indicators.mean_rpe_overshoot >= 1.0:
        reasons.append(f"average RPE {indicators.mean_rpe_overshoot:+.1f} over target")
    summary = f"Session fatigue {overall:.0f}/100"
    if reasons:
        summary += ": " + ", ".join(reasons)
    if alert is not None:
        summary += f". {alert.explanation}"
    return summary + ("" if summary.endswith(".") else ".")
