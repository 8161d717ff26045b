"""Weight/Rep Recommender.

Evidence paths, in priority order:
    1. rpe_adjustment  - accumulated RPE overshoot on a muscle this exercise
                         trains; reduce the most recent working weight
    2. percentage_1rm  - a prescribed %1RM and a recorded max
    3. historical      - best historical set at (or estimated for) the rep target
    4. nothing         - None; the caller seeds its own default

Weights are snapped to 0.5 of the tracked unit and reps to whole numbers.
A fatigue-reduced weight never exceeds what the non-fatigue path would have
suggested, so more overshoot can only lower the suggestion.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Mapping, Sequence

from load_intelligence.aggregation.history import (
    all_completed_sets,
    best_set,
    completed_sets_for,
    most_recent_working_set,
)
from load_intelligence.catalog import ExerciseCatalog
from load_intelligence.fatigue.model import evaluate_alert, fatigue_state
from load_intelligence.math.strength import (
    convert_weight,
    snap_reps,
    snap_weight,
    weight_for_reps,
)
from load_intelligence.models.enums import (
    CROSS_EXERCISE_REFERENCE_FRACTION,
    DEFAULT_TARGET_REPS,
    RPE_PROGRESSION_STEP_PCT,
    RPE_PROGRESSION_TOLERANCE,
    Confidence,
    WeightUnit,
)
from load_intelligence.models.fatigue import FatigueAlert
from load_intelligence.models.recommendation import (
    HistoricalRecommendation,
    PercentageRecommendation,
    RecommendationResult,
    RpeAdjustedRecommendation,
)
from load_intelligence.models.records import (
    SessionRecord,
    SetRecord,
    UserMaxRecord,
    ensure_utc,
    sanitize_number,
)

logger = logging.getLogger(__name__)


def recommend(
    exercise_id: str,
    target_reps: int,
    target_rpe: float | None,
    session_sets: Sequence[SetRecord],
    history: Sequence[SessionRecord],
    catalog: ExerciseCatalog,
    user_maxes: Mapping[str, UserMaxRecord] | None = None,
    percent_of_1rm: float | None = None,
    exercise_name: str | None = None,
    now: datetime | None = None,
) -> RecommendationResult | None:
    """Suggest the weight for the next set of ``exercise_id``.

    Args:
        exercise_id: Exercise the next set belongs to.
        target_reps: Prescribed reps for the next set.
        target_rpe: Prescribed RPE, or None.
        session_sets: Sets logged so far in the current session.
        history: Previous sessions (read-only snapshot).
        catalog: Exercise catalog used to resolve muscle groups.
        user_maxes: Recorded maxes keyed by exercise id.
        percent_of_1rm: Prescribed percentage of max, or None.
        exercise_name: Display name, used when the id is not in the catalog.
        now: Evaluation time; defaults to the latest logged set or the clock.

    Returns:
        One recommendation variant, or None when no evidence exists.
        A rep target or percentage that is not a finite number is treated as
        absent before anything is computed.
    """
    clean_reps = sanitize_number(target_reps, minimum=0.0)
    if clean_reps is None:
        logger.warning("Unusable rep target %r for %s; using %d", target_reps, exercise_id, DEFAULT_TARGET_REPS)
        clean_reps = DEFAULT_TARGET_REPS
    reps = snap_reps(clean_reps)
    target_rpe = sanitize_number(target_rpe, minimum=0.0, maximum=10.0)
    percent_of_1rm = sanitize_number(percent_of_1rm, minimum=0.0)
    history_sets = all_completed_sets(history)
    current = tuple(s for s in session_sets if s.completed)
    if now is not None:
        moment = ensure_utc(now)
    else:
        moment = max((s.timestamp for s in current + history_sets), default=datetime.now(timezone.utc))

    baseline = _percentage_path(exercise_id, reps, percent_of_1rm, user_maxes)
    if baseline is None:
        baseline = _historical_path(exercise_id, reps, target_rpe, history)

    muscles = catalog.muscles_for(exercise_id, exercise_name)
    if muscles:
        state = fatigue_state(history_sets + current, catalog, moment)
        reference = _reference_weight(exercise_id, current, history_sets)
        alert = evaluate_alert(
            state,
            muscles=muscles,
            reference_weight=reference[0] if reference is not None else None,
            target_reps=reps,
        )
        if alert is not None and reference is not None:
            adjusted = _rpe_adjusted(exercise_id, reps, alert, reference, baseline, state.rated_sets)
            logger.info(
                "Fatigue %s for %s: %.1f -> %.1f %s",
                alert.severity.label,
                exercise_id,
                reference[0],
                adjusted.suggested_weight,
                adjusted.unit.value,
            )
            return adjusted
        if alert is not None:
            logger.debug("Fatigue alert for %s but no reference weight available", exercise_id)

    if baseline is None:
        logger.debug("No evidence to recommend a weight for %s", exercise_id)
    return baseline


def _reference_weight(
    exercise_id: str,
    current: Sequence[SetRecord],
    history_sets: Sequence[SetRecord],
) -> tuple[float, WeightUnit, str] | None:
    """(weight, unit, provenance) of the most recent working weight to reduce from."""
    same_session = most_recent_working_set(s for s in current if s.exercise_id == exercise_id)
    if same_session is not None:
        return same_session.actual.weight, same_session.unit, "this session"
    same_history = most_recent_working_set(s for s in history_sets if s.exercise_id == exercise_id)
    if same_history is not None:
        return same_history.actual.weight, same_history.unit, "your last session"
    any_recent = most_recent_working_set(tuple(current) + tuple(history_sets))
    if any_recent is not None:
        return (
            any_recent.actual.weight * CROSS_EXERCISE_REFERENCE_FRACTION,
            any_recent.unit,
            f"{CROSS_EXERCISE_REFERENCE_FRACTION:.0%} of your most recent lift",
        )
    return None


def _rpe_adjusted(
    exercise_id: str,
    reps: int,
    alert: FatigueAlert,
    reference: tuple[float, WeightUnit, str],
    baseline: RecommendationResult | None,
    rated_sets: int,
) -> RpeAdjustedRecommendation:
    weight, unit, provenance = reference
    reduced = weight * (1.0 - alert.suggested_reduction)
    if baseline is not None:
        reduced = min(reduced, convert_weight(baseline.suggested_weight, baseline.unit, unit))

    if alert.confidence >= 0.85:
        confidence = Confidence.HIGH
    elif alert.confidence >= 0.70:
        confidence = Confidence.MEDIUM
    else:
        confidence = Confidence.LOW
    if rated_sets <= 1:
        confidence = Confidence.LOW
    elif rated_sets < 3:
        confidence = min(confidence, Confidence.MEDIUM)

    return RpeAdjustedRecommendation(
        exercise_id=exercise_id,
        suggested_weight=snap_weight(reduced),
        suggested_reps=reps,
        unit=unit,
        reasoning=(
            f"{alert.severity.label.capitalize()} fatigue detected. Reduced "
            f"{weight:g} {unit.value} from {provenance} by "
            f"{alert.suggested_reduction * 100:.0f}%. {alert.explanation}"
        ),
        confidence=confidence,
        fatigue_alert=alert,
        reference_weight=weight,
    )


def _percentage_path(
    exercise_id: str,
    reps: int,
    percent_of_1rm: float | None,
    user_maxes: Mapping[str, UserMaxRecord] | None,
) -> PercentageRecommendation | None:
    if percent_of_1rm is None or percent_of_1rm <= 0 or not user_maxes:
        return None
    record = user_maxes.get(exercise_id)
    if record is None or record.weight <= 0:
        return None
    weight = record.weight * percent_of_1rm / 100.0
    return PercentageRecommendation(
        exercise_id=exercise_id,
        suggested_weight=snap_weight(weight),
        suggested_reps=reps,
        unit=record.unit,
        reasoning=(
            f"{percent_of_1rm:g}% of your {'tested' if record.tested else 'estimated'} "
            f"max of {record.weight:g} {record.unit.value}."
        ),
        confidence=Confidence.HIGH if record.tested else Confidence.MEDIUM,
        percent_of_1rm=percent_of_1rm,
        max_weight=record.weight,
    )


def _historical_path(
    exercise_id: str,
    reps: int,
    target_rpe: float | None,
    history: Sequence[SessionRecord],
) -> HistoricalRecommendation | None:
    sets = completed_sets_for(history, exercise_id)
    exact = best_set(sets, target_reps=reps)
    best = exact or best_set(sets)
    if best is None:
        return None

    if exact is not None:
        weight = exact.actual.weight
        basis = f"Best set at {reps} reps: {exact.actual.weight:g}x{exact.actual.reps}"
    else:
        weight = weight_for_reps(best.e1rm_exact, reps)
        basis = (
            f"Estimated from best set {best.actual.weight:g}x{best.actual.reps} "
            f"(e1RM {best.e1rm_exact:.1f})"
        )

    adjustment = ""
    if target_rpe is not None and best.rpe is not None:
        if best.rpe < target_rpe - RPE_PROGRESSION_TOLERANCE:
            weight *= 1.0 + RPE_PROGRESSION_STEP_PCT
            adjustment = f" Last effort RPE {best.rpe:g} was easy; +{RPE_PROGRESSION_STEP_PCT:.1%}."
        elif best.rpe > target_rpe + RPE_PROGRESSION_TOLERANCE:
            weight *= 1.0 - RPE_PROGRESSION_STEP_PCT
            adjustment = f" Last effort RPE {best.rpe:g} was hard; -{RPE_PROGRESSION_STEP_PCT:.1%}."

    working = [s for s in sets if s.is_working_set]
    if exact is not None and len(working) >= 3:
        confidence = Confidence.HIGH
    elif len(working) >= 2:
        confidence = Confidence.MEDIUM
    else:
        confidence = Confidence.LOW

    return HistoricalRecommendation(
        exercise_id=exercise_id,
        suggested_weight=snap_weight(weight),
        suggested_reps=reps,
        unit=best.unit,
        reasoning=f"{basis} {best.unit.value}.{adjustment}",
        confidence=confidence,
        reference_e1rm=best.e1rm_exact,
    )
