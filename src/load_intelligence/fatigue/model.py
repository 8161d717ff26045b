"""Fatigue Model: decaying per-muscle stress from logged sets.

Every call rebuilds the state from the sets it is given; there is no
long-lived accumulator.

Per completed set, for each muscle the set's exercise trains (source) and
each muscle that receives carryover (target, interference >= 0.1):

    contribution = rpe_intensity × reps_factor × load_factor × interference × 12
                   × failure(1.4) × form_breakdown(1.5) × decay
                 + max(0, overshoot) × 3 × interference × decay

    rpe_intensity = max(0.3, (RPE - 5) / 5)
    reps_factor   = min(reps / 8, 1.5)
    load_factor   = clamp(weight_lbs / 150, 0.5, 1.5)
    decay         = exp(-2.996 × hours_elapsed / recovery_hours(target))

References:
    - Zourdos et al. (2016): RIR-based RPE scale for resistance training.
    - Helms et al. (2018): RPE vs percentage-based load autoregulation.
    - Richens & Cleather (2014): fatigue across successive sets.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from typing import Iterable

from load_intelligence import config
from load_intelligence.catalog import ExerciseCatalog, interference
from load_intelligence.math.recovery import recovery_hours, residual_fraction
from load_intelligence.math.strength import snap_reps, snap_weight
from load_intelligence.models.enums import (
    AFFECTED_MUSCLE_LIMIT,
    AFFECTED_MUSCLE_MIN_LEVEL,
    CALIBRATION_DEVIATION,
    CALIBRATION_DECREASE_PER_RPE,
    CALIBRATION_INCREASE_PER_RPE,
    CALIBRATION_MAX_DECREASE,
    CALIBRATION_MAX_INCREASE,
    CALIBRATION_MIN_SETS,
    EXTRA_REST_SECONDS,
    FATIGUE_DEFAULT_REPS,
    FATIGUE_DEFAULT_RPE,
    FATIGUE_FAILURE_MULTIPLIER,
    FATIGUE_FORM_BREAKDOWN_MULTIPLIER,
    FATIGUE_LEVEL_CAP,
    FATIGUE_MIN_INTERFERENCE,
    FATIGUE_OVERSHOOT_WEIGHT,
    FATIGUE_REFERENCE_LOAD_LBS,
    FATIGUE_REFERENCE_REPS,
    FATIGUE_SET_SCALE,
    MAX_REDUCTION,
    OVERSHOOT_SET_THRESHOLD,
    RECOVERY_HOURS,
    REDUCTION_PER_RPE_OVERSHOOT,
    SEVERITY_BASIS,
    SEVERITY_CONFIDENCE,
    SEVERITY_REDUCTION,
    AdjustmentOption,
    Confidence,
    FatigueSeverity,
)
from load_intelligence.models.fatigue import (
    AdjustmentSuggestion,
    FatigueAlert,
    MuscleFatigue,
    MuscleFatigueState,
    RPECalibration,
)
from load_intelligence.models.records import SetRecord, ensure_utc

logger = logging.getLogger(__name__)

_TRACKED_MUSCLES = frozenset(RECOVERY_HOURS)


def set_stress(s: SetRecord) -> float:
    """Undecayed, unweighted stress of one set before interference."""
    rpe = s.rpe if s.rpe is not None else s.prescribed.effective_rpe
    if rpe is None:
        rpe = FATIGUE_DEFAULT_RPE
    reps = s.actual.reps if s.actual.reps is not None else FATIGUE_DEFAULT_REPS
    weight = s.weight_lbs

    rpe_intensity = max(0.3, (rpe - 5.0) / 5.0)
    reps_factor = min(reps / FATIGUE_REFERENCE_REPS, 1.5)
    if weight is None or weight <= 0:
        load_factor = 1.0
    else:
        load_factor = max(0.5, min(1.5, weight / FATIGUE_REFERENCE_LOAD_LBS))

    stress = rpe_intensity * reps_factor * load_factor * FATIGUE_SET_SCALE
    if s.actual.reached_failure:
        stress *= FATIGUE_FAILURE_MULTIPLIER
    if s.actual.form_breakdown:
        stress *= FATIGUE_FORM_BREAKDOWN_MULTIPLIER
    return stress


def fatigue_state(
    sets: Iterable[SetRecord],
    catalog: ExerciseCatalog,
    now: datetime,
    window_hours: float | None = None,
) -> MuscleFatigueState:
    """Rebuild per-muscle fatigue from completed sets inside the decay window.

    Sets without a prescribed RPE add stress but never count as overshoot.
    """
    now = ensure_utc(now)
    window = config.FATIGUE_WINDOW_HOURS if window_hours is None else window_hours

    levels: dict[str, float] = defaultdict(float)
    overshoot_weight: dict[str, float] = defaultdict(float)
    overshoot_total: dict[str, float] = defaultdict(float)
    overshoot_sets: dict[str, int] = defaultdict(int)
    contributing: dict[str, int] = defaultdict(int)
    rated_sets = 0

    for s in sets:
        if not s.completed:
            continue
        hours = (now - s.timestamp).total_seconds() / 3600.0
        if hours > window:
            continue
        sources = catalog.muscles_for(s.exercise_id, s.exercise_name)
        if s.rpe is not None:
            rated_sets += 1
        if not sources:
            continue

        stress = set_stress(s)
        overshoot = s.rpe_overshoot
        for target in _TRACKED_MUSCLES | sources:
            weight = max(interference(source, target) for source in sources)
            if weight < FATIGUE_MIN_INTERFERENCE:
                continue
            decay = residual_fraction(hours, recovery_hours(target))
            levels[target] += stress * weight * decay
            contributing[target] += 1
            if overshoot is None:
                continue
            if overshoot > 0:
                levels[target] += overshoot * FATIGUE_OVERSHOOT_WEIGHT * weight * decay
            overshoot_weight[target] += weight * decay
            overshoot_total[target] += overshoot * weight * decay
            if overshoot >= OVERSHOOT_SET_THRESHOLD:
                overshoot_sets[target] += 1

    muscles = []
    for muscle in sorted(levels, key=lambda m: (-levels[m], m)):
        mean = overshoot_total[muscle] / overshoot_weight[muscle] if overshoot_weight[muscle] > 0 else 0.0
        muscles.append(
            MuscleFatigue(
                muscle=muscle,
                level=min(FATIGUE_LEVEL_CAP, levels[muscle]),
                overshoot_sets=overshoot_sets[muscle],
                mean_overshoot=mean,
                contributing_sets=contributing[muscle],
            )
        )

    logger.debug("Fatigue state at %s: %d rated sets, %d muscles", now, rated_sets, len(muscles))
    return MuscleFatigueState(
        evaluated_at=now,
        muscles=tuple(muscles),
        active=rated_sets > 0,
        rated_sets=rated_sets,
    )


def classify_severity(fatigue: MuscleFatigue) -> FatigueSeverity | None:
    """Severity for one muscle, or None when there is no overshoot to act on.

    Every branch is monotone in level, overshoot-set count and mean overshoot,
    so more overshoot can never lower the severity.
    """
    level = round(fatigue.level, 6)
    count = fatigue.overshoot_sets
    mean = round(fatigue.mean_overshoot, 6)
    if count == 0 or mean <= 0:
        return None
    if mean >= 2.0 and (level >= 40.0 or count >= 3):
        return FatigueSeverity.CRITICAL
    if (level >= 25.0 and count >= 3 and mean >= 1.0) or (mean >= 2.0 and count >= 2):
        return FatigueSeverity.HIGH
    if (level >= 20.0 and mean >= 1.5) or (mean >= 1.5 and count >= 2):
        return FatigueSeverity.MODERATE
    if (level >= 15.0 and count >= 2) or mean >= 1.0:
        return FatigueSeverity.MILD
    return None


def suggested_reduction(severity: FatigueSeverity, mean_overshoot: float) -> float:
    """Fractional load cut: the severity floor, raised by 5% per RPE of overshoot, max 25%."""
    scaled = min(MAX_REDUCTION, REDUCTION_PER_RPE_OVERSHOOT * max(0.0, mean_overshoot))
    return max(SEVERITY_REDUCTION[severity], scaled)


def evaluate_alert(
    state: MuscleFatigueState,
    muscles: Iterable[str] | None = None,
    reference_weight: float | None = None,
    target_reps: int | None = None,
) -> FatigueAlert | None:
    """Turn a fatigue state into an alert for the given muscles (all when None)."""
    if not state.active:
        return None
    scope = None if muscles is None else frozenset(muscles)
    candidates = [m for m in state.muscles if scope is None or m.muscle in scope]

    graded = [(classify_severity(m), m) for m in candidates]
    graded = [(sev, m) for sev, m in graded if sev is not None]
    if not graded:
        return None

    severity = max(sev for sev, _ in graded)
    driver = max((m for sev, m in graded if sev == severity), key=lambda m: (m.mean_overshoot, m.level))
    reduction = suggested_reduction(severity, driver.mean_overshoot)

    affected = [
        m for m in sorted(candidates, key=lambda m: (-m.level, m.muscle))
        if m.level >= AFFECTED_MUSCLE_MIN_LEVEL
    ][:AFFECTED_MUSCLE_LIMIT]
    affected_names = frozenset(m.muscle for m in affected) or frozenset({driver.muscle})

    explanation = (
        f"{', '.join(sorted(affected_names)).title()} fatigue at {driver.level:.0f}/100 after "
        f"{driver.overshoot_sets} set(s) averaging {driver.mean_overshoot:+.1f} RPE over target. "
        f"Reduce load by {reduction * 100:.0f}%."
    )
    return FatigueAlert(
        severity=severity,
        affected_muscles=affected_names,
        explanation=explanation,
        scientific_basis=SEVERITY_BASIS[severity],
        suggested_reduction=reduction,
        confidence=SEVERITY_CONFIDENCE[severity],
        options=_adjustment_options(severity, reduction, reference_weight, target_reps),
    )


def _adjustment_options(
    severity: FatigueSeverity,
    reduction: float,
    reference_weight: float | None,
    target_reps: int | None,
) -> tuple[AdjustmentSuggestion, ...]:
    options = [
        AdjustmentSuggestion(
            option=AdjustmentOption.REDUCE_WEIGHT,
            description=f"Reduce weight by {reduction * 100:.0f}% and keep the prescribed reps.",
            confidence=Confidence.HIGH,
            new_weight=(
                snap_weight(reference_weight * (1.0 - reduction))
                if reference_weight is not None
                else None
            ),
        )
    ]
    if severity <= FatigueSeverity.MODERATE:
        options.append(
            AdjustmentSuggestion(
                option=AdjustmentOption.REDUCE_REPS,
                description="Keep the weight and stop two reps earlier.",
                confidence=Confidence.MEDIUM,
                new_reps=snap_reps(target_reps - 2) if target_reps is not None else None,
            )
        )
    if severity >= FatigueSeverity.HIGH:
        options.append(
            AdjustmentSuggestion(
                option=AdjustmentOption.INCREASE_REST,
                description=f"Rest an extra {EXTRA_REST_SECONDS} seconds before the next set.",
                confidence=Confidence.MEDIUM,
                extra_rest_s=EXTRA_REST_SECONDS,
            )
        )
    if severity == FatigueSeverity.CRITICAL:
        options.append(
            AdjustmentSuggestion(
                option=AdjustmentOption.SKIP_EXERCISE,
                description="Skip or swap this exercise; the muscles involved need recovery.",
                confidence=Confidence.LOW,
            )
        )
    return tuple(options)


def analyze_rpe_calibration(sets: Iterable[SetRecord]) -> tuple[RPECalibration, ...]:
    """Per-exercise check for consistent over- or under-shooting of prescribed RPE."""
    deviations: dict[str, list[float]] = defaultdict(list)
    for s in sets:
        if s.completed and s.rpe_overshoot is not None:
            deviations[s.exercise_id].append(s.rpe_overshoot)

    results = []
    for exercise_id, values in sorted(deviations.items()):
        mean = sum(values) / len(values)
        over = sum(1 for v in values if v >= CALIBRATION_DEVIATION)
        under = sum(1 for v in values if v <= -CALIBRATION_DEVIATION)
        if over >= CALIBRATION_MIN_SETS and mean > 0:
            change = -min(CALIBRATION_MAX_DECREASE, abs(mean) * CALIBRATION_DECREASE_PER_RPE)
            explanation = (
                f"Reported effort ran {mean:+.1f} RPE above prescription on {over} set(s); "
                f"the working weight is likely too heavy."
            )
            flagged = over
        elif under >= CALIBRATION_MIN_SETS and mean < 0:
            change = min(CALIBRATION_MAX_INCREASE, abs(mean) * CALIBRATION_INCREASE_PER_RPE)
            explanation = (
                f"Reported effort ran {mean:+.1f} RPE below prescription on {under} set(s); "
                f"there is room to add load."
            )
            flagged = under
        else:
            continue
        results.append(
            RPECalibration(
                exercise_id=exercise_id,
                mean_deviation=mean,
                sets_analyzed=len(values),
                miscalibrated_sets=flagged,
                suggested_load_change=change,
                explanation=explanation,
            )
        )
    return tuple(results)
