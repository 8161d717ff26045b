"""Builds the ReadinessContext: workload ratio, muscle recovery and performance trend."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Sequence

import numpy as np

from load_intelligence.aggregation.history import last_trained, performance_proxy, session_loads
from load_intelligence.catalog import ExerciseCatalog
from load_intelligence.math.recovery import (
    classify_recovery,
    hours_until_recovered,
    recovery_hours,
    recovery_percent,
)
from load_intelligence.math.regression import relative_slope
from load_intelligence.math.training_load import (
    calculate_ewma_acwr,
    calculate_monotony,
    calculate_rolling_acwr,
    calculate_strain,
    classify_acwr,
    daily_load_series,
    window_sum,
)
from load_intelligence.models.enums import (
    ACWR_ACUTE_DAYS,
    ACWR_CHRONIC_DAYS,
    TREND_MIN_SESSIONS,
    TREND_WINDOW_SESSIONS,
    RecoveryStatus,
)
from load_intelligence.models.readiness import ACWRAssessment, MuscleRecovery, ReadinessContext
from load_intelligence.models.records import SessionRecord, ensure_utc

logger = logging.getLogger(__name__)


def assess_acwr(history: Sequence[SessionRecord], now: datetime) -> ACWRAssessment:
    """Rolling ACWR with the EWMA variant, monotony and strain alongside."""
    loads = [(moment, load) for moment, load in session_loads(history) if moment <= now]
    value = calculate_rolling_acwr(loads, now)
    daily = daily_load_series(loads, now)
    return ACWRAssessment(
        value=value,
        status=classify_acwr(value),
        acute_load=window_sum(loads, now, ACWR_ACUTE_DAYS),
        chronic_weekly_load=window_sum(loads, now, ACWR_CHRONIC_DAYS) / (ACWR_CHRONIC_DAYS / ACWR_ACUTE_DAYS),
        ewma_value=calculate_ewma_acwr(daily),
        monotony=calculate_monotony(daily),
        strain=calculate_strain(daily),
    )


def assess_muscle_recovery(
    history: Sequence[SessionRecord],
    catalog: ExerciseCatalog,
    now: datetime,
    muscles: Iterable[str] | None = None,
) -> tuple[MuscleRecovery, ...]:
    """Recovery for the given muscles, or for every muscle trained in the history.

    A requested muscle with no training on record is fully recovered.
    """
    trained = last_trained(history, catalog)
    wanted = sorted(set(muscles)) if muscles is not None else sorted(trained)
    results = []
    for muscle in wanted:
        entry = trained.get(muscle)
        if entry is None or entry[0] > now:
            results.append(
                MuscleRecovery(
                    muscle=muscle,
                    recovery_percent=100.0,
                    readiness=10.0,
                    status=RecoveryStatus.READY,
                )
            )
            continue
        moment, exercise_type = entry
        hours = (now - moment).total_seconds() / 3600.0
        needed = recovery_hours(muscle, exercise_type)
        percent = recovery_percent(hours, needed)
        readiness = percent / 10.0
        results.append(
            MuscleRecovery(
                muscle=muscle,
                recovery_percent=percent,
                readiness=readiness,
                status=classify_recovery(readiness),
                hours_since_trained=hours,
                hours_until_ready=hours_until_recovered(hours, needed),
                last_trained_at=moment,
            )
        )
    return tuple(results)


def performance_trend(history: Sequence[SessionRecord], now: datetime) -> float | None:
    """Relative per-session slope of the performance proxy over recent sessions."""
    recent = [
        value
        for value in (
            performance_proxy(s)
            for s in sorted(history, key=lambda s: s.started_at)
            if s.completed and s.started_at <= now
        )
        if value is not None
    ][-TREND_WINDOW_SESSIONS:]
    if len(recent) < TREND_MIN_SESSIONS:
        return None
    return relative_slope(np.asarray(recent, dtype=np.float64))


def build_context(
    history: Sequence[SessionRecord],
    catalog: ExerciseCatalog,
    now: datetime,
    planned_exercise_ids: Iterable[str] = (),
) -> ReadinessContext:
    now = ensure_utc(now)
    planned_muscles: frozenset[str] = frozenset()
    for exercise_id in planned_exercise_ids:
        planned_muscles |= catalog.muscles_for(exercise_id)

    acwr = assess_acwr(history, now)
    recovery = assess_muscle_recovery(
        history, catalog, now, muscles=planned_muscles if planned_muscles else None
    )
    n_sessions = sum(1 for s in history if s.completed and s.started_at <= now)
    logger.debug(
        "Readiness context: %d sessions, ACWR=%s, %d muscles",
        n_sessions,
        acwr.value,
        len(recovery),
    )
    return ReadinessContext(
        evaluated_at=now,
        n_sessions=n_sessions,
        acwr=acwr,
        muscle_recovery=recovery,
        performance_trend=performance_trend(history, now),
        planned_muscles=planned_muscles,
    )
