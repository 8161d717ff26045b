"""Muscle recovery curves.

Recovery follows 1 - exp(-k·t/T), where T is the hours a muscle group needs
to reach ~95% recovery and k = 2.996 (so exp(-k) = 0.05). Compound lifts
stretch T by 20%; isolation work shortens it by 20%.

References:
    - Schoenfeld et al. (2016): training frequency and hypertrophy.
    - Bishop et al. (2008): recovery from training, a brief review.
"""

from __future__ import annotations

import math

from load_intelligence.models.enums import (
    COMPOUND_RECOVERY_MULTIPLIER,
    DEFAULT_RECOVERY_HOURS,
    ISOLATION_RECOVERY_MULTIPLIER,
    MUSCLE_READY_SCORE,
    MUSCLE_RECOVERING_SCORE,
    RECOVERY_HOURS,
    RECOVERY_RATE_CONSTANT,
    ExerciseType,
    RecoveryStatus,
)


def recovery_hours(muscle: str, exercise_type: ExerciseType | None = None) -> float:
    """Hours to ~95% recovery for a muscle, adjusted for the exercise type."""
    base = RECOVERY_HOURS.get(muscle, DEFAULT_RECOVERY_HOURS)
    if exercise_type == ExerciseType.COMPOUND:
        return base * COMPOUND_RECOVERY_MULTIPLIER
    if exercise_type == ExerciseType.ISOLATION:
        return base * ISOLATION_RECOVERY_MULTIPLIER
    return base


def residual_fraction(hours_elapsed: float, full_recovery_hours: float) -> float:
    """Share of the training stress still present after ``hours_elapsed``."""
    if hours_elapsed <= 0:
        return 1.0
    if full_recovery_hours <= 0:
        return 0.0
    return math.exp(-RECOVERY_RATE_CONSTANT * hours_elapsed / full_recovery_hours)


def recovery_percent(hours_elapsed: float, full_recovery_hours: float) -> float:
    """Recovery completeness in percent (0-100)."""
    return 100.0 * (1.0 - residual_fraction(hours_elapsed, full_recovery_hours))


def hours_until_recovered(hours_elapsed: float, full_recovery_hours: float) -> float:
    """Hours remaining until the 95% recovery mark (0 when already there)."""
    return max(0.0, full_recovery_hours - max(0.0, hours_elapsed))


def classify_recovery(score: float) -> RecoveryStatus:
    """Classify a 0-10 muscle readiness score."""
    if score >= MUSCLE_READY_SCORE:
        return RecoveryStatus.READY
    if score >= MUSCLE_RECOVERING_SCORE:
        return RecoveryStatus.RECOVERING
    return RecoveryStatus.FATIGUED
