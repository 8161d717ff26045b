"""Tests for muscle recovery curves."""

from __future__ import annotations

import pytest

from load_intelligence.math.recovery import (
    classify_recovery,
    hours_until_recovered,
    recovery_hours,
    recovery_percent,
    residual_fraction,
)
from load_intelligence.models.enums import ExerciseType, RecoveryStatus


class TestRecoveryCurve:
    def test_reaches_95_percent_at_curve_hours(self) -> None:
        assert recovery_percent(48.0, 48.0) == pytest.approx(95.0, abs=0.01)

    def test_just_trained_is_zero(self) -> None:
        assert recovery_percent(0.0, 48.0) == 0.0
        assert residual_fraction(0.0, 48.0) == 1.0

    def test_monotone_in_time(self) -> None:
        values = [recovery_percent(h, 72.0) for h in range(0, 100, 6)]
        assert values == sorted(values)

    def test_hours_until_recovered(self) -> None:
        assert hours_until_recovered(10.0, 48.0) == 38.0
        assert hours_until_recovered(60.0, 48.0) == 0.0


class TestRecoveryHours:
    def test_compound_slower_than_isolation(self) -> None:
        compound = recovery_hours("biceps", ExerciseType.COMPOUND)
        isolation = recovery_hours("biceps", ExerciseType.ISOLATION)
        assert compound > recovery_hours("biceps") > isolation

    def test_legs_slower_than_arms(self) -> None:
        assert recovery_hours("quads") > recovery_hours("biceps")

    def test_unknown_muscle_uses_default(self) -> None:
        assert recovery_hours("neck") == 48.0


class TestClassifyRecovery:
    @pytest.mark.parametrize(
        ("score", "status"),
        [(9.5, RecoveryStatus.READY), (8.0, RecoveryStatus.READY), (7.0, RecoveryStatus.RECOVERING),
         (6.0, RecoveryStatus.RECOVERING), (5.9, RecoveryStatus.FATIGUED)],
    )
    def test_bands(self, score: float, status: RecoveryStatus) -> None:
        assert classify_recovery(score) == status
