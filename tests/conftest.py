"""Shared test fixtures: catalog, set/session factories, training histories."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from load_intelligence.catalog import ExerciseCatalog
from load_intelligence.models.enums import ExerciseType, WeightUnit
from load_intelligence.models.records import (
    ActualPerformance,
    ExerciseCatalogEntry,
    PrescribedTarget,
    SessionRecord,
    SetRecord,
)

NOW = datetime(2026, 3, 2, 18, 0, tzinfo=timezone.utc)  # a Monday evening

SetFactory = Callable[..., SetRecord]
SessionFactory = Callable[..., SessionRecord]


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def catalog_entries() -> tuple[ExerciseCatalogEntry, ...]:
    return (
        ExerciseCatalogEntry(
            "bench-press", "Barbell Bench Press", ExerciseType.COMPOUND,
            frozenset({"chest", "triceps", "shoulders"}), 180,
        ),
        ExerciseCatalogEntry(
            "incline-press", "Incline Dumbbell Press", ExerciseType.COMPOUND,
            frozenset({"Chest", "Front Delts", "triceps"}), 150,
        ),
        ExerciseCatalogEntry(
            "squat", "Back Squat", ExerciseType.COMPOUND,
            frozenset({"quadriceps", "glutes", "hamstrings"}), 180,
        ),
        ExerciseCatalogEntry(
            "barbell-row", "Barbell Row", ExerciseType.COMPOUND,
            frozenset({"lats", "biceps"}), 150,
        ),
        ExerciseCatalogEntry(
            "bicep-curl", "Bicep Curl", ExerciseType.ISOLATION, frozenset({"biceps"}), 90,
        ),
        ExerciseCatalogEntry(
            "calf-raise", "Standing Calf Raise", ExerciseType.ISOLATION, frozenset({"calves"}), 60,
        ),
    )


@pytest.fixture
def catalog(catalog_entries: tuple[ExerciseCatalogEntry, ...]) -> ExerciseCatalog:
    return ExerciseCatalog(catalog_entries)


@pytest.fixture
def make_set() -> SetFactory:
    """Build a SetRecord with keyword overrides."""

    def _make(
        exercise_id: str = "bench-press",
        weight: float | None = 225.0,
        reps: int | None = 5,
        rpe: float | None = 8.0,
        prescribed_rpe: float | None = 8.0,
        prescribed_reps: int | None = 5,
        timestamp: datetime = NOW,
        set_index: int = 0,
        completed: bool = True,
        unit: WeightUnit = WeightUnit.LBS,
        exercise_name: str | None = None,
        percent_of_1rm: float | None = None,
        reached_failure: bool = False,
        form_breakdown: bool = False,
    ) -> SetRecord:
        return SetRecord(
            exercise_id=exercise_id,
            set_index=set_index,
            timestamp=timestamp,
            prescribed=PrescribedTarget(
                reps=prescribed_reps, rpe=prescribed_rpe, percent_of_1rm=percent_of_1rm
            ),
            actual=ActualPerformance(
                weight=weight,
                reps=reps,
                rpe=rpe,
                reached_failure=reached_failure,
                form_breakdown=form_breakdown,
            ),
            completed=completed,
            unit=unit,
            exercise_name=exercise_name,
        )

    return _make


@pytest.fixture
def make_session(make_set: SetFactory) -> SessionFactory:
    """Build a session of straight sets: [(exercise_id, weight, reps, rpe), ...]."""

    def _make(
        started_at: datetime,
        sets: list[tuple[str, float, int, float]],
        prescribed_rpe: float | None = 8.0,
        session_id: str | None = None,
    ) -> SessionRecord:
        records = tuple(
            make_set(
                exercise_id=exercise_id,
                weight=weight,
                reps=reps,
                rpe=rpe,
                prescribed_rpe=prescribed_rpe,
                prescribed_reps=reps,
                timestamp=started_at + timedelta(minutes=4 * i),
                set_index=i,
            )
            for i, (exercise_id, weight, reps, rpe) in enumerate(sets)
        )
        return SessionRecord(
            session_id=session_id or started_at.isoformat(),
            started_at=started_at,
            sets=records,
            ended_at=started_at + timedelta(minutes=4 * len(sets)),
        )

    return _make


@pytest.fixture
def steady_history(make_session: SessionFactory) -> tuple[SessionRecord, ...]:
    """12 sessions, every 3 days; every set's RPE matches the prescribed 8.

    Best bench set is 225x5 (e1RM 262.5).
    """
    sessions = []
    for k in range(12):
        started = NOW - timedelta(days=3 * (12 - k), hours=1)
        sessions.append(
            make_session(
                started,
                [
                    ("bench-press", 205.0, 5, 8.0),
                    ("bench-press", 215.0, 5, 8.0),
                    ("bench-press", 225.0 if k >= 6 else 215.0, 5, 8.0),
                    ("squat", 275.0, 5, 8.0),
                    ("squat", 275.0, 5, 8.0),
                ],
            )
        )
    return tuple(sessions)


@pytest.fixture
def short_history(make_session: SessionFactory) -> tuple[SessionRecord, ...]:
    """Four sessions over the last two weeks: too few for causal analysis."""
    return tuple(
        make_session(
            NOW - timedelta(days=3 * (4 - k), hours=2),
            [("bench-press", 185.0, 8, 7.5), ("bench-press", 185.0, 8, 8.0), ("squat", 225.0, 8, 8.0)],
        )
        for k in range(4)
    )


@pytest.fixture
def safe_daily_loads() -> tuple[float, ...]:
    """28 days of stable load: ACWR ~1.0."""
    return tuple([50.0] * 28)


@pytest.fixture
def spiked_daily_loads() -> tuple[float, ...]:
    """21 days at 30 then 7 days at 90: an acute spike."""
    return tuple([30.0] * 21 + [90.0] * 7)
