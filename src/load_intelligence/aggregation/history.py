"""Set History Aggregator.

Normalizes session history into:
    - completed sets of an exercise, ordered by time
    - a best-set selector (by e1rm, tie-broken by most recent)
    - per-session series (fatigue, performance, volume, intensity, RPE)
      for the causal estimators

Performance proxy = (10 - average RPE) × 10 × (total volume / 1000)
Fatigue proxy     = clamp(0, 100, (late-third RPE - early-third RPE) × 15 + 30)

Nothing here mutates its inputs.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from load_intelligence import config
from load_intelligence.catalog import ExerciseCatalog
from load_intelligence.models.causal import InsufficientData
from load_intelligence.models.enums import ExerciseType
from load_intelligence.models.records import SessionRecord, SetRecord

logger = logging.getLogger(__name__)

FATIGUE_PROXY_SCALE = 15.0
FATIGUE_PROXY_BASELINE = 30.0


def completed_sets_for(
    history: Iterable[SessionRecord], exercise_id: str
) -> tuple[SetRecord, ...]:
    """All completed sets of one exercise across the history, oldest first."""
    sets = [
        s
        for session in history
        for s in session.sets
        if s.completed and s.exercise_id == exercise_id
    ]
    return tuple(sorted(sets, key=lambda s: (s.timestamp, s.set_index)))


def all_completed_sets(history: Iterable[SessionRecord]) -> tuple[SetRecord, ...]:
    sets = [s for session in history for s in session.sets if s.completed]
    return tuple(sorted(sets, key=lambda s: (s.timestamp, s.set_index)))


def best_set(sets: Iterable[SetRecord], target_reps: int | None = None) -> SetRecord | None:
    """Highest-e1rm working set; the most recent wins a tie.

    With ``target_reps``, only sets performed at exactly that rep count
    are considered.
    """
    candidates = [
        s
        for s in sets
        if s.is_working_set and (target_reps is None or s.actual.reps == target_reps)
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda s: (s.e1rm_exact, s.timestamp, s.set_index))


def most_recent_working_set(sets: Iterable[SetRecord]) -> SetRecord | None:
    candidates = [s for s in sets if s.is_working_set]
    if not candidates:
        return None
    return max(candidates, key=lambda s: (s.timestamp, s.set_index))


def sets_by_muscle(
    sets: Iterable[SetRecord], catalog: ExerciseCatalog
) -> dict[str, tuple[SetRecord, ...]]:
    """Group completed sets under every muscle group their exercise trains."""
    grouped: dict[str, list[SetRecord]] = {}
    for s in sets:
        if not s.completed:
            continue
        for muscle in catalog.muscles_for(s.exercise_id, s.exercise_name):
            grouped.setdefault(muscle, []).append(s)
    return {
        muscle: tuple(sorted(group, key=lambda s: (s.timestamp, s.set_index)))
        for muscle, group in grouped.items()
    }


def last_trained(
    history: Iterable[SessionRecord], catalog: ExerciseCatalog
) -> dict[str, tuple[datetime, ExerciseType | None]]:
    """Most recent completed-set time per muscle, with the exercise type that trained it."""
    latest: dict[str, tuple[datetime, ExerciseType | None]] = {}
    for session in history:
        for s in session.completed_sets:
            exercise_type = catalog.exercise_type(s.exercise_id, s.exercise_name)
            for muscle in catalog.muscles_for(s.exercise_id, s.exercise_name):
                current = latest.get(muscle)
                if current is None or s.timestamp > current[0]:
                    latest[muscle] = (s.timestamp, exercise_type)
    return latest


def session_loads(history: Iterable[SessionRecord]) -> list[tuple[datetime, float]]:
    """(start time, total volume in lbs) for every completed session."""
    return [
        (session.started_at, session.total_volume)
        for session in history
        if session.completed
    ]


def fatigue_proxy(session: SessionRecord) -> float | None:
    """Within-session RPE drift from the first third of sets to the last third."""
    rpes = [s.rpe for s in session.completed_sets if s.rpe is not None]
    if not rpes:
        return None
    third = math.ceil(len(rpes) / 3)
    early = sum(rpes[:third]) / third
    late = sum(rpes[-third:]) / third
    raw = (late - early) * FATIGUE_PROXY_SCALE + FATIGUE_PROXY_BASELINE
    return max(0.0, min(100.0, raw))


def performance_proxy(session: SessionRecord) -> float | None:
    avg_rpe = session.average_rpe
    if avg_rpe is None:
        return None
    return (10.0 - avg_rpe) * 10.0 * (session.total_volume / 1000.0)


@dataclass(frozen=True)
class SessionSeries:
    """Aligned per-session series, oldest first."""

    timestamps: tuple[datetime, ...]
    fatigue: tuple[float, ...]
    performance: tuple[float, ...]
    volume: tuple[float, ...]
    intensity: tuple[float, ...]
    rpe: tuple[float, ...]

    def __len__(self) -> int:
        return len(self.timestamps)

    def array(self, name: str) -> np.ndarray:
        return np.asarray(getattr(self, name), dtype=np.float64)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "fatigue": self.fatigue,
                "performance": self.performance,
                "volume": self.volume,
                "intensity": self.intensity,
                "rpe": self.rpe,
            },
            index=pd.DatetimeIndex(self.timestamps, name="started_at"),
        )


def session_series(
    history: Sequence[SessionRecord], minimum: int | None = None
) -> SessionSeries | InsufficientData:
    """Build the causal-analysis series from completed sessions.

    Sessions without any RPE data or without working sets cannot yield the
    proxies and are skipped. Fewer than ``minimum`` usable sessions returns
    InsufficientData instead of a series.
    """
    required = config.MIN_CAUSAL_SESSIONS if minimum is None else minimum
    rows: list[tuple[datetime, float, float, float, float, float]] = []
    for session in sorted(history, key=lambda s: s.started_at):
        if not session.completed:
            continue
        fatigue = fatigue_proxy(session)
        performance = performance_proxy(session)
        intensity = session.average_intensity
        avg_rpe = session.average_rpe
        if fatigue is None or performance is None or intensity is None or avg_rpe is None:
            logger.debug("Skipping session %s: missing RPE or load data", session.session_id)
            continue
        rows.append(
            (session.started_at, fatigue, performance, session.total_volume, intensity, avg_rpe)
        )

    if len(rows) < required:
        return InsufficientData(
            reason=f"Need at least {required} completed sessions with RPE data",
            required=required,
            available=len(rows),
        )

    timestamps, fatigue, performance, volume, intensity, rpe = zip(*rows)
    return SessionSeries(
        timestamps=tuple(timestamps),
        fatigue=tuple(fatigue),
        performance=tuple(performance),
        volume=tuple(volume),
        intensity=tuple(intensity),
        rpe=tuple(rpe),
    )
