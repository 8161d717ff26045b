"""Immutable training records: sets, sessions, catalog entries and user maxes.

Numeric fields are sanitized on construction: None, NaN, infinities,
negative weights/reps and out-of-scale RPE/RIR all become None, and any
metric derived from a None input is itself None.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Optional

from load_intelligence.math.strength import epley_e1rm, to_lbs
from load_intelligence.models.enums import ExerciseType, WeightUnit


def sanitize_number(
    value: Any,
    minimum: float | None = None,
    maximum: float | None = None,
) -> Optional[float]:
    """Coerce a raw numeric value to float, or None when it is unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    if minimum is not None and number < minimum:
        return None
    if maximum is not None and number > maximum:
        return None
    return number


def sanitize_count(value: Any) -> Optional[int]:
    """Like sanitize_number, but for non-negative whole counts (reps)."""
    number = sanitize_number(value, minimum=0.0)
    if number is None:
        return None
    return int(round(number))


def ensure_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _set(obj: Any, name: str, value: Any) -> None:
    object.__setattr__(obj, name, value)


@dataclass(frozen=True)
class PrescribedTarget:
    """What the program asked for on a set."""

    reps: Optional[int] = None
    rpe: Optional[float] = None
    rir: Optional[float] = None
    percent_of_1rm: Optional[float] = None

    def __post_init__(self) -> None:
        _set(self, "reps", sanitize_count(self.reps))
        _set(self, "rpe", sanitize_number(self.rpe, 0.0, 10.0))
        _set(self, "rir", sanitize_number(self.rir, 0.0, 10.0))
        _set(self, "percent_of_1rm", sanitize_number(self.percent_of_1rm, 0.0, 120.0))

    @property
    def effective_rpe(self) -> Optional[float]:
        """Prescribed RPE, derived from RIR (RPE = 10 - RIR) when only RIR is set."""
        if self.rpe is not None:
            return self.rpe
        if self.rir is not None:
            return 10.0 - self.rir
        return None


@dataclass(frozen=True)
class ActualPerformance:
    """What the lifter actually did on a set."""

    weight: Optional[float] = None
    reps: Optional[int] = None
    rpe: Optional[float] = None
    rir: Optional[float] = None
    reached_failure: bool = False
    form_breakdown: bool = False

    def __post_init__(self) -> None:
        _set(self, "weight", sanitize_number(self.weight, minimum=0.0))
        _set(self, "reps", sanitize_count(self.reps))
        _set(self, "rpe", sanitize_number(self.rpe, 0.0, 10.0))
        _set(self, "rir", sanitize_number(self.rir, 0.0, 10.0))

    @property
    def effective_rpe(self) -> Optional[float]:
        if self.rpe is not None:
            return self.rpe
        if self.rir is not None:
            return 10.0 - self.rir
        return None


@dataclass(frozen=True)
class SetRecord:
    """A single logged set. Immutable once logged."""

    exercise_id: str
    set_index: int
    timestamp: datetime
    prescribed: PrescribedTarget = field(default_factory=PrescribedTarget)
    actual: ActualPerformance = field(default_factory=ActualPerformance)
    completed: bool = True
    unit: WeightUnit = WeightUnit.LBS
    exercise_name: Optional[str] = None

    def __post_init__(self) -> None:
        _set(self, "timestamp", ensure_utc(self.timestamp))

    @property
    def volume_load(self) -> Optional[float]:
        """weight × reps in the set's own unit."""
        if self.actual.weight is None or self.actual.reps is None:
            return None
        return self.actual.weight * self.actual.reps

    @property
    def volume_load_lbs(self) -> Optional[float]:
        volume = self.volume_load
        if volume is None:
            return None
        return to_lbs(volume, self.unit)

    @property
    def e1rm_exact(self) -> Optional[float]:
        """Unrounded Epley estimate, used for ranking sets."""
        if self.actual.weight is None or self.actual.reps is None:
            return None
        return epley_e1rm(self.actual.weight, self.actual.reps)

    @property
    def e1rm(self) -> Optional[int]:
        """Epley estimate rounded half-up to a whole unit, as stored by the log."""
        exact = self.e1rm_exact
        if exact is None:
            return None
        return int(math.floor(exact + 0.5))

    @property
    def weight_lbs(self) -> Optional[float]:
        if self.actual.weight is None:
            return None
        return to_lbs(self.actual.weight, self.unit)

    @property
    def rpe(self) -> Optional[float]:
        """Actual effort, falling back to the RIR-derived value."""
        return self.actual.effective_rpe

    @property
    def rpe_overshoot(self) -> Optional[float]:
        """actual RPE - prescribed RPE; None unless both are known."""
        actual = self.actual.effective_rpe
        prescribed = self.prescribed.effective_rpe
        if actual is None or prescribed is None:
            return None
        return actual - prescribed

    @property
    def is_working_set(self) -> bool:
        """Completed with a usable weight and rep count."""
        return (
            self.completed
            and self.actual.weight is not None
            and self.actual.weight > 0
            and self.actual.reps is not None
            and self.actual.reps > 0
        )


@dataclass(frozen=True)
class SessionRecord:
    """An ordered sequence of sets. Aggregates consider completed sets only."""

    session_id: str
    started_at: datetime
    sets: tuple[SetRecord, ...] = field(default_factory=tuple)
    ended_at: Optional[datetime] = None
    completed: bool = True

    def __post_init__(self) -> None:
        _set(self, "started_at", ensure_utc(self.started_at))
        if self.ended_at is not None:
            _set(self, "ended_at", ensure_utc(self.ended_at))
        _set(self, "sets", tuple(sorted(self.sets, key=lambda s: (s.timestamp, s.set_index))))

    @property
    def completed_sets(self) -> tuple[SetRecord, ...]:
        return tuple(s for s in self.sets if s.completed)

    @property
    def total_volume(self) -> float:
        """Sum of weight × reps over completed sets, in pounds."""
        return sum(
            v for v in (s.volume_load_lbs for s in self.completed_sets) if v is not None
        )

    @property
    def average_rpe(self) -> Optional[float]:
        """Mean actual RPE of completed sets that carry one."""
        values = [s.rpe for s in self.completed_sets if s.rpe is not None]
        if not values:
            return None
        return sum(values) / len(values)

    @property
    def average_intensity(self) -> Optional[float]:
        """Mean working weight (pounds) of completed sets."""
        values = [w for w in (s.weight_lbs for s in self.completed_sets) if w is not None]
        if not values:
            return None
        return sum(values) / len(values)

    @property
    def exercise_ids(self) -> frozenset[str]:
        return frozenset(s.exercise_id for s in self.completed_sets)


@dataclass(frozen=True)
class ExerciseCatalogEntry:
    """Reference metadata for an exercise. Read-only."""

    exercise_id: str
    name: str
    exercise_type: ExerciseType = ExerciseType.COMPOUND
    muscle_groups: frozenset[str] = field(default_factory=frozenset)
    default_rest_s: int = 120


@dataclass(frozen=True)
class UserMaxRecord:
    """A tested or estimated one-rep max for an exercise."""

    exercise_id: str
    weight: float
    unit: WeightUnit = WeightUnit.LBS
    tested: bool = False
    test_date: Optional[date] = None
