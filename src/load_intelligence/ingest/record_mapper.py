"""Pure functions mapping raw workout-log dicts to engine records.

No I/O. Takes the camelCase dicts produced by the persistence layer and
returns frozen SetRecord / SessionRecord / catalog / max records. Malformed
numerics become None (see ``sanitize_number``); structurally unusable
records raise InvalidRecordError.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from load_intelligence.exceptions import InvalidRecordError
from load_intelligence.models.enums import ExerciseType, WeightUnit
from load_intelligence.models.records import (
    ActualPerformance,
    ExerciseCatalogEntry,
    PrescribedTarget,
    SessionRecord,
    SetRecord,
    UserMaxRecord,
    ensure_utc,
    sanitize_number,
)

logger = logging.getLogger(__name__)

_TRUE_STRINGS = frozenset({"true", "t", "yes", "y", "1"})
_FALSE_STRINGS = frozenset({"false", "f", "no", "n", "0"})


def map_set(raw: Mapping[str, Any], default_timestamp: datetime | None = None) -> SetRecord:
    """Map one raw set dict to a SetRecord.

    Accepts either flat keys (``actualWeight``) or nested
    ``prescribed`` / ``actual`` dicts.
    """
    exercise_id = raw.get("exerciseId")
    if not exercise_id:
        raise InvalidRecordError("Set record has no exerciseId", field="exerciseId")

    prescribed = raw.get("prescribed") if isinstance(raw.get("prescribed"), Mapping) else {}
    actual = raw.get("actual") if isinstance(raw.get("actual"), Mapping) else {}

    timestamp = _parse_timestamp(raw.get("timestamp")) or default_timestamp
    if timestamp is None:
        raise InvalidRecordError(f"Set of {exercise_id} has no usable timestamp", field="timestamp")

    set_index = sanitize_number(raw.get("setIndex"), minimum=0.0)
    return SetRecord(
        exercise_id=str(exercise_id),
        set_index=int(set_index) if set_index is not None else 0,
        timestamp=timestamp,
        prescribed=PrescribedTarget(
            reps=_pick(raw, prescribed, "prescribedReps", "reps"),
            rpe=_pick(raw, prescribed, "prescribedRPE", "rpe"),
            rir=_pick(raw, prescribed, "prescribedRIR", "rir"),
            percent_of_1rm=_pick(raw, prescribed, "percentOf1RM", "percentOf1RM"),
        ),
        actual=ActualPerformance(
            weight=_pick(raw, actual, "actualWeight", "weight"),
            reps=_pick(raw, actual, "actualReps", "reps"),
            rpe=_pick(raw, actual, "actualRPE", "rpe"),
            rir=_pick(raw, actual, "actualRIR", "rir"),
            reached_failure=_parse_bool(_pick(raw, actual, "reachedFailure", "reachedFailure")),
            form_breakdown=_parse_bool(_pick(raw, actual, "formBreakdown", "formBreakdown")),
        ),
        completed=_parse_bool(raw.get("completed"), default=True),
        unit=_parse_unit(raw.get("weightUnit")),
        exercise_name=raw.get("exerciseName"),
    )


def map_session(raw: Mapping[str, Any]) -> SessionRecord:
    """Map one raw session dict (with a ``sets`` list) to a SessionRecord.

    Sets that cannot be mapped are skipped with a warning.
    """
    started_at = _parse_timestamp(raw.get("startTime") or raw.get("date"))
    if started_at is None:
        raise InvalidRecordError("Session has no usable start time", field="startTime")

    sets = []
    for index, raw_set in enumerate(raw.get("sets") or []):
        try:
            sets.append(map_set(raw_set, default_timestamp=started_at))
        except InvalidRecordError as exc:
            logger.warning("Skipping set %d of session %s: %s", index, raw.get("id"), exc)

    return SessionRecord(
        session_id=str(raw.get("id") or started_at.isoformat()),
        started_at=started_at,
        sets=tuple(sets),
        ended_at=_parse_timestamp(raw.get("endTime")),
        completed=_parse_bool(raw.get("completed"), default=True),
    )


def map_history(raw_sessions: Iterable[Mapping[str, Any]]) -> tuple[SessionRecord, ...]:
    """Map a list of raw sessions, oldest first; unusable sessions are skipped."""
    sessions = []
    for raw in raw_sessions:
        try:
            sessions.append(map_session(raw))
        except InvalidRecordError as exc:
            logger.warning("Skipping session %s: %s", raw.get("id"), exc)
    return tuple(sorted(sessions, key=lambda s: s.started_at))


def map_catalog(raw_entries: Iterable[Mapping[str, Any]]) -> tuple[ExerciseCatalogEntry, ...]:
    entries = []
    for raw in raw_entries:
        exercise_id = raw.get("id")
        if not exercise_id:
            logger.warning("Skipping catalog entry without id: %s", raw.get("name"))
            continue
        rest = sanitize_number(raw.get("defaultRestSeconds") or raw.get("restSeconds"), minimum=0.0)
        entries.append(
            ExerciseCatalogEntry(
                exercise_id=str(exercise_id),
                name=str(raw.get("name") or exercise_id),
                exercise_type=_parse_exercise_type(raw.get("type")),
                muscle_groups=frozenset(str(m) for m in raw.get("muscleGroups") or ()),
                default_rest_s=int(rest) if rest is not None else 120,
            )
        )
    return tuple(entries)


def map_user_maxes(raw: Iterable[Mapping[str, Any]]) -> dict[str, UserMaxRecord]:
    """Map raw max records keyed by exercise; the latest test date wins."""
    maxes: dict[str, UserMaxRecord] = {}
    for entry in raw:
        exercise_id = entry.get("exerciseId")
        weight = sanitize_number(entry.get("weight") or entry.get("oneRepMax"), minimum=0.0)
        if not exercise_id or not weight:
            continue
        record = UserMaxRecord(
            exercise_id=str(exercise_id),
            weight=weight,
            unit=_parse_unit(entry.get("unit")),
            tested=_parse_bool(_first_present(entry, "tested", "isTested")),
            test_date=_parse_date(entry.get("testDate") or entry.get("date")),
        )
        current = maxes.get(record.exercise_id)
        if current is None or (record.test_date or date.min) >= (current.test_date or date.min):
            maxes[record.exercise_id] = record
    return maxes


# ---------------------------------------------------------------------------
# Internal extractors: each handles missing or malformed input gracefully
# ---------------------------------------------------------------------------


def _pick(flat: Mapping[str, Any], nested: Mapping[str, Any], flat_key: str, nested_key: str) -> Any:
    value = flat.get(flat_key)
    if value is None:
        value = nested.get(nested_key)
    return value


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return ensure_utc(datetime(value.year, value.month, value.day))
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Epoch milliseconds
        number = sanitize_number(value)
        if number is None:
            return None
        try:
            return datetime.fromtimestamp(number / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    try:
        return ensure_utc(datetime.fromisoformat(str(value).replace("Z", "+00:00")))
    except ValueError:
        return None


def _first_present(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def _parse_bool(value: Any, default: bool = False) -> bool:
    """Booleans, 0/1 and the usual string spellings; anything else gives ``default``."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        number = sanitize_number(value)
        return default if number is None else number != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    logger.debug("Unrecognised boolean %r; using %s", value, default)
    return default


def _parse_date(value: Any) -> Optional[date]:
    moment = _parse_timestamp(value)
    return moment.date() if moment is not None else None


def _parse_unit(value: Any) -> WeightUnit:
    if isinstance(value, str) and value.strip().lower() in ("kg", "kgs", "kilograms"):
        return WeightUnit.KG
    return WeightUnit.LBS


def _parse_exercise_type(value: Any) -> ExerciseType:
    if isinstance(value, str) and value.strip().lower() == "isolation":
        return ExerciseType.ISOLATION
    return ExerciseType.COMPOUND
