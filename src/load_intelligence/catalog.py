"""Exercise catalog lookups, muscle-name normalization and fatigue interference.

The catalog is reference data owned by an external collaborator; this module
only reads it. Exercises missing from the catalog fall back to muscle groups
inferred from keywords in the exercise name.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from load_intelligence.models.enums import ExerciseType
from load_intelligence.models.records import ExerciseCatalogEntry

logger = logging.getLogger(__name__)

MUSCLE_ALIASES: dict[str, str] = {
    "pecs": "chest",
    "pectorals": "chest",
    "pectoralis": "chest",
    "lats": "back",
    "latissimus": "back",
    "traps": "upper back",
    "trapezius": "upper back",
    "rhomboids": "upper back",
    "erectors": "lower back",
    "spinal erectors": "lower back",
    "delts": "shoulders",
    "deltoids": "shoulders",
    "anterior delts": "front delts",
    "posterior delts": "rear delts",
    "quadriceps": "quads",
    "hams": "hamstrings",
    "glute": "glutes",
    "gluteus": "glutes",
    "calf": "calves",
    "core": "abs",
    "abdominals": "abs",
    "obliques": "abs",
    "tricep": "triceps",
    "bicep": "biceps",
}

# Cross-muscle fatigue carryover: source muscle trained → target muscle.
# Schoenfeld (2010) synergist involvement; Richens & Cleather (2014).
FATIGUE_INTERFERENCE: dict[str, dict[str, float]] = {
    "chest": {
        "chest": 1.0, "shoulders": 0.7, "triceps": 0.8, "back": 0.2, "biceps": 0.15,
        "quads": 0.1, "hamstrings": 0.1, "calves": 0.05, "abs": 0.3,
    },
    "back": {
        "back": 1.0, "shoulders": 0.6, "biceps": 0.8, "chest": 0.2, "triceps": 0.15,
        "quads": 0.1, "hamstrings": 0.15, "calves": 0.05, "abs": 0.4,
    },
    "shoulders": {
        "shoulders": 1.0, "chest": 0.6, "triceps": 0.7, "back": 0.5, "biceps": 0.2,
        "quads": 0.1, "hamstrings": 0.1, "calves": 0.05, "abs": 0.25,
    },
    "quads": {
        "quads": 1.0, "hamstrings": 0.6, "calves": 0.4, "glutes": 0.7, "abs": 0.5,
        "lower back": 0.6, "chest": 0.15, "shoulders": 0.15, "back": 0.2,
        "triceps": 0.1, "biceps": 0.1,
    },
    "hamstrings": {
        "hamstrings": 1.0, "quads": 0.5, "glutes": 0.9, "calves": 0.3, "lower back": 0.7,
        "abs": 0.4, "chest": 0.15, "shoulders": 0.15, "back": 0.3, "triceps": 0.1,
        "biceps": 0.1,
    },
    "triceps": {
        "triceps": 1.0, "chest": 0.5, "shoulders": 0.6, "biceps": 0.15, "back": 0.1,
        "quads": 0.05, "hamstrings": 0.05, "calves": 0.05, "abs": 0.2,
    },
    "biceps": {
        "biceps": 1.0, "back": 0.4, "shoulders": 0.3, "chest": 0.15, "triceps": 0.15,
        "quads": 0.05, "hamstrings": 0.05, "calves": 0.05, "abs": 0.15,
    },
    "abs": {
        "abs": 1.0, "lower back": 0.6, "chest": 0.2, "shoulders": 0.2, "back": 0.3,
        "quads": 0.3, "hamstrings": 0.25, "triceps": 0.1, "biceps": 0.1, "calves": 0.05,
    },
}

MOVEMENT_CHAINS: tuple[frozenset[str], ...] = (
    frozenset({"chest", "shoulders", "triceps", "front delts"}),
    frozenset({"back", "biceps", "rear delts", "upper back"}),
    frozenset({"quads", "hamstrings", "glutes", "calves"}),
)
SAME_CHAIN_INTERFERENCE = 0.5
SYSTEMIC_INTERFERENCE = 0.15

# (pattern, muscles) pairs applied to lower-cased exercise names
_NAME_RULES: tuple[tuple[re.Pattern[str], tuple[str, ...]], ...] = (
    (re.compile(r"\b(bench|chest|fly|flye|pec|push ?up|dip)s?\b"), ("chest",)),
    (re.compile(r"\b(bench|chest|incline|decline)\b.*\bpress\b"), ("triceps", "shoulders")),
    (re.compile(r"\b(row|pull|pulldown|pull ?up|chin ?up|lat)s?\b"), ("back",)),
    (re.compile(r"\b(row|pull|pulldown|pull ?up|chin ?up)s?\b"), ("biceps",)),
    (re.compile(r"\b(shoulder|delt|ohp|military|overhead|lateral raise)s?\b"), ("shoulders",)),
    (re.compile(r"\b(ohp|military|overhead|shoulder)\b.*\bpress\b|\bohp\b"), ("triceps",)),
    (re.compile(r"\b(squat|leg press|quad|lunge|split squat|step ?up)s?\b"), ("quads", "glutes")),
    (re.compile(r"\b(deadlift|rdl|good morning)s?\b"), ("hamstrings", "back", "glutes")),
    (re.compile(r"\b(leg curl|hamstring curl|nordic|hamstring)s?\b"), ("hamstrings",)),
    (re.compile(r"\b(hip thrust|glute bridge|glute)s?\b"), ("glutes",)),
    (re.compile(r"\b(tricep|pushdown|skull ?crusher|extension)s?\b"), ("triceps",)),
    (re.compile(r"\b(abs?|crunch|plank|core|sit ?up)(es|s)?\b"), ("abs",)),
    (re.compile(r"\b(calf|calves)\b"), ("calves",)),
)
_BICEPS_CURL = re.compile(r"\b(bicep|curl)s?\b")
_LEG_WORDS = re.compile(r"\b(leg|ham|hamstring|nordic)s?\b")
_LEG_EXTENSION = re.compile(r"\b(leg|quad)\b.*\bextension")


def normalize_muscle(name: str) -> str:
    """Lower-case, trim and map anatomical aliases onto tracked muscle groups."""
    key = " ".join(name.strip().lower().replace("_", " ").split())
    return MUSCLE_ALIASES.get(key, key)


def infer_muscles_from_name(name: str) -> frozenset[str]:
    """Best-effort muscle groups from keywords in an exercise name."""
    text = " ".join(name.lower().replace("_", " ").replace("-", " ").split())
    inferred: set[str] = set()
    for pattern, muscles in _NAME_RULES:
        if pattern.search(text):
            inferred.update(muscles)
    if _BICEPS_CURL.search(text) and not _LEG_WORDS.search(text):
        inferred.add("biceps")
    if _LEG_EXTENSION.search(text):
        inferred.discard("triceps")
        inferred.add("quads")
    return frozenset(inferred)


def interference(source: str, target: str) -> float:
    """Fatigue carryover from training ``source`` onto ``target`` (0-1)."""
    row = FATIGUE_INTERFERENCE.get(source)
    if row is not None and target in row:
        return row[target]
    if source == target:
        return 1.0
    for chain in MOVEMENT_CHAINS:
        if source in chain and target in chain:
            return SAME_CHAIN_INTERFERENCE
    return SYSTEMIC_INTERFERENCE


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


class ExerciseCatalog:
    """Read-only view over catalog entries with name-based fallbacks.

    Usage:
        catalog = ExerciseCatalog(entries)
        muscles = catalog.muscles_for("bench-press", "Barbell Bench Press")
    """

    def __init__(self, entries: Iterable[ExerciseCatalogEntry] = ()) -> None:
        self._entries: dict[str, ExerciseCatalogEntry] = {}
        self._by_slug: dict[str, ExerciseCatalogEntry] = {}
        for entry in entries:
            normalized = ExerciseCatalogEntry(
                exercise_id=entry.exercise_id,
                name=entry.name,
                exercise_type=entry.exercise_type,
                muscle_groups=frozenset(normalize_muscle(m) for m in entry.muscle_groups),
                default_rest_s=entry.default_rest_s,
            )
            self._entries[entry.exercise_id] = normalized
            self._by_slug[_slug(entry.exercise_id)] = normalized
            self._by_slug.setdefault(_slug(entry.name), normalized)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, exercise_id: object) -> bool:
        return exercise_id in self._entries

    def get(self, exercise_id: str, exercise_name: str | None = None) -> ExerciseCatalogEntry | None:
        """Find an entry by id, then by slug of the id, then by slug of the name."""
        entry = self._entries.get(exercise_id)
        if entry is not None:
            return entry
        entry = self._by_slug.get(_slug(exercise_id))
        if entry is not None:
            return entry
        if exercise_name:
            return self._by_slug.get(_slug(exercise_name))
        return None

    def muscles_for(self, exercise_id: str, exercise_name: str | None = None) -> frozenset[str]:
        """Muscle groups an exercise trains; empty when they cannot be resolved."""
        entry = self.get(exercise_id, exercise_name)
        if entry is not None and entry.muscle_groups:
            return entry.muscle_groups
        inferred = infer_muscles_from_name(exercise_name or exercise_id)
        if not inferred:
            logger.debug("No muscle groups resolved for exercise %s", exercise_id)
        return inferred

    def exercise_type(self, exercise_id: str, exercise_name: str | None = None) -> ExerciseType | None:
        entry = self.get(exercise_id, exercise_name)
        return entry.exercise_type if entry is not None else None
