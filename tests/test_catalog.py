"""Tests for catalog lookups, muscle inference and fatigue interference."""

from __future__ import annotations

import pytest

from load_intelligence.catalog import (
    ExerciseCatalog,
    infer_muscles_from_name,
    interference,
    normalize_muscle,
)
from load_intelligence.models.enums import ExerciseType


class TestNormalizeMuscle:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("Pectorals", "chest"), ("quadriceps", "quads"), ("  Lats ", "back"), ("Front Delts", "front delts")],
    )
    def test_aliases(self, raw: str, expected: str) -> None:
        assert normalize_muscle(raw) == expected


class TestInferMuscles:
    def test_bench_press(self) -> None:
        assert infer_muscles_from_name("Close-Grip Bench Press") >= {"chest", "triceps", "shoulders"}

    def test_row(self) -> None:
        assert infer_muscles_from_name("Seated Cable Row") == frozenset({"back", "biceps"})

    def test_leg_curl_is_not_biceps(self) -> None:
        muscles = infer_muscles_from_name("Lying Leg Curl")
        assert "hamstrings" in muscles
        assert "biceps" not in muscles

    def test_leg_extension_is_quads(self) -> None:
        muscles = infer_muscles_from_name("Leg Extension")
        assert "quads" in muscles
        assert "triceps" not in muscles

    def test_deadlift(self) -> None:
        assert infer_muscles_from_name("Romanian Deadlift") >= {"hamstrings", "glutes", "back"}

    def test_cable_is_not_abs(self) -> None:
        assert "abs" not in infer_muscles_from_name("Cable Fly")

    def test_unknown(self) -> None:
        assert infer_muscles_from_name("Mystery Movement") == frozenset()


class TestInterference:
    def test_matrix_value(self) -> None:
        assert interference("chest", "triceps") == 0.8

    def test_same_muscle(self) -> None:
        assert interference("glutes", "glutes") == 1.0

    def test_same_chain_fallback(self) -> None:
        assert interference("front delts", "triceps") == 0.5

    def test_systemic_fallback(self) -> None:
        assert interference("calves", "biceps") == 0.15


class TestExerciseCatalog:
    def test_lookup_normalizes_muscles(self, catalog: ExerciseCatalog) -> None:
        assert catalog.muscles_for("squat") == frozenset({"quads", "glutes", "hamstrings"})
        assert catalog.muscles_for("incline-press") == frozenset({"chest", "front delts", "triceps"})

    def test_lookup_by_name_slug(self, catalog: ExerciseCatalog) -> None:
        entry = catalog.get("unknown-id", "Barbell Bench Press")
        assert entry is not None
        assert entry.exercise_id == "bench-press"

    def test_falls_back_to_name_inference(self, catalog: ExerciseCatalog) -> None:
        assert catalog.muscles_for("custom-42", "Walking Lunge") == frozenset({"quads", "glutes"})

    def test_exercise_type(self, catalog: ExerciseCatalog) -> None:
        assert catalog.exercise_type("bicep-curl") == ExerciseType.ISOLATION
        assert catalog.exercise_type("nope") is None

    def test_len_and_contains(self, catalog: ExerciseCatalog) -> None:
        assert len(catalog) == 6
        assert "squat" in catalog
