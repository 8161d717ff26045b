"""Tests for the in-session fatigue monitor."""

from __future__ import annotations

from datetime import timedelta

import pytest

from load_intelligence.fatigue.monitor import (
    assess_session,
    is_unintentional_failure,
    session_fatigue_score,
    session_indicators,
)
from load_intelligence.models.enums import FatigueSeverity
from load_intelligence.models.fatigue import SessionFatigueIndicators


def _bench_sets(make_set, now, rpe: float, count: int = 3):
    return [
        make_set(
            weight=185.0,
            reps=8,
            rpe=rpe,
            prescribed_rpe=8.0,
            prescribed_reps=8,
            timestamp=now - timedelta(minutes=4 * (count - i)),
            set_index=i,
        )
        for i in range(count)
    ]


class TestAssessSession:
    def test_overshoot_before_shared_muscles_triggers_reduction(self, make_set, catalog, now) -> None:
        sets = _bench_sets(make_set, now, rpe=9.5)
        result = assess_session(sets, catalog, next_exercise_id="incline-press", now=now)
        assert result.should_reduce_weight is True
        assert result.alert is not None
        assert result.alert.severity >= FatigueSeverity.MODERATE
        assert "chest" in result.alert.affected_muscles
        assert result.completed_sets == 3

    def test_on_target_session_is_clear(self, make_set, catalog, now) -> None:
        result = assess_session(_bench_sets(make_set, now, rpe=8.0), catalog, "incline-press", now=now)
        assert result.should_reduce_weight is False
        assert result.alert is None
        assert result.state.active is True

    def test_unrelated_next_exercise_is_clear(self, make_set, catalog, now) -> None:
        result = assess_session(_bench_sets(make_set, now, rpe=9.5), catalog, "calf-raise", now=now)
        assert result.should_reduce_weight is False
        assert result.alert is None

    def test_no_rpe_logged_is_inactive(self, make_set, catalog, now) -> None:
        sets = _bench_sets(make_set, now, rpe=8.0)
        sets = [make_set(rpe=None, set_index=s.set_index, timestamp=s.timestamp) for s in sets]
        result = assess_session(sets, catalog, "incline-press", now=now)
        assert result.state.active is False
        assert result.should_reduce_weight is False

    def test_mild_overshoot_alerts_without_reduction(self, make_set, catalog, now) -> None:
        sets = [make_set(weight=185.0, reps=8, rpe=9.0, prescribed_rpe=8.0, timestamp=now)]
        result = assess_session(sets, catalog, "bench-press", now=now)
        assert result.alert is not None
        assert result.alert.severity == FatigueSeverity.MILD
        assert result.should_reduce_weight is False

    def test_reference_weight_from_same_exercise(self, make_set, catalog, now) -> None:
        result = assess_session(_bench_sets(make_set, now, rpe=10.0), catalog, "bench-press", now=now)
        reduce_option = result.alert.options[0]
        assert reduce_option.new_weight is not None
        assert reduce_option.new_weight < 185.0

    def test_incomplete_sets_not_counted(self, make_set, catalog, now) -> None:
        sets = _bench_sets(make_set, now, rpe=9.5)
        sets.append(make_set(rpe=10.0, completed=False, timestamp=now, set_index=5))
        assert assess_session(sets, catalog, now=now).completed_sets == 3

    def test_recomputes_from_full_list(self, make_set, catalog, now) -> None:
        sets = _bench_sets(make_set, now, rpe=9.5)
        first = assess_session(sets, catalog, "incline-press", now=now)
        second = assess_session(sets, catalog, "incline-press", now=now)
        assert first == second

    def test_naive_now_is_treated_as_utc(self, make_set, catalog, now) -> None:
        sets = _bench_sets(make_set, now, rpe=9.5)
        naive = assess_session(sets, catalog, "incline-press", now=now.replace(tzinfo=None))
        aware = assess_session(sets, catalog, "incline-press", now=now)
        assert naive == aware
        assert naive.should_reduce_weight is True

    def test_reduction_percent_follows_alert(self, make_set, catalog, now) -> None:
        result = assess_session(_bench_sets(make_set, now, rpe=9.5), catalog, "incline-press", now=now)
        assert result.reduction_percent == pytest.approx(result.alert.suggested_reduction * 100)
        assert result.confidence == pytest.approx(0.6)

    def test_no_reduction_percent_when_clear(self, make_set, catalog, now) -> None:
        result = assess_session(_bench_sets(make_set, now, rpe=8.0), catalog, "incline-press", now=now)
        assert result.reduction_percent == 0.0
        assert result.indicators.mean_rpe_overshoot == 0.0


class TestSessionIndicators:
    def test_counts_flags_overshoot_and_volume(self, make_set, now) -> None:
        sets = _bench_sets(make_set, now, rpe=9.5)
        sets.append(
            make_set(
                weight=185.0,
                reps=6,
                rpe=10.0,
                prescribed_rpe=7.0,
                reached_failure=True,
                form_breakdown=True,
                timestamp=now,
                set_index=3,
            )
        )
        indicators = session_indicators(sets)
        assert indicators.mean_rpe_overshoot == pytest.approx(1.875)
        assert indicators.form_breakdown_sets == 1
        assert indicators.unintentional_failure_sets == 1
        assert indicators.volume_load_lbs == pytest.approx(5550.0)
        assert session_fatigue_score(indicators) == pytest.approx(49.3)

    def test_reported_through_assessment(self, make_set, catalog, now) -> None:
        sets = [
            make_set(weight=185.0, reps=8, rpe=8.0, prescribed_rpe=8.0, form_breakdown=True, timestamp=now),
        ]
        result = assess_session(sets, catalog, now=now)
        assert result.indicators.form_breakdown_sets == 1
        assert result.overall_fatigue == pytest.approx(1.48 + 10.0)
        assert "form breakdown" in result.reasoning

    def test_incomplete_sets_ignored(self, make_set, now) -> None:
        sets = [make_set(form_breakdown=True, reached_failure=True, completed=False)]
        assert session_indicators(sets) == SessionFatigueIndicators()

    def test_empty_session(self, catalog) -> None:
        result = assess_session([], catalog)
        assert result.overall_fatigue == 0.0
        assert result.confidence == 0.0
        assert result.indicators == SessionFatigueIndicators()

    def test_score_is_capped(self) -> None:
        indicators = SessionFatigueIndicators(
            mean_rpe_overshoot=3.0,
            form_breakdown_sets=4,
            unintentional_failure_sets=3,
            volume_load_lbs=90000.0,
        )
        assert session_fatigue_score(indicators) == 100.0

    def test_negative_overshoot_adds_nothing(self) -> None:
        indicators = SessionFatigueIndicators(mean_rpe_overshoot=-1.5, volume_load_lbs=2000.0)
        assert session_fatigue_score(indicators) == pytest.approx(2.0)

    @pytest.mark.parametrize(
        ("prescribed_rpe", "rpe", "reached_failure", "expected"),
        [
            (7.0, 10.0, True, True),
            (6.0, 9.0, True, True),
            (10.0, 10.0, True, False),
            (8.5, 10.0, True, False),
            (None, 7.0, True, True),
            (None, None, True, True),
            (7.0, 10.0, False, False),
        ],
    )
    def test_unintentional_failure(self, make_set, prescribed_rpe, rpe, reached_failure, expected) -> None:
        s = make_set(prescribed_rpe=prescribed_rpe, rpe=rpe, reached_failure=reached_failure)
        assert is_unintentional_failure(s) is expected
