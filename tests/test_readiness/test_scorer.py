"""Tests for readiness context building and the ReadinessScorer blend."""

from __future__ import annotations

from datetime import timedelta

import pytest

from load_intelligence.models.enums import ACWRStatus, RecoveryStatus, ReadinessStatus, SignalPriority
from load_intelligence.models.readiness import ReadinessContext, SignalAssessment
from load_intelligence.readiness.context import assess_muscle_recovery, build_context, performance_trend
from load_intelligence.readiness.registry import SignalRegistry
from load_intelligence.readiness.scorer import ReadinessScorer, classify_readiness
from load_intelligence.readiness.signals.base import ReadinessSignal


class _FixedSignal(ReadinessSignal):
    version = "test"
    required_data: list[str] = []

    def __init__(self, signal_id: str, score: float, weight: float, priority: SignalPriority) -> None:
        self.signal_id = signal_id
        self._score = score
        self.weight = weight
        self.priority = priority

    def evaluate(self, context: ReadinessContext) -> SignalAssessment | None:
        return SignalAssessment(
            signal_id=self.signal_id,
            score=self._score,
            weight=self.weight,
            warnings=(f"{self.signal_id} warning",),
            recommendations=(f"{self.signal_id} advice",),
        )


class _SilentSignal(_FixedSignal):
    def evaluate(self, context: ReadinessContext) -> SignalAssessment | None:
        return None


def _registry(*signals: ReadinessSignal) -> SignalRegistry:
    registry = SignalRegistry()
    for signal in signals:
        registry.register(signal)
    return registry


class TestClassifyReadiness:
    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (10.0, ReadinessStatus.HIGH),
            (7.5, ReadinessStatus.HIGH),
            (7.49, ReadinessStatus.MODERATE),
            (5.0, ReadinessStatus.MODERATE),
            (4.99, ReadinessStatus.LOW),
            (0.0, ReadinessStatus.LOW),
        ],
    )
    def test_thresholds(self, score: float, expected: ReadinessStatus) -> None:
        assert classify_readiness(score) == expected


class TestBlend:
    def test_weighted_mean_of_signals(self, catalog, now) -> None:
        scorer = ReadinessScorer(
            _registry(
                _FixedSignal("low", 4.0, 1.0, SignalPriority.RECOVERY),
                _FixedSignal("high", 10.0, 3.0, SignalPriority.SAFETY),
            )
        )
        result = scorer.score((), catalog, now=now)
        assert result.overall_score == pytest.approx(8.5)
        assert result.overall_status == ReadinessStatus.HIGH

    def test_most_adverse_signal_first(self, catalog, now) -> None:
        scorer = ReadinessScorer(
            _registry(
                _FixedSignal("fine", 9.0, 1.0, SignalPriority.SAFETY),
                _FixedSignal("poor", 3.0, 1.0, SignalPriority.PERFORMANCE),
            )
        )
        result = scorer.score((), catalog, now=now)
        assert result.warnings == ("poor warning", "fine warning")
        assert result.recommendations[0] == "poor advice"

    def test_missing_signals_renormalize(self, catalog, now) -> None:
        scorer = ReadinessScorer(
            _registry(
                _FixedSignal("present", 6.0, 0.2, SignalPriority.RECOVERY),
                _SilentSignal("absent", 0.0, 0.8, SignalPriority.SAFETY),
            )
        )
        result = scorer.score((), catalog, now=now)
        assert result.overall_score == pytest.approx(6.0)
        assert len(result.signals) == 1

    def test_no_signals_is_neutral(self, catalog, now) -> None:
        result = ReadinessScorer(SignalRegistry()).score((), catalog, now=now)
        assert result.overall_score == 7.0
        assert result.overall_status == ReadinessStatus.MODERATE
        assert result.confidence == 0.0
        assert result.is_fallback is False


class TestDefaultSignals:
    def test_steady_history_is_ready(self, steady_history, catalog, now) -> None:
        result = ReadinessScorer().score(steady_history, catalog, planned_exercise_ids={"bench-press"}, now=now)
        assert result.is_fallback is False
        assert result.acwr.status == ACWRStatus.OPTIMAL
        assert result.overall_score >= 7.0
        assert result.confidence == pytest.approx(1.0)
        assert {s.signal_id for s in result.signals} == {"acwr", "muscle_recovery", "performance_trend"}
        assert 0.0 <= result.overall_score <= 10.0

    def test_short_history_scales_confidence(self, short_history, catalog, now) -> None:
        result = ReadinessScorer().score(short_history, catalog, now=now)
        assert result.is_fallback is False
        assert result.confidence == pytest.approx(0.4)

    def test_empty_history(self, catalog, now) -> None:
        result = ReadinessScorer().score((), catalog, now=now)
        assert result.overall_score == 7.0
        assert result.acwr.value is None
        assert result.acwr.status == ACWRStatus.UNKNOWN
        assert result.confidence == 0.0

    def test_fresh_legs_warn_before_squats(self, make_session, catalog, now) -> None:
        history = (
            make_session(now - timedelta(hours=12), [("squat", 315.0, 5, 9.0)] * 5),
        )
        result = ReadinessScorer().score(history, catalog, planned_exercise_ids={"squat"}, now=now)
        quads = next(m for m in result.muscle_recovery if m.muscle == "quads")
        assert quads.status == RecoveryStatus.FATIGUED
        assert any("Quads" in w for w in result.warnings)
        assert any("quads" in r for r in result.recommendations)

    def test_spike_warns(self, make_session, catalog, now) -> None:
        history = [
            make_session(now - timedelta(days=day), [("squat", 135.0, 5, 7.0)])
            for day in (27, 24, 20, 17, 13, 10)
        ]
        history += [
            make_session(now - timedelta(days=day), [("squat", 275.0, 8, 9.0)] * 6)
            for day in (6, 4, 2)
        ]
        result = ReadinessScorer().score(history, catalog, now=now)
        assert result.acwr.status == ACWRStatus.HIGH_RISK
        assert any("ACWR" in w for w in result.warnings)
        assert result.overall_score < 7.5


class TestContext:
    def test_untrained_planned_muscle_is_ready(self, steady_history, catalog, now) -> None:
        (calves,) = assess_muscle_recovery(steady_history, catalog, now, muscles={"calves"})
        assert calves.status == RecoveryStatus.READY
        assert calves.recovery_percent == 100.0

    def test_all_trained_muscles_without_plan(self, steady_history, catalog, now) -> None:
        muscles = {m.muscle for m in assess_muscle_recovery(steady_history, catalog, now)}
        assert {"chest", "triceps", "quads", "glutes"} <= muscles

    def test_trend_needs_three_sessions(self, short_history, now) -> None:
        assert performance_trend(short_history[:2], now) is None
        assert performance_trend(short_history, now) is not None

    def test_context_ignores_future_sessions(self, steady_history, catalog, now) -> None:
        context = build_context(steady_history, catalog, now - timedelta(days=10))
        assert context.n_sessions < len(steady_history)

    def test_naive_now_is_treated_as_utc(self, steady_history, catalog, now) -> None:
        context = build_context(steady_history, catalog, now.replace(tzinfo=None))
        assert context.evaluated_at == now
        assert context == build_context(steady_history, catalog, now)

    def test_scorer_accepts_naive_now(self, steady_history, catalog, now) -> None:
        scorer = ReadinessScorer()
        naive = scorer.score(steady_history, catalog, {"squat"}, now.replace(tzinfo=None))
        assert naive == scorer.score(steady_history, catalog, {"squat"}, now)
