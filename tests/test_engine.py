"""Tests for IntelligenceEngine, the in-process facade."""

from __future__ import annotations

from datetime import timedelta

import pytest

from load_intelligence import IntelligenceEngine
from load_intelligence.models.causal import CausalInsights, InsufficientData
from load_intelligence.models.enums import BasedOn
from load_intelligence.models.records import UserMaxRecord


@pytest.fixture
def engine(catalog_entries) -> IntelligenceEngine:
    return IntelligenceEngine(
        catalog_entries, user_maxes={"squat": UserMaxRecord("squat", 365.0, tested=True)}
    )


class TestIntelligenceEngine:
    def test_accepts_catalog_entries(self, engine) -> None:
        assert "bench-press" in engine.catalog
        assert len(engine.catalog) == 6

    def test_recommend_historical(self, engine, steady_history, now) -> None:
        result = engine.recommend("bench-press", 5, 8.0, [], steady_history, now=now)
        assert result.based_on == BasedOn.HISTORICAL
        assert result.suggested_weight == 225.0

    def test_recommend_percentage_uses_engine_maxes(self, engine, now) -> None:
        result = engine.recommend("squat", 3, None, [], (), percent_of_1rm=80.0, now=now)
        assert result.based_on == BasedOn.PERCENTAGE_1RM
        assert result.suggested_weight == 292.0

    def test_recommend_without_evidence(self, engine, now) -> None:
        assert engine.recommend("bicep-curl", 10, 8.0, [], (), now=now) is None

    def test_recommend_failure_returns_none(self, engine, now) -> None:
        assert engine.recommend("bench-press", 5, 8.0, [object()], (), now=now) is None

    def test_session_fatigue(self, engine, make_set, now) -> None:
        sets = [
            make_set(weight=185.0, reps=8, rpe=9.5, prescribed_rpe=8.0,
                     timestamp=now - timedelta(minutes=4 * (3 - i)), set_index=i)
            for i in range(3)
        ]
        result = engine.session_fatigue(sets, "incline-press", now=now)
        assert result.should_reduce_weight is True

    def test_rpe_calibration(self, engine, make_set) -> None:
        sets = [make_set(rpe=10.0, prescribed_rpe=7.0, set_index=i) for i in range(3)]
        (calibration,) = engine.rpe_calibration(sets)
        assert calibration.suggested_load_change < 0

    def test_assess_readiness(self, engine, steady_history, now) -> None:
        result = engine.assess_readiness(steady_history, {"bench-press"}, now=now)
        assert result.is_fallback is False
        assert 0.0 <= result.overall_score <= 10.0

    def test_causal_insights_short_history(self, engine, short_history) -> None:
        insights = engine.causal_insights(short_history)
        assert isinstance(insights, CausalInsights)
        assert isinstance(insights.mediation, InsufficientData)

    def test_causal_failure_becomes_insufficient(self, engine, monkeypatch, steady_history) -> None:
        def _boom(*args, **kwargs):
            raise ValueError("singular matrix")

        monkeypatch.setattr("load_intelligence.engine.run_causal_suite", _boom)
        result = engine.causal_insights(steady_history)
        assert isinstance(result, InsufficientData)
        assert "singular matrix" in result.reason
        assert result.available == len(steady_history)

    def test_calls_are_independent(self, engine, steady_history, now) -> None:
        first = engine.assess_readiness(steady_history, {"squat"}, now=now)
        engine.assess_readiness((), {"bench-press"}, now=now)
        assert engine.assess_readiness(steady_history, {"squat"}, now=now) == first


class TestEngineBoundaries:
    def test_naive_now_recommend(self, engine, steady_history, now) -> None:
        naive = engine.recommend("bench-press", 5, 8.0, [], steady_history, now=now.replace(tzinfo=None))
        assert naive is not None
        assert naive == engine.recommend("bench-press", 5, 8.0, [], steady_history, now=now)
        assert naive.suggested_weight == 225.0

    def test_naive_now_session_fatigue(self, engine, make_set, now) -> None:
        sets = [
            make_set(weight=185.0, reps=8, rpe=9.5, prescribed_rpe=8.0,
                     timestamp=now - timedelta(minutes=4 * (3 - i)), set_index=i)
            for i in range(3)
        ]
        result = engine.session_fatigue(sets, "bench-press", now=now.replace(tzinfo=None))
        assert result.should_reduce_weight is True
        assert result.state.evaluated_at == now

    def test_naive_now_readiness(self, engine, steady_history, now) -> None:
        naive = engine.assess_readiness(steady_history, {"squat"}, now=now.replace(tzinfo=None))
        assert naive.is_fallback is False
        assert naive == engine.assess_readiness(steady_history, {"squat"}, now=now)

    def test_session_fatigue_failure_is_inactive(self, engine, now) -> None:
        result = engine.session_fatigue([object()], "bench-press", now=now)
        assert result.should_reduce_weight is False
        assert result.state.active is False
        assert result.alert is None

    def test_readiness_failure_serves_fallback(self, engine, monkeypatch, steady_history, now) -> None:
        def _boom(*args, **kwargs):
            raise RuntimeError("scorer exploded")

        monkeypatch.setattr(engine.scorer, "score", _boom)
        result = engine.assess_readiness(steady_history, {"squat"}, now=now)
        assert result.is_fallback is True
        assert result.evaluated_at == now

    @pytest.mark.parametrize("percent", [float("nan"), float("inf"), -10.0])
    def test_unusable_percent_falls_back_to_history(self, catalog_entries, steady_history, now, percent) -> None:
        engine = IntelligenceEngine(
            catalog_entries, user_maxes={"bench-press": UserMaxRecord("bench-press", 300.0)}
        )
        result = engine.recommend("bench-press", 5, None, [], steady_history, percent_of_1rm=percent, now=now)
        assert result is not None
        assert result.based_on == BasedOn.HISTORICAL
        assert result.suggested_weight == 225.0

    def test_nan_rep_target_uses_default(self, engine, steady_history, now) -> None:
        result = engine.recommend("bench-press", float("nan"), None, [], steady_history, now=now)
        assert result is not None
        assert result.suggested_reps == 5
        assert result.suggested_weight == 225.0

    def test_nan_rpe_target_is_ignored(self, engine, steady_history, now) -> None:
        result = engine.recommend("bench-press", 5, float("nan"), [], steady_history, now=now)
        assert result == engine.recommend("bench-press", 5, None, [], steady_history, now=now)
