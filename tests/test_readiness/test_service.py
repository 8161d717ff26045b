"""Tests for the async readiness service and request coordinator."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

import pytest

from load_intelligence.models.enums import ACWRStatus, ReadinessStatus
from load_intelligence.readiness.service import (
    ReadinessInputs,
    ReadinessRequestCoordinator,
    ReadinessService,
    fallback_result,
)

NOW = datetime(2026, 3, 2, 18, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self) -> None:
        self.value = 1000.0

    def __call__(self) -> float:
        return self.value


class FakeProvider:
    """Async history collaborator that counts calls and can be slowed or broken."""

    def __init__(self, inputs: ReadinessInputs, delay: float = 0.0, fail: bool = False) -> None:
        self.inputs = inputs
        self.delay = delay
        self.fail = fail
        self.calls: list[str] = []

    async def __call__(self, user_id: str) -> ReadinessInputs:
        self.calls.append(user_id)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError("history store unavailable")
        return self.inputs


@pytest.fixture
def provider(steady_history, catalog) -> FakeProvider:
    return FakeProvider(ReadinessInputs(steady_history, catalog))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def _service(provider, clock, **kwargs) -> ReadinessService:
    kwargs.setdefault("timeout_s", 2.0)
    kwargs.setdefault("cache_ttl_s", 300.0)
    return ReadinessService(provider, clock=clock, now=lambda: NOW, **kwargs)


class TestFallback:
    def test_fallback_shape(self) -> None:
        result = fallback_result(NOW)
        assert result.is_fallback is True
        assert result.overall_score == 6.5
        assert result.overall_status == ReadinessStatus.MODERATE
        assert result.acwr.status == ACWRStatus.UNKNOWN
        assert result.confidence == 0.0
        assert result.warnings


class TestReadinessService:
    @pytest.mark.asyncio
    async def test_real_result(self, provider, clock) -> None:
        result = await _service(provider, clock).assess("user-1", {"bench-press"})
        assert result.is_fallback is False
        assert result.evaluated_at == NOW
        assert provider.calls == ["user-1"]

    @pytest.mark.asyncio
    async def test_slow_history_times_out_to_fallback(self, steady_history, catalog, clock) -> None:
        slow = FakeProvider(ReadinessInputs(steady_history, catalog), delay=5.0)
        service = _service(slow, clock, timeout_s=0.05)
        result = await asyncio.wait_for(service.assess("user-1"), timeout=2.0)
        assert result.is_fallback is True
        assert result.overall_score == 6.5

    @pytest.mark.asyncio
    async def test_provider_error_falls_back(self, steady_history, catalog, clock) -> None:
        broken = FakeProvider(ReadinessInputs(steady_history, catalog), fail=True)
        result = await _service(broken, clock).assess("user-1")
        assert result.is_fallback is True

    @pytest.mark.asyncio
    async def test_fallback_is_not_cached(self, steady_history, catalog, clock) -> None:
        flaky = FakeProvider(ReadinessInputs(steady_history, catalog), fail=True)
        service = _service(flaky, clock)
        assert (await service.assess("user-1")).is_fallback is True
        flaky.fail = False
        assert (await service.assess("user-1")).is_fallback is False
        assert len(flaky.calls) == 2

    @pytest.mark.asyncio
    async def test_cache_hit_within_ttl(self, provider, clock) -> None:
        service = _service(provider, clock)
        first = await service.assess("user-1", {"squat"})
        clock.value += 299.0
        second = await service.assess("user-1", {"squat"})
        assert second is first
        assert len(provider.calls) == 1

    @pytest.mark.asyncio
    async def test_cache_expires(self, provider, clock) -> None:
        service = _service(provider, clock)
        await service.assess("user-1")
        clock.value += 300.0
        await service.assess("user-1")
        assert len(provider.calls) == 2

    @pytest.mark.asyncio
    async def test_cache_keyed_by_plan(self, provider, clock) -> None:
        service = _service(provider, clock)
        await service.assess("user-1", {"squat"})
        await service.assess("user-1", {"bench-press"})
        await service.assess("user-2", {"squat"})
        assert len(provider.calls) == 3

    @pytest.mark.asyncio
    async def test_invalidate_user(self, provider, clock) -> None:
        service = _service(provider, clock)
        await service.assess("user-1")
        await service.assess("user-2")
        service.invalidate("user-1")
        await service.assess("user-1")
        await service.assess("user-2")
        assert provider.calls == ["user-1", "user-2", "user-1"]

    @pytest.mark.asyncio
    async def test_invalidate_all(self, provider, clock) -> None:
        service = _service(provider, clock)
        await service.assess("user-1")
        service.invalidate()
        await service.assess("user-1")
        assert len(provider.calls) == 2

    @pytest.mark.asyncio
    async def test_caller_cancellation_propagates(self, steady_history, catalog, clock) -> None:
        slow = FakeProvider(ReadinessInputs(steady_history, catalog), delay=5.0)
        service = _service(slow, clock, timeout_s=10.0)
        task = asyncio.ensure_future(service.assess("user-1"))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


    @pytest.mark.asyncio
    async def test_missing_history_falls_back(self, catalog, clock, caplog) -> None:
        provider = FakeProvider(ReadinessInputs(None, catalog))
        with caplog.at_level(logging.WARNING):
            result = await _service(provider, clock).assess("user-1")
        assert result.is_fallback is True
        assert "No history snapshot for user-1" in caplog.text

    @pytest.mark.asyncio
    async def test_missing_catalog_falls_back(self, steady_history, clock) -> None:
        provider = FakeProvider(ReadinessInputs(steady_history, None))
        assert (await _service(provider, clock).assess("user-1")).is_fallback is True


class TestRequestCoordinator:
    @pytest.mark.asyncio
    async def test_only_latest_request_delivers(self, steady_history, catalog, clock) -> None:
        slow = FakeProvider(ReadinessInputs(steady_history, catalog), delay=0.05)
        delivered: list[int] = []
        coordinator = ReadinessRequestCoordinator(
            _service(slow, clock), on_result=lambda token, _: delivered.append(token)
        )
        first = coordinator.request("user-1", {"squat"})
        second = coordinator.request("user-1", {"bench-press"})
        await coordinator.wait()
        assert (first, second) == (1, 2)
        assert delivered == [second]
        assert coordinator.latest_token == second
        assert coordinator.latest_result is not None

    @pytest.mark.asyncio
    async def test_stale_token_is_discarded(self, provider, clock) -> None:
        coordinator = ReadinessRequestCoordinator(_service(provider, clock))
        coordinator.request("user-1")
        coordinator.request("user-1")
        await coordinator.wait()
        assert coordinator.deliver(1, fallback_result(NOW)) is False
        assert coordinator.latest_result.is_fallback is False

    @pytest.mark.asyncio
    async def test_result_delivered_once(self, provider, clock) -> None:
        coordinator = ReadinessRequestCoordinator(_service(provider, clock))
        token = coordinator.request("user-1")
        await coordinator.wait()
        assert coordinator.deliver(token, fallback_result(NOW)) is False

    @pytest.mark.asyncio
    async def test_wait_without_request(self, provider, clock) -> None:
        coordinator = ReadinessRequestCoordinator(_service(provider, clock))
        await coordinator.wait()
        assert coordinator.latest_result is None
