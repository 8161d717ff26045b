"""Async readiness service: bounded-time scoring, TTL cache and request tokens.

The history fetch and the scoring run as one cancellable task raced against a
watchdog timeout. When the budget runs out, or the history collaborator
fails, the caller gets a conservative fallback result. Only real results are
cached.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Iterable, Optional, Sequence

from load_intelligence import config
from load_intelligence.catalog import ExerciseCatalog
from load_intelligence.exceptions import (
    CatalogUnavailableError,
    HistoryUnavailableError,
    LoadIntelligenceError,
)
from load_intelligence.models.enums import (
    READINESS_FALLBACK_SCORE,
    ACWRStatus,
    ReadinessStatus,
)
from load_intelligence.models.readiness import ACWRAssessment, ReadinessResult
from load_intelligence.models.records import SessionRecord, ensure_utc
from load_intelligence.readiness.scorer import ReadinessScorer

logger = logging.getLogger(__name__)

FALLBACK_WARNING = "Training data was incomplete or slow to load; showing a conservative estimate."
FALLBACK_RECOMMENDATION = "Train by feel today and keep one or two reps in reserve."


@dataclass(frozen=True)
class ReadinessInputs:
    """What the history collaborator returns for one user."""

    history: Optional[Sequence[SessionRecord]]
    catalog: Optional[ExerciseCatalog] = field(default_factory=ExerciseCatalog)


HistoryProvider = Callable[[str], Awaitable[ReadinessInputs]]
CacheKey = tuple[str, frozenset[str]]


def fallback_result(now: datetime | None = None) -> ReadinessResult:
    """The bounded result served when real data is unavailable."""
    return ReadinessResult(
        overall_score=READINESS_FALLBACK_SCORE,
        overall_status=ReadinessStatus.MODERATE,
        acwr=ACWRAssessment(value=None, status=ACWRStatus.UNKNOWN),
        warnings=(FALLBACK_WARNING,),
        recommendations=(FALLBACK_RECOMMENDATION,),
        confidence=0.0,
        is_fallback=True,
        evaluated_at=now,
    )


class ReadinessService:
    """Read-through cached, time-bounded readiness assessments.

    Usage:
        service = ReadinessService(provider)
        result = await service.assess("user-1", {"bench-press", "squat"})
    """

    def __init__(
        self,
        provider: HistoryProvider,
        scorer: ReadinessScorer | None = None,
        timeout_s: float | None = None,
        cache_ttl_s: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self.provider = provider
        self.scorer = scorer or ReadinessScorer()
        self.timeout_s = config.READINESS_TIMEOUT_S if timeout_s is None else timeout_s
        self.cache_ttl_s = config.READINESS_CACHE_TTL_S if cache_ttl_s is None else cache_ttl_s
        self._clock = clock
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._cache: dict[CacheKey, tuple[float, ReadinessResult]] = {}

    async def assess(
        self, user_id: str, planned_exercise_ids: Iterable[str] | None = None
    ) -> ReadinessResult:
        """Readiness for ``user_id``; never raises and never blocks past the timeout."""
        key: CacheKey = (user_id, frozenset(planned_exercise_ids or ()))
        cached = self._cached(key)
        if cached is not None:
            logger.info("Readiness cache hit for %s", user_id)
            return cached

        moment = ensure_utc(self._now())
        task = asyncio.ensure_future(self._compute(user_id, key[1], moment))
        try:
            result = await asyncio.wait_for(task, timeout=self.timeout_s)
        except asyncio.TimeoutError:
            logger.warning(
                "Readiness for %s exceeded %.1fs; serving fallback", user_id, self.timeout_s
            )
            return fallback_result(moment)
        except asyncio.CancelledError:
            task.cancel()
            raise
        except LoadIntelligenceError as exc:
            logger.warning("Readiness for %s unavailable (%s); serving fallback", user_id, exc)
            return fallback_result(moment)
        except Exception:
            logger.exception("Readiness for %s failed; serving fallback", user_id)
            return fallback_result(moment)

        self._cache[key] = (self._clock(), result)
        return result

    async def _compute(
        self, user_id: str, planned: frozenset[str], moment: datetime
    ) -> ReadinessResult:
        inputs = await self.provider(user_id)
        if inputs is None or inputs.history is None:
            raise HistoryUnavailableError(f"No history snapshot for {user_id}", user_id=user_id)
        if inputs.catalog is None:
            raise CatalogUnavailableError(f"No exercise catalog for {user_id}")
        return await asyncio.to_thread(
            self.scorer.score, inputs.history, inputs.catalog, planned, moment
        )

    def _cached(self, key: CacheKey) -> ReadinessResult | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        stored_at, result = entry
        if self._clock() - stored_at >= self.cache_ttl_s:
            del self._cache[key]
            return None
        return result

    def invalidate(self, user_id: str | None = None) -> None:
        """Drop cached results for one user (e.g. after a workout is saved), or all."""
        if user_id is None:
            self._cache.clear()
            return
        for key in [k for k in self._cache if k[0] == user_id]:
            del self._cache[key]


class ReadinessRequestCoordinator:
    """Applies only the newest readiness request's result.

    Each request gets a monotonically increasing token. Starting a new
    request cancels the one in flight, and a result is delivered only if its
    token is still the latest and has not been settled before.
    """

    def __init__(
        self,
        service: ReadinessService,
        on_result: Callable[[int, ReadinessResult], None] | None = None,
    ) -> None:
        self.service = service
        self.on_result = on_result
        self._tokens = itertools.count(1)
        self._latest_token = 0
        self._settled_token = 0
        self._task: asyncio.Task[None] | None = None
        self.latest_result: ReadinessResult | None = None

    @property
    def latest_token(self) -> int:
        return self._latest_token

    def request(self, user_id: str, planned_exercise_ids: Iterable[str] | None = None) -> int:
        """Start a readiness request from a running event loop; returns its token."""
        token = next(self._tokens)
        self._latest_token = token
        if self._task is not None and not self._task.done():
            self._task.cancel()
        planned = frozenset(planned_exercise_ids or ())
        self._task = asyncio.ensure_future(self._run(token, user_id, planned))
        return token

    async def _run(self, token: int, user_id: str, planned: frozenset[str]) -> None:
        result = await self.service.assess(user_id, planned)
        self.deliver(token, result)

    def deliver(self, token: int, result: ReadinessResult) -> bool:
        """Apply ``result`` if ``token`` is current and unsettled; report whether it was applied."""
        if token != self._latest_token or token == self._settled_token:
            logger.debug("Discarding readiness result for stale token %d", token)
            return False
        self._settled_token = token
        self.latest_result = result
        if self.on_result is not None:
            self.on_result(token, result)
        return True

    async def wait(self) -> None:
        """Wait for the current request to finish or be cancelled."""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            if not self._task.cancelled():
                raise
