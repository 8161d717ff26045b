"""Readiness outputs: workload ratio, per-muscle recovery, signal verdicts, overall score."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from load_intelligence.models.enums import ACWRStatus, ReadinessStatus, RecoveryStatus


@dataclass(frozen=True)
class ACWRAssessment:
    """Acute:chronic workload ratio and its companions from daily loads."""

    value: Optional[float]
    status: ACWRStatus
    acute_load: float = 0.0
    chronic_weekly_load: float = 0.0
    ewma_value: Optional[float] = None
    monotony: float = 0.0
    strain: float = 0.0


@dataclass(frozen=True)
class MuscleRecovery:
    """Recovery state of one muscle group."""

    muscle: str
    recovery_percent: float  # 0-100
    readiness: float  # 0-10
    status: RecoveryStatus
    hours_since_trained: Optional[float] = None
    hours_until_ready: float = 0.0
    last_trained_at: Optional[datetime] = None


@dataclass(frozen=True)
class SignalAssessment:
    """One readiness signal's verdict, on the same 0-10 scale as the overall score."""

    signal_id: str
    score: float
    weight: float
    warnings: tuple[str, ...] = field(default_factory=tuple)
    recommendations: tuple[str, ...] = field(default_factory=tuple)
    explanation: str = ""


@dataclass(frozen=True)
class ReadinessContext:
    """Precomputed inputs every readiness signal reads from."""

    evaluated_at: datetime
    n_sessions: int
    acwr: Optional[ACWRAssessment] = None
    muscle_recovery: tuple[MuscleRecovery, ...] = field(default_factory=tuple)
    performance_trend: Optional[float] = None
    planned_muscles: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class ReadinessResult:
    """Pre-session readiness for the UI.

    ``is_fallback`` marks the conservative result served when history could
    not be fetched or scored within the time budget.
    """

    overall_score: float  # 0-10
    overall_status: ReadinessStatus
    acwr: ACWRAssessment
    muscle_recovery: tuple[MuscleRecovery, ...] = field(default_factory=tuple)
    warnings: tuple[str, ...] = field(default_factory=tuple)
    recommendations: tuple[str, ...] = field(default_factory=tuple)
    confidence: float = 0.0  # 0-1
    signals: tuple[SignalAssessment, ...] = field(default_factory=tuple)
    is_fallback: bool = False
    evaluated_at: Optional[datetime] = None
