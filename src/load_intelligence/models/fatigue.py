"""Fatigue model outputs: per-muscle state, alerts and session assessments."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from load_intelligence.models.enums import AdjustmentOption, Confidence, FatigueSeverity


@dataclass(frozen=True)
class MuscleFatigue:
    """Accumulated, decayed stress on one muscle group."""

    muscle: str
    level: float  # 0-100
    overshoot_sets: int = 0
    mean_overshoot: float = 0.0
    contributing_sets: int = 0


@dataclass(frozen=True)
class MuscleFatigueState:
    """Transient fatigue snapshot, rebuilt from the input sets on every call.

    ``active`` is False when no completed set carried RPE data; that is a
    valid zero-information state, not an error.
    """

    evaluated_at: datetime
    muscles: tuple[MuscleFatigue, ...] = field(default_factory=tuple)
    active: bool = False
    rated_sets: int = 0

    def for_muscle(self, muscle: str) -> MuscleFatigue | None:
        for entry in self.muscles:
            if entry.muscle == muscle:
                return entry
        return None

    def levels(self) -> dict[str, float]:
        return {m.muscle: m.level for m in self.muscles}


@dataclass(frozen=True)
class AdjustmentSuggestion:
    """One concrete alternative the lifter can choose in response to an alert."""

    option: AdjustmentOption
    description: str
    confidence: Confidence
    new_weight: Optional[float] = None
    new_reps: Optional[int] = None
    extra_rest_s: Optional[int] = None


@dataclass(frozen=True)
class FatigueAlert:
    """Warning that accumulated overshoot calls for a lighter load."""

    severity: FatigueSeverity
    affected_muscles: frozenset[str]
    explanation: str
    scientific_basis: str
    suggested_reduction: float  # fraction, 0.05 = 5%
    confidence: float  # 0-1
    options: tuple[AdjustmentSuggestion, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SessionFatigueIndicators:
    """Raw session evidence, counted over every completed set."""

    mean_rpe_overshoot: float = 0.0  # over sets with both prescribed and actual RPE
    form_breakdown_sets: int = 0
    unintentional_failure_sets: int = 0
    volume_load_lbs: float = 0.0


@dataclass(frozen=True)
class SessionFatigueResult:
    """Real-time assessment of the in-progress session.

    ``overall_fatigue`` is a 0-100 session scalar built from the indicators;
    ``reduction_percent`` is the load cut to apply, 0 unless
    ``should_reduce_weight``.
    """

    should_reduce_weight: bool
    state: MuscleFatigueState
    alert: FatigueAlert | None = None
    completed_sets: int = 0
    indicators: SessionFatigueIndicators = field(default_factory=SessionFatigueIndicators)
    overall_fatigue: float = 0.0
    reduction_percent: float = 0.0
    confidence: float = 0.0
    reasoning: str = ""


@dataclass(frozen=True)
class RPECalibration:
    """Systematic gap between prescribed and reported effort for one exercise."""

    exercise_id: str
    mean_deviation: float  # actual - prescribed
    sets_analyzed: int
    miscalibrated_sets: int
    suggested_load_change: float  # fraction; negative = lighter
    explanation: str
