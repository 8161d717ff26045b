"""Set-level weight/rep recommendations, one tagged variant per evidence path."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from load_intelligence.models.enums import BasedOn, Confidence, WeightUnit
from load_intelligence.models.fatigue import FatigueAlert


@dataclass(frozen=True)
class HistoricalRecommendation:
    """Suggestion derived from the best historical set for the rep target."""

    based_on: ClassVar[BasedOn] = BasedOn.HISTORICAL

    exercise_id: str
    suggested_weight: float
    suggested_reps: int
    unit: WeightUnit
    reasoning: str
    confidence: Confidence
    reference_e1rm: Optional[float] = None

    @property
    def fatigue_alert(self) -> None:
        return None


@dataclass(frozen=True)
class PercentageRecommendation:
    """Suggestion derived from a prescribed percentage of a recorded max."""

    based_on: ClassVar[BasedOn] = BasedOn.PERCENTAGE_1RM

    exercise_id: str
    suggested_weight: float
    suggested_reps: int
    unit: WeightUnit
    reasoning: str
    confidence: Confidence
    percent_of_1rm: float = 0.0
    max_weight: float = 0.0

    @property
    def fatigue_alert(self) -> None:
        return None


@dataclass(frozen=True)
class RpeAdjustedRecommendation:
    """Fatigue-driven reduction of the most recent working weight.

    Always carries the alert that triggered it.
    """

    based_on: ClassVar[BasedOn] = BasedOn.RPE_ADJUSTMENT

    exercise_id: str
    suggested_weight: float
    suggested_reps: int
    unit: WeightUnit
    reasoning: str
    confidence: Confidence
    fatigue_alert: FatigueAlert
    reference_weight: float = 0.0

    def __post_init__(self) -> None:
        if self.fatigue_alert is None:
            raise ValueError("An RPE-adjusted recommendation requires a fatigue alert")


RecommendationResult = Union[
    HistoricalRecommendation, PercentageRecommendation, RpeAdjustedRecommendation
]
