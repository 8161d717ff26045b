"""Abstract base class for readiness signals."""

from __future__ import annotations

from abc import ABC, abstractmethod

from load_intelligence.models.enums import SignalPriority
from load_intelligence.models.readiness import ReadinessContext, SignalAssessment


class ReadinessSignal(ABC):
    """One sub-signal of the readiness score.

    Signals are discovered automatically by the SignalRegistry and blended
    by the ReadinessScorer.

    Subclasses must define:
        signal_id: unique identifier (e.g. "acwr")
        version: semantic version string
        priority: SignalPriority tier, used to order equally adverse warnings
        weight: share of the overall blend
        required_data: ReadinessContext field names needed by this signal
        evaluate(): the signal's scoring logic
    """

    signal_id: str
    version: str
    priority: SignalPriority
    weight: float
    required_data: list[str]

    def has_required_data(self, context: ReadinessContext) -> bool:
        """Check that all required context fields are present and non-empty."""
        for field_name in self.required_data:
            value = getattr(context, field_name, None)
            if value is None:
                return False
            if isinstance(value, (list, tuple, frozenset)) and len(value) == 0:
                return False
        return True

    @abstractmethod
    def evaluate(self, context: ReadinessContext) -> SignalAssessment | None:
        """Score the context on 0-10, or return None when the signal has nothing to say."""
        ...
