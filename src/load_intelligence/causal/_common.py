"""Input checks shared by the estimators."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from load_intelligence import config
from load_intelligence.models.causal import InsufficientData


def as_series(values: Sequence[float] | np.ndarray) -> np.ndarray:
    return np.asarray(values, dtype=np.float64).ravel()


def check_sample(
    *arrays: np.ndarray, minimum: int | None = None, label: str = "observations"
) -> InsufficientData | None:
    """InsufficientData when lengths differ, values are non-finite or n < minimum."""
    required = config.MIN_CAUSAL_SESSIONS if minimum is None else minimum
    lengths = {len(a) for a in arrays}
    available = min(lengths) if lengths else 0
    if len(lengths) > 1:
        return InsufficientData(
            reason=f"Series lengths differ: {sorted(lengths)}",
            required=required,
            available=available,
        )
    if any(not np.all(np.isfinite(a)) for a in arrays):
        return InsufficientData(
            reason="Series contain missing or non-finite values",
            required=required,
            available=available,
        )
    if available < required:
        return InsufficientData(
            reason=f"Need at least {required} {label}",
            required=required,
            available=available,
        )
    return None


def two_sided_confidence(p_value: float) -> float:
    return float(min(1.0, max(0.0, 1.0 - p_value)))
