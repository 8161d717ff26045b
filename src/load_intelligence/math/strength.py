"""Strength arithmetic: Epley estimates, plate snapping, unit conversion.

References:
    - Epley (1985): Poundage chart, Boyd Epley Workout.
    - LeSuer et al. (1997): accuracy of 1RM prediction equations.
"""

from __future__ import annotations

import math

from load_intelligence.models.enums import EPLEY_DIVISOR, LBS_PER_KG, WEIGHT_INCREMENT, WeightUnit


def epley_e1rm(weight: float, reps: int) -> float:
    """Estimated one-rep max: weight × (1 + reps / 30)."""
    return weight * (1.0 + reps / EPLEY_DIVISOR)


def weight_for_reps(e1rm: float, reps: int) -> float:
    """Inverse Epley: the load expected to allow ``reps`` at maximal effort."""
    return e1rm / (1.0 + reps / EPLEY_DIVISOR)


def snap_weight(weight: float, increment: float = WEIGHT_INCREMENT) -> float:
    """Round a load to the nearest practical increment (half-up)."""
    if weight <= 0:
        return 0.0
    return math.floor(weight / increment + 0.5) * increment


def snap_reps(reps: float) -> int:
    """Whole-number reps, never below one."""
    return max(1, int(math.floor(reps + 0.5)))


def to_lbs(weight: float, unit: WeightUnit) -> float:
    if unit == WeightUnit.KG:
        return weight * LBS_PER_KG
    return weight


def convert_weight(weight: float, from_unit: WeightUnit, to_unit: WeightUnit) -> float:
    """Convert a load between pounds and kilograms."""
    if from_unit == to_unit:
        return weight
    if to_unit == WeightUnit.KG:
        return weight / LBS_PER_KG
    return weight * LBS_PER_KG
