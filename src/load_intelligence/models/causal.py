"""Causal estimator outputs. Each estimator returns its own result type or InsufficientData."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union


@dataclass(frozen=True)
class InsufficientData:
    """Explicit "not enough observations" outcome. Never raised, always returned."""

    kind: ClassVar[str] = "insufficient_data"

    reason: str
    required: int
    available: int


@dataclass(frozen=True)
class GrangerResult:
    """Does the past of ``cause`` improve prediction of ``effect``?"""

    kind: ClassVar[str] = "granger"

    cause: str
    effect: str
    lag: int
    f_statistic: float
    p_value: float
    effect_estimate: float  # sum of lagged cause coefficients
    is_causal: bool
    confidence: float
    n_obs: int
    interpretation: str


@dataclass(frozen=True)
class MediationResult:
    """Decomposition of X → Y into a direct path and a path through M."""

    kind: ClassVar[str] = "mediation"

    treatment: str
    mediator: str
    outcome: str
    total_effect: float
    direct_effect: float
    indirect_effect: float
    a_path: float
    b_path: float
    sobel_z: float
    p_value: float
    ci_low: float
    ci_high: float
    proportion_mediated: float
    is_significant: bool
    confidence: float
    n_obs: int
    interpretation: str


@dataclass(frozen=True)
class PropensityResult:
    """Covariate-matched average treatment effect on the treated."""

    kind: ClassVar[str] = "propensity_matching"

    treatment: str
    outcome: str
    effect_estimate: float
    standard_error: float
    p_value: float
    matched_pairs: int
    n_treated: int
    n_control: int
    is_significant: bool
    confidence: float
    interpretation: str


@dataclass(frozen=True)
class DiDResult:
    """Difference-in-differences estimate of a regime change."""

    kind: ClassVar[str] = "difference_in_differences"

    estimate: float
    standard_error: float
    t_statistic: float
    degrees_of_freedom: float
    p_value: float
    treatment_change: float
    control_change: float
    is_significant: bool
    confidence: float
    interpretation: str


@dataclass(frozen=True)
class InstrumentalVariableResult:
    """Wald / two-stage least squares estimate with a binary instrument."""

    kind: ClassVar[str] = "instrumental_variable"

    instrument: str
    treatment: str
    outcome: str
    estimate: float
    standard_error: float
    first_stage_f: float
    weak_instrument: bool
    p_value: float
    is_significant: bool
    confidence: float
    n_obs: int
    interpretation: str


GrangerOutcome = Union[GrangerResult, InsufficientData]
MediationOutcome = Union[MediationResult, InsufficientData]
PropensityOutcome = Union[PropensityResult, InsufficientData]
DiDOutcome = Union[DiDResult, InsufficientData]
IVOutcome = Union[InstrumentalVariableResult, InsufficientData]


@dataclass(frozen=True)
class CausalInsights:
    """Every estimator slot for one history snapshot."""

    n_sessions: int
    fatigue_to_performance: GrangerOutcome
    volume_to_fatigue: GrangerOutcome
    intensity_to_performance: GrangerOutcome
    mediation: MediationOutcome
    propensity: PropensityOutcome
    difference_in_differences: DiDOutcome
    instrumental_variable: IVOutcome
