"""Causal estimators over per-session training series."""

from load_intelligence.causal.did import difference_in_differences
from load_intelligence.causal.granger import granger_causality
from load_intelligence.causal.instrumental import instrumental_variable
from load_intelligence.causal.mediation import mediation_analysis
from load_intelligence.causal.propensity import propensity_score_matching
from load_intelligence.causal.suite import run_causal_suite

__all__ = [
    "difference_in_differences",
    "granger_causality",
    "instrumental_variable",
    "mediation_analysis",
    "propensity_score_matching",
    "run_causal_suite",
]
