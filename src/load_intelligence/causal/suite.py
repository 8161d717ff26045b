"""Runs every estimator over the per-session series of one history snapshot.

Questions asked:
    - Granger: fatigue → performance, volume → fatigue, intensity → performance
    - Mediation: volume → fatigue → performance
    - Propensity matching: high- vs low-volume sessions (median split),
      matched on intensity and RPE, outcome performance
    - Difference-in-differences: first vs second half of the history,
      performance as the treated series, fatigue as the control trend
    - Instrumental variable: weekend session as instrument for volume → performance
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from load_intelligence import config
from load_intelligence.aggregation.history import SessionSeries, session_series
from load_intelligence.causal.did import difference_in_differences
from load_intelligence.causal.granger import granger_causality
from load_intelligence.causal.instrumental import instrumental_variable
from load_intelligence.causal.mediation import mediation_analysis
from load_intelligence.causal.propensity import propensity_score_matching
from load_intelligence.models.causal import CausalInsights, DiDOutcome, InsufficientData
from load_intelligence.models.enums import MIN_DID_HALF, MIN_DID_SESSIONS, MIN_IV_OBSERVATIONS
from load_intelligence.models.records import SessionRecord

logger = logging.getLogger(__name__)

GRANGER_LAG = 1


def run_causal_suite(
    history: Sequence[SessionRecord],
    minimum: int | None = None,
    seed: int | None = None,
) -> CausalInsights:
    """Every estimator slot filled with a result or InsufficientData."""
    required = config.MIN_CAUSAL_SESSIONS if minimum is None else minimum
    series = session_series(history, minimum=required)
    if isinstance(series, InsufficientData):
        logger.info("Causal suite skipped: %s (%d available)", series.reason, series.available)
        return CausalInsights(
            n_sessions=series.available,
            fatigue_to_performance=series,
            volume_to_fatigue=series,
            intensity_to_performance=series,
            mediation=series,
            propensity=series,
            difference_in_differences=series,
            instrumental_variable=series,
        )

    fatigue = series.array("fatigue")
    performance = series.array("performance")
    volume = series.array("volume")
    intensity = series.array("intensity")
    rpe = series.array("rpe")

    high_volume = volume > np.median(volume)
    weekend = np.asarray([ts.weekday() >= 5 for ts in series.timestamps], dtype=np.float64)

    insights = CausalInsights(
        n_sessions=len(series),
        fatigue_to_performance=granger_causality(
            fatigue, performance, GRANGER_LAG, "fatigue", "performance", minimum=required
        ),
        volume_to_fatigue=granger_causality(
            volume, fatigue, GRANGER_LAG, "volume", "fatigue", minimum=required
        ),
        intensity_to_performance=granger_causality(
            intensity, performance, GRANGER_LAG, "intensity", "performance", minimum=required
        ),
        mediation=mediation_analysis(
            volume, fatigue, performance, "volume", "fatigue", "performance",
            seed=seed, minimum=required,
        ),
        propensity=propensity_score_matching(
            high_volume, np.column_stack([intensity, rpe]), performance,
            "high-volume sessions", "performance",
        ),
        difference_in_differences=_split_did(series),
        instrumental_variable=instrumental_variable(
            weekend, volume, performance, "weekend training", "volume", "performance",
            minimum=max(required, MIN_IV_OBSERVATIONS),
        ),
    )
    logger.info("Causal suite ran on %d sessions", len(series))
    return insights


def _split_did(series: SessionSeries) -> DiDOutcome:
    """Treat the midpoint of the history as a regime change."""
    n = len(series)
    if n < MIN_DID_SESSIONS:
        return InsufficientData(
            reason=f"Difference-in-differences needs at least {MIN_DID_SESSIONS} sessions",
            required=MIN_DID_SESSIONS,
            available=n,
        )
    mid = n // 2
    performance = series.array("performance")
    fatigue = series.array("fatigue")
    return difference_in_differences(
        performance[:mid], performance[mid:], fatigue[:mid], fatigue[mid:], min_group=MIN_DID_HALF
    )
