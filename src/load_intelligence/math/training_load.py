"""Training load calculations: rolling ACWR, EWMA ACWR, monotony.

References:
    - Hulin et al. (2016): rolling-average acute:chronic workload ratio
    - Williams et al. (2017): EWMA-based ACWR
    - Gabbett (2016): ACWR injury risk thresholds
    - Foster (1998): Monotony and strain
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

import numpy as np
import pandas as pd

from load_intelligence.models.enums import (
    ACWR_ACUTE_DAYS,
    ACWR_CHRONIC_DAYS,
    ACWR_DANGER_THRESHOLD,
    ACWR_OPTIMAL_HIGH,
    ACWR_OPTIMAL_LOW,
    EWMA_ACUTE_SPAN,
    EWMA_CHRONIC_SPAN,
    ACWRStatus,
)


def window_sum(
    loads: Iterable[tuple[datetime, float]], now: datetime, days: int
) -> float:
    """Sum of loads with timestamps in the half-open window (now - days, now]."""
    start = now - timedelta(days=days)
    return float(sum(load for moment, load in loads if start < moment <= now))


def calculate_rolling_acwr(
    loads: list[tuple[datetime, float]], now: datetime
) -> float | None:
    """Acute:Chronic Workload Ratio from timestamped session loads.

    ACWR = (sum of loads in the trailing 7 days) /
           (sum of loads in the trailing 28 days / 4)

    A perfectly flat weekly load gives exactly 1.0.

    Returns:
        The ratio, or None when there is no chronic load to compare against.

    Reference:
        Hulin et al. (2016). Br J Sports Med 50(4):231-236.
    """
    acute = window_sum(loads, now, ACWR_ACUTE_DAYS)
    chronic_total = window_sum(loads, now, ACWR_CHRONIC_DAYS)
    if chronic_total <= 0.0:
        return None
    chronic_weekly = chronic_total / (ACWR_CHRONIC_DAYS / ACWR_ACUTE_DAYS)
    return acute / chronic_weekly


def classify_acwr(acwr: float | None) -> ACWRStatus:
    """Classify an ACWR value into a risk band.

    Bands: < 0.8 undertrained, 0.8-1.3 (inclusive) optimal,
    (1.3, 1.5] caution, > 1.5 high risk.

    Reference:
        Gabbett (2016), Br J Sports Med 50(5):273-280.
    """
    if acwr is None:
        return ACWRStatus.UNKNOWN
    if acwr > ACWR_DANGER_THRESHOLD:
        return ACWRStatus.HIGH_RISK
    if acwr > ACWR_OPTIMAL_HIGH:
        return ACWRStatus.CAUTION
    if acwr >= ACWR_OPTIMAL_LOW:
        return ACWRStatus.OPTIMAL
    return ACWRStatus.UNDERTRAINED


def daily_load_series(
    loads: list[tuple[datetime, float]], now: datetime, days: int = ACWR_CHRONIC_DAYS
) -> pd.Series:
    """Bucket timestamped loads into a dense daily series ending on ``now``'s date.

    Days without training are zero. Oldest first.
    """
    end = pd.Timestamp(now.date())
    index = pd.date_range(end=end, periods=days, freq="D")
    if not loads:
        return pd.Series(0.0, index=index, dtype=np.float64)
    frame = pd.DataFrame(
        {
            "day": [pd.Timestamp(moment.date()) for moment, _ in loads],
            "load": [float(load) for _, load in loads],
        }
    )
    daily = frame.groupby("day")["load"].sum()
    return daily.reindex(index, fill_value=0.0).astype(np.float64)


def calculate_ewma(values: list[float] | tuple[float, ...] | pd.Series, span: int) -> float:
    """Most recent value of an exponentially weighted moving average.

    Reference:
        Williams et al. (2017). J Sci Med Sport 20(5):493-497.
    """
    if len(values) == 0:
        return 0.0
    series = pd.Series(values, dtype=np.float64)
    ewma = series.ewm(span=span, adjust=False).mean()
    return float(ewma.iloc[-1])


def calculate_ewma_acwr(daily_loads: list[float] | tuple[float, ...] | pd.Series) -> float | None:
    """EWMA variant of the ACWR over a daily load series (oldest first).

    Returns None with fewer than 7 days or negligible chronic load.
    """
    if len(daily_loads) < EWMA_ACUTE_SPAN:
        return None
    acute = calculate_ewma(daily_loads, span=EWMA_ACUTE_SPAN)
    chronic = calculate_ewma(daily_loads, span=EWMA_CHRONIC_SPAN)
    if chronic < 1e-6:
        return None
    return acute / chronic


def calculate_monotony(daily_loads: list[float] | tuple[float, ...] | pd.Series) -> float:
    """Training monotony over the most recent 7 days: mean / sd of daily load.

    Returns 0.0 with fewer than 7 days or no variation.

    Reference:
        Foster (1998). Med Sci Sports Exerc 30(7):1164-1168.
    """
    if len(daily_loads) < 7:
        return 0.0
    recent = np.asarray(daily_loads, dtype=np.float64)[-7:]
    std = float(np.std(recent, ddof=0))
    if std < 1e-6:
        return 0.0
    return float(np.mean(recent)) / std


def calculate_strain(daily_loads: list[float] | tuple[float, ...] | pd.Series) -> float:
    """Weekly strain = weekly load × monotony (Foster, 1998)."""
    if len(daily_loads) < 7:
        return 0.0
    recent = np.asarray(daily_loads, dtype=np.float64)[-7:]
    return float(recent.sum()) * calculate_monotony(recent)
