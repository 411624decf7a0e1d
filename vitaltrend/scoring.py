"""
Scores over an analysed window: summary statistics, analysis confidence,
and trend strength.

Confidence and strength are bounded scores; summary statistics are raw.
"""

from typing import Sequence

import numpy as np
import pandas as pd

from vitaltrend.config import VitalTrendConfig
from vitaltrend.models import TrendAnalysis, TrendSummary


def compute_trend_summary(values: Sequence[float]) -> TrendSummary:
    """Aggregate statistics over time-ordered values (sample standard deviation)."""
    s = pd.Series(values, dtype=np.float64)
    first, last = float(s.iloc[0]), float(s.iloc[-1])

    # Percentage change from a zero baseline is undefined
    change = None if first == 0.0 else (last - first) / first * 100.0

    return TrendSummary(
        total_data_points=int(len(s)),
        average_value=float(s.mean()),
        minimum_value=float(s.min()),
        maximum_value=float(s.max()),
        standard_deviation=float(s.std()) if len(s) > 1 else 0.0,
        change_percentage=change,
        first_value=first,
        last_value=last,
    )


def compute_confidence(
    r_squared: float,
    n_points: int,
    cfg: VitalTrendConfig | None = None,
) -> float:
    """
    Analysis confidence in (0, 1].

    confidence = w_fit * R²  +  w_sample * min(n / saturation, 1)

    More points and a tighter fit both raise it. Floored just above zero so
    a valid analysis never reports zero confidence.
    """
    if cfg is None:
        cfg = VitalTrendConfig()
    cp = cfg.confidence

    sample = min(n_points / cp.sample_saturation, 1.0)
    raw = cp.weight_fit * r_squared + cp.weight_sample * sample
    return round(float(np.clip(raw, cp.floor, 1.0)), 4)


def calculate_trend_strength(
    analysis: TrendAnalysis,
    cfg: VitalTrendConfig | None = None,
) -> float:
    """
    How decisively a metric is trending, in [0, 1].

    Combines the fitted change across the window relative to the observed
    range with R², minus a small penalty for the share of anomalous points.
    Used to rank several tracked metrics against each other.
    """
    if cfg is None:
        cfg = VitalTrendConfig()
    sp = cfg.strength
    summary = analysis.summary
    n = summary.total_data_points

    value_range = summary.maximum_value - summary.minimum_value
    if value_range > 0.0 and n > 1:
        slope_score = min(1.0, abs(analysis.slope) * (n - 1) / value_range)
    else:
        slope_score = 0.0

    anomaly_fraction = len(analysis.anomalies) / n if n else 0.0

    raw = (
        sp.weight_slope * slope_score
        + sp.weight_fit * analysis.r_squared
        - sp.anomaly_penalty * anomaly_fraction
    )
    return round(float(np.clip(raw, 0.0, 1.0)), 4)
