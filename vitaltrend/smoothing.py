"""
Smoothing engine: simple, weighted, and exponential moving averages.

All functions are pure transforms over a numeric sequence. Degenerate
inputs (empty values, oversized windows) return an empty list rather than
raising; smoothing degrades gracefully where whole-series analysis does not.
"""

from typing import List, Sequence

import numpy as np
import pandas as pd

from vitaltrend.config import VitalTrendConfig


# ---------------------------------------------------------------------------
# Simple moving average
# ---------------------------------------------------------------------------

def simple_moving_average(values: Sequence[float], window_size: int) -> List[float]:
    """
    Arithmetic mean of each contiguous window.

    Returns len(values) - window_size + 1 means, or [] when the window does
    not fit the series.
    """
    n = len(values)
    if n == 0 or window_size <= 0 or window_size > n:
        return []

    series = pd.Series(values, dtype=np.float64)
    means = series.rolling(window_size, min_periods=window_size).mean()
    return means.iloc[window_size - 1:].tolist()


def trailing_moving_average(
    values: Sequence[float],
    window_size: int,
    cfg: VitalTrendConfig | None = None,
) -> List[float]:
    """
    Full-length trailing mean; leading points average whatever history exists.

    This is the baseline curve attached to each TrendPoint, so its length
    always equals the input length.
    """
    if cfg is None:
        cfg = VitalTrendConfig()
    if len(values) == 0:
        return []

    window = max(1, window_size)
    series = pd.Series(values, dtype=np.float64)
    min_periods = min(cfg.smoothing.min_periods, window)
    return series.rolling(window, min_periods=min_periods).mean().tolist()


# ---------------------------------------------------------------------------
# Weighted moving average
# ---------------------------------------------------------------------------

def weighted_moving_average(
    values: Sequence[float],
    weights: Sequence[float],
) -> List[float]:
    """
    Single weighted aggregate over the whole series, returned as [Σ vᵢ·wᵢ].

    NOTE: unlike the simple and exponential averages this is not a sliding
    window. One weight per value is required and weights are used as given;
    normalizing them to sum to 1 is the caller's job. Mismatched lengths or
    empty input return [].
    """
    if len(values) == 0 or len(values) != len(weights):
        return []

    v = np.asarray(values, dtype=np.float64)
    w = np.asarray(weights, dtype=np.float64)
    return [float(np.dot(v, w))]


# ---------------------------------------------------------------------------
# Exponential moving average
# ---------------------------------------------------------------------------

def exponential_moving_average(values: Sequence[float], alpha: float) -> List[float]:
    """
    ema[0] = values[0];  ema[i] = alpha * values[i] + (1 - alpha) * ema[i-1]

    Uses the recursive (adjust=False) form. alpha is expected in (0, 1] and
    is not clamped.
    """
    if len(values) == 0:
        return []

    series = pd.Series(values, dtype=np.float64)
    return series.ewm(alpha=alpha, adjust=False).mean().tolist()


# ---------------------------------------------------------------------------
# Window selection
# ---------------------------------------------------------------------------

def optimal_window_size(count: int, cfg: VitalTrendConfig | None = None) -> int:
    """Pick a smoothing window from the number of records in a custom range."""
    if cfg is None:
        cfg = VitalTrendConfig()
    s = cfg.smoothing

    if count <= s.small_count:
        return max(s.min_window, count // 3)
    if count <= s.medium_count:
        return s.medium_window
    if count <= s.large_count:
        return s.large_window
    return s.max_window
