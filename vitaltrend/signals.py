"""
Trend signals: OLS regression, Pearson correlation, and direction labels.

All functions are pure transforms. Whole-series statistics need at least
two points and raise InsufficientDataError otherwise.
"""

from typing import Sequence, Tuple

import numpy as np

from vitaltrend.config import VitalTrendConfig
from vitaltrend.errors import InsufficientDataError
from vitaltrend.models import LinearRegressionResult, TrendDirection


# ---------------------------------------------------------------------------
# OLS primitives
# ---------------------------------------------------------------------------

def _ols_fit(x: np.ndarray, y: np.ndarray) -> Tuple[float, float]:
    """
    Closed-form OLS:  slope = Σ(x_c · y_c) / Σ(x_c²),  intercept = ȳ - slope·x̄
    where x_c and y_c are mean-centered. Caller guarantees Σ(x_c²) > 0.
    """
    x_c = x - x.mean()
    y_c = y - y.mean()
    slope = float(np.dot(x_c, y_c) / np.dot(x_c, x_c))
    intercept = float(y.mean() - slope * x.mean())
    return slope, intercept


def _pearson(x: np.ndarray, y: np.ndarray) -> float:
    """Pearson r, or 0.0 when either series has no variation."""
    x_c = x - x.mean()
    y_c = y - y.mean()
    denom = np.sqrt(np.dot(x_c, x_c) * np.dot(y_c, y_c))
    if denom == 0.0:
        return 0.0
    return float(np.clip(np.dot(x_c, y_c) / denom, -1.0, 1.0))


def _index_axis(n: int) -> np.ndarray:
    return np.arange(n, dtype=np.float64)


# ---------------------------------------------------------------------------
# Linear regression
# ---------------------------------------------------------------------------

def linear_regression(points: Sequence[Tuple[float, float]]) -> LinearRegressionResult:
    """
    Ordinary least squares over (x, y) pairs.

    A constant y series fits a flat line with zero explanatory power, so
    correlation and R² are both 0.0 there. Fewer than two distinct x values
    cannot define a slope.
    """
    if len(points) < 2:
        raise InsufficientDataError(
            "Linear regression requires at least 2 points",
            required=2, actual=len(points),
        )

    xy = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    x, y = xy[:, 0], xy[:, 1]

    distinct_x = len(np.unique(x))
    if distinct_x < 2:
        raise InsufficientDataError(
            "Linear regression requires at least 2 distinct x values",
            required=2, actual=distinct_x,
        )

    slope, intercept = _ols_fit(x, y)
    r = _pearson(x, y)
    r_squared = float(np.clip(r * r, 0.0, 1.0))

    n = len(x)
    standard_error = None
    if n > 2:
        residuals = y - (slope * x + intercept)
        standard_error = float(np.sqrt(np.dot(residuals, residuals) / (n - 2)))

    return LinearRegressionResult(
        slope=slope,
        intercept=intercept,
        correlation=r,
        r_squared=r_squared,
        standard_error=standard_error,
    )


def regression_over_index(values: Sequence[float]) -> LinearRegressionResult:
    """Regress values against their position 0..n-1."""
    y = np.asarray(values, dtype=np.float64)
    return linear_regression(list(zip(_index_axis(len(y)), y)))


# ---------------------------------------------------------------------------
# Correlation
# ---------------------------------------------------------------------------

def correlation(series_a: Sequence[float], series_b: Sequence[float]) -> float:
    """Pearson product-moment correlation in [-1, 1]."""
    if len(series_a) != len(series_b):
        raise ValueError(
            f"Series lengths differ: {len(series_a)} vs {len(series_b)}"
        )
    if len(series_a) < 2:
        raise InsufficientDataError(
            "Correlation requires at least 2 paired values",
            required=2, actual=len(series_a),
        )

    a = np.asarray(series_a, dtype=np.float64)
    b = np.asarray(series_b, dtype=np.float64)
    if np.ptp(a) == 0.0 or np.ptp(b) == 0.0:
        raise InsufficientDataError(
            "Correlation is undefined for a constant series",
            required=2, actual=1,
        )
    return _pearson(a, b)


# ---------------------------------------------------------------------------
# Trend classification
# ---------------------------------------------------------------------------

def trend_volatility(values: Sequence[float]) -> float:
    """
    Residual dispersion around the OLS line, relative to |mean|.

    A clean ramp has zero volatility however steep it is; swings around a
    flat line do not. A zero mean with any dispersion is infinitely volatile.
    """
    y = np.asarray(values, dtype=np.float64)
    if len(y) < 2:
        return 0.0

    x = _index_axis(len(y))
    slope, intercept = _ols_fit(x, y)
    residuals = y - (slope * x + intercept)
    spread = float(np.sqrt(np.mean(residuals ** 2)))

    mean = abs(float(y.mean()))
    if mean == 0.0:
        return 0.0 if spread == 0.0 else float("inf")
    return spread / mean


def normalized_slope(values: Sequence[float]) -> float:
    """OLS slope per observation as a fraction of |mean|."""
    y = np.asarray(values, dtype=np.float64)
    if len(y) < 2:
        return 0.0

    slope, _ = _ols_fit(_index_axis(len(y)), y)
    mean = abs(float(y.mean()))
    if mean == 0.0:
        return slope
    return slope / mean


def classify_trend(
    values: Sequence[float],
    threshold: float,
    cfg: VitalTrendConfig | None = None,
) -> TrendDirection:
    """
    Label a series increasing, decreasing, stable or volatile.

    Decision order matters: volatility is checked first so that large swings
    around a flat line are never reported as stable.
    """
    if cfg is None:
        cfg = VitalTrendConfig()
    t = cfg.trend

    if len(values) < t.min_data_points:
        return TrendDirection.STABLE

    if trend_volatility(values) > t.volatile_threshold:
        return TrendDirection.VOLATILE

    slope = normalized_slope(values)
    if abs(slope) < threshold:
        return TrendDirection.STABLE
    if slope > 0:
        return TrendDirection.INCREASING
    return TrendDirection.DECREASING


# ---------------------------------------------------------------------------
# Narrative
# ---------------------------------------------------------------------------

_DIRECTION_WORDS = {
    TrendDirection.INCREASING: "upward",
    TrendDirection.DECREASING: "downward",
    TrendDirection.STABLE: "stable",
    TrendDirection.VOLATILE: "volatile",
}


def _grade(score: float) -> str:
    if score > 0.8:
        return "strong"
    if score > 0.5:
        return "moderate"
    return "weak"


def describe_trend(
    direction: TrendDirection,
    strength: float,
    confidence: float,
    period_label: str,
) -> str:
    """One-sentence summary, e.g. 'A strong upward trend detected over month with high confidence.'"""
    confidence_word = {"strong": "high", "moderate": "moderate", "weak": "low"}[_grade(confidence)]
    return (
        f"A {_grade(strength)} {_DIRECTION_WORDS[direction]} trend detected "
        f"over {period_label} with {confidence_word} confidence."
    )
