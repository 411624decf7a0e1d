"""Regression, correlation, and trend classification."""
import math

import pytest

from vitaltrend.config import VitalTrendConfig
from vitaltrend.errors import InsufficientDataError
from vitaltrend.models import TrendDirection
from vitaltrend.signals import (
    classify_trend,
    correlation,
    describe_trend,
    linear_regression,
    normalized_slope,
    regression_over_index,
    trend_volatility,
)

CFG = VitalTrendConfig()
THRESHOLD = CFG.trend.analysis_slope_threshold


def approx(a, b, tol=0.01):
    assert abs(a - b) < tol, f"{a} != {b} (tol={tol})"


# ═══════════════════════════════════════════════════════════════════════
# LINEAR REGRESSION
# ═══════════════════════════════════════════════════════════════════════

def test_regression_exact_fit():
    fit = linear_regression([(1, 2), (2, 4), (3, 6), (4, 8)])
    approx(fit.slope, 2.0, 1e-9)
    approx(fit.intercept, 0.0, 1e-9)
    approx(fit.correlation, 1.0, 1e-9)
    approx(fit.r_squared, 1.0, 1e-9)
    approx(fit.predict(5), 10.0, 1e-9)
    approx(fit.standard_error, 0.0, 1e-9)


def test_regression_two_points_has_no_standard_error():
    fit = linear_regression([(0, 1), (1, 3)])
    approx(fit.slope, 2.0, 1e-9)
    assert fit.standard_error is None


def test_regression_constant_y():
    fit = linear_regression([(0, 5), (1, 5), (2, 5)])
    assert fit.slope == 0.0
    assert fit.correlation == 0.0
    assert fit.r_squared == 0.0


def test_regression_needs_two_points():
    with pytest.raises(InsufficientDataError):
        linear_regression([(1, 2)])
    with pytest.raises(InsufficientDataError):
        linear_regression([])


def test_regression_needs_distinct_x():
    with pytest.raises(InsufficientDataError):
        linear_regression([(1, 2), (1, 3), (1, 4)])


def test_regression_over_index_uses_positions():
    fit = regression_over_index([10.0, 12.0, 14.0])
    approx(fit.slope, 2.0, 1e-9)
    approx(fit.intercept, 10.0, 1e-9)


# ═══════════════════════════════════════════════════════════════════════
# CORRELATION
# ═══════════════════════════════════════════════════════════════════════

def test_correlation_co_increasing():
    approx(correlation([1, 2, 3, 4], [10, 20, 30, 40]), 1.0, 1e-9)


def test_correlation_inverse():
    approx(correlation([1, 2, 3, 4], [8, 6, 4, 2]), -1.0, 1e-9)


def test_correlation_bounded():
    r = correlation([1, 3, 2, 5, 4], [2, 1, 4, 3, 5])
    assert -1.0 <= r <= 1.0


def test_correlation_length_mismatch():
    with pytest.raises(ValueError):
        correlation([1, 2, 3], [1, 2])


def test_correlation_too_short():
    with pytest.raises(InsufficientDataError):
        correlation([1], [2])


def test_correlation_constant_series():
    with pytest.raises(InsufficientDataError):
        correlation([1, 2, 3], [5, 5, 5])


# ═══════════════════════════════════════════════════════════════════════
# TREND CLASSIFICATION
# ═══════════════════════════════════════════════════════════════════════

def test_increasing():
    assert classify_trend([68.0, 69.0, 70.0, 71.0, 72.0], THRESHOLD, CFG) == TrendDirection.INCREASING


def test_decreasing():
    assert classify_trend([75.0, 73.0, 71.0, 69.0, 67.0], THRESHOLD, CFG) == TrendDirection.DECREASING


def test_near_flat_is_stable():
    assert classify_trend([70.0, 70.2, 69.8, 70.1, 69.9], THRESHOLD, CFG) == TrendDirection.STABLE


def test_oscillating_is_volatile():
    assert classify_trend([1.0, 5.0, 2.0, 4.0, 1.5], THRESHOLD, CFG) == TrendDirection.VOLATILE


def test_identical_values_are_stable():
    assert classify_trend([70.0] * 10, THRESHOLD, CFG) == TrendDirection.STABLE


def test_single_value_is_stable():
    assert classify_trend([70.0], THRESHOLD, CFG) == TrendDirection.STABLE


def test_steep_ramp_is_not_volatile():
    assert trend_volatility([1.0, 2.0, 3.0, 4.0, 5.0]) == pytest.approx(0.0, abs=1e-12)
    assert classify_trend([1.0, 2.0, 3.0, 4.0, 5.0], THRESHOLD, CFG) == TrendDirection.INCREASING


def test_zero_mean_with_spread_is_infinitely_volatile():
    assert math.isinf(trend_volatility([-1.0, 1.0, -1.0, 1.0]))


def test_normalized_slope_scales_by_mean():
    approx(normalized_slope([100.0, 101.0, 102.0]), 1.0 / 101.0, 1e-9)


# ═══════════════════════════════════════════════════════════════════════
# NARRATIVE
# ═══════════════════════════════════════════════════════════════════════

def test_describe_trend():
    text = describe_trend(TrendDirection.INCREASING, 0.9, 0.6, "30 days")
    assert text == "A strong upward trend detected over 30 days with moderate confidence."


def test_describe_weak_trend():
    text = describe_trend(TrendDirection.STABLE, 0.1, 0.2, "7 days")
    assert "weak stable" in text
    assert "low confidence" in text
