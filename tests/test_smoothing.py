"""Moving averages and window selection."""
import pytest

from vitaltrend.config import VitalTrendConfig
from vitaltrend.smoothing import (
    exponential_moving_average,
    optimal_window_size,
    simple_moving_average,
    trailing_moving_average,
    weighted_moving_average,
)

CFG = VitalTrendConfig()


# ═══════════════════════════════════════════════════════════════════════
# SIMPLE MOVING AVERAGE
# ═══════════════════════════════════════════════════════════════════════

@pytest.mark.parametrize("window", [1, 2, 3, 5])
def test_sma_length(window):
    values = [1.0, 2.0, 3.0, 4.0, 5.0]
    assert len(simple_moving_average(values, window)) == len(values) - window + 1


def test_sma_values():
    assert simple_moving_average([1.0, 2.0, 3.0, 4.0, 5.0], 3) == pytest.approx([2.0, 3.0, 4.0])


def test_sma_oversized_window_is_empty():
    assert simple_moving_average([1.0, 2.0], 3) == []


def test_sma_empty_input_is_empty():
    assert simple_moving_average([], 3) == []


def test_sma_non_positive_window_is_empty():
    assert simple_moving_average([1.0, 2.0, 3.0], 0) == []


def test_trailing_average_keeps_length():
    smoothed = trailing_moving_average([1.0, 2.0, 3.0, 4.0], 2, CFG)
    assert smoothed == pytest.approx([1.0, 1.5, 2.5, 3.5])


def test_trailing_average_window_larger_than_series():
    smoothed = trailing_moving_average([2.0, 4.0], 7, CFG)
    assert smoothed == pytest.approx([2.0, 3.0])


# ═══════════════════════════════════════════════════════════════════════
# WEIGHTED / EXPONENTIAL
# ═══════════════════════════════════════════════════════════════════════

def test_wma_is_single_aggregate():
    result = weighted_moving_average([1.0, 2.0, 3.0], [0.2, 0.3, 0.5])
    assert result == pytest.approx([2.3])


def test_wma_mismatched_lengths_is_empty():
    assert weighted_moving_average([1.0, 2.0, 3.0], [0.5, 0.5]) == []
    assert weighted_moving_average([], []) == []


@pytest.mark.parametrize("alpha", [0.1, 0.3, 0.5, 1.0])
def test_ema_first_element_is_first_value(alpha):
    values = [42.0, 40.0, 45.0, 41.0]
    assert exponential_moving_average(values, alpha)[0] == 42.0


def test_ema_recursion():
    ema = exponential_moving_average([0.0, 10.0, 10.0], 0.3)
    assert ema == pytest.approx([0.0, 3.0, 5.1])


def test_ema_empty_input_is_empty():
    assert exponential_moving_average([], 0.3) == []


# ═══════════════════════════════════════════════════════════════════════
# WINDOW SELECTION
# ═══════════════════════════════════════════════════════════════════════

@pytest.mark.parametrize("count, expected", [
    (2, 3), (7, 3), (8, 7), (30, 7), (31, 14), (90, 14), (91, 30), (365, 30),
])
def test_optimal_window_size(count, expected):
    assert optimal_window_size(count, CFG) == expected
