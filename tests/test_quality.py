"""Variability, data quality scoring, and gap detection."""
import math
from datetime import datetime, timedelta, timezone

import pytest

from vitaltrend.config import VitalTrendConfig
from vitaltrend.errors import InsufficientDataError
from vitaltrend.models import DataFrequency, DataQualityIssueType, HealthDataType, HealthRecord
from vitaltrend.quality import assess_data_quality, calculate_variability, identify_data_gaps

CFG = VitalTrendConfig()


def approx(a, b, tol=0.01):
    assert abs(a - b) < tol, f"{a} != {b} (tol={tol})"


def issue_types(assessment):
    return {i.issue_type for i in assessment.issues}


# ═══════════════════════════════════════════════════════════════════════
# VARIABILITY
# ═══════════════════════════════════════════════════════════════════════

def test_variability_population_statistics():
    v = calculate_variability([1.0, 2.0, 3.0, 4.0, 5.0])
    approx(v.variance, 2.0, 1e-9)
    approx(v.standard_deviation, math.sqrt(2.0), 1e-9)
    approx(v.coefficient_of_variation, math.sqrt(2.0) / 3.0, 1e-9)
    approx(v.range, 4.0, 1e-9)
    approx(v.interquartile_range, 2.0, 1e-9)


def test_variability_zero_mean_has_no_cv():
    v = calculate_variability([-1.0, 1.0])
    assert v.coefficient_of_variation is None
    approx(v.standard_deviation, 1.0, 1e-9)


def test_variability_single_value():
    v = calculate_variability([7.0])
    assert v.variance == 0.0
    assert v.range == 0.0
    assert v.coefficient_of_variation == 0.0


def test_variability_empty_raises():
    with pytest.raises(InsufficientDataError):
        calculate_variability([])


# ═══════════════════════════════════════════════════════════════════════
# QUALITY ASSESSMENT
# ═══════════════════════════════════════════════════════════════════════

def test_clean_daily_series_scores_perfect(weight_records):
    q = assess_data_quality(weight_records, DataFrequency.DAILY, now=weight_records[-1].timestamp, cfg=CFG)
    assert q.completeness == 1.0
    assert q.consistency == 1.0
    assert q.accuracy == 1.0
    assert q.timeliness == 1.0
    assert q.overall_score == 1.0
    assert q.issues == ()


def test_empty_input_scores_zero():
    q = assess_data_quality([], now=None, cfg=CFG)
    assert (q.completeness, q.consistency, q.accuracy, q.timeliness, q.overall_score) == (0, 0, 0, 0, 0)
    assert q.issues == ()


def test_scores_are_bounded(spiky_weight_records):
    now = spiky_weight_records[-1].timestamp + timedelta(days=90)
    q = assess_data_quality(spiky_weight_records, now=now, cfg=CFG)
    for score in (q.completeness, q.consistency, q.accuracy, q.timeliness, q.overall_score):
        assert 0.0 <= score <= 1.0


def test_stale_data_lowers_timeliness(weight_records):
    now = weight_records[-1].timestamp + timedelta(days=10)
    q = assess_data_quality(weight_records, now=now, cfg=CFG)
    approx(q.timeliness, 1.0 - 10 / 30, 1e-4)
    assert DataQualityIssueType.STALE_DATA in issue_types(q)


def test_timeliness_floors_at_zero(weight_records):
    now = weight_records[-1].timestamp + timedelta(days=45)
    assert assess_data_quality(weight_records, now=now, cfg=CFG).timeliness == 0.0


def test_missing_days_lower_completeness(make_records):
    records = make_records([70.0, 70.1, 70.0, 69.9, 70.0, 70.1], days=[0, 1, 2, 5, 6, 9])
    q = assess_data_quality(records, now=records[-1].timestamp, cfg=CFG)
    approx(q.completeness, 0.6, 1e-9)
    assert DataQualityIssueType.MISSING_DATA in issue_types(q)


def test_irregular_frequency_is_complete(make_records):
    records = make_records([70.0, 70.1, 70.0], days=[0, 5, 40])
    q = assess_data_quality(records, DataFrequency.IRREGULAR, now=records[-1].timestamp, cfg=CFG)
    assert q.completeness == 1.0


def test_duplicate_timestamps_reported(make_records):
    records = make_records([70.0, 70.2, 70.1], days=[0, 1, 1])
    q = assess_data_quality(records, now=records[-1].timestamp, cfg=CFG)
    dupes = [i for i in q.issues if i.issue_type == DataQualityIssueType.DUPLICATE_DATA]
    assert len(dupes) == 1
    assert dupes[0].affected_records == 1


def test_implausible_values_lower_accuracy(make_records):
    values = [70.0, 72.0, 250.0, 71.0, 69.0]
    records = make_records(values, data_type=HealthDataType.HEART_RATE)
    q = assess_data_quality(records, now=records[-1].timestamp, cfg=CFG)
    approx(q.accuracy, 0.8, 1e-9)
    assert DataQualityIssueType.OUTLIER_DATA in issue_types(q)


def test_untyped_records_are_assumed_plausible(make_records):
    records = make_records([-5.0, 1000000.0, 3.0], data_type=None)
    q = assess_data_quality(records, now=records[-1].timestamp, cfg=CFG)
    assert q.accuracy == 1.0


def test_assessment_depends_only_on_inputs(weight_records):
    now = weight_records[-1].timestamp + timedelta(days=3)
    assert assess_data_quality(weight_records, now=now, cfg=CFG) == \
        assess_data_quality(weight_records, now=now, cfg=CFG)


# ═══════════════════════════════════════════════════════════════════════
# GAPS
# ═══════════════════════════════════════════════════════════════════════

def test_contiguous_series_has_no_gaps(weight_records):
    assert identify_data_gaps(weight_records, DataFrequency.DAILY, CFG) == []


def test_gaps_span_missing_slots(make_records):
    records = make_records([1.0, 2.0, 3.0, 4.0, 5.0, 6.0], days=[0, 1, 2, 5, 6, 9])
    gaps = identify_data_gaps(records, DataFrequency.DAILY, CFG)
    start = records[0].timestamp
    assert [(g.start_date, g.end_date) for g in gaps] == [
        (start + timedelta(days=3), start + timedelta(days=4)),
        (start + timedelta(days=7), start + timedelta(days=8)),
    ]


def test_single_missing_slot_collapses(make_records):
    records = make_records([1.0, 2.0], days=[0, 2])
    gaps = identify_data_gaps(records, DataFrequency.DAILY, CFG)
    assert len(gaps) == 1
    assert gaps[0].start_date == gaps[0].end_date == records[0].timestamp + timedelta(days=1)


def test_weekly_tolerates_daily_jitter(make_records):
    records = make_records([1.0, 2.0, 3.0], days=[0, 8, 15])
    assert identify_data_gaps(records, DataFrequency.WEEKLY, CFG) == []


def test_irregular_frequency_has_no_gaps(make_records):
    records = make_records([1.0, 2.0], days=[0, 100])
    assert identify_data_gaps(records, DataFrequency.IRREGULAR, CFG) == []


def test_offset_change_is_not_a_gap():
    records = [
        HealthRecord(
            timestamp=datetime(2024, 3, 28 + d, 8, 0, tzinfo=timezone(timedelta(hours=1)))
            if d < 4 else datetime(2024, 4, d - 3, 8, 0, tzinfo=timezone(timedelta(hours=2))),
            value=70.0 + 0.1 * (d % 2),
            data_type=HealthDataType.WEIGHT,
        )
        for d in range(9)
    ]
    assert identify_data_gaps(records, DataFrequency.DAILY, CFG) == []
    q = assess_data_quality(records, now=records[-1].timestamp, cfg=CFG)
    assert q.completeness == 1.0
    assert q.timeliness == 1.0
