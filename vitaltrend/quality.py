"""
Variability statistics, data-quality scoring, and gap detection.

Quality scores are all in [0, 1]. "now" is an explicit input wherever
recency matters, so repeated calls with the same arguments agree.
"""

from datetime import datetime
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from vitaltrend.config import VitalTrendConfig
from vitaltrend.detectors import detect_outliers
from vitaltrend.errors import InsufficientDataError
from vitaltrend.frames import now_like, records_to_frame, timestamps, to_datetime
from vitaltrend.models import (
    AnomalySeverity,
    DataFrequency,
    DataQualityAssessment,
    DataQualityIssue,
    DataQualityIssueType,
    DateRange,
    HealthRecord,
    OutlierMethod,
    VariabilityMetrics,
)


# ---------------------------------------------------------------------------
# Variability
# ---------------------------------------------------------------------------

def calculate_variability(values: Sequence[float]) -> VariabilityMetrics:
    """
    Population variance/std, coefficient of variation, range and IQR.

    The coefficient of variation is std / |mean| and is None for a zero
    mean rather than a fabricated 0.
    """
    if len(values) == 0:
        raise InsufficientDataError(
            "Variability requires at least 1 value", required=1, actual=0,
        )

    arr = np.asarray(values, dtype=np.float64)
    variance = float(np.var(arr, ddof=0))
    std = float(np.sqrt(variance))
    mean = float(arr.mean())
    cv = std / abs(mean) if mean != 0.0 else None
    q1, q3 = np.percentile(arr, [25, 75])

    return VariabilityMetrics(
        variance=variance,
        standard_deviation=std,
        coefficient_of_variation=cv,
        range=float(arr.max() - arr.min()),
        interquartile_range=float(q3 - q1),
    )


# ---------------------------------------------------------------------------
# Sub-scores
# ---------------------------------------------------------------------------

def _completeness(df: pd.DataFrame, frequency: DataFrequency) -> float:
    """Occupied sampling slots / expected slots between first and last record."""
    interval = frequency.interval
    if interval is None or len(df) < 2:
        return 1.0

    step = pd.Timedelta(interval)
    offsets = df["timestamp"] - df["timestamp"].iloc[0]
    occupied = (offsets // step).nunique()
    expected = int(offsets.iloc[-1] // step) + 1
    return float(min(1.0, occupied / expected))


def _consistency(values: np.ndarray, outlier_count: int, typical_cv: float) -> float:
    """(1 - outlier fraction) scaled down when variability exceeds the type norm."""
    clean_fraction = 1.0 - outlier_count / len(values)

    cv = calculate_variability(values).coefficient_of_variation
    if cv is None:
        spread_factor = 1.0 if np.ptp(values) == 0.0 else 0.0
    elif cv == 0.0:
        spread_factor = 1.0
    else:
        spread_factor = min(1.0, typical_cv / cv)

    return float(np.clip(clean_fraction * spread_factor, 0.0, 1.0))


def _implausible_count(df: pd.DataFrame, cfg: VitalTrendConfig) -> int:
    count = 0
    for value, data_type in zip(df["value"], df["data_type"]):
        rule = cfg.plausibility_for(data_type)
        if rule is not None and not rule.is_plausible(value):
            count += 1
    return count


def _days_since(latest: datetime, now: datetime) -> float:
    return (now - latest).total_seconds() / 86400.0


# ---------------------------------------------------------------------------
# Data quality assessment
# ---------------------------------------------------------------------------

def assess_data_quality(
    records: Sequence[HealthRecord],
    expected_frequency: DataFrequency = DataFrequency.DAILY,
    now: Optional[datetime] = None,
    cfg: VitalTrendConfig | None = None,
) -> DataQualityAssessment:
    """
    Score completeness, consistency, accuracy and timeliness.

    Empty input scores 0 everywhere. Accuracy is plausibility against the
    record's data type; records without a known type are assumed plausible.
    """
    if cfg is None:
        cfg = VitalTrendConfig()
    qp = cfg.quality
    qw = cfg.quality_weights

    if len(records) == 0:
        return DataQualityAssessment(
            completeness=0.0, consistency=0.0, accuracy=0.0,
            timeliness=0.0, overall_score=0.0,
        )

    df = records_to_frame(records)
    values = df["value"].to_numpy(dtype=np.float64)
    n = len(df)
    issues: List[DataQualityIssue] = []

    # -- Completeness ---------------------------------------------------------

    completeness = _completeness(df, DataFrequency(expected_frequency))
    if completeness < qp.completeness_issue_floor:
        issues.append(DataQualityIssue(
            issue_type=DataQualityIssueType.MISSING_DATA,
            description="Expected sampling slots are missing records",
            severity=AnomalySeverity.MEDIUM,
            affected_records=n,
            suggested_action="Record measurements at a regular cadence",
        ))

    duplicates = int(df["timestamp"].duplicated().sum())
    if duplicates:
        issues.append(DataQualityIssue(
            issue_type=DataQualityIssueType.DUPLICATE_DATA,
            description="Multiple records share a timestamp",
            severity=AnomalySeverity.LOW,
            affected_records=duplicates,
            suggested_action="Deduplicate imports from overlapping sources",
        ))

    # -- Consistency ----------------------------------------------------------

    types = [t for t in df["data_type"] if t is not None]
    rule = cfg.plausibility_for(types[0]) if types else None
    typical_cv = rule.typical_cv if rule is not None else qp.default_typical_cv

    outlier_count = len(detect_outliers(values, OutlierMethod.Z_SCORE, cfg))
    consistency = _consistency(values, outlier_count, typical_cv)
    if outlier_count > n * qp.outlier_issue_fraction:
        issues.append(DataQualityIssue(
            issue_type=DataQualityIssueType.INCONSISTENT_DATA,
            description="High number of outliers detected",
            severity=AnomalySeverity.MEDIUM,
            affected_records=outlier_count,
            suggested_action="Review data collection process",
        ))

    # -- Accuracy -------------------------------------------------------------

    implausible = _implausible_count(df, cfg)
    accuracy = 1.0 - implausible / n
    if implausible:
        issues.append(DataQualityIssue(
            issue_type=DataQualityIssueType.OUTLIER_DATA,
            description="Values outside reasonable range detected",
            severity=AnomalySeverity.HIGH,
            affected_records=implausible,
            suggested_action="Verify sensor calibration and data entry",
        ))

    # -- Timeliness -----------------------------------------------------------

    latest = to_datetime(df["timestamp"].iloc[-1])
    if now is None:
        now = now_like(latest)
    age_days = _days_since(latest, now)
    timeliness = float(np.clip(1.0 - age_days / qp.stale_horizon_days, 0.0, 1.0))
    if age_days > qp.stale_issue_days:
        issues.append(DataQualityIssue(
            issue_type=DataQualityIssueType.STALE_DATA,
            description="Latest data is more than a week old",
            severity=AnomalySeverity.MEDIUM,
            affected_records=1,
            suggested_action="Update data collection frequency",
        ))

    overall = (
        completeness * qw.completeness
        + consistency * qw.consistency
        + accuracy * qw.accuracy
        + timeliness * qw.timeliness
    )

    return DataQualityAssessment(
        completeness=round(completeness, 4),
        consistency=round(consistency, 4),
        accuracy=round(accuracy, 4),
        timeliness=round(timeliness, 4),
        overall_score=round(float(np.clip(overall, 0.0, 1.0)), 4),
        issues=tuple(issues),
    )


# ---------------------------------------------------------------------------
# Gap detection
# ---------------------------------------------------------------------------

def identify_data_gaps(
    records: Sequence[HealthRecord],
    expected_frequency: DataFrequency = DataFrequency.DAILY,
    cfg: VitalTrendConfig | None = None,
) -> List[DateRange]:
    """
    Report runs of missing sampling slots between consecutive records.

    A gap is reported when two neighbours are more than `gap_tolerance`
    intervals apart. It spans the first missing slot to the last one; when
    only a single slot is missing the range collapses to that instant.
    """
    if cfg is None:
        cfg = VitalTrendConfig()

    interval = DataFrequency(expected_frequency).interval
    if interval is None or len(records) < 2:
        return []

    df = records_to_frame(records)
    stamps = timestamps(df)
    limit = interval * cfg.quality.gap_tolerance

    gaps = []
    for prev, nxt in zip(stamps, stamps[1:]):
        if nxt - prev > limit:
            start = prev + interval
            end = max(start, nxt - interval)
            gaps.append(DateRange(start_date=start, end_date=end))
    return gaps
