"""
Value types: input records, enums, and immutable analysis results.

Every result is a frozen dataclass whose sequences are tuples. to_dict()
returns JSON-compatible primitives for export and rendering collaborators.
"""

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional, Tuple

from vitaltrend.errors import InvalidRangeError


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def _to_primitive(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if is_dataclass(value):
        return {f.name: _to_primitive(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, (list, tuple)):
        return [_to_primitive(v) for v in value]
    return value


class _Serializable:
    def to_dict(self) -> dict:
        return _to_primitive(self)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class HealthDataType(str, Enum):
    WEIGHT = "weight"
    STEPS = "steps"
    CALORIES = "calories"
    HEART_RATE = "heartRate"
    BLOOD_GLUCOSE = "bloodGlucose"

    @property
    def unit(self) -> str:
        return {
            "weight": "kg",
            "steps": "steps",
            "calories": "kcal",
            "heartRate": "bpm",
            "bloodGlucose": "mg/dL",
        }[self.value]


class TrendDirection(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    VOLATILE = "volatile"


class AnomalySeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Ordinal position: low=0 < medium=1 < high=2 < critical=3."""
        return ("low", "medium", "high", "critical").index(self.value)


class OutlierMethod(str, Enum):
    Z_SCORE = "z_score"
    IQR = "iqr"
    MODIFIED_Z_SCORE = "modified_z_score"


class PredictionMethod(str, Enum):
    LINEAR_REGRESSION = "linear_regression"
    EXPONENTIAL_SMOOTHING = "exponential_smoothing"
    MOVING_AVERAGE = "moving_average"


class DataFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    IRREGULAR = "irregular"

    @property
    def interval(self) -> Optional[timedelta]:
        """Expected spacing between records; None for irregular sampling."""
        days = {"daily": 1, "weekly": 7, "monthly": 30}.get(self.value)
        return timedelta(days=days) if days is not None else None


class TimeRange(str, Enum):
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"

    @property
    def days(self) -> int:
        return {"week": 7, "month": 30, "quarter": 90, "year": 365}[self.value]

    @property
    def moving_average_window(self) -> int:
        return {"week": 3, "month": 7, "quarter": 14, "year": 30}[self.value]


class DataQualityIssueType(str, Enum):
    MISSING_DATA = "missing_data"
    DUPLICATE_DATA = "duplicate_data"
    INCONSISTENT_DATA = "inconsistent_data"
    OUTLIER_DATA = "outlier_data"
    STALE_DATA = "stale_data"


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HealthRecord(_Serializable):
    """A single observation. data_type only selects plausibility bounds."""

    timestamp: datetime
    value: float
    data_type: Optional[HealthDataType] = None


@dataclass(frozen=True)
class DateRange(_Serializable):
    """Inclusive [start_date, end_date] window. Rejects inverted bounds."""

    start_date: datetime
    end_date: datetime

    def __post_init__(self):
        if self.start_date > self.end_date:
            raise InvalidRangeError(
                f"Start date {self.start_date.isoformat()} is after "
                f"end date {self.end_date.isoformat()}"
            )

    def contains(self, timestamp: datetime) -> bool:
        return self.start_date <= timestamp <= self.end_date

    @property
    def duration_days(self) -> float:
        return (self.end_date - self.start_date).total_seconds() / 86400.0


# ---------------------------------------------------------------------------
# Smoothing / trend results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TrendPoint(_Serializable):
    timestamp: datetime
    raw_value: float
    smoothed_value: float
    is_anomaly: bool = False


@dataclass(frozen=True)
class AnomalyPoint(_Serializable):
    timestamp: datetime
    value: float
    expected_value: float
    deviation_score: float
    severity: AnomalySeverity


@dataclass(frozen=True)
class TrendSummary(_Serializable):
    """
    Aggregate statistics over the analysed window.

    change_percentage is None when the first value is zero.
    """

    total_data_points: int
    average_value: float
    minimum_value: float
    maximum_value: float
    standard_deviation: float
    change_percentage: Optional[float]
    first_value: float
    last_value: float


@dataclass(frozen=True)
class TrendAnalysis(_Serializable):
    """Snapshot produced once by analyze_trends and consumed by forecasting."""

    data_type: Optional[HealthDataType]
    time_range: DateRange
    trend_points: Tuple[TrendPoint, ...]
    direction: TrendDirection
    slope: float
    correlation: float
    r_squared: float
    anomalies: Tuple[AnomalyPoint, ...]
    summary: TrendSummary
    confidence: float


# ---------------------------------------------------------------------------
# Statistical results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LinearRegressionResult(_Serializable):
    """
    OLS fit y = slope * x + intercept.

    standard_error is None with only two points (no residual degrees of freedom).
    """

    slope: float
    intercept: float
    correlation: float
    r_squared: float
    standard_error: Optional[float] = None

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept


@dataclass(frozen=True)
class VariabilityMetrics(_Serializable):
    """
    Population dispersion statistics.

    coefficient_of_variation is None when the mean is zero.
    """

    variance: float
    standard_deviation: float
    coefficient_of_variation: Optional[float]
    range: float
    interquartile_range: float


@dataclass(frozen=True)
class DataQualityIssue(_Serializable):
    issue_type: DataQualityIssueType
    description: str
    severity: AnomalySeverity
    affected_records: int
    suggested_action: str


@dataclass(frozen=True)
class DataQualityAssessment(_Serializable):
    completeness: float
    consistency: float
    accuracy: float
    timeliness: float
    overall_score: float
    issues: Tuple[DataQualityIssue, ...] = field(default_factory=tuple)


# ---------------------------------------------------------------------------
# Forecast results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PredictedPoint(_Serializable):
    timestamp: datetime
    value: float


@dataclass(frozen=True)
class TrendPrediction(_Serializable):
    data_type: Optional[HealthDataType]
    predicted_points: Tuple[PredictedPoint, ...]
    confidence: float
    methodology: str
    valid_until: datetime
