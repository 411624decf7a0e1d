"""
Centralized configuration for all thresholds, weights, and window parameters.

Every tunable constant lives here. Operations accept a VitalTrendConfig and
fall back to the defaults below when none is given.
"""

from dataclasses import dataclass, field
from typing import Optional


# ---------------------------------------------------------------------------
# Smoothing windows
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SmoothingParams:
    """Window sizes used when building the smoothed baseline curve."""

    min_periods: int = 1

    # Record-count breakpoints for choosing a window on explicit date ranges
    small_count: int = 7
    medium_count: int = 30
    large_count: int = 90

    min_window: int = 3
    medium_window: int = 7
    large_window: int = 14
    max_window: int = 30

    # Alpha used by exponential smoothing forecasts
    forecast_alpha: float = 0.3
    forecast_window: int = 7


# ---------------------------------------------------------------------------
# Trend classification
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TrendThresholds:
    """Thresholds for labeling trend direction."""

    # Residual dispersion / |mean| above which a series is volatile
    volatile_threshold: float = 0.3

    # Fractional change per observation below which a series is stable.
    # 0.001 per day on a 70 kg weight series is 0.07 kg/day.
    analysis_slope_threshold: float = 0.001

    min_data_points: int = 2


# ---------------------------------------------------------------------------
# Outlier / anomaly detection
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OutlierParams:
    """Multipliers for each outlier detection method."""

    z_multiplier: float = 2.0
    iqr_multiplier: float = 1.5
    modified_z_multiplier: float = 3.5
    modified_z_constant: float = 0.6745

    # Sigma clipping stops after this many passes even if still flagging
    max_passes: int = 10
    min_values: int = 3

    # Sensitivity used by the top-level analysis
    analysis_sensitivity: float = 2.0


@dataclass(frozen=True)
class SeverityThresholds:
    """
    Score / sensitivity ratios separating anomaly severities.

    ratio < medium_ceiling  → medium
    ratio < high_ceiling    → high
    otherwise               → critical
    """

    medium_ceiling: float = 1.5
    high_ceiling: float = 2.0

    def __post_init__(self):
        if not 1.0 <= self.medium_ceiling <= self.high_ceiling:
            raise ValueError(
                "Severity ceilings must satisfy 1.0 <= medium <= high, "
                f"got medium={self.medium_ceiling}, high={self.high_ceiling}"
            )


# ---------------------------------------------------------------------------
# Analysis confidence and trend strength
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConfidenceParams:
    """
    Weights for the analysis confidence score (0, 1].

    confidence = w_fit * R²  +  w_sample * min(n / sample_saturation, 1)
    """

    weight_fit: float = 0.6
    weight_sample: float = 0.4
    sample_saturation: int = 30
    floor: float = 1e-4

    def __post_init__(self):
        total = self.weight_fit + self.weight_sample
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"Confidence weights must sum to 1.0, got {total}")


@dataclass(frozen=True)
class StrengthParams:
    """Weights for the trend strength score [0, 1]."""

    weight_slope: float = 0.5
    weight_fit: float = 0.5
    anomaly_penalty: float = 0.1

    def __post_init__(self):
        total = self.weight_slope + self.weight_fit
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"Strength weights must sum to 1.0, got {total}")


# ---------------------------------------------------------------------------
# Data quality
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class QualityWeights:
    """Weights for combining quality sub-scores into the overall score."""

    completeness: float = 0.25
    consistency: float = 0.25
    accuracy: float = 0.25
    timeliness: float = 0.25

    def __post_init__(self):
        total = self.completeness + self.consistency + self.accuracy + self.timeliness
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"Quality weights must sum to 1.0, got {total}")


@dataclass(frozen=True)
class QualityParams:
    """Thresholds for quality scoring, gap detection and issue reporting."""

    gap_tolerance: float = 1.5
    stale_horizon_days: float = 30.0
    stale_issue_days: float = 7.0
    completeness_issue_floor: float = 0.8
    outlier_issue_fraction: float = 0.1
    default_typical_cv: float = 0.25


# ---------------------------------------------------------------------------
# Forecasting
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ForecastParams:
    """Confidence decay and value policy for predictions."""

    confidence_decay: float = 0.8
    confidence_cap: float = 0.9
    clamp_non_negative: bool = True
    methodology: str = "Linear Regression"


# ---------------------------------------------------------------------------
# Plausibility rules (declarative)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PlausibilityRule:
    """
    Physiological plausibility window and variability norm for one data type.

    A value is plausible when low < value <= high (low_inclusive widens the
    lower bound to low <= value).
    """

    data_type: str
    low: float
    high: float
    low_inclusive: bool = True
    typical_cv: float = 0.25

    def is_plausible(self, value: float) -> bool:
        above = value >= self.low if self.low_inclusive else value > self.low
        return above and value <= self.high


DEFAULT_PLAUSIBILITY_RULES: tuple = (
    PlausibilityRule(data_type="weight", low=0.0, high=500.0,
                     low_inclusive=False, typical_cv=0.03),
    PlausibilityRule(data_type="steps", low=0.0, high=100000.0, typical_cv=0.5),
    PlausibilityRule(data_type="calories", low=0.0, high=10000.0, typical_cv=0.3),
    PlausibilityRule(data_type="heartRate", low=30.0, high=220.0, typical_cv=0.15),
    PlausibilityRule(data_type="bloodGlucose", low=0.0, high=600.0, typical_cv=0.25),
)


# ---------------------------------------------------------------------------
# Top-level config aggregate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VitalTrendConfig:
    """Complete engine configuration. Pass to any operation to override defaults."""

    smoothing: SmoothingParams = field(default_factory=SmoothingParams)
    trend: TrendThresholds = field(default_factory=TrendThresholds)
    outliers: OutlierParams = field(default_factory=OutlierParams)
    severity: SeverityThresholds = field(default_factory=SeverityThresholds)
    confidence: ConfidenceParams = field(default_factory=ConfidenceParams)
    strength: StrengthParams = field(default_factory=StrengthParams)
    quality_weights: QualityWeights = field(default_factory=QualityWeights)
    quality: QualityParams = field(default_factory=QualityParams)
    forecast: ForecastParams = field(default_factory=ForecastParams)
    plausibility_rules: tuple = DEFAULT_PLAUSIBILITY_RULES

    def plausibility_for(self, data_type) -> Optional[PlausibilityRule]:
        """Look up the rule for a data type (enum or raw string)."""
        if data_type is None:
            return None
        key = getattr(data_type, "value", data_type)
        for rule in self.plausibility_rules:
            if rule.data_type == key:
                return rule
        return None
