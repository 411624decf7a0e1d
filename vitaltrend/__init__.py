"""
VitalTrend v1.0 — Deterministic Health-Metric Trend Engine

Analyzes time-stamped health measurements and produces structured
intelligence about direction, anomalies, data quality, and short-horizon
forecasts.

Architecture:
    config      — All thresholds, weights, and window sizes (single source of truth)
    models      — Records, enums, and immutable result types
    smoothing   — Simple, weighted, and exponential moving averages
    signals     — OLS regression, correlation, trend classification
    detectors   — Outlier methods and anomaly detection
    quality     — Variability, data quality assessment, gap detection
    scoring     — Trend summary, confidence, trend strength
    pipeline    — Orchestration: frame → window → smooth → fit → detect → score
    forecast    — Trend projection and single-value prediction

Core engine is fully stateless and safe for backend/API usage.

Public API:
    analyze_trends(records)       → TrendAnalysis
    analyze_data(data)            → UI / backend mode
    predict_trend(analysis, days) → TrendPrediction
    generate_report(analysis)     → formatted report
"""

from vitaltrend.config import VitalTrendConfig
from vitaltrend.detectors import classify_severity, detect_anomalies, detect_outliers
from vitaltrend.errors import InsufficientDataError, InvalidRangeError, VitalTrendError
from vitaltrend.forecast import predict_trend, predict_value
from vitaltrend.models import (
    AnomalyPoint,
    AnomalySeverity,
    DataFrequency,
    DataQualityAssessment,
    DataQualityIssue,
    DataQualityIssueType,
    DateRange,
    HealthDataType,
    HealthRecord,
    LinearRegressionResult,
    OutlierMethod,
    PredictedPoint,
    PredictionMethod,
    TimeRange,
    TrendAnalysis,
    TrendDirection,
    TrendPoint,
    TrendPrediction,
    TrendSummary,
    VariabilityMetrics,
)
from vitaltrend.pipeline import analyze_data, analyze_trends, generate_report
from vitaltrend.quality import assess_data_quality, calculate_variability, identify_data_gaps
from vitaltrend.scoring import calculate_trend_strength
from vitaltrend.signals import classify_trend, correlation, describe_trend, linear_regression
from vitaltrend.smoothing import (
    exponential_moving_average,
    optimal_window_size,
    simple_moving_average,
    trailing_moving_average,
    weighted_moving_average,
)

__version__ = "1.0.0"

__all__ = [
    "VitalTrendConfig",
    "VitalTrendError", "InsufficientDataError", "InvalidRangeError",
    "HealthRecord", "HealthDataType", "DateRange", "TimeRange", "DataFrequency",
    "TrendDirection", "AnomalySeverity", "OutlierMethod", "PredictionMethod",
    "TrendPoint", "AnomalyPoint", "TrendSummary", "TrendAnalysis",
    "LinearRegressionResult", "VariabilityMetrics",
    "DataQualityIssueType", "DataQualityIssue", "DataQualityAssessment",
    "PredictedPoint", "TrendPrediction",
    "simple_moving_average", "trailing_moving_average",
    "weighted_moving_average", "exponential_moving_average", "optimal_window_size",
    "linear_regression", "correlation", "classify_trend", "describe_trend",
    "detect_outliers", "detect_anomalies", "classify_severity",
    "calculate_variability", "assess_data_quality", "identify_data_gaps",
    "analyze_trends", "analyze_data", "generate_report",
    "predict_trend", "predict_value", "calculate_trend_strength",
]
