"""
Pipeline orchestration: frame → window → smooth → fit → classify → detect → score.

All analytical logic is delegated to smoothing, signals, detectors, scoring.
The analysis is a pure function of its inputs; "now" only anchors the
default time window and may be passed explicitly.
"""

import logging
import time
from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from vitaltrend.config import VitalTrendConfig
from vitaltrend.detectors import anomalies_from_frame
from vitaltrend.errors import InsufficientDataError
from vitaltrend.frames import now_like, records_from_dicts, records_to_frame, timestamps
from vitaltrend.models import (
    DateRange,
    HealthDataType,
    HealthRecord,
    TimeRange,
    TrendAnalysis,
    TrendPoint,
)
from vitaltrend.scoring import calculate_trend_strength, compute_confidence, compute_trend_summary
from vitaltrend.signals import classify_trend, describe_trend, regression_over_index
from vitaltrend.smoothing import optimal_window_size, trailing_moving_average


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _require_points(count: int, cfg: VitalTrendConfig, context: str) -> None:
    required = cfg.trend.min_data_points
    if count < required:
        raise InsufficientDataError(
            f"At least {required} records required for trend analysis "
            f"({context}: got {count})",
            required=required, actual=count,
        )


def _single_data_type(df: pd.DataFrame) -> Optional[HealthDataType]:
    """The one data type present, or None if no record is tagged."""
    tagged = {t for t in df["data_type"] if t is not None}
    if len(tagged) > 1:
        names = sorted(getattr(t, "value", str(t)) for t in tagged)
        raise ValueError(f"Records mix data types: {names}")
    return next(iter(tagged)) if tagged else None


# ---------------------------------------------------------------------------
# Core analysis (PURE FUNCTION over a filtered, sorted frame)
# ---------------------------------------------------------------------------

def _analyze_df(
    df: pd.DataFrame,
    window: DateRange,
    window_size: int,
    cfg: VitalTrendConfig,
) -> TrendAnalysis:
    values = df["value"].to_numpy(dtype=np.float64)

    # Stage 1: Smooth
    smoothed = trailing_moving_average(values, window_size, cfg)

    # Stage 2: Fit + classify
    regression = regression_over_index(values)
    direction = classify_trend(values, cfg.trend.analysis_slope_threshold, cfg)

    # Stage 3: Anomalies
    flagged = anomalies_from_frame(df, cfg.outliers.analysis_sensitivity, cfg)
    anomalous_rows = {i for i, _ in flagged}

    # Stage 4: Summary + confidence
    summary = compute_trend_summary(values)
    confidence = compute_confidence(regression.r_squared, len(values), cfg)

    trend_points = tuple(
        TrendPoint(
            timestamp=ts,
            raw_value=float(raw),
            smoothed_value=float(avg),
            is_anomaly=i in anomalous_rows,
        )
        for i, (ts, raw, avg) in enumerate(zip(timestamps(df), values, smoothed))
    )

    return TrendAnalysis(
        data_type=_single_data_type(df),
        time_range=window,
        trend_points=trend_points,
        direction=direction,
        slope=regression.slope,
        correlation=regression.correlation,
        r_squared=regression.r_squared,
        anomalies=tuple(point for _, point in flagged),
        summary=summary,
        confidence=confidence,
    )


# ---------------------------------------------------------------------------
# Public Entry Points
# ---------------------------------------------------------------------------

def analyze_trends(
    records: Sequence[HealthRecord],
    time_range: TimeRange = TimeRange.MONTH,
    *,
    date_range: Optional[DateRange] = None,
    now: Optional[datetime] = None,
    cfg: VitalTrendConfig | None = None,
    logger: logging.Logger | None = None,
) -> TrendAnalysis:
    """
    Analyse a record set over a window and return an immutable TrendAnalysis.

    The window is `date_range` when given, otherwise the `time_range.days`
    ending at `now`. Records outside the window are ignored. At least two
    records are required both before and after windowing.
    """
    if cfg is None:
        cfg = VitalTrendConfig()
    log = logger or logging.getLogger(__name__)
    operation = "trend_analysis" if date_range is None else "trend_analysis_date_range"
    started = time.perf_counter()

    try:
        _require_points(len(records), cfg, "input")

        df = records_to_frame(records)

        if date_range is None:
            time_range = TimeRange(time_range)
            end = now if now is not None else now_like(timestamps(df)[-1])
            window = DateRange(start_date=end - timedelta(days=time_range.days), end_date=end)
        else:
            window = date_range

        in_window = (df["timestamp"] >= window.start_date) & (df["timestamp"] <= window.end_date)
        df = df[in_window].reset_index(drop=True)
        _require_points(len(df), cfg, "within window")

        if date_range is None:
            window_size = time_range.moving_average_window
        else:
            window_size = optimal_window_size(len(df), cfg)

        analysis = _analyze_df(df, window, window_size, cfg)

    except ValueError as exc:
        log.warning(
            "%s failed after %.3fs: %s",
            operation, time.perf_counter() - started, exc,
        )
        raise

    log.info(
        "%s completed in %.3fs: data_type=%s records=%d direction=%s confidence=%.3f",
        operation,
        time.perf_counter() - started,
        getattr(analysis.data_type, "value", None),
        analysis.summary.total_data_points,
        analysis.direction.value,
        analysis.confidence,
    )
    return analysis


def analyze_data(
    data: Iterable[dict],
    time_range: TimeRange = TimeRange.MONTH,
    **kwargs,
) -> TrendAnalysis:
    """
    Backend / UI integration entry point.

    Accepts list-of-dict JSON data ({"timestamp" or "date", "value",
    optional "data_type"}) and forwards to analyze_trends.
    """
    return analyze_trends(records_from_dicts(data), time_range, **kwargs)


# ---------------------------------------------------------------------------
# Report generation
# ---------------------------------------------------------------------------

def _fmt_optional(value: Optional[float], fmt: str) -> str:
    return "n/a" if value is None else format(value, fmt)


def generate_report(analysis: TrendAnalysis, cfg: VitalTrendConfig | None = None) -> str:
    """Format an analysis as a human-readable text summary."""
    s = analysis.summary
    strength = calculate_trend_strength(analysis, cfg)
    period = f"{analysis.time_range.duration_days:.0f} days"
    data_type = analysis.data_type.value if analysis.data_type else "unspecified"

    lines = [
        "HEALTH TREND REPORT",
        "=" * 58,
        "",
        f"  Data Type           : {data_type}",
        f"  Period              : {analysis.time_range.start_date:%Y-%m-%d} → "
        f"{analysis.time_range.end_date:%Y-%m-%d} ({period})",
        f"  Data Points         : {s.total_data_points}",
        f"  Average Value       : {s.average_value:.1f}",
        f"  Range               : {s.minimum_value:.1f} - {s.maximum_value:.1f}",
        f"  Std Deviation       : {s.standard_deviation:.2f}",
        f"  Change              : {_fmt_optional(s.change_percentage, '+.1f')}%",
        f"  Direction           : {analysis.direction.value} (slope: {analysis.slope:+.4f})",
        f"  Fit (R²)            : {analysis.r_squared:.3f}",
        f"  Trend Strength      : {strength:.3f}",
        f"  Confidence          : {analysis.confidence:.3f}",
        "",
        f"  {describe_trend(analysis.direction, strength, analysis.confidence, period)}",
    ]

    if analysis.anomalies:
        lines.append("")
        lines.append("  Anomalies:")
        for a in analysis.anomalies:
            lines.append(
                f"    - {a.timestamp:%Y-%m-%d} value={a.value:.1f} "
                f"score={a.deviation_score:.2f} [{a.severity.value}]"
            )

    lines.append("")
    lines.append("=" * 58)
    return "\n".join(lines)
