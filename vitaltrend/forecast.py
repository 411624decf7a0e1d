"""
Forecasting: project future values from an analysis snapshot or raw records.

predict_trend extends a linear fit over elapsed days. predict_value picks
one of three PredictionMethod strategies, registered in PREDICTORS.
"""

import logging
import time
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Sequence

import numpy as np

from vitaltrend.config import VitalTrendConfig
from vitaltrend.errors import InsufficientDataError
from vitaltrend.frames import now_like, records_to_frame
from vitaltrend.models import (
    DateRange,
    HealthRecord,
    LinearRegressionResult,
    PredictedPoint,
    PredictionMethod,
    TrendAnalysis,
    TrendPrediction,
)
from vitaltrend.pipeline import analyze_trends
from vitaltrend.signals import linear_regression
from vitaltrend.smoothing import exponential_moving_average, simple_moving_average


def _elapsed_days(start: datetime, ts: datetime) -> float:
    return (ts - start).total_seconds() / 86400.0


def _calendar_fit(
    analysis: TrendAnalysis,
    origin: datetime,
    last: datetime,
) -> LinearRegressionResult:
    """Raw value against elapsed days, or the snapshot slope anchored at the last point."""
    points = analysis.trend_points
    xy = [(_elapsed_days(origin, p.timestamp), p.raw_value) for p in points]
    if len({x for x, _ in xy}) >= 2:
        return linear_regression(xy)

    last_x = _elapsed_days(origin, last)
    return LinearRegressionResult(
        slope=analysis.slope,
        intercept=points[-1].raw_value - analysis.slope * last_x,
        correlation=analysis.correlation,
        r_squared=analysis.r_squared,
    )


# ---------------------------------------------------------------------------
# Trend projection
# ---------------------------------------------------------------------------

def predict_trend(
    analysis: TrendAnalysis,
    days_ahead: int,
    now: Optional[datetime] = None,
    cfg: VitalTrendConfig | None = None,
    logger: logging.Logger | None = None,
) -> TrendPrediction:
    """
    Project one value per day for `days_ahead` days after the last analysed point.

    The fit is raw value against elapsed days, so irregular sampling is
    projected on a calendar axis rather than by observation index.
    When every point shares one instant there is no calendar axis, so the
    analysis' own per-observation slope is extended from the last point.
    Confidence decays from the analysis confidence and never exceeds it.
    """
    if cfg is None:
        cfg = VitalTrendConfig()
    log = logger or logging.getLogger(__name__)
    fp = cfg.forecast
    started = time.perf_counter()

    try:
        if days_ahead <= 0:
            raise ValueError(f"days_ahead must be positive, got {days_ahead}")

        points = analysis.trend_points
        origin = points[0].timestamp
        last = points[-1].timestamp
        regression = _calendar_fit(analysis, origin, last)
    except ValueError as exc:
        log.warning(
            "trend_prediction failed after %.3fs: %s", time.perf_counter() - started, exc,
        )
        raise

    last_x = _elapsed_days(origin, last)
    predicted = []
    for day in range(1, days_ahead + 1):
        value = regression.predict(last_x + day)
        if fp.clamp_non_negative:
            value = max(0.0, value)
        predicted.append(PredictedPoint(timestamp=last + timedelta(days=day), value=float(value)))

    if now is None:
        now = now_like(last)

    prediction = TrendPrediction(
        data_type=analysis.data_type,
        predicted_points=tuple(predicted),
        confidence=min(analysis.confidence * fp.confidence_decay, fp.confidence_cap),
        methodology=fp.methodology,
        valid_until=now + timedelta(days=days_ahead),
    )

    log.info(
        "trend_prediction completed in %.3fs: days_ahead=%d slope_per_day=%+.4f confidence=%.3f",
        time.perf_counter() - started, days_ahead, regression.slope, prediction.confidence,
    )
    return prediction


# ---------------------------------------------------------------------------
# Single-value prediction strategies
# ---------------------------------------------------------------------------

def _predict_linear(
    records: Sequence[HealthRecord],
    days_ahead: int,
    now: Optional[datetime],
    cfg: VitalTrendConfig,
    log: logging.Logger,
) -> float:
    stamps = [r.timestamp for r in records]
    span = DateRange(start_date=min(stamps), end_date=max(stamps))
    analysis = analyze_trends(records, date_range=span, cfg=cfg, logger=log)
    prediction = predict_trend(analysis, days_ahead, now=now, cfg=cfg, logger=log)
    return prediction.predicted_points[-1].value


def _predict_exponential(
    records: Sequence[HealthRecord],
    days_ahead: int,
    now: Optional[datetime],
    cfg: VitalTrendConfig,
    log: logging.Logger,
) -> float:
    values = records_to_frame(records)["value"].to_numpy(dtype=np.float64)
    return exponential_moving_average(values, cfg.smoothing.forecast_alpha)[-1]


def _predict_moving_average(
    records: Sequence[HealthRecord],
    days_ahead: int,
    now: Optional[datetime],
    cfg: VitalTrendConfig,
    log: logging.Logger,
) -> float:
    values = records_to_frame(records)["value"].to_numpy(dtype=np.float64)
    window = min(cfg.smoothing.forecast_window, len(values))
    return simple_moving_average(values, window)[-1]


PREDICTORS: Dict[PredictionMethod, Callable[..., float]] = {
    PredictionMethod.LINEAR_REGRESSION: _predict_linear,
    PredictionMethod.EXPONENTIAL_SMOOTHING: _predict_exponential,
    PredictionMethod.MOVING_AVERAGE: _predict_moving_average,
}


def predict_value(
    records: Sequence[HealthRecord],
    days_ahead: int,
    method: PredictionMethod = PredictionMethod.LINEAR_REGRESSION,
    now: Optional[datetime] = None,
    cfg: VitalTrendConfig | None = None,
    logger: logging.Logger | None = None,
) -> float:
    """
    Predict a single value `days_ahead` days out.

    Linear regression analyses the full span of the records and returns the
    last projected point. Exponential smoothing and moving average return a
    flat forecast: the last smoothed level.
    """
    if cfg is None:
        cfg = VitalTrendConfig()
    log = logger or logging.getLogger(__name__)
    started = time.perf_counter()

    try:
        if len(records) == 0:
            raise InsufficientDataError(
                "Prediction requires at least 1 record", required=1, actual=0,
            )
        if days_ahead <= 0:
            raise ValueError(f"days_ahead must be positive, got {days_ahead}")

        method = PredictionMethod(method)
        value = float(PREDICTORS[method](records, days_ahead, now, cfg, log))
    except ValueError as exc:
        log.warning(
            "value_prediction failed after %.3fs: %s", time.perf_counter() - started, exc,
        )
        raise

    log.info(
        "value_prediction completed in %.3fs: method=%s records=%d days_ahead=%d value=%.3f",
        time.perf_counter() - started, method.value, len(records), days_ahead, value,
    )
    return value
