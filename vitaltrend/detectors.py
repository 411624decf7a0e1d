"""
Outlier and anomaly detectors.

Each outlier method is a pure function with the same signature
(values, cfg) -> flagged indices, registered in OUTLIER_METHODS.
No side effects; inputs are never mutated.
"""

import logging
import time
from typing import Callable, Dict, List, Sequence, Tuple

import numpy as np
import pandas as pd

from vitaltrend.config import VitalTrendConfig
from vitaltrend.frames import records_to_frame, to_datetime
from vitaltrend.models import AnomalyPoint, AnomalySeverity, HealthRecord, OutlierMethod


# ---------------------------------------------------------------------------
# Sigma clipping (shared by z-score outliers and anomaly scoring)
# ---------------------------------------------------------------------------

def sigma_clip(
    values: np.ndarray,
    multiplier: float,
    cfg: VitalTrendConfig,
    inclusive: bool = True,
) -> Dict[int, Tuple[float, float]]:
    """
    Iteratively flag points whose z-score against the unflagged remainder
    is >= multiplier (> multiplier when not inclusive).

    Each pass computes mean and sample std over the points not yet flagged,
    flags every remaining point at or beyond the multiplier, and repeats.
    Stops when a pass flags nothing, fewer than `min_values` points remain,
    the remainder has no spread, or `max_passes` is reached.

    Returns {index: (z_score, mean_of_pass)}.
    """
    op = cfg.outliers
    flagged: Dict[int, Tuple[float, float]] = {}
    active = np.ones(len(values), dtype=bool)

    for _ in range(op.max_passes):
        remaining = values[active]
        if len(remaining) < op.min_values:
            break

        mean = float(remaining.mean())
        std = float(remaining.std(ddof=1))
        if std == 0.0:
            break

        z = np.abs(values - mean) / std
        beyond = z >= multiplier if inclusive else z > multiplier
        hits = np.flatnonzero(active & beyond)
        if len(hits) == 0:
            break

        for i in hits:
            flagged[int(i)] = (float(z[i]), mean)
        active[hits] = False

    return flagged


# ---------------------------------------------------------------------------
# Outlier methods
# ---------------------------------------------------------------------------

def _z_score_outliers(values: np.ndarray, cfg: VitalTrendConfig) -> List[int]:
    return sorted(sigma_clip(values, cfg.outliers.z_multiplier, cfg, inclusive=False))


def _iqr_outliers(values: np.ndarray, cfg: VitalTrendConfig) -> List[int]:
    q1, q3 = np.percentile(values, [25, 75])
    fence = cfg.outliers.iqr_multiplier * (q3 - q1)
    lower, upper = q1 - fence, q3 + fence
    return np.flatnonzero((values < lower) | (values > upper)).tolist()


def _modified_z_score_outliers(values: np.ndarray, cfg: VitalTrendConfig) -> List[int]:
    op = cfg.outliers
    median = np.median(values)
    mad = np.median(np.abs(values - median))
    if mad == 0.0:
        return []
    scores = op.modified_z_constant * (values - median) / mad
    return np.flatnonzero(np.abs(scores) > op.modified_z_multiplier).tolist()


OUTLIER_METHODS: Dict[OutlierMethod, Callable[[np.ndarray, VitalTrendConfig], List[int]]] = {
    OutlierMethod.Z_SCORE: _z_score_outliers,
    OutlierMethod.IQR: _iqr_outliers,
    OutlierMethod.MODIFIED_Z_SCORE: _modified_z_score_outliers,
}


def detect_outliers(
    values: Sequence[float],
    method: OutlierMethod = OutlierMethod.Z_SCORE,
    cfg: VitalTrendConfig | None = None,
) -> List[int]:
    """
    Indices of outlying values, ascending. Fewer than 3 values → [].

    Every method flags only values strictly beyond its gate; a value sitting
    exactly on the multiplier or fence is kept.
    """
    if cfg is None:
        cfg = VitalTrendConfig()
    if len(values) < cfg.outliers.min_values:
        return []

    arr = np.asarray(values, dtype=np.float64)
    return OUTLIER_METHODS[OutlierMethod(method)](arr, cfg)


# ---------------------------------------------------------------------------
# Anomaly severity
# ---------------------------------------------------------------------------

def classify_severity(
    score: float,
    sensitivity: float,
    cfg: VitalTrendConfig | None = None,
) -> AnomalySeverity:
    """
    Grade a deviation score by how far it exceeds the sensitivity gate.

    LOW is returned only for scores below the gate, which never become
    anomalies.
    """
    if cfg is None:
        cfg = VitalTrendConfig()
    st = cfg.severity

    if score < sensitivity:
        return AnomalySeverity.LOW
    ratio = score / sensitivity
    if ratio < st.medium_ceiling:
        return AnomalySeverity.MEDIUM
    if ratio < st.high_ceiling:
        return AnomalySeverity.HIGH
    return AnomalySeverity.CRITICAL


# ---------------------------------------------------------------------------
# Anomaly detection over records
# ---------------------------------------------------------------------------

def anomalies_from_frame(
    df: pd.DataFrame,
    sensitivity: float,
    cfg: VitalTrendConfig,
) -> List[Tuple[int, AnomalyPoint]]:
    """(row index, AnomalyPoint) pairs for a time-ordered record frame."""
    if len(df) < cfg.outliers.min_values:
        return []

    values = df["value"].to_numpy(dtype=np.float64)
    flagged = sigma_clip(values, sensitivity, cfg)

    return [
        (i, AnomalyPoint(
            timestamp=to_datetime(df["timestamp"].iloc[i]),
            value=float(values[i]),
            expected_value=expected,
            deviation_score=score,
            severity=classify_severity(score, sensitivity, cfg),
        ))
        for i, (score, expected) in sorted(flagged.items())
    ]


def detect_anomalies(
    records: Sequence[HealthRecord],
    sensitivity: float,
    cfg: VitalTrendConfig | None = None,
    logger: logging.Logger | None = None,
) -> List[AnomalyPoint]:
    """
    Emit an AnomalyPoint for every record whose deviation score >= sensitivity.

    Scores come from sigma clipping, so one extreme reading cannot hide a
    second one by inflating the spread. Points are returned in time order.
    """
    if cfg is None:
        cfg = VitalTrendConfig()
    log = logger or logging.getLogger(__name__)
    started = time.perf_counter()

    if sensitivity <= 0:
        log.warning("anomaly_detection rejected sensitivity=%s", sensitivity)
        raise ValueError(f"Sensitivity must be positive, got {sensitivity}")

    if len(records) < cfg.outliers.min_values:
        return []

    df = records_to_frame(records)
    anomalies = [point for _, point in anomalies_from_frame(df, sensitivity, cfg)]

    log.info(
        "anomaly_detection completed in %.3fs: records=%d anomalies=%d sensitivity=%.2f",
        time.perf_counter() - started, len(records), len(anomalies), sensitivity,
    )
    return anomalies
