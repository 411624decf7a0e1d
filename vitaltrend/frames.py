"""
Record framing: turn caller-owned record sequences into time-ordered DataFrames.

The caller's sequence is never mutated; every function builds a new frame.
"""

from datetime import datetime
from typing import Iterable, List, Sequence

import pandas as pd

from vitaltrend.models import HealthDataType, HealthRecord


FRAME_COLUMNS = ["timestamp", "value", "data_type"]


def records_to_frame(records: Sequence[HealthRecord]) -> pd.DataFrame:
    """
    Build a frame sorted ascending by timestamp.

    The sort is stable, so records sharing a timestamp keep their input order.
    Timezone-aware timestamps are normalized to UTC, so records carrying
    different offsets (a DST change, several devices) still compare as instants.
    """
    stamps = [r.timestamp for r in records]
    aware = any(ts.tzinfo is not None for ts in stamps)
    df = pd.DataFrame({
        "timestamp": pd.to_datetime(pd.Series(stamps, dtype=object), utc=aware),
        "value": pd.Series([float(r.value) for r in records], dtype="float64"),
        # object dtype keeps HealthDataType members (and None) as-is
        "data_type": pd.Series([r.data_type for r in records], dtype=object),
    }, columns=FRAME_COLUMNS)
    if df.empty:
        return df

    df.sort_values("timestamp", kind="mergesort", inplace=True)
    df.reset_index(drop=True, inplace=True)
    return df


def to_datetime(value) -> datetime:
    """Normalize pandas/numpy timestamps back to datetime."""
    return pd.Timestamp(value).to_pydatetime()


def timestamps(df: pd.DataFrame) -> List[datetime]:
    return [to_datetime(ts) for ts in df["timestamp"]]


def records_from_dicts(data: Iterable[dict]) -> List[HealthRecord]:
    """
    Parse JSON-style dicts into HealthRecord objects.

    Accepts "timestamp" or "date" for the time field, a numeric "value", and
    an optional "data_type" (or "type").
    """
    records = []
    for i, row in enumerate(data):
        raw_ts = row.get("timestamp", row.get("date"))
        if raw_ts is None:
            raise ValueError(f"Record {i} is missing a timestamp")
        if "value" not in row:
            raise ValueError(f"Record {i} is missing a value")

        raw_type = row.get("data_type", row.get("type"))
        data_type = HealthDataType(raw_type) if raw_type is not None else None

        records.append(HealthRecord(
            timestamp=to_datetime(pd.to_datetime(raw_ts)),
            value=float(row["value"]),
            data_type=data_type,
        ))
    return records


def now_like(reference: datetime) -> datetime:
    """Current time, timezone-aware only if the reference is."""
    if reference.tzinfo is not None:
        return datetime.now(tz=reference.tzinfo)
    return datetime.now()
