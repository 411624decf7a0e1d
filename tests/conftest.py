"""Shared record factories for the VitalTrend test suite."""
from datetime import datetime, timedelta

import pytest

from vitaltrend.models import HealthDataType, HealthRecord

BASE = datetime(2024, 3, 1, 8, 0)

DECREASING_WEIGHT = [70.0, 69.5, 69.0, 68.8, 68.5, 68.2, 68.0, 67.8, 67.5, 67.2]
WEIGHT_WITH_SPIKES = [70.0, 69.8, 69.5, 75.0, 69.2, 69.0, 65.0, 68.5, 68.3, 68.0]


def build_records(values, data_type=HealthDataType.WEIGHT, days=None, start=BASE):
    """One record per value; `days` overrides the default 0..n-1 day offsets."""
    offsets = days if days is not None else range(len(values))
    return [
        HealthRecord(timestamp=start + timedelta(days=d), value=v, data_type=data_type)
        for d, v in zip(offsets, values)
    ]


@pytest.fixture
def make_records():
    return build_records


@pytest.fixture
def weight_records():
    return build_records(DECREASING_WEIGHT)


@pytest.fixture
def spiky_weight_records():
    return build_records(WEIGHT_WITH_SPIKES)
