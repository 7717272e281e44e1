from datetime import datetime
from typing import Optional, Sequence

from pydantic import BaseModel

from features.common.models.series_types import TimeSample

class InterpolatedValue(BaseModel):
    """Value of a series at an instant plus its local slope."""
    value: float
    rate_per_hour: float

def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600

def nearest_sample(series: Sequence[TimeSample], target: datetime) -> Optional[float]:
    """Value of the sample closest in time to ``target``.

    Meant for hourly data where sub-hour precision is meaningless. On equal
    distance the first sample encountered wins.
    """
    best: Optional[TimeSample] = None
    best_distance = None
    for sample in series:
        distance = abs((sample.timestamp - target).total_seconds())
        if best_distance is None or distance < best_distance:
            best = sample
            best_distance = distance
    return best.value if best is not None else None

def interpolate_between(
    start_time: datetime,
    start_value: float,
    end_time: datetime,
    end_value: float,
    target: datetime
) -> InterpolatedValue:
    """Linear interpolation between two points, with the segment's rate."""
    span_seconds = (end_time - start_time).total_seconds()
    alpha = (target - start_time).total_seconds() / span_seconds if span_seconds else 0.0
    span_hours = span_seconds / 3600
    rate = (end_value - start_value) / span_hours if span_hours else 0.0
    return InterpolatedValue(
        value=start_value + alpha * (end_value - start_value),
        rate_per_hour=rate
    )

def interpolate_series(series: Sequence[TimeSample], target: datetime) -> Optional[InterpolatedValue]:
    """Piecewise-linear value of a dense series at ``target``.

    Input order does not matter. Outside the covered range (on either side)
    the last adjacent pair is extended rather than rejected.
    """
    if len(series) < 2:
        return None

    ordered = sorted(series, key=lambda s: s.timestamp)

    start, end = ordered[-2], ordered[-1]
    for s1, s2 in zip(ordered, ordered[1:]):
        if s1.timestamp <= target <= s2.timestamp:
            start, end = s1, s2
            break

    return interpolate_between(start.timestamp, start.value, end.timestamp, end.value, target)
