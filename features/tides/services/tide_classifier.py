from datetime import datetime, timedelta
from typing import Optional, Sequence

from core.config import settings
from features.common.models.series_types import TideExtremeEvent, TideExtremeKind, TimeSample
from features.common.utils.series_sampler import interpolate_between, interpolate_series
from features.tides.models.tide_types import (
    DenseSeries,
    SparseEvents,
    TideInput,
    TideReading,
    TideStage,
    Unavailable
)

def build_tide_input(
    samples: Sequence[TimeSample],
    events: Sequence[TideExtremeEvent]
) -> TideInput:
    """Pick the strategy: dense heights win, high/low events are the fallback."""
    if len(samples) >= 2:
        return DenseSeries(samples=list(samples), events=list(events))
    if len(events) >= 2:
        return SparseEvents(events=list(events))
    return Unavailable()

def nearest_extreme(events: Sequence[TideExtremeEvent], target: datetime) -> Optional[TideExtremeEvent]:
    if not events:
        return None
    return min(events, key=lambda e: abs((e.timestamp - target).total_seconds()))

def stage_from_rate(rate: float, slack_rate: float = settings.tide_slack_rate_ft_per_hr) -> TideStage:
    if abs(rate) < slack_rate:
        return TideStage.SLACK
    return TideStage.RISING if rate > 0 else TideStage.DROPPING

def _classify_dense(tide_input: DenseSeries, target: datetime) -> Optional[TideReading]:
    interpolated = interpolate_series(tide_input.samples, target)
    if interpolated is None:
        return None
    return TideReading(
        stage=stage_from_rate(interpolated.rate_per_hour),
        height_ft=interpolated.value,
        rate_ft_per_hr=interpolated.rate_per_hour,
        nearest_extreme=nearest_extreme(tide_input.events, target)
    )

def _classify_sparse(tide_input: SparseEvents, target: datetime) -> Optional[TideReading]:
    events = sorted(tide_input.events, key=lambda e: e.timestamp)
    if len(events) < 2:
        return None

    if target < events[0].timestamp:
        prev_event, next_event = events[0], events[1]
    elif target > events[-1].timestamp:
        prev_event, next_event = events[-2], events[-1]
        if prev_event.timestamp == next_event.timestamp:
            return None
    else:
        prev_event, next_event = events[0], events[1]
        for e1, e2 in zip(events, events[1:]):
            if e1.timestamp <= target <= e2.timestamp:
                prev_event, next_event = e1, e2
                break

    window = timedelta(minutes=settings.tide_slack_window_minutes)
    if abs(target - prev_event.timestamp) <= window or abs(next_event.timestamp - target) <= window:
        stage = TideStage.SLACK
    elif prev_event.kind == TideExtremeKind.LOW and next_event.kind == TideExtremeKind.HIGH:
        stage = TideStage.RISING
    elif prev_event.kind == TideExtremeKind.HIGH and next_event.kind == TideExtremeKind.LOW:
        stage = TideStage.DROPPING
    else:
        stage = TideStage.UNKNOWN

    interpolated = interpolate_between(
        prev_event.timestamp,
        prev_event.height,
        next_event.timestamp,
        next_event.height,
        target
    )
    return TideReading(
        stage=stage,
        height_ft=interpolated.value,
        rate_ft_per_hr=interpolated.rate_per_hour,
        nearest_extreme=nearest_extreme(events, target)
    )

def classify_tide(tide_input: TideInput, target: datetime) -> Optional[TideReading]:
    """Tide stage, height and rate at ``target``, or None when data is insufficient."""
    if isinstance(tide_input, DenseSeries):
        return _classify_dense(tide_input, target)
    if isinstance(tide_input, SparseEvents):
        return _classify_sparse(tide_input, target)
    if isinstance(tide_input, Unavailable):
        return None
    raise TypeError(f"Unsupported tide input {type(tide_input).__name__}")
