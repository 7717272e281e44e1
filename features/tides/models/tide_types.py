from enum import Enum
from typing import List, Literal, Optional, Union
from pydantic import BaseModel, Field

from features.common.models.series_types import TideExtremeEvent, TimeSample

class TideStage(str, Enum):
    RISING = "Rising"
    DROPPING = "Dropping"
    SLACK = "Slack"
    UNKNOWN = "Unknown"

class DenseSeries(BaseModel):
    """Sub-hourly height predictions; extremes ride along for annotation only."""
    mode: Literal["dense"] = "dense"
    samples: List[TimeSample]
    events: List[TideExtremeEvent] = []

class SparseEvents(BaseModel):
    """Only high/low predictions are available."""
    mode: Literal["sparse"] = "sparse"
    events: List[TideExtremeEvent]

class Unavailable(BaseModel):
    mode: Literal["unavailable"] = "unavailable"

TideInput = Union[DenseSeries, SparseEvents, Unavailable]

class TideReading(BaseModel):
    """Tide state at an instant."""
    stage: TideStage
    height_ft: float = Field(..., description="Interpolated height in feet")
    rate_ft_per_hr: float = Field(..., description="Signed rate of change in feet per hour")
    nearest_extreme: Optional[TideExtremeEvent] = None
