from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field

class TimeSample(BaseModel):
    """One point of a scalar series (pressure, temperature, weather code, tide height)."""
    timestamp: datetime
    value: float

class TideExtremeKind(str, Enum):
    HIGH = "High"
    LOW = "Low"

class TideExtremeEvent(BaseModel):
    """A predicted high or low water."""
    timestamp: datetime
    height: float = Field(..., description="Height in feet above datum")
    kind: TideExtremeKind
