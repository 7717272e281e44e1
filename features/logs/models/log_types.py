from datetime import date as Date, time as Time
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from features.tides.models.tide_types import TideStage
from features.weather.models.weather_types import BaroTrend

class EnvironmentalContext(BaseModel):
    """Conditions at the moment of catch. Fields are None when they could not be determined."""
    sunrise: Optional[str] = None
    sunset: Optional[str] = None
    moonrise: Optional[str] = None
    moonset: Optional[str] = None
    moon_phase: Optional[str] = None
    barometric_current: Optional[float] = None  # hPa
    barometric_prev_3h: Optional[float] = None  # hPa
    barometric_trend: Optional[BaroTrend] = None
    weather_temp: Optional[float] = None  # °F
    weather_condition: Optional[str] = None
    tide_station_id: Optional[str] = None
    tide_stage: Optional[TideStage] = None
    tide_height_ft: Optional[float] = None
    tide_rate_ft_per_hr: Optional[float] = None

class FishingLogBase(BaseModel):
    title: Optional[str] = None
    date: Optional[Date] = None
    time: Optional[Time] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    area_name: Optional[str] = None
    catch_status: Optional[str] = None
    notes: Optional[str] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

class FishingLogCreate(FishingLogBase):
    """New log entry. Conditions given here override the looked-up ones."""
    weather_temp: Optional[float] = None
    weather_condition: Optional[str] = None
    tide_stage: Optional[TideStage] = None
    moon_phase: Optional[str] = None
    barometric_current: Optional[float] = None
    barometric_prev_3h: Optional[float] = None

class FishingRecord(FishingLogBase, EnvironmentalContext):
    """Stored log entry."""
    id: int

class CreateLogResponse(BaseModel):
    success: bool = True
    id: int
    record: FishingRecord

class BackfillGroup(str, Enum):
    ASTRONOMY = "astronomy"
    BAROMETRIC = "barometric"
    TIDE = "tide"

BACKFILL_FIELDS: Dict[BackfillGroup, List[str]] = {
    BackfillGroup.ASTRONOMY: ["sunrise", "sunset", "moonrise", "moonset", "moon_phase"],
    BackfillGroup.BAROMETRIC: ["barometric_current", "barometric_prev_3h", "barometric_trend"],
    BackfillGroup.TIDE: ["tide_station_id", "tide_stage", "tide_height_ft", "tide_rate_ft_per_hr"]
}

class BackfillCriteria(BaseModel):
    group: BackfillGroup
    missing_only: bool = True  # False re-runs the group over complete rows too

    @property
    def fields(self) -> List[str]:
        return BACKFILL_FIELDS[self.group]

class BackfillResult(BaseModel):
    group: BackfillGroup
    scanned_count: int = 0
    updated_count: int = 0
    skipped_count: int = 0
