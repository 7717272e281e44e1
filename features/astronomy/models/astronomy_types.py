from typing import Optional
from pydantic import BaseModel

class AstronomyData(BaseModel):
    """Sun and moon events for one location and day, as local "HH:MM" strings."""
    sunrise: Optional[str] = None
    sunset: Optional[str] = None
    moonrise: Optional[str] = None
    moonset: Optional[str] = None
    moon_phase: Optional[str] = None
