from enum import Enum
from typing import List
from pydantic import BaseModel

from features.common.models.series_types import TimeSample

class BaroTrend(str, Enum):
    RISING = "Rising"
    FALLING = "Falling"
    STEADY = "Steady"

class WeatherCondition(Enum):
    """WMO weather interpretation codes grouped into display conditions."""
    CLEAR = ((0, 0), "Clear")
    PARTLY_CLOUDY = ((1, 2), "Partly Cloudy")
    OVERCAST = ((3, 3), "Overcast")
    FOG = ((45, 48), "Fog")
    DRIZZLE = ((51, 55), "Drizzle")
    FREEZING_DRIZZLE = ((56, 57), "Freezing Drizzle")
    RAIN = ((61, 65), "Rain")
    FREEZING_RAIN = ((66, 67), "Freezing Rain")
    SNOW = ((71, 75), "Snow")
    SNOW_GRAINS = ((77, 77), "Snow Grains")
    RAIN_SHOWERS = ((80, 82), "Rain Showers")
    SNOW_SHOWERS = ((85, 86), "Snow Showers")
    THUNDERSTORM = ((95, 95), "Thunderstorm")
    THUNDERSTORM_HAIL = ((96, 99), "Thunderstorm with Hail")

    @classmethod
    def get_description(cls, code: int) -> str:
        for condition in cls:
            (min_code, max_code), description = condition.value
            if min_code <= code <= max_code:
                return description
        return "Unknown"

class HourlyWeather(BaseModel):
    """Hourly temperature (°F) and weather code samples for one location."""
    temperature: List[TimeSample] = []
    weather_code: List[TimeSample] = []
