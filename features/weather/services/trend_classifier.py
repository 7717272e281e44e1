import math
from typing import Any, Optional

from core.config import settings
from features.weather.models.weather_types import BaroTrend, WeatherCondition

SUNNY_SYNONYMS = {"sunny", "mostly sunny", "mainly sunny", "clear sky", "fair"}

def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None

def baro_trend(
    current: Any,
    previous: Any,
    deadband: float = settings.baro_trend_deadband
) -> Optional[BaroTrend]:
    """Pressure tendency between two readings.

    Changes within +/- ``deadband`` count as steady so that near-equal
    consecutive readings do not flip the trend.
    """
    current_value = _as_float(current)
    previous_value = _as_float(previous)
    if current_value is None or previous_value is None:
        return None

    change = current_value - previous_value
    if change > deadband:
        return BaroTrend.RISING
    if change < -deadband:
        return BaroTrend.FALLING
    return BaroTrend.STEADY

def weather_description(code: Any) -> Optional[str]:
    """Display condition for a WMO weather code; None when there is no code."""
    value = _as_float(code)
    if value is None:
        return None
    if not value.is_integer():
        return "Unknown"
    return WeatherCondition.get_description(int(value))

def normalize_condition(text: Optional[str]) -> Optional[str]:
    """Map provider "Sunny" wording onto Clear; blank text means no condition."""
    if text is None or not text.strip():
        return None
    cleaned = text.strip()
    if cleaned.lower() in SUNNY_SYNONYMS:
        return WeatherCondition.CLEAR.value[1]
    return cleaned
