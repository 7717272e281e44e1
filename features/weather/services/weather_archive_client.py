import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import pandas as pd

from core.config import settings
from features.common.exceptions.enrichment_exceptions import UpstreamUnavailable
from features.common.models.result_types import FetchFailed, FetchOk, FetchResult
from features.common.models.series_types import TimeSample
from features.common.services.upstream_client import UpstreamClient
from features.weather.models.weather_types import HourlyWeather

logger = logging.getLogger(__name__)

class WeatherArchiveClient(UpstreamClient):
    """Hourly pressure and weather history from the Open-Meteo archive API."""

    def __init__(self, timeout_ms: Optional[int] = None):
        super().__init__(timeout_ms)
        self.base_url = settings.weather_archive_url

    def _build_params(self, lat: float, lon: float, day: date, variables: List[str]) -> Dict[str, Any]:
        # Start a day early so the pressure look-back works shortly after midnight
        return {
            "latitude": lat,
            "longitude": lon,
            "start_date": (day - timedelta(days=1)).isoformat(),
            "end_date": day.isoformat(),
            "hourly": ",".join(variables),
            **settings.weather_params
        }

    def parse_hourly(self, data: Dict[str, Any], variable: str) -> List[TimeSample]:
        """Turn Open-Meteo's parallel ``time``/``<variable>`` arrays into samples, dropping nulls."""
        hourly = data.get("hourly") if isinstance(data, dict) else None
        if not isinstance(hourly, dict) or "time" not in hourly or variable not in hourly:
            raise UpstreamUnavailable(f"Archive response has no hourly {variable}")

        times, values = hourly["time"], hourly[variable]
        if len(times) != len(values):
            raise UpstreamUnavailable(f"Archive {variable} has {len(values)} values for {len(times)} timestamps")

        df = pd.DataFrame({
            "timestamp": pd.to_datetime(pd.Series(times, dtype="object"), errors="coerce"),
            "value": pd.to_numeric(pd.Series(values, dtype="object"), errors="coerce")
        }).dropna()

        return [
            TimeSample(timestamp=row.timestamp.to_pydatetime(), value=float(row.value))
            for row in df.itertuples(index=False)
        ]

    async def fetch_pressure_series(self, lat: float, lon: float, day: date) -> FetchResult:
        """Hourly surface pressure (hPa)."""
        try:
            data = await self._get_json(self.base_url, self._build_params(lat, lon, day, ["surface_pressure"]))
            return FetchOk(value=self.parse_hourly(data, "surface_pressure"))
        except UpstreamUnavailable as e:
            logger.warning(f"Pressure lookup failed for ({lat}, {lon}) on {day}: {str(e)}")
            return FetchFailed(reason=str(e))

    async def fetch_weather_series(self, lat: float, lon: float, day: date) -> FetchResult:
        """Hourly temperature (°F) and WMO weather code."""
        try:
            data = await self._get_json(
                self.base_url,
                self._build_params(lat, lon, day, ["temperature_2m", "weather_code"])
            )
            return FetchOk(value=HourlyWeather(
                temperature=self.parse_hourly(data, "temperature_2m"),
                weather_code=self.parse_hourly(data, "weather_code")
            ))
        except UpstreamUnavailable as e:
            logger.warning(f"Weather lookup failed for ({lat}, {lon}) on {day}: {str(e)}")
            return FetchFailed(reason=str(e))
