import asyncio
import logging
import math
from datetime import date, datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from core.cache import SeriesCache, series_cache_key
from core.config import settings
from features.astronomy.models.astronomy_types import AstronomyData
from features.astronomy.services.astronomy_client import AstronomyClient
from features.common.exceptions.enrichment_exceptions import UpstreamUnavailable
from features.common.models.result_types import FetchFailed, FetchOk
from features.common.utils.series_sampler import nearest_sample
from features.logs.models.log_types import EnvironmentalContext, FishingLogBase, FishingLogCreate
from features.stations.models.station_types import Station
from features.stations.services.geo_index import GeoIndex
from features.tides.models.tide_types import TideReading
from features.tides.services.tide_classifier import build_tide_input, classify_tide
from features.tides.services.tide_client import TideClient
from features.weather.services.trend_classifier import baro_trend, normalize_condition, weather_description
from features.weather.services.weather_archive_client import WeatherArchiveClient

logger = logging.getLogger(__name__)

def catch_time(entry: FishingLogBase) -> Optional[datetime]:
    """Local date and time of the catch, if both were recorded.

    Provider series are naive local time, so an offset on the recorded time is
    dropped rather than converted.
    """
    if entry.date is None or entry.time is None:
        return None
    return datetime.combine(entry.date, entry.time.replace(tzinfo=None))

def round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))

class EnrichmentService:
    """Resolves astronomy, pressure, weather and tide context for a log entry.

    The ``resolve_*`` methods are shared with the backfill service, which
    passes a ``SeriesCache`` so rows with the same location and day reuse one
    fetch. Without a cache every call goes upstream.
    """

    def __init__(
        self,
        geo_index: GeoIndex,
        astronomy_client: AstronomyClient,
        weather_client: WeatherArchiveClient,
        tide_client: TideClient
    ):
        self.geo_index = geo_index
        self.astronomy_client = astronomy_client
        self.weather_client = weather_client
        self.tide_client = tide_client

    async def _fetch(
        self,
        cache: Optional[SeriesCache],
        key: str,
        fetch: Callable[[], Awaitable[Any]]
    ) -> Any:
        if cache is None:
            return await fetch()
        return await cache.get_or_fetch(key, fetch)

    async def resolve_astronomy(
        self,
        lat: float,
        lon: float,
        day: date,
        cache: Optional[SeriesCache] = None
    ) -> Optional[AstronomyData]:
        result = await self._fetch(
            cache,
            series_cache_key("astronomy", lat, lon, day),
            lambda: self.astronomy_client.fetch_astronomy(lat, lon, day)
        )
        return result.value if isinstance(result, FetchOk) else None

    async def resolve_pressure(
        self,
        lat: float,
        lon: float,
        when: datetime,
        cache: Optional[SeriesCache] = None
    ) -> Tuple[Optional[float], Optional[float]]:
        """Pressure nearest ``when`` and nearest the look-back instant before it."""
        result = await self._fetch(
            cache,
            series_cache_key("pressure", lat, lon, when.date()),
            lambda: self.weather_client.fetch_pressure_series(lat, lon, when.date())
        )
        if isinstance(result, FetchFailed):
            return None, None
        previous_time = when - timedelta(hours=settings.baro_lookback_hours)
        return nearest_sample(result.value, when), nearest_sample(result.value, previous_time)

    async def resolve_weather(
        self,
        lat: float,
        lon: float,
        when: datetime,
        cache: Optional[SeriesCache] = None
    ) -> Tuple[Optional[float], Optional[str]]:
        """Rounded temperature and condition description nearest ``when``."""
        result = await self._fetch(
            cache,
            series_cache_key("weather", lat, lon, when.date()),
            lambda: self.weather_client.fetch_weather_series(lat, lon, when.date())
        )
        if isinstance(result, FetchFailed):
            return None, None
        temperature = nearest_sample(result.value.temperature, when)
        code = nearest_sample(result.value.weather_code, when)
        return (
            round_half_up(temperature) if temperature is not None else None,
            normalize_condition(weather_description(code))
        )

    async def resolve_tide(
        self,
        lat: float,
        lon: float,
        when: datetime,
        cache: Optional[SeriesCache] = None
    ) -> Tuple[Optional[Station], Optional[TideReading]]:
        """Nearest station and the tide reading there, each None when unobtainable."""
        station = self.geo_index.nearest_station(lat, lon)
        if station is None:
            return None, None

        day = when.date()
        dense_result, hilo_result = await asyncio.gather(
            self._fetch(
                cache,
                series_cache_key("tide_dense", station.id, day),
                lambda: self.tide_client.fetch_dense_series(station.id, day)
            ),
            self._fetch(
                cache,
                series_cache_key("tide_hilo", station.id, day),
                lambda: self.tide_client.fetch_hilo_events(station.id, day)
            )
        )
        samples = dense_result.value if isinstance(dense_result, FetchOk) else []
        events = hilo_result.value if isinstance(hilo_result, FetchOk) else []
        return station, classify_tide(build_tide_input(samples, events), when)

    async def _settle(self, step: str, work: Awaitable[Dict[str, Any]]) -> Dict[str, Any]:
        """Run one enrichment step; an upstream failure empties only that step's fields."""
        try:
            return await work
        except UpstreamUnavailable as e:
            logger.warning(f"{step} context unavailable: {str(e)}")
            return {}

    async def _astronomy_fields(self, entry: FishingLogCreate) -> Dict[str, Any]:
        astronomy = await self.resolve_astronomy(entry.latitude, entry.longitude, entry.date)
        return astronomy.model_dump() if astronomy else {}

    async def _tide_fields(self, entry: FishingLogCreate, when: datetime) -> Dict[str, Any]:
        station, reading = await self.resolve_tide(entry.latitude, entry.longitude, when)
        fields: Dict[str, Any] = {}
        if station is not None:
            fields["tide_station_id"] = station.id
        if reading is not None:
            fields["tide_stage"] = reading.stage
            fields["tide_height_ft"] = round(reading.height_ft, 2)
            fields["tide_rate_ft_per_hr"] = round(reading.rate_ft_per_hr, 2)
        return fields

    async def _barometric_fields(self, entry: FishingLogCreate, when: Optional[datetime]) -> Dict[str, Any]:
        current, previous = entry.barometric_current, entry.barometric_prev_3h
        if entry.has_coordinates and when is not None and (current is None or previous is None):
            sampled_current, sampled_previous = await self.resolve_pressure(entry.latitude, entry.longitude, when)
            current = current if current is not None else sampled_current
            previous = previous if previous is not None else sampled_previous
        return {
            "barometric_current": current,
            "barometric_prev_3h": previous,
            "barometric_trend": baro_trend(current, previous)
        }

    async def _weather_fields(self, entry: FishingLogCreate, when: Optional[datetime]) -> Dict[str, Any]:
        temperature = entry.weather_temp
        condition = normalize_condition(entry.weather_condition)
        if entry.has_coordinates and when is not None and (temperature is None or condition is None):
            sampled_temperature, sampled_condition = await self.resolve_weather(entry.latitude, entry.longitude, when)
            temperature = temperature if temperature is not None else sampled_temperature
            condition = condition if condition is not None else sampled_condition
        return {"weather_temp": temperature, "weather_condition": condition}

    async def enrich(self, entry: FishingLogCreate) -> EnvironmentalContext:
        """Environmental context for a new entry, manual values taking precedence.

        Never raises for unavailable data; fields that cannot be determined
        are left as None.
        """
        when = catch_time(entry)
        steps = [
            self._settle("Barometric", self._barometric_fields(entry, when)),
            self._settle("Weather", self._weather_fields(entry, when))
        ]
        if entry.has_coordinates and entry.date is not None:
            steps.append(self._settle("Astronomy", self._astronomy_fields(entry)))
        if entry.has_coordinates and when is not None:
            steps.append(self._settle("Tide", self._tide_fields(entry, when)))

        merged: Dict[str, Any] = {}
        for fields in await asyncio.gather(*steps):
            merged.update(fields)

        if entry.moon_phase:
            merged["moon_phase"] = entry.moon_phase
        if entry.tide_stage is not None:
            merged["tide_stage"] = entry.tide_stage
        return EnvironmentalContext(**merged)
