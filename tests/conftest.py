"""
Pytest configuration and shared fixtures.
"""

import pytest
from datetime import date, datetime, time, timedelta
from typing import List

from features.astronomy.models.astronomy_types import AstronomyData
from features.common.exceptions.enrichment_exceptions import UpstreamUnavailable
from features.common.models.result_types import FetchFailed, FetchOk
from features.common.models.series_types import TideExtremeEvent, TideExtremeKind, TimeSample
from features.logs.models.log_types import FishingRecord
from features.logs.services.enrichment_service import EnrichmentService
from features.logs.services.record_store import InMemoryRecordStore
from features.stations.models.station_types import Station
from features.stations.services.geo_index import GeoIndex
from features.weather.models.weather_types import HourlyWeather

CATCH_DAY = date(2024, 6, 1)

def hourly(start: datetime, values: List[float]) -> List[TimeSample]:
    return [TimeSample(timestamp=start + timedelta(hours=i), value=v) for i, v in enumerate(values)]

class FakeAstronomyClient:
    def __init__(self, data=None, fail=False):
        self.data = data or AstronomyData(
            sunrise="05:09", sunset="20:10", moonrise="02:31", moonset=None, moon_phase="Waning Crescent"
        )
        self.fail = fail
        self.calls = []

    async def fetch_astronomy(self, lat, lon, day):
        self.calls.append((lat, lon, day))
        if self.fail:
            return FetchFailed(reason="astronomy down")
        return FetchOk(value=self.data)

    async def close(self):
        pass

class FakeWeatherClient:
    """Pressure rises 0.25 hPa per hour from 1008 at midnight the day before."""

    def __init__(self, fail_pressure=False, fail_weather=False, raise_error=False):
        self.fail_pressure = fail_pressure
        self.fail_weather = fail_weather
        self.raise_error = raise_error
        self.pressure_calls = []
        self.weather_calls = []

    async def fetch_pressure_series(self, lat, lon, day):
        self.pressure_calls.append((lat, lon, day))
        if self.raise_error:
            raise UpstreamUnavailable("archive unreachable")
        if self.fail_pressure:
            return FetchFailed(reason="archive down")
        start = datetime.combine(day - timedelta(days=1), time(0))
        return FetchOk(value=hourly(start, [1008 + 0.25 * i for i in range(48)]))

    async def fetch_weather_series(self, lat, lon, day):
        self.weather_calls.append((lat, lon, day))
        if self.raise_error:
            raise UpstreamUnavailable("archive unreachable")
        if self.fail_weather:
            return FetchFailed(reason="archive down")
        start = datetime.combine(day, time(0))
        return FetchOk(value=HourlyWeather(
            temperature=hourly(start, [60.0 + i * 0.5 for i in range(24)]),
            weather_code=hourly(start, [0.0] * 12 + [2.0] * 6 + [95.0] * 6)
        ))

    async def close(self):
        pass

class FakeTideClient:
    """Low of 2 ft at 06:00 and high of 8 ft at 12:00; dense heights optional."""

    def __init__(self, dense=True, events=True, fail=False):
        self.dense = dense
        self.events = events
        self.fail = fail
        self.dense_calls = []
        self.hilo_calls = []

    async def fetch_dense_series(self, station_id, day):
        self.dense_calls.append((station_id, day))
        if self.fail:
            return FetchFailed(reason="coops down")
        if not self.dense:
            return FetchOk(value=[])
        start = datetime.combine(day, time(6))
        return FetchOk(value=hourly(start, [2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0]))

    async def fetch_hilo_events(self, station_id, day):
        self.hilo_calls.append((station_id, day))
        if self.fail:
            return FetchFailed(reason="coops down")
        if not self.events:
            return FetchOk(value=[])
        return FetchOk(value=[
            TideExtremeEvent(timestamp=datetime.combine(day, time(6)), height=2.0, kind=TideExtremeKind.LOW),
            TideExtremeEvent(timestamp=datetime.combine(day, time(12)), height=8.0, kind=TideExtremeKind.HIGH)
        ])

    async def close(self):
        pass

@pytest.fixture
def stations():
    return [
        Station(id="8447930", name="Woods Hole", lat=41.5236, lon=-70.6711, region="MA"),
        Station(id="8452660", name="Newport", lat=41.5043, lon=-71.3261, region="RI"),
        Station(id="8518750", name="The Battery", lat=40.7006, lon=-74.0142, region="NY")
    ]

@pytest.fixture
def geo_index(stations):
    return GeoIndex(stations)

@pytest.fixture
def astronomy_client():
    return FakeAstronomyClient()

@pytest.fixture
def weather_client():
    return FakeWeatherClient()

@pytest.fixture
def tide_client():
    return FakeTideClient()

@pytest.fixture
def enrichment_service(geo_index, astronomy_client, weather_client, tide_client):
    return EnrichmentService(
        geo_index=geo_index,
        astronomy_client=astronomy_client,
        weather_client=weather_client,
        tide_client=tide_client
    )

@pytest.fixture
def woods_hole_entry():
    """Catch just off Woods Hole at 09:00 local."""
    return {
        "title": "Stripers at the Hole",
        "date": CATCH_DAY,
        "time": time(9, 0),
        "latitude": 41.52,
        "longitude": -70.68,
        "area_name": "Woods Hole",
        "catch_status": "caught"
    }

@pytest.fixture
def stored_records():
    """Two entries sharing a location and day, one without coordinates, one legacy row without a time."""
    return [
        FishingRecord(id=1, title="Morning", date=CATCH_DAY, time=time(9, 0),
                      latitude=41.52, longitude=-70.68, catch_status="caught"),
        FishingRecord(id=2, title="Late morning", date=CATCH_DAY, time=time(10, 30),
                      latitude=41.52, longitude=-70.68, catch_status="released"),
        FishingRecord(id=3, title="Somewhere", date=CATCH_DAY, time=time(9, 0),
                      catch_status="skunked"),
        FishingRecord(id=4, title="Legacy", date=CATCH_DAY,
                      latitude=41.52, longitude=-70.68, catch_status="caught")
    ]

@pytest.fixture
def record_store(stored_records):
    return InMemoryRecordStore(stored_records)
