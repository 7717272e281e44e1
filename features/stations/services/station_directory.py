import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import aiohttp
from pydantic import ValidationError

from core.config import settings
from features.stations.models.station_types import Station

logger = logging.getLogger(__name__)

class StationDirectory:
    """Loads the tide station list once at startup."""

    def __init__(self, stations_file: Path = Path(settings.stations_file)):
        self.stations_file = Path(stations_file)

    def load_stations(self) -> List[Station]:
        """Load stations from the local JSON file.

        A missing file yields an empty list; entries that fail validation are
        skipped.
        """
        if not self.stations_file.exists():
            logger.warning(f"Station file {self.stations_file} not found, tide lookups disabled")
            return []

        try:
            with open(self.stations_file) as f:
                stations_data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error reading station file {self.stations_file}: {str(e)}")
            return []

        if not isinstance(stations_data, list):
            logger.error(f"Station file {self.stations_file} does not hold a list")
            return []
        return self._parse_stations(stations_data)

    def _parse_stations(self, stations_data: List[Dict[str, Any]]) -> List[Station]:
        stations = []
        for entry in stations_data:
            try:
                stations.append(Station.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"Skipping malformed station entry {entry!r}: {str(e)}")
        logger.info(f"Loaded {len(stations)} tide stations")
        return stations

    async def fetch_from_noaa(self) -> List[Station]:
        """Fetch the tide prediction station list from the CO-OPS metadata API."""
        url = f"{settings.coops_metadata_url}/stations.json"
        timeout = aiohttp.ClientTimeout(total=settings.request_timeout_ms / 1000)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url, params={"type": "tidepredictions"}) as response:
                response.raise_for_status()
                data = await response.json()
        if not isinstance(data, dict):
            raise ValueError("Station metadata response is not an object")
        return self._parse_stations(data.get("stations", []))

    def save_stations(self, stations: List[Station]) -> None:
        self.stations_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.stations_file, 'w') as f:
            json.dump([s.model_dump() for s in stations], f, indent=2)

    async def load_or_fetch(self) -> List[Station]:
        """Local file first; fall back to NOAA and cache the result on disk."""
        stations = self.load_stations()
        if stations:
            return stations
        try:
            stations = await self.fetch_from_noaa()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Error fetching tide stations from NOAA: {str(e)}")
            return []
        if stations:
            self.save_stations(stations)
        return stations
