import logging
import re
from datetime import date
from typing import Any, Dict, Optional

from core.config import settings
from features.astronomy.models.astronomy_types import AstronomyData
from features.common.exceptions.enrichment_exceptions import UpstreamUnavailable
from features.common.models.result_types import FetchFailed, FetchOk, FetchResult
from features.common.services.upstream_client import UpstreamClient

logger = logging.getLogger(__name__)

TIME_OF_DAY = re.compile(r"^\d{1,2}:\d{2}(:\d{2})?$")

def normalize_time_of_day(value: Any) -> Optional[str]:
    """Return "HH:MM", or None for the provider's "no such event" placeholders ("-:-", "--:--", "")."""
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    if not TIME_OF_DAY.match(cleaned):
        return None
    hours, minutes = cleaned.split(":")[:2]
    return f"{int(hours):02d}:{minutes}"

def format_moon_phase(value: Any) -> Optional[str]:
    """``WAXING_GIBBOUS`` -> ``Waxing Gibbous``."""
    if not isinstance(value, str) or not value.strip() or value.strip() in {"-", "-:-"}:
        return None
    return value.strip().replace("_", " ").title()

class AstronomyClient(UpstreamClient):
    """Sun and moon times from the ipgeolocation.io astronomy API."""

    def __init__(self, api_key: Optional[str] = None, timeout_ms: Optional[int] = None):
        super().__init__(timeout_ms)
        self.base_url = settings.astronomy_base_url
        self.api_key = api_key or settings.astronomy_api_key

    def parse_astronomy(self, data: Dict[str, Any]) -> AstronomyData:
        # v2 responses nest the fields under "astronomy"
        payload = data.get("astronomy", data)
        if not isinstance(payload, dict):
            raise UpstreamUnavailable("Astronomy response has no astronomy payload")
        return AstronomyData(
            sunrise=normalize_time_of_day(payload.get("sunrise")),
            sunset=normalize_time_of_day(payload.get("sunset")),
            moonrise=normalize_time_of_day(payload.get("moonrise")),
            moonset=normalize_time_of_day(payload.get("moonset")),
            moon_phase=format_moon_phase(payload.get("moon_phase"))
        )

    async def fetch_astronomy(self, lat: float, lon: float, day: date) -> FetchResult:
        if not self.api_key:
            return FetchFailed(reason="No astronomy API key configured")

        params = {
            "apiKey": self.api_key,
            "lat": lat,
            "long": lon,
            "date": day.isoformat()
        }
        try:
            data = await self._get_json(self.base_url, params)
            if not isinstance(data, dict):
                raise UpstreamUnavailable("Astronomy response is not an object")
            if "message" in data and "sunrise" not in data and "astronomy" not in data:
                raise UpstreamUnavailable(data["message"])
            return FetchOk(value=self.parse_astronomy(data))
        except UpstreamUnavailable as e:
            logger.warning(f"Astronomy lookup failed for ({lat}, {lon}) on {day}: {str(e)}")
            return FetchFailed(reason=str(e))
