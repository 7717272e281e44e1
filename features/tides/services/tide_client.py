import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from core.config import settings
from features.common.exceptions.enrichment_exceptions import UpstreamUnavailable
from features.common.models.result_types import FetchFailed, FetchOk, FetchResult
from features.common.models.series_types import TideExtremeEvent, TideExtremeKind, TimeSample
from features.common.services.upstream_client import UpstreamClient

logger = logging.getLogger(__name__)

NOAA_TIME_FORMAT = "%Y-%m-%d %H:%M"

class TideClient(UpstreamClient):
    """Client for NOAA CO-OPS tide predictions."""

    def __init__(self, timeout_ms: Optional[int] = None):
        super().__init__(timeout_ms)
        self.data_url = settings.coops_base_url

    async def _get_predictions(
        self,
        station_id: str,
        start_date: date,
        end_date: date,
        interval: str
    ) -> List[Dict[str, Any]]:
        """Raw prediction rows for a station; stations without predictions give []."""
        params = {
            **settings.coops_params,
            "begin_date": start_date.strftime("%Y%m%d"),
            "end_date": end_date.strftime("%Y%m%d"),
            "station": station_id,
            "interval": interval
        }
        data = await self._get_json(self.data_url, params)
        if not isinstance(data, dict):
            raise UpstreamUnavailable("Tide response is not an object")

        if "error" in data:
            message = data["error"].get("message", "Unknown error from NOAA API")
            if "No Predictions data was found" in message:
                return []
            raise UpstreamUnavailable(message)

        return data.get("predictions", [])

    def parse_dense(self, predictions: List[Dict[str, Any]]) -> List[TimeSample]:
        try:
            return [
                TimeSample(
                    timestamp=datetime.strptime(p["t"], NOAA_TIME_FORMAT),
                    value=float(p["v"])
                )
                for p in predictions
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamUnavailable(f"Malformed tide prediction: {str(e)}")

    def parse_hilo(self, predictions: List[Dict[str, Any]]) -> List[TideExtremeEvent]:
        events = []
        try:
            for p in predictions:
                # Mixed tides report higher/lower high and low as HH/L/H/LL
                kind = TideExtremeKind.HIGH if p["type"].upper().startswith("H") else TideExtremeKind.LOW
                events.append(TideExtremeEvent(
                    timestamp=datetime.strptime(p["t"], NOAA_TIME_FORMAT),
                    height=float(p["v"]),
                    kind=kind
                ))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise UpstreamUnavailable(f"Malformed high/low prediction: {str(e)}")
        return events

    async def fetch_hilo_events(self, station_id: str, day: date) -> FetchResult:
        """High/low predictions from the day before to the day after ``day``."""
        try:
            predictions = await self._get_predictions(
                station_id,
                start_date=day - timedelta(days=1),
                end_date=day + timedelta(days=1),
                interval="hilo"
            )
            return FetchOk(value=self.parse_hilo(predictions))
        except UpstreamUnavailable as e:
            logger.warning(f"High/low predictions failed for station {station_id} on {day}: {str(e)}")
            return FetchFailed(reason=str(e))

    async def fetch_dense_series(self, station_id: str, day: date) -> FetchResult:
        """Six-minute height predictions for ``day``; subordinate stations have none."""
        try:
            predictions = await self._get_predictions(
                station_id,
                start_date=day,
                end_date=day,
                interval=settings.coops_dense_interval
            )
            return FetchOk(value=self.parse_dense(predictions))
        except UpstreamUnavailable as e:
            logger.warning(f"Height predictions failed for station {station_id} on {day}: {str(e)}")
            return FetchFailed(reason=str(e))
