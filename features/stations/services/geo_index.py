import math
from typing import Iterable, List, Optional, Tuple

from core.config import settings
from features.stations.models.station_types import Station

def distance_km(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    radius_km: float = settings.earth_radius_km
) -> float:
    """Great-circle (haversine) distance on a spherical Earth."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * radius_km * math.asin(min(1.0, math.sqrt(a)))

class GeoIndex:
    """Read-only set of tide stations with nearest-neighbour lookup.

    Built once at startup and shared by every request and backfill run.
    """

    def __init__(self, stations: Iterable[Station] = ()):
        self._stations: Tuple[Station, ...] = tuple(stations)

    def __len__(self) -> int:
        return len(self._stations)

    @property
    def stations(self) -> List[Station]:
        return list(self._stations)

    def get(self, station_id: str) -> Optional[Station]:
        return next((s for s in self._stations if s.id == station_id), None)

    def nearest_with_distance(self, lat: float, lon: float) -> Optional[Tuple[Station, float]]:
        """Station of minimal distance and that distance in km.

        Returns *a* station of minimal distance: ties keep the first station
        in load order, not the lowest id.
        """
        best: Optional[Station] = None
        best_distance = math.inf
        for station in self._stations:
            d = distance_km(lat, lon, station.lat, station.lon)
            if d < best_distance:
                best = station
                best_distance = d
        if best is None:
            return None
        return best, best_distance

    def nearest_station(self, lat: float, lon: float) -> Optional[Station]:
        found = self.nearest_with_distance(lat, lon)
        return found[0] if found else None
