from typing import Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

class Station(BaseModel):
    """Tide reference station."""
    model_config = ConfigDict(frozen=True)

    # NOAA directory entries use station_id/latitude/longitude/state
    id: str = Field(validation_alias=AliasChoices("id", "station_id"))
    name: str
    lat: float = Field(validation_alias=AliasChoices("lat", "latitude"))
    lon: float = Field(validation_alias=AliasChoices("lon", "lng", "longitude"))
    region: Optional[str] = Field(default=None, validation_alias=AliasChoices("region", "state"))

class NearestStationResponse(BaseModel):
    """Nearest station to a coordinate pair."""
    station: Station
    distance_km: float
