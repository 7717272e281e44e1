from fastapi import APIRouter, Depends, HTTPException, Query, Request
from features.stations.models.station_types import NearestStationResponse
from features.stations.services.geo_index import GeoIndex

router = APIRouter(
    prefix="/stations",
    tags=["Stations"]
)

def get_geo_index(request: Request) -> GeoIndex:
    """Dependency to get the loaded station index."""
    return request.app.state.geo_index

@router.get(
    "/nearest",
    response_model=NearestStationResponse,
    summary="Get the nearest tide station",
    description="Returns the tide station closest to the given coordinates by great-circle distance"
)
async def get_nearest_station(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    geo_index: GeoIndex = Depends(get_geo_index)
) -> NearestStationResponse:
    found = geo_index.nearest_with_distance(lat, lon)
    if found is None:
        raise HTTPException(status_code=404, detail="No tide stations loaded")
    station, distance = found
    return NearestStationResponse(station=station, distance_km=round(distance, 2))
