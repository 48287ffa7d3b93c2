"""API routes for nearby-place discovery."""

import typing

import fastapi
import sqlmodel

from .. import database, location, models
from . import services

router = fastapi.APIRouter(prefix='/Places')


# Dependencies
def get_place_store() -> services.PlaceStore:
    """Get place store instance."""
    return services.PlaceStore()


@router.get('/Nearby', response_model=list[models.NearbyPlace])
async def nearby(
    latitude: typing.Annotated[str | None, fastapi.Query()] = None,
    longitude: typing.Annotated[str | None, fastapi.Query()] = None,
    session: sqlmodel.Session = fastapi.Depends(database.get_session),
    place_store: services.PlaceStore = fastapi.Depends(get_place_store),
) -> list[models.NearbyPlace]:
    """Places near a point, nearest first."""
    lat = location.parse_coordinate(latitude)
    lon = location.parse_coordinate(longitude)
    if lat is None or lon is None or not location.is_valid_location(lat, lon):
        raise fastapi.HTTPException(status_code=400, detail='Invalid location')

    return place_store.nearby(session, lat, lon)
