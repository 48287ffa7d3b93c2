"""API routes for photo upload, sighting registration and product search."""

import io
import logging
import typing

import fastapi
import sqlmodel

from .. import database, errors, location, models
from ..discovery import services as discovery_services
from ..images import services as images_services

logger = logging.getLogger(__name__)

router = fastapi.APIRouter(prefix='/Product')


# Dependencies
def get_extractor() -> images_services.GeoMetadataExtractor:
    """Get GPS metadata extractor instance."""
    return images_services.GeoMetadataExtractor()


def get_image_store() -> images_services.ImageStore:
    """Get image store instance."""
    return images_services.ImageStore()


def get_discovery_service() -> discovery_services.DiscoveryService:
    """Get discovery service instance."""
    return discovery_services.DiscoveryService()


@router.post('/UploadImage', response_model=models.GeoExtractionResult)
async def upload_image(
    file: typing.Annotated[
        fastapi.UploadFile | None, fastapi.File(alias='fileToUpload')
    ] = None,
    extractor: images_services.GeoMetadataExtractor = fastapi.Depends(get_extractor),
    image_store: images_services.ImageStore = fastapi.Depends(get_image_store),
) -> models.GeoExtractionResult:
    """Read GPS coordinates from a photo and store it for a later Add."""
    if file is None:
        raise fastapi.HTTPException(status_code=400, detail='No image')

    content = await file.read()
    try:
        result = extractor.extract(io.BytesIO(content), file.filename)
        image_store.save(content, result.file_name)
    except errors.NoGpsDataError as e:
        logger.warning('Upload %r rejected: %s', file.filename, e)
        raise fastapi.HTTPException(status_code=422, detail=str(e)) from None
    except errors.ImageParseError as e:
        logger.warning('Upload %r is not a readable image: %s', file.filename, e)
        raise fastapi.HTTPException(status_code=400, detail=str(e)) from None

    return result


@router.api_route('/Add', methods=['GET', 'POST'])
async def add(
    product_name: typing.Annotated[
        str | None, fastapi.Query(alias='productName')
    ] = None,
    place_name: typing.Annotated[str | None, fastapi.Query(alias='placeName')] = None,
    place_latitude: typing.Annotated[
        str | None, fastapi.Query(alias='placeLatitude')
    ] = None,
    place_longitude: typing.Annotated[
        str | None, fastapi.Query(alias='placeLongitude')
    ] = None,
    file_name: typing.Annotated[str | None, fastapi.Query(alias='fileName')] = None,
    place_type: typing.Annotated[str | None, fastapi.Query(alias='placeType')] = None,
    session: sqlmodel.Session = fastapi.Depends(database.get_session),
    discovery: discovery_services.DiscoveryService = fastapi.Depends(
        get_discovery_service
    ),
) -> dict[str, typing.Any]:
    """Record a product sighting at a place."""
    try:
        post = discovery.add_sighting(
            session,
            product_name=product_name,
            place_name=place_name,
            latitude=location.parse_coordinate(place_latitude),
            longitude=location.parse_coordinate(place_longitude),
            image_file_name=file_name,
            place_type=place_type,
        )
    except errors.InvalidInputError as e:
        raise fastapi.HTTPException(status_code=400, detail=str(e)) from None
    except Exception:
        logger.exception('Failed to add %r at %r', product_name, place_name)
        raise fastapi.HTTPException(
            status_code=500, detail='Failed to add sighting'
        ) from None

    return {'PostId': post.id}


@router.get('/FindProducts', response_model=list[models.SearchResult])
async def find_products(
    request: fastapi.Request,
    product_name: typing.Annotated[str, fastapi.Query(alias='productName')] = '',
    session: sqlmodel.Session = fastapi.Depends(database.get_session),
    discovery: discovery_services.DiscoveryService = fastapi.Depends(
        get_discovery_service
    ),
) -> list[models.SearchResult]:
    """Places where products matching a wildcard name were sighted."""
    base_url = f'{request.url.scheme}://{request.url.netloc}'
    try:
        return discovery.find_products(session, product_name, base_url)
    except errors.IntegrityFaultError as e:
        raise fastapi.HTTPException(status_code=500, detail=str(e)) from None
