"""Sighting registration and product search across posts and places."""

import logging
import posixpath

import sqlmodel

import common.settings

from .. import errors, location, models
from ..places import services as places_services
from ..posts import services as posts_services
from ..products import services as products_services

logger = logging.getLogger(__name__)


def image_href(base_url: str, image_file_name: str | None) -> str:
    """Public URL of a stored image, or '' when no image is attached."""
    if not image_file_name or not image_file_name.strip():
        return ''
    return f'{base_url.rstrip("/")}{common.settings.UPLOADS_URL_PATH}/{image_file_name}'


class DiscoveryService:
    """Registers sightings and answers product searches."""

    def __init__(
        self,
        places: places_services.PlaceStore | None = None,
        products: products_services.ProductStore | None = None,
        linker: posts_services.SightingLinker | None = None,
    ):
        """Initialize with the stores it coordinates."""
        self.places = places or places_services.PlaceStore()
        self.products = products or products_services.ProductStore()
        self.linker = linker or posts_services.SightingLinker()

    def add_sighting(
        self,
        session: sqlmodel.Session,
        product_name: str | None,
        place_name: str | None,
        latitude: float | None,
        longitude: float | None,
        image_file_name: str | None = None,
        place_type: str | None = None,
    ) -> models.Post:
        """Record that a product was seen at a place.

        Names are trimmed of surrounding whitespace, then used as exact,
        case-sensitive keys. The place and product are created on first
        sighting. A place with no type adopts ``place_type``; an existing type
        is kept. Nothing is rolled back if a later step fails.

        Raises:
            InvalidInputError: a name is blank or the coordinates are invalid.
        """
        product_name = (product_name or '').strip()
        place_name = (place_name or '').strip()
        if not product_name or not place_name:
            raise errors.InvalidInputError('Product and place names are required')
        if not location.is_valid_location(latitude, longitude):
            raise errors.InvalidInputError('Invalid place coordinates')
        assert latitude is not None and longitude is not None

        place_type = (place_type or '').strip() or None
        place = self.places.get_or_create(
            session, place_name, latitude, longitude, place_type
        )
        product = self.products.get_or_create(session, product_name)
        assert place.id is not None and product.id is not None

        # Only the bare name is kept so hrefs always point into the uploads path
        file_name = posixpath.basename((image_file_name or '').replace('\\', '/'))
        post = self.linker.add_sighting(session, product.id, place.id, file_name)

        if place_type and not place.type:
            place.type = place_type
            self.places.update(session, place)

        return post

    def find_products(
        self, session: sqlmodel.Session, query: str | None, base_url: str
    ) -> list[models.SearchResult]:
        """One result per post of every product matching the wildcard query.

        Results keep the order posts are read from storage. Each post's place
        and product are looked up individually.

        Raises:
            IntegrityFaultError: a post references a missing place or product.
        """
        product_ids = self.products.wildcard_query(query or '')
        posts = self.linker.posts_for_product_query(session, product_ids)

        results: list[models.SearchResult] = []
        for post in posts:
            place = self.places.get(session, post.place_id)
            product = self.products.get(session, post.product_id)
            if place is None or product is None:
                logger.error(
                    'Post %s references missing %s (product=%s, place=%s)',
                    post.id,
                    'place' if place is None else 'product',
                    post.product_id,
                    post.place_id,
                )
                raise errors.IntegrityFaultError(
                    f'Post {post.id} references a missing place or product'
                )

            results.append(
                models.SearchResult(
                    place_name=place.name,
                    product_name=product.name,
                    latitude=place.latitude,
                    longitude=place.longitude,
                    image_href=image_href(base_url, post.image_file_name),
                )
            )

        logger.debug('Query %r returned %d results', query, len(results))
        return results
