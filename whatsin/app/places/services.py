"""Business logic for canonical places and nearby-place queries."""

import logging

import sqlalchemy.exc
import sqlmodel

import common.settings

from .. import location, models

logger = logging.getLogger(__name__)


class PlaceStore:
    """Resolves, creates and searches places keyed by their unique name."""

    def __init__(self, radius_km: float | None = None):
        """Initialize with the Nearby search radius in kilometres."""
        self.radius_km = (
            radius_km if radius_km is not None else common.settings.NEARBY_RADIUS_KM
        )

    def resolve(self, session: sqlmodel.Session, name: str) -> models.Place | None:
        """Get a place by exact name."""
        statement = sqlmodel.select(models.Place).where(models.Place.name == name)
        return session.exec(statement).first()

    def get(self, session: sqlmodel.Session, place_id: int) -> models.Place | None:
        """Get a place by ID."""
        return session.get(models.Place, place_id)

    def create(
        self,
        session: sqlmodel.Session,
        name: str,
        latitude: float,
        longitude: float,
        place_type: str | None = None,
    ) -> models.Place:
        """Insert a new place. Coordinates must already be validated."""
        place = models.Place(
            name=name, type=place_type, latitude=latitude, longitude=longitude
        )
        session.add(place)
        session.commit()
        session.refresh(place)
        logger.info('Created place %r (id=%s)', name, place.id)
        return place

    def get_or_create(
        self,
        session: sqlmodel.Session,
        name: str,
        latitude: float,
        longitude: float,
        place_type: str | None = None,
    ) -> models.Place:
        """Return the place with this name, creating it on first sighting.

        A concurrent writer inserting the same name first makes our insert
        fail on the unique constraint; the row it wrote is returned instead.
        """
        place = self.resolve(session, name)
        if place is not None:
            logger.debug('Resolved place %r (id=%s)', name, place.id)
            return place
        try:
            return self.create(session, name, latitude, longitude, place_type)
        except sqlalchemy.exc.IntegrityError:
            session.rollback()
            place = self.resolve(session, name)
            if place is None:
                raise
            logger.warning('Place %r created concurrently; using id=%s', name, place.id)
            return place

    def update(self, session: sqlmodel.Session, place: models.Place) -> models.Place:
        """Persist changes to a place's own fields."""
        session.add(place)
        session.commit()
        session.refresh(place)
        return place

    def nearby(
        self, session: sqlmodel.Session, latitude: float, longitude: float
    ) -> list[models.NearbyPlace]:
        """Places within the search radius, nearest first.

        Distance is great-circle distance in kilometres. A bounding box narrows
        the rows fetched; equal distances are ordered by id.
        """
        min_lat, max_lat, min_lon, max_lon = location.bounding_box(
            latitude, longitude, self.radius_km
        )
        statement = sqlmodel.select(models.Place).where(
            models.Place.latitude >= min_lat,
            models.Place.latitude <= max_lat,
            models.Place.longitude >= min_lon,
            models.Place.longitude <= max_lon,
        )

        results: list[models.NearbyPlace] = []
        for place in session.exec(statement):
            assert place.id is not None
            km = location.distance_km(
                latitude, longitude, place.latitude, place.longitude
            )
            if km > self.radius_km:
                continue
            results.append(
                models.NearbyPlace(
                    id=place.id,
                    name=place.name,
                    type=place.type,
                    latitude=place.latitude,
                    longitude=place.longitude,
                    distance=km,
                )
            )

        results.sort(key=lambda p: (p.distance, p.id))
        return results
