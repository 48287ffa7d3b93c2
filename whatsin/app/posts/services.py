"""Business logic for sightings linking products to places."""

import logging
from collections.abc import Iterable

import sqlmodel
from sqlmodel.sql.expression import SelectOfScalar

from .. import models

logger = logging.getLogger(__name__)


class SightingLinker:
    """Creates posts and answers the post views of products and places."""

    def add_sighting(
        self,
        session: sqlmodel.Session,
        product_id: int,
        place_id: int,
        image_file_name: str | None = None,
    ) -> models.Post:
        """Create a post for an already resolved product and place."""
        post = models.Post(
            product_id=product_id,
            place_id=place_id,
            image_file_name=image_file_name or '',
        )
        session.add(post)
        session.commit()
        session.refresh(post)
        logger.info(
            'Created post %s (product=%s, place=%s)', post.id, product_id, place_id
        )
        return post

    def posts_for_products(
        self, session: sqlmodel.Session, product_ids: Iterable[int]
    ) -> list[models.Post]:
        """All posts for any of the given products, in storage order."""
        ids = list(product_ids)
        if not ids:
            return []
        statement = sqlmodel.select(models.Post).where(
            sqlmodel.col(models.Post.product_id).in_(ids)
        )
        return list(session.exec(statement).all())

    def posts_for_product_query(
        self,
        session: sqlmodel.Session,
        product_ids: SelectOfScalar[int | None],
    ) -> list[models.Post]:
        """All posts whose product is selected by a product ID query, in id order.

        The query runs as a subquery, so no IDs are bound as parameters.
        """
        statement = (
            sqlmodel.select(models.Post)
            .where(sqlmodel.col(models.Post.product_id).in_(product_ids))
            .order_by(sqlmodel.col(models.Post.id))
        )
        return list(session.exec(statement).all())

    def posts_for_product(
        self, session: sqlmodel.Session, product_id: int
    ) -> list[models.Post]:
        """All posts of one product."""
        return self.posts_for_products(session, [product_id])

    def posts_for_place(
        self, session: sqlmodel.Session, place_id: int
    ) -> list[models.Post]:
        """All posts made at one place."""
        statement = sqlmodel.select(models.Post).where(models.Post.place_id == place_id)
        return list(session.exec(statement).all())
