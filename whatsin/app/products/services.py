"""Business logic for canonical products and wildcard product search."""

import logging
import re

import sqlalchemy.exc
import sqlmodel
from sqlmodel.sql.expression import SelectOfScalar

from .. import models

logger = logging.getLogger(__name__)

LIKE_ESCAPE = '\\'

_WHITESPACE = re.compile(r'\s+')
_LIKE_SPECIAL = re.compile(r'([\\%_])')


def wildcard_pattern(query: str) -> str:
    """Build a LIKE pattern where each run of whitespace matches any characters.

    The pattern is open on both ends, so ``'the bread'`` becomes
    ``'%the%bread%'``. Literal ``%``, ``_`` and ``\\`` are escaped.
    """
    escaped = _LIKE_SPECIAL.sub(r'\\\1', query)
    return f'%{_WHITESPACE.sub("%", escaped)}%'


class ProductStore:
    """Resolves, creates and searches products keyed by their unique name."""

    def resolve(self, session: sqlmodel.Session, name: str) -> models.Product | None:
        """Get a product by exact, case-sensitive name."""
        statement = sqlmodel.select(models.Product).where(models.Product.name == name)
        return session.exec(statement).first()

    def get(self, session: sqlmodel.Session, product_id: int) -> models.Product | None:
        """Get a product by ID."""
        return session.get(models.Product, product_id)

    def create(self, session: sqlmodel.Session, name: str) -> models.Product:
        """Insert a new product."""
        product = models.Product(name=name)
        session.add(product)
        session.commit()
        session.refresh(product)
        logger.info('Created product %r (id=%s)', name, product.id)
        return product

    def get_or_create(self, session: sqlmodel.Session, name: str) -> models.Product:
        """Return the product with this name, creating it on first sighting.

        Losing an insert race to a concurrent writer is absorbed by re-reading
        the row that writer created.
        """
        product = self.resolve(session, name)
        if product is not None:
            logger.debug('Resolved product %r (id=%s)', name, product.id)
            return product
        try:
            return self.create(session, name)
        except sqlalchemy.exc.IntegrityError:
            session.rollback()
            product = self.resolve(session, name)
            if product is None:
                raise
            logger.warning(
                'Product %r created concurrently; using id=%s', name, product.id
            )
            return product

    def update(
        self, session: sqlmodel.Session, product: models.Product
    ) -> models.Product:
        """Persist changes to a product's own fields."""
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def wildcard_query(self, query: str) -> SelectOfScalar[int | None]:
        """Select the IDs of products whose name matches the wildcard query.

        Matching follows SQLite's LIKE, which ignores ASCII case. An empty query
        matches every product.
        """
        return sqlmodel.select(models.Product.id).where(
            sqlmodel.col(models.Product.name).like(
                wildcard_pattern(query), escape=LIKE_ESCAPE
            )
        )

    def wildcard_search(self, session: sqlmodel.Session, query: str) -> set[int]:
        """IDs of products whose name matches the query's wildcard pattern."""
        pattern = wildcard_pattern(query)
        statement = self.wildcard_query(query)
        ids = {
            product_id
            for product_id in session.exec(statement)
            if product_id is not None
        }
        logger.debug('Pattern %r matched %d products', pattern, len(ids))
        return ids
