"""Database models and response shapes for product sightings."""

import pydantic
import pydantic.alias_generators
import sqlmodel


class Product(sqlmodel.SQLModel, table=True):
    """A named item that can be sighted at places."""

    __tablename__ = 'product'  # type: ignore[misc]

    id: int | None = sqlmodel.Field(default=None, primary_key=True)
    name: str = sqlmodel.Field(index=True, unique=True)


class Place(sqlmodel.SQLModel, table=True):
    """A named physical location where products have been sighted."""

    __tablename__ = 'place'  # type: ignore[misc]

    id: int | None = sqlmodel.Field(default=None, primary_key=True)
    name: str = sqlmodel.Field(index=True, unique=True)
    # e.g. supermarket, cafe, shop
    type: str | None = None
    latitude: float
    longitude: float


class Post(sqlmodel.SQLModel, table=True):
    """A single sighting linking one product to one place.

    Posts are append-only. The posts of a product or place are always read
    through a query, never held as a collection on the owning row.
    """

    __tablename__ = 'post'  # type: ignore[misc]

    id: int | None = sqlmodel.Field(default=None, primary_key=True)
    product_id: int = sqlmodel.Field(foreign_key='product.id', index=True)
    place_id: int = sqlmodel.Field(foreign_key='place.id', index=True)
    # Empty means no photo attached
    image_file_name: str = ''


class _PascalCaseModel(pydantic.BaseModel):
    """Serializes field names in PascalCase for the public JSON API."""

    model_config = pydantic.ConfigDict(
        alias_generator=pydantic.alias_generators.to_pascal,
        populate_by_name=True,
        frozen=True,
    )


class GeoExtractionResult(_PascalCaseModel):
    """Coordinates decoded from an uploaded image and the name it is stored under."""

    file_name: str
    latitude: float
    longitude: float


class SearchResult(_PascalCaseModel):
    """One product sighting as returned by product search."""

    place_name: str
    product_name: str
    latitude: float
    longitude: float
    image_href: str


class NearbyPlace(_PascalCaseModel):
    """A place near a query point and its distance from it in kilometres."""

    id: int
    name: str
    type: str | None
    latitude: float
    longitude: float
    distance: float
