"""Database configuration and session management."""

import collections.abc
import os

import sqlalchemy
import sqlmodel

import common.settings

DATABASE_URL = common.settings.DATABASE_URL

_connect_args = (
    {'check_same_thread': False} if DATABASE_URL.startswith('sqlite') else {}
)
engine = sqlmodel.create_engine(DATABASE_URL, connect_args=_connect_args, echo=False)


def create_db_and_tables() -> None:
    """Create database tables if they don't exist."""
    # Import models to ensure they're registered with SQLModel
    from . import models  # noqa: F401 # pyright: ignore[reportUnusedImport]

    if DATABASE_URL.startswith('sqlite:///'):
        db_path = DATABASE_URL.removeprefix('sqlite:///')
        if db_path and db_path != ':memory:':
            os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
    sqlmodel.SQLModel.metadata.create_all(engine)


def ping() -> None:
    """Run a trivial query; raises if the database is unreachable."""
    with engine.connect() as connection:
        connection.execute(sqlalchemy.text('SELECT 1'))


def get_session() -> collections.abc.Generator[sqlmodel.Session, None, None]:
    """Get a database session."""
    with sqlmodel.Session(engine) as session:
        yield session
