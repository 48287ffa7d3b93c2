"""WhatsIn: report where products were seen and find them nearby."""

import contextlib
import os
from collections.abc import AsyncGenerator

import fastapi
import fastapi.staticfiles
import uvicorn

import common.app
import common.settings

from . import database
from .places import routes as places_routes
from .products import routes as products_routes


@contextlib.asynccontextmanager
async def lifespan(app: fastapi.FastAPI) -> AsyncGenerator[None, None]:
    """Initialize the database and uploads directory on startup."""
    database.create_db_and_tables()
    os.makedirs(common.settings.UPLOADS_DIR, exist_ok=True)
    yield


app = common.app.create_app('WhatsIn', health_check=database.ping, lifespan=lifespan)

# Stored upload thumbnails, addressed by SearchResult.ImageHref
app.mount(
    common.settings.UPLOADS_URL_PATH,
    fastapi.staticfiles.StaticFiles(
        directory=common.settings.UPLOADS_DIR, check_dir=False
    ),
    name='image-uploads',
)

app.include_router(places_routes.router)
app.include_router(products_routes.router)


if __name__ == '__main__':
    uvicorn.run(app, host='0.0.0.0', port=8000)
