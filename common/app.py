"""Core FastAPI application utilities shared across all services."""

from collections.abc import Callable
from typing import Any

import fastapi
import fastapi.middleware.cors

import common.health
import common.log
import common.settings


def create_app(
    title: str,
    health_check: Callable[[], None] | None = None,
    **kwargs: Any,
) -> fastapi.FastAPI:
    """Create a FastAPI app with health endpoint, CORS and logging configured.

    Additional keyword arguments are forwarded to FastAPI.__init__ (e.g. lifespan).
    """
    app = fastapi.FastAPI(title=title, **kwargs)
    common.log.configure_logging()
    app.add_middleware(
        fastapi.middleware.cors.CORSMiddleware,
        allow_origins=common.settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    app.include_router(common.health.make_router(health_check))
    return app
