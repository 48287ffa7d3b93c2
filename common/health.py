"""Shared health check router for FastAPI applications."""

import logging
from collections.abc import Callable

import fastapi
import fastapi.responses

logger = logging.getLogger(__name__)


def make_router(check: Callable[[], None] | None = None) -> fastapi.APIRouter:
    """Build a router serving /health.

    When ``check`` is given it is called on every probe; any exception it raises
    turns the response into a 503.
    """
    router = fastapi.APIRouter()

    @router.api_route('/health', methods=['GET', 'HEAD'])
    async def health() -> fastapi.responses.JSONResponse:
        """Health check endpoint."""
        if check is not None:
            try:
                check()
            except Exception:
                logger.exception('Health check failed')
                return fastapi.responses.JSONResponse(
                    {'status': 'unhealthy'}, status_code=503
                )
        return fastapi.responses.JSONResponse({'status': 'healthy'})

    return router
