"""Routes package initialization.

This module exports the route collection for the application.
"""

from fastapi import APIRouter

from shortlinks.api.routes import health, links, redirect
from shortlinks.core.config import settings

# Create root router
api_router = APIRouter()

# Owner-scoped management API
api_router.include_router(
    links.router,
    prefix=settings.API_PREFIX
)

# Include health check routes with API prefix
api_router.include_router(
    health.router,
    prefix=settings.API_PREFIX
)

# Public redirects live under their own short prefix, e.g. /l/{short_code}
api_router.include_router(
    redirect.router,
    prefix=settings.REDIRECT_PREFIX
)

__all__ = ["api_router"]
