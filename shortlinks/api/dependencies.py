"""API dependencies for FastAPI.

This module provides dependency injection functions for FastAPI endpoints
to access repositories and service instances.
"""

from fastapi import Depends

from shortlinks.core.config import settings
from shortlinks.repositories.link_repository import LinkRepository
from shortlinks.services.codegen import CodeGenerator
from shortlinks.services.links import LinkService


async def get_link_repository() -> LinkRepository:
    """Get an instance of the link repository."""
    return LinkRepository()


async def get_code_generator() -> CodeGenerator:
    """Get a short code generator backed by the system random source."""
    return CodeGenerator()


async def get_link_service(
    link_repo: LinkRepository = Depends(get_link_repository),
    code_generator: CodeGenerator = Depends(get_code_generator),
) -> LinkService:
    """Get an instance of the link service."""
    return LinkService(link_repository=link_repo, code_generator=code_generator)


def get_short_url_base() -> str:
    """Get the prefix short codes are appended to."""
    return settings.SHORT_URL_BASE
