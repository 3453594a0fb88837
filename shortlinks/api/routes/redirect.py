"""Public short code redirection endpoint."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import RedirectResponse

from shortlinks.api.dependencies import get_link_service
from shortlinks.core.telemetry import get_meter
from shortlinks.db.session import get_db
from shortlinks.services.exceptions import StorageError
from shortlinks.services.links import LinkService

router = APIRouter(tags=["redirect"])

redirects = get_meter("shortlinks.redirect").create_counter(
    name="shortlinks.redirects",
    description="Number of short code lookups by outcome",
    unit="1",
)


@router.get(
    "/{short_code}",
    response_class=RedirectResponse,
    status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    responses={404: {"description": "Link not found"}},
)
async def redirect_to_original_url(
    request: Request,
    short_code: str,
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
):
    """Redirect to the original URL registered under ``short_code``."""
    try:
        link = await link_service.lookup_by_code(db, short_code)
    except StorageError:
        logger.exception("Error redirecting", short_code=short_code)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while processing the redirect",
        )

    if link is None:
        redirects.add(1, {"outcome": "not_found"})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Link not found")

    redirects.add(1, {"outcome": "found"})
    logger.bind(event_type="redirect").debug(
        "Short code resolved",
        short_code=short_code,
        client_host=request.client.host if request.client else None,
    )
    return RedirectResponse(url=link.original_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
