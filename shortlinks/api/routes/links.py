"""Owner-scoped link management endpoints."""

from typing import Any, List, NoReturn

from fastapi import APIRouter, Body, Depends, HTTPException, Path, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from shortlinks.api import schemas
from shortlinks.api.dependencies import get_link_service, get_short_url_base
from shortlinks.api.validation import safe_parse
from shortlinks.core.telemetry import get_meter
from shortlinks.core.security import get_current_owner
from shortlinks.db.session import get_db
from shortlinks.models.link import MAX_LINK_ID, Link
from shortlinks.services.exceptions import ConflictError, StorageError, ValidationError
from shortlinks.services.links import LinkService

router = APIRouter(prefix="/links", tags=["links"])

links_created = get_meter("shortlinks.links").create_counter(
    name="shortlinks.links.created",
    description="Number of links created",
    unit="1",
)

LINK_NOT_FOUND = "Link not found"

ERROR_RESPONSES = {
    400: {"model": schemas.ErrorResponse, "description": "Invalid input"},
    401: {"model": schemas.ErrorResponse, "description": "Missing or invalid identity"},
    409: {"model": schemas.ErrorResponse, "description": "Short code already in use"},
    500: {"model": schemas.ErrorResponse, "description": "Storage failure"},
}


def to_response(link: Link, short_url_base: str) -> schemas.LinkResponse:
    return schemas.LinkResponse(
        id=link.id,
        short_code=link.short_code,
        original_url=link.original_url,
        short_url=f"{short_url_base}/{link.short_code}",
        created_at=link.created_at,
        updated_at=link.updated_at,
    )


def raise_for_service_error(exc: Exception) -> NoReturn:
    """Translate a service exception into the matching HTTP error."""
    if isinstance(exc, ValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, ConflictError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Something went wrong while saving the link, please try again later",
    )


@router.post(
    "",
    response_model=schemas.ActionResponse[schemas.LinkResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_link(
    payload: Any = Body(None),
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
    short_url_base: str = Depends(get_short_url_base),
):
    parsed = safe_parse(schemas.LinkCreateRequest, payload)
    if not parsed.success:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=parsed.error)

    try:
        link = await link_service.create(
            db=db,
            owner_id=owner_id,
            original_url=parsed.data.original_url,
            custom_code=parsed.data.custom_code,
        )
    except (ValidationError, ConflictError, StorageError) as e:
        logger.info("Link creation rejected", owner_id=owner_id, reason=type(e).__name__)
        raise_for_service_error(e)

    logger.info("Link created", owner_id=owner_id, link_id=link.id, short_code=link.short_code)
    links_created.add(1, {"custom_code": parsed.data.custom_code is not None})
    return schemas.ActionResponse(success=True, data=to_response(link, short_url_base))


@router.get(
    "",
    response_model=schemas.ActionResponse[List[schemas.LinkResponse]],
    response_model_exclude_none=True,
    responses={401: ERROR_RESPONSES[401], 500: ERROR_RESPONSES[500]},
)
async def list_links(
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
    short_url_base: str = Depends(get_short_url_base),
):
    """List the caller's links, most recently updated first."""
    try:
        links = await link_service.list_by_owner(db, owner_id)
    except StorageError as e:
        raise_for_service_error(e)

    return schemas.ActionResponse(
        success=True,
        data=[to_response(link, short_url_base) for link in links],
    )


@router.patch(
    "/{link_id}",
    response_model=schemas.ActionResponse[schemas.LinkResponse],
    response_model_exclude_none=True,
    responses={**ERROR_RESPONSES, 404: {"model": schemas.ErrorResponse, "description": LINK_NOT_FOUND}},
)
async def update_link(
    link_id: int = Path(..., ge=1, le=MAX_LINK_ID, description="Id of the link to update"),
    payload: Any = Body(None),
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
    short_url_base: str = Depends(get_short_url_base),
):
    parsed = safe_parse(schemas.LinkUpdateRequest, payload)
    if not parsed.success:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=parsed.error)

    try:
        link = await link_service.update(
            db=db,
            link_id=link_id,
            owner_id=owner_id,
            original_url=parsed.data.original_url,
            short_code=parsed.data.short_code,
        )
    except (ValidationError, ConflictError, StorageError) as e:
        logger.info("Link update rejected", owner_id=owner_id, link_id=link_id, reason=type(e).__name__)
        raise_for_service_error(e)

    # Missing and foreign links are reported identically
    if link is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=LINK_NOT_FOUND)

    return schemas.ActionResponse(success=True, data=to_response(link, short_url_base))


@router.delete(
    "/{link_id}",
    response_model=schemas.ActionResponse[schemas.DeletedLink],
    response_model_exclude_none=True,
    responses={
        401: ERROR_RESPONSES[401],
        404: {"model": schemas.ErrorResponse, "description": LINK_NOT_FOUND},
        500: ERROR_RESPONSES[500],
    },
)
async def delete_link(
    link_id: int = Path(..., ge=1, le=MAX_LINK_ID, description="Id of the link to delete"),
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
):
    try:
        deleted = await link_service.delete(db, link_id, owner_id)
    except StorageError as e:
        raise_for_service_error(e)

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=LINK_NOT_FOUND)

    logger.info("Link deleted", owner_id=owner_id, link_id=link_id)
    return schemas.ActionResponse(success=True, data=schemas.DeletedLink(id=link_id))
