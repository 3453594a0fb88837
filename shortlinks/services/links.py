"""Link management service for the short links application.

This module contains the LinkService class which implements the business logic
for creating, resolving, listing, updating and deleting owner-scoped links.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from pydantic import AnyUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from shortlinks.core.config import settings
from shortlinks.db.session import db_transaction
from shortlinks.models.link import MAX_LINK_ID, Link, LinkCreate, LinkUpdate
from shortlinks.repositories.base import DuplicateEntityError, RepositoryError
from shortlinks.repositories.link_repository import LinkRepository
from shortlinks.services.codegen import CodeGenerator
from shortlinks.services.exceptions import ConflictError, StorageError, ValidationError

logger = logging.getLogger(__name__)

_url_adapter = TypeAdapter(AnyUrl)


@dataclass(frozen=True)
class OwnedLink:
    """Outcome of an ownership lookup.

    ``link`` is None both when the id does not exist and when it belongs to
    another owner; callers cannot tell the two apart.
    """
    link: Optional[Link] = None

    @property
    def found(self) -> bool:
        return self.link is not None


NOT_FOUND_OR_FORBIDDEN = OwnedLink()


def is_storable_id(link_id: int) -> bool:
    """True if ``link_id`` fits the ``links.id`` column."""
    return 1 <= link_id <= MAX_LINK_ID


class LinkService:
    """
    Service for link business logic.

    Validates input, allocates short codes (retrying generated codes on
    collision), and enforces that only the owner can mutate a link.
    """

    def __init__(
        self,
        link_repository: LinkRepository,
        code_generator: Optional[CodeGenerator] = None,
        max_attempts: Optional[int] = None,
    ):
        """
        Initialize the link service.

        Args:
            link_repository: Repository for link data access
            code_generator: Source of candidate codes for links without a custom code
            max_attempts: Insert attempts allowed for a generated code
        """
        self.link_repository = link_repository
        self.code_generator = code_generator or CodeGenerator()
        self.max_attempts = max_attempts or settings.SHORT_CODE_MAX_ATTEMPTS
        self._custom_code_re = re.compile(settings.CUSTOM_CODE_PATTERN)

    @db_transaction(db_param_name="db")
    async def create(
        self,
        db: AsyncSession,
        owner_id: str,
        original_url: str,
        custom_code: Optional[str] = None,
    ) -> Link:
        """
        Create a link for ``owner_id``.

        A custom code is inserted exactly once and a collision is reported,
        never substituted. A generated code is regenerated on collision, up to
        ``max_attempts`` inserts in total.

        Raises:
            ValidationError: If the owner, URL or custom code is invalid
            ConflictError: If the custom code is already in use
            StorageError: If persistence fails or every generated code collided
        """
        self._validate_owner(owner_id)
        self._validate_url(original_url)
        if custom_code == "":
            custom_code = None
        if custom_code is not None:
            self._validate_code(custom_code)
            return await self._insert(db, owner_id, original_url, custom_code)

        for attempt in range(1, self.max_attempts + 1):
            candidate = self.code_generator.generate()
            try:
                return await self._insert(db, owner_id, original_url, candidate)
            except ConflictError:
                logger.warning(
                    f"Generated short code collided (attempt {attempt}/{self.max_attempts})"
                )

        logger.error(f"No free short code after {self.max_attempts} attempts")
        raise StorageError(
            "Could not allocate a unique short code. Try again later or choose a custom code."
        )

    async def lookup_by_code(self, db: AsyncSession, short_code: str) -> Optional[Link]:
        """
        Resolve a short code for redirection. Public: no owner filter.

        Returns:
            The Link, or None when no link has this exact code

        Raises:
            StorageError: If the lookup fails
        """
        try:
            return await self.link_repository.get_by_short_code(db, short_code)
        except RepositoryError as e:
            logger.error(f"Error resolving short code: {e}")
            raise StorageError("Failed to resolve short code") from e

    async def list_by_owner(self, db: AsyncSession, owner_id: str) -> List[Link]:
        """
        List the owner's links, most recently updated first.

        Raises:
            StorageError: If the query fails
        """
        try:
            return await self.link_repository.list_by_owner(db, owner_id)
        except RepositoryError as e:
            logger.error(f"Error listing links: {e}")
            raise StorageError("Failed to list links") from e

    @db_transaction(db_param_name="db")
    async def update(
        self,
        db: AsyncSession,
        link_id: int,
        owner_id: str,
        original_url: Optional[str] = None,
        short_code: Optional[str] = None,
    ) -> Optional[Link]:
        """
        Patch a link owned by ``owner_id``.

        Returns:
            The updated Link, or None when the link is missing or not owned

        Raises:
            ValidationError: If the patch is empty or a field is invalid
            ConflictError: If the new short code is already in use
            StorageError: If persistence fails
        """
        if original_url is None and short_code is None:
            raise ValidationError("Nothing to update: provide original_url or short_code")
        if original_url is not None:
            self._validate_url(original_url)
        if short_code is not None:
            self._validate_code(short_code)

        if not is_storable_id(link_id):
            return None

        owned = await self._fetch_owned(db, link_id, owner_id)
        if not owned.found:
            return None

        changes = {}
        if original_url is not None:
            changes["original_url"] = original_url
        if short_code is not None and short_code != owned.link.short_code:
            changes["short_code"] = short_code

        try:
            patch = LinkUpdate(**changes)
            return await self.link_repository.update_link(db, owned.link, patch)
        except DuplicateEntityError as e:
            logger.info(f"Short code conflict on update: {e}")
            raise ConflictError(f"Short code '{short_code}' is already in use") from e
        except RepositoryError as e:
            logger.error(f"Error updating link: {e}")
            raise StorageError("Failed to update link") from e

    @db_transaction(db_param_name="db")
    async def delete(self, db: AsyncSession, link_id: int, owner_id: str) -> bool:
        """
        Delete a link owned by ``owner_id``.

        Returns:
            True if the link was removed, False if it is missing or not owned

        Raises:
            StorageError: If persistence fails
        """
        if not is_storable_id(link_id):
            return False
        try:
            return await self.link_repository.delete_owned(db, link_id, owner_id)
        except RepositoryError as e:
            logger.error(f"Error deleting link: {e}")
            raise StorageError("Failed to delete link") from e

    async def _fetch_owned(self, db: AsyncSession, link_id: int, owner_id: str) -> OwnedLink:
        try:
            link = await self.link_repository.get_owned(db, link_id, owner_id)
        except RepositoryError as e:
            logger.error(f"Error loading link for owner check: {e}")
            raise StorageError("Failed to load link") from e
        return OwnedLink(link) if link is not None else NOT_FOUND_OR_FORBIDDEN

    async def _insert(
        self,
        db: AsyncSession,
        owner_id: str,
        original_url: str,
        short_code: str,
    ) -> Link:
        data = LinkCreate(owner_id=owner_id, original_url=original_url, short_code=short_code)
        try:
            return await self.link_repository.insert_link(db, data)
        except DuplicateEntityError as e:
            raise ConflictError(f"Short code '{short_code}' is already in use") from e
        except RepositoryError as e:
            logger.error(f"Error inserting link: {e}")
            raise StorageError("Failed to create link") from e

    def _validate_owner(self, owner_id: str) -> None:
        if not owner_id or not owner_id.strip():
            raise ValidationError("Owner id must not be empty")

    def _validate_url(self, url: str) -> None:
        """Require an absolute URL with an allowed scheme and a host.

        The caller's string is stored as given; parsing is only a check.
        """
        try:
            parsed = _url_adapter.validate_python(url)
        except PydanticValidationError:
            raise ValidationError(f"Invalid URL: {url!r}") from None
        if parsed.scheme not in settings.ALLOWED_URL_SCHEMES or not parsed.host:
            raise ValidationError(
                f"URL must be absolute and use one of: {', '.join(settings.ALLOWED_URL_SCHEMES)}"
            )

    def _validate_code(self, code: str) -> None:
        if not self._custom_code_re.fullmatch(code):
            raise ValidationError(
                "Short code must be 3-20 characters of letters, digits, '_' or '-'"
            )
