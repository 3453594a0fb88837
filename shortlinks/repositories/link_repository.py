"""Link Repository for the short links application.

This module provides the LinkRepository class for database operations related to Link models.
Following the Repository pattern, it abstracts database interactions; business rules
(validation, code generation, retries) live in the service layer.
"""

from typing import Any, Dict, List, Optional, Union

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shortlinks.models.link import Link, LinkCreate, LinkUpdate, utcnow
from shortlinks.repositories.base import BaseRepository, RepositoryError


class LinkRepository(BaseRepository[Link, LinkCreate, LinkUpdate]):
    """
    Repository for Link model database operations.

    Every write touches at most one row. Owner scoping is expressed in the
    WHERE clause so that a foreign link and a missing link look the same.
    """

    unique_field = "short_code"

    def __init__(self):
        """Initialize the repository with the Link model type."""
        super().__init__(Link)

    async def insert_link(
        self,
        db: AsyncSession,
        data: Union[LinkCreate, Dict[str, Any]]
    ) -> Link:
        """
        Insert a new link row.

        No existence pre-check is made: the unique constraint on ``short_code``
        is the arbiter, so concurrent inserts of the same code cannot both win.

        Raises:
            DuplicateEntityError: If the short code already exists
            RepositoryError: On other database errors
        """
        return await self.create(db, data)

    async def get_by_short_code(self, db: AsyncSession, short_code: str) -> Optional[Link]:
        """
        Find a link by its exact, case-sensitive short code.

        Raises:
            RepositoryError: On database errors
        """
        try:
            query = select(self.model_type).where(self.model_type.short_code == short_code)
            result = await db.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error retrieving link by short code: {e}") from e

    async def get_owned(self, db: AsyncSession, link_id: int, owner_id: str) -> Optional[Link]:
        """
        Find a link by id, but only if ``owner_id`` owns it.

        Returns:
            The Link, or None when it does not exist or belongs to someone else

        Raises:
            RepositoryError: On database errors
        """
        try:
            query = select(self.model_type).where(
                self.model_type.id == link_id,
                self.model_type.owner_id == owner_id,
            )
            result = await db.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error retrieving owned link: {e}") from e

    async def list_by_owner(self, db: AsyncSession, owner_id: str) -> List[Link]:
        """
        Get every link owned by ``owner_id``, most recently updated first.

        Raises:
            RepositoryError: On database errors
        """
        try:
            query = (
                select(self.model_type)
                .where(self.model_type.owner_id == owner_id)
                .order_by(desc(self.model_type.updated_at), desc(self.model_type.id))
            )
            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error listing links for owner: {e}") from e

    async def update_link(
        self,
        db: AsyncSession,
        link: Link,
        data: Union[LinkUpdate, Dict[str, Any]]
    ) -> Link:
        """
        Apply a patch to ``link`` and refresh its ``updated_at``.

        Raises:
            DuplicateEntityError: If the new short code already exists
            RepositoryError: On other database errors
        """
        changes = data.model_dump(exclude_unset=True) if isinstance(data, LinkUpdate) else dict(data)
        changes["updated_at"] = utcnow()
        return await self.update_entity(db, link, changes)

    async def delete_owned(self, db: AsyncSession, link_id: int, owner_id: str) -> bool:
        """
        Delete a link in a single statement matching both id and owner.

        Returns:
            True if a row was removed, False otherwise

        Raises:
            RepositoryError: On database errors
        """
        deleted = await self.bulk_delete(db, id=link_id, owner_id=owner_id)
        return deleted > 0
