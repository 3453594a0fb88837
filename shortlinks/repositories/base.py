"""Base repository implementation for the short links application.

This module provides a generic BaseRepository class that follows the Repository pattern
for database operations, serving as a foundation for more specific repositories.
"""

import logging
from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

# Type variable for model types
T = TypeVar("T", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)

logger = logging.getLogger(__name__)

# Fragments of the messages PostgreSQL and SQLite raise for unique violations
UNIQUE_VIOLATION_MARKERS = ("unique constraint", "duplicate key")


class RepositoryError(Exception):
    """Base exception for repository errors."""
    pass


class DuplicateEntityError(RepositoryError):
    """Exception raised when a unique constraint is violated."""

    def __init__(self, model_type: Type[SQLModel], field_name: str, value: Any):
        self.model_type = model_type
        self.field_name = field_name
        self.value = value
        model_name = getattr(model_type, "__name__", "Entity")
        super().__init__(f"{model_name} with {field_name}={value} already exists")


def is_unique_violation(error: IntegrityError) -> bool:
    """Tell a unique-constraint violation apart from other integrity errors."""
    if getattr(error.orig, "sqlstate", None) == "23505":
        return True
    message = str(error.orig if error.orig is not None else error).lower()
    return any(marker in message for marker in UNIQUE_VIOLATION_MARKERS)


def as_dict(data: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    """Convert a Pydantic model to a dict of the fields that were set."""
    if isinstance(data, BaseModel):
        return data.model_dump(exclude_unset=True)
    return dict(data)


class BaseRepository(Generic[T, CreateSchemaType, UpdateSchemaType]):
    """
    Base repository implementing common CRUD operations for SQLModel entities.

    Type parameters:
        T: The SQLModel type this repository manages
        CreateSchemaType: The Pydantic model type for creation operations
        UpdateSchemaType: The Pydantic model type for update operations
    """

    # Column whose unique constraint a failed write is reported against
    unique_field: Optional[str] = None

    def __init__(self, model_type: Type[T]):
        """
        Initialize the repository with a specific model type.

        Args:
            model_type: The SQLModel class this repository will work with
        """
        self.model_type = model_type

    async def create(self, db: AsyncSession, data: Union[CreateSchemaType, Dict[str, Any]]) -> T:
        """
        Create a new entity.

        The insert is flushed immediately so constraint violations surface here.
        On failure the session is rolled back and nothing is left behind.

        Args:
            db: Database session
            data: Entity data (either as a Pydantic model or dictionary)

        Returns:
            The created entity

        Raises:
            DuplicateEntityError: If a unique constraint rejects the row
            RepositoryError: On other database errors
        """
        data_dict = as_dict(data)
        try:
            entity = self.model_type(**data_dict)
            db.add(entity)
            await db.flush()
            await db.refresh(entity)
            return entity
        except IntegrityError as e:
            await db.rollback()
            self._raise_integrity_error(e, data_dict)
        except SQLAlchemyError as e:
            logger.error(f"Error creating {self.model_type.__name__}: {e}")
            await db.rollback()
            raise RepositoryError(f"Database error creating entity: {e}") from e

    async def update_entity(
        self,
        db: AsyncSession,
        entity: T,
        data: Union[UpdateSchemaType, Dict[str, Any]]
    ) -> T:
        """
        Apply ``data`` to an already loaded entity and flush.

        Raises:
            DuplicateEntityError: If a unique constraint rejects the change
            RepositoryError: On other database errors
        """
        data_dict = as_dict(data)
        try:
            for key, value in data_dict.items():
                setattr(entity, key, value)

            await db.flush()
            await db.refresh(entity)
            return entity
        except IntegrityError as e:
            await db.rollback()
            self._raise_integrity_error(e, data_dict)
        except SQLAlchemyError as e:
            logger.error(f"Error updating {self.model_type.__name__}: {e}")
            await db.rollback()
            raise RepositoryError(f"Database error updating entity: {e}") from e

    async def bulk_delete(self, db: AsyncSession, **filters) -> int:
        """
        Delete every entity matching all ``field=value`` filters.

        Returns:
            Number of rows deleted

        Raises:
            RepositoryError: On database errors
        """
        if not filters:
            raise ValueError("No conditions provided for bulk delete")

        conditions = [getattr(self.model_type, field) == value for field, value in filters.items()]
        try:
            result = await db.execute(delete(self.model_type).where(*conditions))
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"Error bulk deleting {self.model_type.__name__} records: {e}", exc_info=True)
            raise RepositoryError(f"Database error bulk deleting entities: {e}") from e

    def _raise_integrity_error(self, error: IntegrityError, data: Dict[str, Any]) -> None:
        if self.unique_field and is_unique_violation(error):
            raise DuplicateEntityError(
                self.model_type, self.unique_field, data.get(self.unique_field, "unknown")
            ) from error
        logger.error(f"Integrity error on {self.model_type.__name__}: {error}")
        raise RepositoryError(f"Database integrity error: {error}") from error
