"""Tests for repository error handling."""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from shortlinks.models.link import LinkCreate
from shortlinks.repositories.base import DuplicateEntityError, RepositoryError, is_unique_violation
from tests.utils import random_url


class _FakeDriverError(Exception):
    def __init__(self, message, sqlstate=None):
        super().__init__(message)
        self.sqlstate = sqlstate


@pytest.mark.repository
class TestRepositoryErrorHandling:
    """Tests for error handling in repositories."""

    @pytest.mark.asyncio
    async def test_lookup_database_error(self, test_db, link_repository):
        with patch.object(test_db, "execute", new=AsyncMock(side_effect=SQLAlchemyError("Test database error"))):
            with pytest.raises(RepositoryError) as excinfo:
                await link_repository.get_by_short_code(test_db, "errortest")

        assert "Test database error" in str(excinfo.value)
        assert not isinstance(excinfo.value, DuplicateEntityError)

    @pytest.mark.asyncio
    async def test_list_database_error(self, test_db, link_repository):
        with patch.object(test_db, "execute", new=AsyncMock(side_effect=SQLAlchemyError("list failed"))):
            with pytest.raises(RepositoryError):
                await link_repository.list_by_owner(test_db, "user_alice")

    @pytest.mark.asyncio
    async def test_delete_database_error(self, test_db, link_repository):
        with patch.object(test_db, "execute", new=AsyncMock(side_effect=SQLAlchemyError("delete failed"))):
            with pytest.raises(RepositoryError):
                await link_repository.delete_owned(test_db, 1, "user_alice")

    @pytest.mark.asyncio
    async def test_insert_flush_error_is_not_a_conflict(self, test_db, link_repository):
        """A non-constraint failure surfaces as a plain repository error."""
        data = LinkCreate(owner_id="user_alice", original_url=random_url(), short_code="flushfail")

        with patch.object(test_db, "flush", new=AsyncMock(side_effect=SQLAlchemyError("disk full"))):
            with pytest.raises(RepositoryError) as excinfo:
                await link_repository.insert_link(test_db, data)

        assert not isinstance(excinfo.value, DuplicateEntityError)
        assert await link_repository.get_by_short_code(test_db, "flushfail") is None

    @pytest.mark.asyncio
    async def test_other_integrity_errors_are_not_conflicts(self, test_db, link_repository):
        data = LinkCreate(owner_id="user_alice", original_url=random_url(), short_code="notnull")
        error = IntegrityError("INSERT", {}, _FakeDriverError("NOT NULL constraint failed: links.owner_id"))

        with patch.object(test_db, "flush", new=AsyncMock(side_effect=error)):
            with pytest.raises(RepositoryError) as excinfo:
                await link_repository.insert_link(test_db, data)

        assert not isinstance(excinfo.value, DuplicateEntityError)


def test_unique_violation_detected_by_sqlstate():
    error = IntegrityError("INSERT", {}, _FakeDriverError("constraint uq_links_short_code", sqlstate="23505"))
    assert is_unique_violation(error)


def test_unique_violation_detected_by_message():
    sqlite_error = IntegrityError("INSERT", {}, _FakeDriverError("UNIQUE constraint failed: links.short_code"))
    postgres_error = IntegrityError("INSERT", {}, _FakeDriverError('duplicate key value violates unique constraint'))

    assert is_unique_violation(sqlite_error)
    assert is_unique_violation(postgres_error)


def test_foreign_integrity_error_not_unique_violation():
    error = IntegrityError("INSERT", {}, _FakeDriverError("CHECK constraint failed", sqlstate="23514"))
    assert not is_unique_violation(error)
