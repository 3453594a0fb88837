"""Basic tests to verify test DB setup."""

import pytest
from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError

from shortlinks.models.link import Link


@pytest.mark.asyncio
async def test_create_tables(test_db):
    """Verify the links table is created and usable in the test database."""
    result = await test_db.execute(text("SELECT name FROM sqlite_master WHERE type='table' AND name='links'"))
    tables = [row[0] for row in result.fetchall()]
    assert "links" in tables

    link = Link(owner_id="user_alice", original_url="https://example.com", short_code="test123")
    test_db.add(link)
    await test_db.commit()

    result = await test_db.execute(select(Link).where(Link.short_code == "test123"))
    retrieved = result.scalars().first()

    assert retrieved is not None
    assert retrieved.id is not None
    assert retrieved.original_url == "https://example.com"
    assert retrieved.owner_id == "user_alice"
    assert retrieved.created_at is not None
    assert retrieved.updated_at is not None


@pytest.mark.asyncio
async def test_owner_index_exists(test_engine):
    """Verify the listing index is created alongside the table."""
    async with test_engine.connect() as conn:
        result = await conn.execute(text("SELECT name FROM sqlite_master WHERE type='index' AND tbl_name='links'"))
        indexes = [row[0] for row in result.fetchall()]

    assert "ix_links_owner_id_updated_at" in indexes


@pytest.mark.asyncio
async def test_short_code_unique_constraint(test_db):
    """The database itself rejects a second row with the same short code."""
    test_db.add(Link(owner_id="user_alice", original_url="https://a.example", short_code="same"))
    await test_db.commit()

    test_db.add(Link(owner_id="user_bob", original_url="https://b.example", short_code="same"))
    with pytest.raises(IntegrityError):
        await test_db.commit()
    await test_db.rollback()
