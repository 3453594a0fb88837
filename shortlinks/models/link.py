"""Link data models.

This module defines the Link model mapping a short code to its original URL
and the principal that owns it.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, Index, Text, UniqueConstraint
from sqlmodel import Field, SQLModel

# Largest id the links.id column (INTEGER) can hold
MAX_LINK_ID = 2**31 - 1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LinkBase(SQLModel):
    """Fields shared by every link representation."""

    original_url: str = Field(
        sa_type=Text,
        description="The original (long) URL to redirect to",
    )
    short_code: str = Field(
        max_length=20,
        description="Globally unique code used in the redirect path",
    )


class Link(LinkBase, table=True):
    """
    Link model for storing shortened URLs in the database.

    ``short_code`` is protected by a unique constraint; it is the only
    handle exposed publicly. ``id`` is a storage surrogate key.
    """

    __tablename__ = "links"

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: str = Field(
        max_length=191,
        description="Identity-provider subject that owns this link",
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    __table_args__ = (
        UniqueConstraint("short_code", name="uq_links_short_code"),
        # Dashboard listing: owner's links, most recently updated first
        Index("ix_links_owner_id_updated_at", "owner_id", "updated_at"),
    )


class LinkCreate(LinkBase):
    """Schema for inserting a new link."""
    owner_id: str


class LinkUpdate(SQLModel):
    """Schema for patching a link. Unset fields are left untouched."""
    original_url: Optional[str] = None
    short_code: Optional[str] = None
