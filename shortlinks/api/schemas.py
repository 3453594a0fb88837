"""API request and response schemas.

This module contains Pydantic models for API request validation
and response serialization.
"""

from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shortlinks.core.config import settings

T = TypeVar("T")


class ActionResponse(BaseModel, Generic[T]):
    """Uniform envelope returned by every management endpoint."""
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None


class LinkCreateRequest(BaseModel):
    """Request schema for creating a link."""
    model_config = ConfigDict(extra="forbid")

    original_url: str = Field(min_length=1)
    custom_code: Optional[str] = Field(default=None, pattern=settings.CUSTOM_CODE_PATTERN)

    # An empty code field means "generate one for me"
    @field_validator("custom_code", mode="before")
    def blank_code_is_absent(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip() == "":
            return None
        return v


class LinkUpdateRequest(BaseModel):
    """Request schema for patching a link. At least one field is required."""
    model_config = ConfigDict(extra="forbid")

    original_url: Optional[str] = Field(default=None, min_length=1)
    short_code: Optional[str] = Field(default=None, pattern=settings.CUSTOM_CODE_PATTERN)


class LinkResponse(BaseModel):
    """Response schema for a link as seen by its owner."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    short_code: str
    original_url: str
    short_url: str  # Full redirect URL including base domain
    created_at: datetime
    updated_at: datetime


class DeletedLink(BaseModel):
    """Payload confirming which link was removed."""
    id: int


class ErrorResponse(BaseModel):
    """Envelope shape of every error response."""
    success: bool = False
    error: str
