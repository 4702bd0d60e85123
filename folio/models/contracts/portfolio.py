"""
Portfolio contracts (API request/response schemas).

Images and tags are stored as JSON-encoded text and always cross the API as
real lists.
"""

import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def decode_json_list(raw: str | None) -> list[Any]:
    """
    Decode a stored JSON list column.

    Anything that is not a JSON array (empty, malformed, another JSON type)
    decodes to an empty list.
    """
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return []
    return value if isinstance(value, list) else []


def encode_json_list(values: list[Any] | None) -> str:
    """Encode a list for storage in a JSON text column."""
    return json.dumps(list(values or []))


def _coerce_list(value: Any) -> Any:
    # Older clients post images/tags as JSON strings
    if isinstance(value, str):
        return decode_json_list(value)
    return value


class PortfolioCreate(BaseModel):
    """Portfolio creation request model."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    content: str = Field(default="", description="Long-form project write-up")
    images: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    published: bool = False
    featured: bool = False

    @field_validator("images", "tags", mode="before")
    @classmethod
    def parse_encoded_lists(cls, v: Any) -> Any:
        """Accept JSON-encoded strings for list fields."""
        return _coerce_list(v)


class PortfolioUpdate(BaseModel):
    """Portfolio update request model. Omitted fields stay unchanged."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    content: str | None = None
    images: list[str] | None = None
    tags: list[str] | None = None
    published: bool | None = None
    featured: bool | None = None

    @field_validator("images", "tags", mode="before")
    @classmethod
    def parse_encoded_lists(cls, v: Any) -> Any:
        """Accept JSON-encoded strings for list fields."""
        return _coerce_list(v)


class OwnerSummary(BaseModel):
    """Public profile fields of a portfolio owner."""

    model_config = ConfigDict(from_attributes=True)

    username: str
    avatar: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    bio: str | None = None


class PortfolioPublic(BaseModel):
    """Portfolio public response model."""

    id: str
    owner_id: str
    owner: OwnerSummary | None = None
    title: str
    description: str
    content: str
    images: list[Any] = Field(default_factory=list)
    tags: list[Any] = Field(default_factory=list)
    category: str
    published: bool
    featured: bool
    views: int
    created_at: datetime
    updated_at: datetime


class PortfolioAdminSummary(BaseModel):
    """Condensed portfolio row for the platform overview."""

    id: str
    title: str
    owner: str | None
    published: bool
    featured: bool
    views: int
    created_at: datetime


class PortfolioOverview(BaseModel):
    """Platform-wide portfolio listing with publication counts."""

    total: int
    published: int
    portfolios: list[PortfolioAdminSummary]


class PortfolioModeration(BaseModel):
    """Admin-side publication and featuring switches."""

    published: bool | None = None
    featured: bool | None = None
