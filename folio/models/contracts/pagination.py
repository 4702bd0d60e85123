"""
Paged list envelope used by the admin inbox.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field, computed_field

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of results plus what a client needs to draw pager controls."""

    items: list[T]
    total: int = Field(..., description="Matches across all pages")
    limit: int = Field(..., description="Page size")
    offset: int = Field(..., description="Items before this page")

    @computed_field
    @property
    def page(self) -> int:
        """1-based number of this page."""
        if self.limit <= 0:
            return 1
        return self.offset // self.limit + 1

    @computed_field
    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 1
        return max(1, -(-self.total // self.limit))

    @computed_field
    @property
    def has_next(self) -> bool:
        return self.offset + len(self.items) < self.total
