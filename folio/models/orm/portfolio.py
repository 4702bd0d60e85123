"""
PortfolioPost ORM model.

A published project: description, content, images and tags, plus the view
counter. ``last_view_counted_at`` drives the view cooldown and is kept apart
from ``updated_at`` so content edits never reset it.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from folio.models.orm.base import Base

if TYPE_CHECKING:
    from folio.models.orm.user import User


class PortfolioPost(Base):
    """Portfolio post database table."""

    __tablename__ = "portfolio_posts"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    owner_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    images: Mapped[str] = mapped_column(
        Text, nullable=False, default="[]", comment="JSON-encoded list of image URLs"
    )
    tags: Mapped[str] = mapped_column(
        Text, nullable=False, default="[]", comment="JSON-encoded list of tags"
    )
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    views: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    last_view_counted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=lambda: datetime.now(UTC),
    )

    owner: Mapped["User"] = relationship(back_populates="portfolios")

    __table_args__ = (
        CheckConstraint("views >= 0", name="ck_portfolio_posts_views_non_negative"),
        Index("ix_portfolio_posts_owner_id", "owner_id"),
        Index("ix_portfolio_posts_published_created", "published", "created_at"),
    )
