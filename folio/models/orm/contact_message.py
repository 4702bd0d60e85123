"""
ContactMessage ORM model.

Messages submitted by visitors through the public contact form.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

import sqlalchemy
from sqlalchemy import DateTime, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from folio.models.enums import ContactMessageStatus
from folio.models.orm.base import Base


class ContactMessage(Base):
    """Contact message database table."""

    __tablename__ = "contact_messages"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    message: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[ContactMessageStatus] = mapped_column(
        sqlalchemy.Enum(
            ContactMessageStatus,
            name="contact_message_status",
            values_callable=lambda x: [e.value for e in x],
        ),
        default=ContactMessageStatus.UNREAD,
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

    __table_args__ = (
        Index("ix_contact_messages_status", "status"),
        Index("ix_contact_messages_created_at", "created_at"),
    )
