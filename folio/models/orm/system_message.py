"""
SystemMessage ORM model.

Messages exchanged between System Admins and Super Admins.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

import sqlalchemy
from sqlalchemy import Boolean, DateTime, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from folio.models.enums import MessagePriority, SystemMessageStatus, SystemMessageType
from folio.models.orm.base import Base


def _enum(enum_cls: type, name: str) -> sqlalchemy.Enum:
    return sqlalchemy.Enum(
        enum_cls,
        name=name,
        values_callable=lambda x: [e.value for e in x],
    )


class SystemMessage(Base):
    """System message database table."""

    __tablename__ = "system_messages"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    sender: Mapped[str] = mapped_column(String(100), nullable=False)
    recipient: Mapped[str] = mapped_column(String(100), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[SystemMessageStatus] = mapped_column(
        _enum(SystemMessageStatus, "system_message_status"),
        default=SystemMessageStatus.SENT,
    )
    priority: Mapped[MessagePriority] = mapped_column(
        _enum(MessagePriority, "message_priority"),
        default=MessagePriority.MEDIUM,
    )
    type: Mapped[SystemMessageType] = mapped_column(
        _enum(SystemMessageType, "system_message_type"),
        default=SystemMessageType.GENERAL,
    )
    is_starred: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (Index("ix_system_messages_recipient", "recipient"),)
