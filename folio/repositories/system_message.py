"""
System Message Repository

Provides database operations for SystemMessage model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from folio.models.enums import SystemMessageStatus
from folio.models.orm.system_message import SystemMessage
from folio.repositories.base import BaseRepository


class SystemMessageRepository(BaseRepository[SystemMessage]):
    """Repository for SystemMessage model operations."""

    model = SystemMessage

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def list_messages(self, recipient: str | None = None) -> list[SystemMessage]:
        """
        List messages newest first.

        Args:
            recipient: Only messages addressed to this recipient (None = all)

        Returns:
            List of messages
        """
        query = select(SystemMessage)
        if recipient:
            query = query.where(SystemMessage.recipient == recipient)
        query = query.order_by(SystemMessage.created_at.desc())

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def toggle_star(self, message: SystemMessage) -> SystemMessage:
        """Flip the starred flag."""
        message.is_starred = not message.is_starred
        return await self.update(message)

    async def mark_read(self, message: SystemMessage) -> SystemMessage:
        """Mark a message as read."""
        message.status = SystemMessageStatus.READ
        return await self.update(message)
