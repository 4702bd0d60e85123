"""
Contact Message Repository

Provides database operations for ContactMessage model.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from folio.models.enums import ContactMessageStatus
from folio.models.orm.contact_message import ContactMessage
from folio.repositories.base import BaseRepository

SEARCH_COLUMNS = ["name", "email", "subject", "message"]


class ContactMessageRepository(BaseRepository[ContactMessage]):
    """Repository for ContactMessage model operations."""

    model = ContactMessage

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def search(
        self,
        *,
        search: str | None = None,
        status: ContactMessageStatus | None = None,
        limit: int = 5,
        offset: int = 0,
    ) -> tuple[list[ContactMessage], int]:
        """
        Search contact messages, newest first.

        Args:
            search: Term matched against name, email, subject and message
            status: Only return messages in this state (None = all)
            limit: Maximum number of results
            offset: Number of results to skip

        Returns:
            Tuple of (messages, total count)
        """
        filters = []
        if status is not None:
            filters.append(ContactMessage.status == status)

        return await self.paginate(
            filters=filters,
            search_columns=SEARCH_COLUMNS,
            search_term=search,
            order_by=ContactMessage.created_at.desc(),
            limit=limit,
            offset=offset,
        )

    async def set_status(
        self, message: ContactMessage, status: ContactMessageStatus
    ) -> ContactMessage:
        """Change the read state of a message."""
        message.status = status
        return await self.update(message)
