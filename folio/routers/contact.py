"""
Contact Router

Public contact form submission.
"""

import logging

from fastapi import APIRouter, status

from folio.core.database import DbSession
from folio.models.contracts.contact_message import ContactMessageCreate, ContactMessagePublic
from folio.models.orm.contact_message import ContactMessage
from folio.repositories.contact_message import ContactMessageRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/contact", tags=["contact"])


@router.post("", response_model=ContactMessagePublic, status_code=status.HTTP_201_CREATED)
async def submit_contact_message(
    message_data: ContactMessageCreate,
    db: DbSession,
) -> ContactMessagePublic:
    """
    Store a visitor's contact message. New messages start unread.

    Args:
        message_data: Contact form fields
        db: Database session

    Returns:
        Stored message
    """
    message = ContactMessage(
        name=message_data.name,
        email=message_data.email,
        subject=message_data.subject,
        message=message_data.message,
    )
    message = await ContactMessageRepository(db).create(message)

    logger.info(
        "Contact message received",
        extra={"message_id": str(message.id)},
    )

    return ContactMessagePublic(
        id=str(message.id),
        name=message.name,
        email=message.email,
        subject=message.subject,
        message=message.message,
        status=message.status,
        created_at=message.created_at,
        updated_at=message.updated_at,
    )
