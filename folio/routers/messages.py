"""
Contact Messages Router

Admin inbox for messages submitted through the contact form.
"""

import logging
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from folio.core.auth import RequireAdmin
from folio.core.database import DbSession
from folio.models.contracts.common import DeleteResponse
from folio.models.contracts.contact_message import (
    ContactMessagePublic,
    ContactMessageStatusUpdate,
)
from folio.models.contracts.pagination import PaginatedResponse
from folio.models.enums import ContactMessageStatus
from folio.models.orm.contact_message import ContactMessage
from folio.repositories.contact_message import ContactMessageRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/messages", tags=["messages"])


def _to_public(message: ContactMessage) -> ContactMessagePublic:
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


async def _get_message_or_404(db: DbSession, message_id: UUID) -> ContactMessage:
    message = await ContactMessageRepository(db).get_by_id(message_id)
    if message is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Message not found",
        )
    return message


@router.get("", response_model=PaginatedResponse[ContactMessagePublic])
async def list_messages(
    current_user: RequireAdmin,
    db: DbSession,
    search: str | None = Query(None, description="Search name, email, subject and body"),
    status_filter: Literal["all", "unread", "read"] = Query(
        "all", alias="status", description="Filter by read state"
    ),
    limit: int = Query(5, ge=1, le=100, description="Maximum results per page"),
    offset: int = Query(0, ge=0, description="Number of results to skip"),
) -> PaginatedResponse[ContactMessagePublic]:
    """
    List contact messages, newest first.

    Args:
        current_user: Current admin user
        db: Database session
        search: Optional search term
        status_filter: "all", "unread" or "read"
        limit: Maximum number of results
        offset: Number of results to skip

    Returns:
        Paginated contact messages
    """
    message_status = None if status_filter == "all" else ContactMessageStatus(status_filter)

    messages, total = await ContactMessageRepository(db).search(
        search=search,
        status=message_status,
        limit=limit,
        offset=offset,
    )

    return PaginatedResponse[ContactMessagePublic](
        items=[_to_public(m) for m in messages],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.patch("/{message_id}", response_model=ContactMessagePublic)
async def update_message_status(
    message_id: UUID,
    update_data: ContactMessageStatusUpdate,
    current_user: RequireAdmin,
    db: DbSession,
) -> ContactMessagePublic:
    """
    Mark a contact message read or unread.

    Raises:
        HTTPException: If the message does not exist
    """
    message = await _get_message_or_404(db, message_id)
    message = await ContactMessageRepository(db).set_status(message, update_data.status)

    logger.info(
        f"Contact message marked {update_data.status.value}",
        extra={"message_id": str(message_id), "user_id": str(current_user.user_id)},
    )

    return _to_public(message)


@router.delete("/{message_id}", response_model=DeleteResponse)
async def delete_message(
    message_id: UUID,
    current_user: RequireAdmin,
    db: DbSession,
) -> DeleteResponse:
    """Delete a contact message."""
    message = await _get_message_or_404(db, message_id)
    await ContactMessageRepository(db).delete(message)

    logger.info(
        "Contact message deleted",
        extra={"message_id": str(message_id), "user_id": str(current_user.user_id)},
    )

    return DeleteResponse(message="Message deleted successfully")
