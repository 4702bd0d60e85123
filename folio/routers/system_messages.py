"""
System Messages Router

Messages between System Admins and Super Admins. Every change is published
on the message hub so open dashboards update without polling.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from folio.core.auth import RequireSystemAdmin
from folio.core.database import DbSession
from folio.core.pubsub import SYSTEM_MESSAGES_TOPIC, EventType, Hub, HubEvent
from folio.models.contracts.common import DeleteResponse
from folio.models.contracts.system_message import SystemMessageCreate, SystemMessagePublic
from folio.models.orm.system_message import SystemMessage
from folio.repositories.system_message import SystemMessageRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/system-messages", tags=["system-messages"])


def _to_public(message: SystemMessage) -> SystemMessagePublic:
    return SystemMessagePublic(
        id=str(message.id),
        sender=message.sender,
        recipient=message.recipient,
        subject=message.subject,
        content=message.content,
        status=message.status,
        priority=message.priority,
        type=message.type,
        is_starred=message.is_starred,
        created_at=message.created_at,
    )


async def _get_message_or_404(db: DbSession, message_id: UUID) -> SystemMessage:
    message = await SystemMessageRepository(db).get_by_id(message_id)
    if message is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="System message not found",
        )
    return message


async def _announce(hub: Hub, event_type: EventType, data: dict) -> None:
    await hub.publish(HubEvent(type=event_type, topic=SYSTEM_MESSAGES_TOPIC, data=data))


@router.get("", response_model=list[SystemMessagePublic])
async def list_system_messages(
    current_user: RequireSystemAdmin,
    db: DbSession,
    recipient: str | None = Query(None, description="Only messages for this recipient"),
) -> list[SystemMessagePublic]:
    """List system messages, newest first."""
    messages = await SystemMessageRepository(db).list_messages(recipient=recipient)
    return [_to_public(m) for m in messages]


@router.post("", response_model=SystemMessagePublic, status_code=status.HTTP_201_CREATED)
async def send_system_message(
    message_data: SystemMessageCreate,
    current_user: RequireSystemAdmin,
    db: DbSession,
    hub: Hub,
) -> SystemMessagePublic:
    """
    Send a system message from the caller.

    Args:
        message_data: Message fields
        current_user: Current System Admin or Super Admin
        db: Database session
        hub: Message hub

    Returns:
        Stored message
    """
    message = SystemMessage(
        sender=current_user.username,
        recipient=message_data.recipient,
        subject=message_data.subject,
        content=message_data.content,
        priority=message_data.priority,
        type=message_data.type,
    )
    message = await SystemMessageRepository(db).create(message)
    public = _to_public(message)

    logger.info(
        f"System message sent to {message.recipient}",
        extra={"message_id": str(message.id), "user_id": str(current_user.user_id)},
    )

    await _announce(hub, EventType.CREATED, public.model_dump(mode="json"))
    return public


@router.post("/{message_id}/read", response_model=SystemMessagePublic)
async def mark_system_message_read(
    message_id: UUID,
    current_user: RequireSystemAdmin,
    db: DbSession,
    hub: Hub,
) -> SystemMessagePublic:
    """Mark a system message as read."""
    message = await _get_message_or_404(db, message_id)
    message = await SystemMessageRepository(db).mark_read(message)
    public = _to_public(message)

    await _announce(hub, EventType.UPDATED, public.model_dump(mode="json"))
    return public


@router.post("/{message_id}/star", response_model=SystemMessagePublic)
async def toggle_system_message_star(
    message_id: UUID,
    current_user: RequireSystemAdmin,
    db: DbSession,
    hub: Hub,
) -> SystemMessagePublic:
    """Star or unstar a system message."""
    message = await _get_message_or_404(db, message_id)
    message = await SystemMessageRepository(db).toggle_star(message)
    public = _to_public(message)

    await _announce(hub, EventType.UPDATED, public.model_dump(mode="json"))
    return public


@router.delete("/{message_id}", response_model=DeleteResponse)
async def delete_system_message(
    message_id: UUID,
    current_user: RequireSystemAdmin,
    db: DbSession,
    hub: Hub,
) -> DeleteResponse:
    """Delete a system message."""
    message = await _get_message_or_404(db, message_id)
    await SystemMessageRepository(db).delete(message)

    logger.info(
        "System message deleted",
        extra={"message_id": str(message_id), "user_id": str(current_user.user_id)},
    )

    await _announce(hub, EventType.DELETED, {"id": str(message_id)})
    return DeleteResponse(message="System message deleted successfully")
