"""
System message contracts (API request/response schemas).
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from folio.models.enums import MessagePriority, SystemMessageStatus, SystemMessageType


class SystemMessageCreate(BaseModel):
    """New message between administrator roles."""

    recipient: str = Field(..., min_length=1, max_length=100)
    subject: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    priority: MessagePriority = MessagePriority.MEDIUM
    type: SystemMessageType = SystemMessageType.GENERAL


class SystemMessagePublic(BaseModel):
    """System message response model."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    sender: str
    recipient: str
    subject: str
    content: str
    status: SystemMessageStatus
    priority: MessagePriority
    type: SystemMessageType
    is_starred: bool
    created_at: datetime
