"""
Contact message contracts (API request/response schemas).
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from folio.models.enums import ContactMessageStatus


class ContactMessageCreate(BaseModel):
    """Public contact form submission."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    subject: str = Field(default="", max_length=255)
    message: str = Field(..., min_length=1)


class ContactMessageStatusUpdate(BaseModel):
    """Status change for a contact message."""

    status: ContactMessageStatus


class ContactMessagePublic(BaseModel):
    """Contact message as seen by administrators."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    subject: str
    message: str
    status: ContactMessageStatus
    created_at: datetime
    updated_at: datetime
