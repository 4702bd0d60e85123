"""Folio Models.

ORM models (database tables):
    from folio.models.orm import PortfolioPost, User

Pydantic contracts (API request/response):
    from folio.models.contracts import PortfolioCreate, PortfolioPublic

Enums:
    from folio.models.enums import UserRole
"""

from folio.models.enums import (
    ContactMessageStatus,
    MessagePriority,
    SystemMessageStatus,
    SystemMessageType,
    UserRole,
    ViewerKind,
    ViewOutcome,
)
from folio.models.orm import Base, ContactMessage, PortfolioPost, SystemMessage, User

__all__ = [
    # Base
    "Base",
    # ORM models
    "User",
    "PortfolioPost",
    "ContactMessage",
    "SystemMessage",
    # Enums
    "UserRole",
    "ContactMessageStatus",
    "SystemMessageStatus",
    "MessagePriority",
    "SystemMessageType",
    "ViewerKind",
    "ViewOutcome",
]
