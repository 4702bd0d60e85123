"""
Enums for Folio models.
"""

from enum import Enum


class UserRole(str, Enum):
    """User roles for access control."""

    USER = "user"
    ADMIN = "admin"
    SYSTEM_ADMIN = "system_admin"
    SUPER_ADMIN = "super_admin"

    @classmethod
    def hierarchy(cls) -> list["UserRole"]:
        """Roles ordered from lowest to highest privilege."""
        return [cls.USER, cls.ADMIN, cls.SYSTEM_ADMIN, cls.SUPER_ADMIN]

    def at_least(self, other: "UserRole") -> bool:
        """Check if this role is at or above another role."""
        order = UserRole.hierarchy()
        return order.index(self) >= order.index(other)


class ContactMessageStatus(str, Enum):
    """Read state of a visitor contact message."""

    UNREAD = "unread"
    READ = "read"


class SystemMessageStatus(str, Enum):
    """Delivery state of an inter-role system message."""

    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"


class MessagePriority(str, Enum):
    """Priority of an inter-role system message."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class SystemMessageType(str, Enum):
    """Category of an inter-role system message."""

    SYSTEM_UPDATE = "system_update"
    SECURITY_ALERT = "security_alert"
    USER_REQUEST = "user_request"
    MAINTENANCE = "maintenance"
    GENERAL = "general"


class ViewerKind(str, Enum):
    """How a portfolio viewer was identified."""

    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class ViewOutcome(str, Enum):
    """Result of accounting a single portfolio read."""

    COUNTED = "counted"
    OWNER_EXEMPT = "owner_exempt"
    RATE_LIMITED = "rate_limited"
    UNPUBLISHED = "unpublished"
    GONE = "gone"
    FAILED = "failed"
