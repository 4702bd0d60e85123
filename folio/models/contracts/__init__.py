"""Pydantic contracts for API requests and responses."""

from folio.models.contracts.common import DeleteResponse, ErrorResponse, HealthResponse
from folio.models.contracts.contact_message import (
    ContactMessageCreate,
    ContactMessagePublic,
    ContactMessageStatusUpdate,
)
from folio.models.contracts.pagination import PaginatedResponse
from folio.models.contracts.portfolio import (
    OwnerSummary,
    PortfolioAdminSummary,
    PortfolioCreate,
    PortfolioModeration,
    PortfolioOverview,
    PortfolioPublic,
    PortfolioUpdate,
)
from folio.models.contracts.system_message import SystemMessageCreate, SystemMessagePublic
from folio.models.contracts.user import UserCreate, UserPublic, UserRoleUpdate

__all__ = [
    # Common
    "ErrorResponse",
    "HealthResponse",
    "DeleteResponse",
    "PaginatedResponse",
    # Portfolios
    "PortfolioCreate",
    "PortfolioUpdate",
    "PortfolioPublic",
    "PortfolioAdminSummary",
    "PortfolioOverview",
    "PortfolioModeration",
    "OwnerSummary",
    # Contact messages
    "ContactMessageCreate",
    "ContactMessagePublic",
    "ContactMessageStatusUpdate",
    # System messages
    "SystemMessageCreate",
    "SystemMessagePublic",
    # Users
    "UserCreate",
    "UserPublic",
    "UserRoleUpdate",
]
