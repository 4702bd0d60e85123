"""Data access repositories."""

from folio.repositories.contact_message import ContactMessageRepository
from folio.repositories.portfolio import PortfolioRepository
from folio.repositories.system_message import SystemMessageRepository
from folio.repositories.user import UserRepository

__all__ = [
    "ContactMessageRepository",
    "PortfolioRepository",
    "SystemMessageRepository",
    "UserRepository",
]
