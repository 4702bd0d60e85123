"""SQLAlchemy ORM Models for Folio.

Pure database models using SQLAlchemy 2.0 declarative style.
"""

from folio.models.orm.base import Base
from folio.models.orm.contact_message import ContactMessage
from folio.models.orm.portfolio import PortfolioPost
from folio.models.orm.system_message import SystemMessage
from folio.models.orm.user import User

__all__ = [
    "Base",
    "User",
    "PortfolioPost",
    "ContactMessage",
    "SystemMessage",
]
