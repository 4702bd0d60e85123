"""API routers."""

from folio.routers.admin import router as admin_router
from folio.routers.contact import router as contact_router
from folio.routers.health import router as health_router
from folio.routers.messages import router as messages_router
from folio.routers.portfolios import router as portfolios_router
from folio.routers.system_messages import router as system_messages_router
from folio.routers.websocket import router as websocket_router

__all__ = [
    "health_router",
    "portfolios_router",
    "contact_router",
    "messages_router",
    "system_messages_router",
    "admin_router",
    "websocket_router",
]
