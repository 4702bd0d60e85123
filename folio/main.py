"""
Folio API - FastAPI Application

Builds the app (routers, CORS, exception handlers, message hub) and runs
startup/shutdown: database check, schema bootstrap outside production, hub
start/stop and the optional bootstrap Super Admin.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from folio import __version__
from folio.config import get_settings
from folio.core.cache import close_redis
from folio.core.database import close_db, create_all, get_db_context, init_db
from folio.core.errors import register_exception_handlers
from folio.core.pubsub import MessageHub
from folio.models.enums import UserRole
from folio.repositories.user import UserRepository
from folio.routers import (
    admin_router,
    contact_router,
    health_router,
    messages_router,
    portfolios_router,
    system_messages_router,
    websocket_router,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info("Starting Folio API...")
    settings = get_settings()

    logger.info("Initializing database connection...")
    await init_db()
    if not settings.is_production:
        # Schema migrations are out of scope; local runs bootstrap from metadata
        await create_all()
    logger.info("Database connection established")

    logger.info("Starting message hub...")
    hub: MessageHub = app.state.message_hub
    await hub.start()

    if settings.default_admin_username and settings.default_admin_email:
        await create_default_user()

    logger.info(f"Folio API started in {settings.environment} mode")

    yield

    # Shutdown
    logger.info("Shutting down Folio API...")
    await hub.stop()
    await close_redis()
    await close_db()
    logger.info("Folio API shutdown complete")


async def create_default_user() -> None:
    """
    Create the bootstrap Super Admin if it doesn't exist.

    Only runs if FOLIO_DEFAULT_ADMIN_USERNAME and FOLIO_DEFAULT_ADMIN_EMAIL
    environment variables are set.
    """
    settings = get_settings()

    if not settings.default_admin_username or not settings.default_admin_email:
        return

    async with get_db_context() as db:
        user_repo = UserRepository(db)

        existing = await user_repo.get_by_username(settings.default_admin_username)
        if existing:
            logger.info(f"Default user already exists: {settings.default_admin_username}")
            return

        user = await user_repo.create_user(
            username=settings.default_admin_username,
            email=settings.default_admin_email,
            role=UserRole.SUPER_ADMIN,
        )

        logger.info(f"Created default super admin: {user.username} (id: {user.id})")


def create_app() -> FastAPI:
    """
    Build the Folio application.

    The message hub is created here and started by the lifespan; until it is
    started it delivers to local subscribers only.
    """
    settings = get_settings()

    app = FastAPI(
        title="Folio API",
        description="Portfolio hosting platform API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Owned by the app; started and stopped by the lifespan
    app.state.message_hub = MessageHub()

    # ==========================================================================
    # CORS Middleware
    # ==========================================================================
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # ==========================================================================
    # Register Routers
    # ==========================================================================
    app.include_router(health_router)
    app.include_router(portfolios_router)
    app.include_router(contact_router)
    app.include_router(messages_router)
    app.include_router(system_messages_router)
    app.include_router(admin_router)
    app.include_router(websocket_router)

    # Root endpoint
    @app.get("/")
    async def root():
        return {
            "name": "Folio API",
            "version": __version__,
            "docs": "/docs",
        }

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "folio.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
    )
