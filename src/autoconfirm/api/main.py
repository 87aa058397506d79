"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from autoconfirm.infrastructure import get_settings
from autoconfirm.infrastructure.log_config import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info("Listening for Gmail Pub/Sub notifications at /gmail-webhook")

    yield

    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Auto-confirms Netflix household verification emails from Gmail push notifications",
        lifespan=lifespan,
    )

    # Register routes
    from autoconfirm.api.routes import router
    from autoconfirm.infrastructure.http.gmail_webhook import router as webhook_router

    app.include_router(router)
    app.include_router(webhook_router)

    return app


# Create app instance
app = create_app()
