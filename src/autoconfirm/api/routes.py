"""
Health routes for the auto-confirm service.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from autoconfirm.application.use_cases.sync_mailbox import MailboxSyncEngine
from autoconfirm.infrastructure import get_settings
from autoconfirm.infrastructure.wiring import get_sync_engine

router = APIRouter()


# ============================================================================
# Response Models
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response with sync engine state."""

    status: str
    timestamp: str
    checkpoint: int | None
    processed_messages: int


# ============================================================================
# Health Endpoints
# ============================================================================


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check() -> HealthResponse:
    """Basic health check endpoint."""
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=settings.app_version,
    )


@router.get("/health/ready", response_model=ReadinessResponse, tags=["health"])
async def readiness_check(engine: MailboxSyncEngine = Depends(get_sync_engine)) -> ReadinessResponse:
    """Ready once the engine is built; reports whether a checkpoint exists yet."""
    return ReadinessResponse(
        status="ready" if engine.initialized else "awaiting_first_notification",
        timestamp=datetime.now(timezone.utc).isoformat(),
        checkpoint=engine.last_checkpoint,
        processed_messages=len(engine.processed),
    )
