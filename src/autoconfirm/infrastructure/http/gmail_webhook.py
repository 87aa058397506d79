"""Gmail push notification endpoint (Pub/Sub push subscription)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from autoconfirm.application.use_cases.sync_mailbox import MailboxSyncEngine
from autoconfirm.domain.entities.notification import MailboxNotification
from autoconfirm.domain.errors import InvalidNotificationError
from autoconfirm.domain.models import ReconcileStatus
from autoconfirm.infrastructure.settings import Settings, get_settings
from autoconfirm.infrastructure.wiring import get_sync_engine


router = APIRouter()

STATUS_TEXT = {
    ReconcileStatus.MISSING_CHECKPOINT: "No historyId",
    ReconcileStatus.INITIALIZED: "Initialized with first mail",
    ReconcileStatus.SYNCED: "OK",
}


# ============================================================================
# Request Models
# ============================================================================


class PubSubMessage(BaseModel):
    """The message part of a Pub/Sub push request."""

    model_config = ConfigDict(populate_by_name=True)

    data: str
    message_id: str | None = Field(default=None, alias="messageId")
    publish_time: str | None = Field(default=None, alias="publishTime")
    attributes: dict[str, str] | None = None


class PushEnvelope(BaseModel):
    """Body Pub/Sub POSTs to a push endpoint."""

    message: PubSubMessage
    subscription: str | None = None


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/gmail-webhook", response_class=PlainTextResponse)
async def gmail_webhook(
    request: Request,
    engine: MailboxSyncEngine = Depends(get_sync_engine),
) -> PlainTextResponse:
    """
    Receive a Gmail change notification and reconcile the mailbox.

    - 400 when the envelope or its base64 JSON data is malformed
    - 200 "No historyId" when the notification carries no usable checkpoint
    - 200 "Initialized with first mail" / "OK" after a reconciliation pass
    - 500 "Error: ..." on any other failure (Pub/Sub will redeliver)
    """
    logger.info("Gmail webhook triggered")

    try:
        body = await request.json()
        envelope = PushEnvelope.model_validate(body)
    except (ValueError, ValidationError) as e:
        logger.error(f"Invalid Pub/Sub message format: {e}")
        return PlainTextResponse("Invalid Pub/Sub data", status_code=400)

    try:
        notification = MailboxNotification.from_push_data(envelope.message.data)
    except InvalidNotificationError as e:
        logger.error(f"Invalid Pub/Sub message data: {e}")
        return PlainTextResponse("Invalid Pub/Sub data", status_code=400)

    logger.info(
        f"Notification for {notification.email_address or '?'}: "
        f"historyId={notification.checkpoint}, pubsub id={envelope.message.message_id}"
    )

    try:
        result = await engine.reconcile(notification)
    except Exception as e:
        logger.exception(f"Error in Gmail webhook: {e}")
        return PlainTextResponse(f"Error: {e}", status_code=500)

    logger.info(
        f"Reconcile {result.status.value}: checkpoint={result.checkpoint}, "
        f"dispatched={len(result.dispatched)}, skipped={len(result.skipped)}, failed={len(result.failed)}"
    )
    return PlainTextResponse(STATUS_TEXT[result.status], status_code=200)


@router.get("/start-watch")
async def start_watch(
    engine: MailboxSyncEngine = Depends(get_sync_engine),
    settings: Settings = Depends(get_settings),
):
    """Start or renew the Gmail push subscription and adopt its historyId."""
    try:
        topic = settings.require_topic_path()
        subscription = await engine.provider.watch(topic, list(settings.gmail_watch_labels))
        await engine.adopt_checkpoint(subscription.history_id)
    except Exception as e:
        logger.exception(f"Error starting watch: {e}")
        return JSONResponse({"error": str(e)}, status_code=500)

    return {
        "historyId": str(subscription.history_id),
        "expiration": subscription.expiration.isoformat() if subscription.expiration else None,
        "topic": subscription.topic,
        "labelIds": list(subscription.label_ids),
    }
