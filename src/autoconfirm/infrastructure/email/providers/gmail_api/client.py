from __future__ import annotations
import asyncio
import base64
from datetime import datetime, timezone
from typing import Any, Optional

from googleapiclient.errors import HttpError
from loguru import logger

from autoconfirm.application.ports.mailbox_provider import MailboxProvider
from autoconfirm.domain.entities.mail_message import MailMessage
from autoconfirm.domain.entities.watch import WatchSubscription
from autoconfirm.domain.errors import CheckpointExpiredError
from autoconfirm.infrastructure.email.providers.gmail_api.auth import (
    GmailOAuthCredentials,
    GmailServiceFactory,
)
from autoconfirm.infrastructure.email.providers.gmail_api.mapper import gmail_to_mail_message

HISTORY_TYPE_MESSAGE_ADDED = "messageAdded"


class GmailMailboxProvider(MailboxProvider):
    """Gmail REST API through google-api-python-client.

    The client library is blocking, so every ``execute()`` runs in a worker
    thread. Nothing is retried here; errors reach the caller.
    """

    def __init__(self, service: Any, user_id: str = "me", history_label_id: Optional[str] = "INBOX") -> None:
        self.service = service
        self.user_id = user_id
        self.history_label_id = history_label_id

    @classmethod
    def from_credentials(
        cls,
        creds: GmailOAuthCredentials,
        user_id: str = "me",
        history_label_id: Optional[str] = "INBOX",
    ) -> GmailMailboxProvider:
        service = GmailServiceFactory(creds).build()
        return cls(service, user_id=user_id, history_label_id=history_label_id)

    async def _execute(self, request) -> dict:
        return await asyncio.to_thread(request.execute)

    async def list_newest(self, label_id: str, max_results: int = 1) -> list[str]:
        resp = await self._execute(
            self.service.users().messages().list(
                userId=self.user_id,
                labelIds=[label_id],
                maxResults=max_results,
            )
        )
        return [m["id"] for m in resp.get("messages") or [] if m.get("id")]

    async def get_message(self, message_id: str) -> MailMessage:
        resp = await self._execute(
            self.service.users().messages().get(userId=self.user_id, id=message_id, format="full")
        )
        return gmail_to_mail_message(resp)

    async def list_added_since(self, checkpoint: int) -> list[str]:
        message_ids: list[str] = []
        page_token: Optional[str] = None
        pages = 0

        while True:
            params: dict[str, Any] = {
                "userId": self.user_id,
                "startHistoryId": str(checkpoint),
                "historyTypes": [HISTORY_TYPE_MESSAGE_ADDED],
            }
            if self.history_label_id:
                params["labelId"] = self.history_label_id
            if page_token:
                params["pageToken"] = page_token

            try:
                resp = await self._execute(self.service.users().history().list(**params))
            except HttpError as e:
                # 404 means startHistoryId is older than Gmail keeps history for
                if e.resp.status == 404:
                    raise CheckpointExpiredError(checkpoint) from e
                raise

            pages += 1
            for record in resp.get("history") or []:
                for added in record.get("messagesAdded") or []:
                    message_id = (added.get("message") or {}).get("id")
                    if message_id:
                        message_ids.append(message_id)

            page_token = resp.get("nextPageToken")
            if not page_token:
                break

        logger.debug(f"History since {checkpoint}: {len(message_ids)} added across {pages} page(s)")
        return message_ids

    async def send_message(self, raw: bytes) -> str:
        encoded = base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")
        resp = await self._execute(
            self.service.users().messages().send(userId=self.user_id, body={"raw": encoded})
        )
        return resp.get("id", "")

    async def watch(self, topic: str, label_ids: list[str]) -> WatchSubscription:
        resp = await self._execute(
            self.service.users().watch(
                userId=self.user_id,
                body={"topicName": topic, "labelIds": list(label_ids)},
            )
        )

        # expiration is milliseconds since epoch, as a string
        expiration = None
        if resp.get("expiration"):
            expiration = datetime.fromtimestamp(int(resp["expiration"]) / 1000, tz=timezone.utc)

        logger.info(f"Gmail watch active on {topic}, historyId={resp.get('historyId')}")
        return WatchSubscription(
            history_id=int(resp["historyId"]),
            expiration=expiration,
            topic=topic,
            label_ids=tuple(label_ids),
        )
