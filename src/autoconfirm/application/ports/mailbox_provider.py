from __future__ import annotations
from typing import Protocol

from autoconfirm.domain.entities.mail_message import MailMessage
from autoconfirm.domain.entities.watch import WatchSubscription


class MailboxProvider(Protocol):
    async def list_newest(self, label_id: str, max_results: int = 1) -> list[str]: ...

    async def get_message(self, message_id: str) -> MailMessage: ...

    # Ids from "message added" events after the checkpoint, in provider order.
    # Raises CheckpointExpiredError when the provider no longer has that history.
    async def list_added_since(self, checkpoint: int) -> list[str]: ...

    async def send_message(self, raw: bytes) -> str: ...

    async def watch(self, topic: str, label_ids: list[str]) -> WatchSubscription: ...
