"""Incremental mailbox synchronization driven by push notifications."""

from __future__ import annotations

import asyncio
from typing import Optional

from loguru import logger

from autoconfirm.application.ports.checkpoint_store import CheckpointStore
from autoconfirm.application.ports.mailbox_provider import MailboxProvider
from autoconfirm.application.use_cases.dispatch_verification import VerificationDispatcher
from autoconfirm.domain.entities.notification import MailboxNotification
from autoconfirm.domain.errors import CheckpointExpiredError
from autoconfirm.domain.models import CheckpointPolicy, MarkPolicy, ReconcileResult, ReconcileStatus


class MailboxSyncEngine:
    """Reconcile push notifications against the last processed checkpoint.

    One instance per mailbox, created at process start. It owns the
    checkpoint and the set of message ids already handed to the dispatcher;
    ``reconcile`` calls are serialized so overlapping webhook deliveries
    cannot dispatch the same message twice.

    Flow:
    1. Notification without a usable historyId: no-op
    2. No checkpoint yet: inspect only the newest inbox message, then adopt
       the notification's checkpoint
    3. Otherwise: read "message added" history since the checkpoint, dispatch
       each unseen id in provider order, then apply the checkpoint policy

    Per-message failures are logged and do not stop the pass. A failing
    history call propagates and leaves the checkpoint untouched.
    """

    def __init__(
        self,
        provider: MailboxProvider,
        dispatcher: VerificationDispatcher,
        *,
        label_id: str = "INBOX",
        checkpoint_policy: CheckpointPolicy = CheckpointPolicy.ADVANCE_ALWAYS,
        mark_policy: MarkPolicy = MarkPolicy.BEFORE_DISPATCH,
        store: Optional[CheckpointStore] = None,
    ) -> None:
        self.provider = provider
        self.dispatcher = dispatcher
        self.label_id = label_id
        self.checkpoint_policy = checkpoint_policy
        self.mark_policy = mark_policy
        self.store = store

        # A failed id marked before dispatch is skipped on the re-read window
        if checkpoint_policy == CheckpointPolicy.HOLD_ON_FAILURE and mark_policy != MarkPolicy.AFTER_DISPATCH:
            raise ValueError("HOLD_ON_FAILURE checkpoint policy requires the AFTER_DISPATCH mark policy")

        self.last_checkpoint: Optional[int] = store.load() if store else None
        self.processed: set[str] = set()
        self._lock = asyncio.Lock()

        if self.last_checkpoint is not None:
            logger.info(f"Loaded last checkpoint: {self.last_checkpoint}")

    @property
    def initialized(self) -> bool:
        return self.last_checkpoint is not None

    async def reconcile(self, notification: MailboxNotification) -> ReconcileResult:
        if not notification.has_checkpoint:
            logger.warning("No historyId found in notification")
            return ReconcileResult(
                status=ReconcileStatus.MISSING_CHECKPOINT,
                checkpoint=self.last_checkpoint,
                previous_checkpoint=self.last_checkpoint,
            )

        checkpoint = notification.checkpoint
        async with self._lock:
            if self.last_checkpoint is None:
                return await self._bootstrap(checkpoint)
            try:
                return await self._sync_since(checkpoint)
            except CheckpointExpiredError as e:
                logger.warning(f"{e}; re-initializing from the newest message")
                return await self._bootstrap(checkpoint)

    async def adopt_checkpoint(self, checkpoint: int) -> None:
        """Replace the checkpoint, e.g. with the one returned by a watch renewal."""
        async with self._lock:
            logger.info(f"Adopting checkpoint {checkpoint} (was {self.last_checkpoint})")
            self.last_checkpoint = checkpoint
            self._persist()

    async def _bootstrap(self, checkpoint: int) -> ReconcileResult:
        result = ReconcileResult(
            status=ReconcileStatus.INITIALIZED,
            previous_checkpoint=self.last_checkpoint,
        )

        logger.info("No usable checkpoint, fetching newest inbox message")
        message_ids = await self.provider.list_newest(self.label_id, max_results=1)
        if message_ids:
            message_id = message_ids[0]
            if message_id in self.processed:
                result.skipped.append(message_id)
            else:
                await self._handle(message_id, result)
        else:
            logger.info("No messages found in inbox yet")

        self._finish(checkpoint, result)
        logger.info(f"Initialized history tracking at {self.last_checkpoint}")
        return result

    async def _sync_since(self, checkpoint: int) -> ReconcileResult:
        previous = self.last_checkpoint
        if checkpoint < previous:
            logger.warning(f"Notification checkpoint {checkpoint} is older than {previous}")

        logger.info(f"Fetching history from {previous} -> {checkpoint}")
        message_ids = await self.provider.list_added_since(previous)
        logger.info(f"Found {len(message_ids)} added message(s)")

        result = ReconcileResult(status=ReconcileStatus.SYNCED, previous_checkpoint=previous)
        seen_this_pass: set[str] = set()
        for message_id in message_ids:
            if message_id in self.processed or message_id in seen_this_pass:
                logger.debug(f"Skipping already processed message {message_id}")
                result.skipped.append(message_id)
                continue
            seen_this_pass.add(message_id)
            await self._handle(message_id, result)

        self._finish(checkpoint, result)
        return result

    async def _handle(self, message_id: str, result: ReconcileResult) -> None:
        if self.mark_policy == MarkPolicy.BEFORE_DISPATCH:
            self.processed.add(message_id)

        try:
            message = await self.provider.get_message(message_id)
            logger.info(f"New email: {message.sender} - {message.subject} ({message.date})")
            logger.debug(
                f"Message {message_id} thread={message.thread_id} labels={','.join(message.label_ids)}: {message.snippet}"
            )
            await self.dispatcher.classify_and_dispatch(message)
        except Exception as e:
            logger.exception(f"Failed to process message {message_id}: {e}")
            result.failed.append(message_id)
            return

        if self.mark_policy == MarkPolicy.AFTER_DISPATCH:
            self.processed.add(message_id)
        result.dispatched.append(message_id)

    def _finish(self, checkpoint: int, result: ReconcileResult) -> None:
        if result.failed and self.checkpoint_policy == CheckpointPolicy.HOLD_ON_FAILURE:
            logger.warning(
                f"{len(result.failed)} message(s) failed, holding checkpoint at {self.last_checkpoint}"
            )
        else:
            if result.failed:
                logger.warning(f"{len(result.failed)} message(s) failed, advancing anyway")
            self.last_checkpoint = checkpoint
            self._persist()
            logger.info(f"Updated last checkpoint -> {checkpoint}")
        result.checkpoint = self.last_checkpoint

    def _persist(self) -> None:
        if self.store is not None and self.last_checkpoint is not None:
            self.store.save(self.last_checkpoint)
