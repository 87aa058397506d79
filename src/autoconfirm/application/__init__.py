"""Application layer - sync engine, dispatcher and extraction logic."""

from autoconfirm.application.automation import ConfirmationTraversal, TraversalConfig
from autoconfirm.application.use_cases.dispatch_verification import (
    DispatchConfig,
    VerificationDispatcher,
)
from autoconfirm.application.use_cases.sync_mailbox import MailboxSyncEngine

__all__ = [
    "ConfirmationTraversal",
    "DispatchConfig",
    "MailboxSyncEngine",
    "TraversalConfig",
    "VerificationDispatcher",
]
