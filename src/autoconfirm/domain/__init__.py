"""Domain models and entities."""

from autoconfirm.domain.models import (
    CheckpointPolicy,
    DispatchAction,
    DispatchResult,
    DispatchStatus,
    LinkModel,
    MarkPolicy,
    ReconcileResult,
    ReconcileStatus,
)

__all__ = [
    "CheckpointPolicy",
    "DispatchAction",
    "DispatchResult",
    "DispatchStatus",
    "LinkModel",
    "MarkPolicy",
    "ReconcileResult",
    "ReconcileStatus",
]
