"""Domain models for the household auto-confirm service."""

from enum import Enum

from pydantic import BaseModel, Field


class DispatchAction(str, Enum):
    """Side effects a verification email can trigger."""

    AUTO_CONFIRM = "auto_confirm"
    FORWARD = "forward"


class CheckpointPolicy(str, Enum):
    """What happens to the checkpoint when part of a history pass fails."""

    ADVANCE_ALWAYS = "advance_always"
    HOLD_ON_FAILURE = "hold_on_failure"


class MarkPolicy(str, Enum):
    """When a message id joins the processed set."""

    BEFORE_DISPATCH = "before_dispatch"  # at-most-once
    AFTER_DISPATCH = "after_dispatch"  # at-least-once


class ReconcileStatus(str, Enum):
    """Outcome of one reconciliation pass."""

    MISSING_CHECKPOINT = "missing_checkpoint"
    INITIALIZED = "initialized"
    SYNCED = "synced"


class DispatchStatus(str, Enum):
    """Outcome of classifying a single message."""

    IGNORED_SENDER = "ignored_sender"
    NO_HTML = "no_html"
    NO_LINKS = "no_links"
    DISPATCHED = "dispatched"


class LinkModel(BaseModel):
    """An actionable link as reported back to callers."""

    target: str
    label: str


class DispatchResult(BaseModel):
    """What the dispatcher did with one message."""

    message_id: str
    status: DispatchStatus
    code: str | None = None
    code_strategy: str | None = None
    links: list[LinkModel] = Field(default_factory=list)
    actions: list[DispatchAction] = Field(default_factory=list)


class ReconcileResult(BaseModel):
    """What one reconciliation pass did."""

    status: ReconcileStatus
    checkpoint: int | None = None
    previous_checkpoint: int | None = None
    dispatched: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)

    @property
    def partial_failure(self) -> bool:
        return bool(self.failed)
