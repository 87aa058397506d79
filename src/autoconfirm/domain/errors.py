"""Exceptions shared across layers."""


class AutoconfirmError(Exception):
    """Base class for errors raised by this service."""


class InvalidNotificationError(AutoconfirmError):
    """Push envelope could not be decoded into a mailbox notification."""


class CheckpointExpiredError(AutoconfirmError):
    """Provider no longer keeps history for the requested checkpoint."""

    def __init__(self, checkpoint: int) -> None:
        super().__init__(f"History for checkpoint {checkpoint} is no longer available")
        self.checkpoint = checkpoint
