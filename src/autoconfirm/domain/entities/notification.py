from __future__ import annotations
import base64
import binascii
import json
from dataclasses import dataclass
from typing import Any, Optional

from autoconfirm.domain.errors import InvalidNotificationError


def parse_checkpoint(value: Any) -> Optional[int]:
    """Coerce a historyId value to a positive int, or None when unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        checkpoint = value
    elif isinstance(value, float):
        if not value.is_integer():
            return None
        checkpoint = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdigit()):
            return None
        checkpoint = int(text)
    else:
        return None
    return checkpoint if checkpoint > 0 else None


@dataclass(frozen=True)
class MailboxNotification:
    checkpoint: Optional[int]
    email_address: Optional[str] = None

    @property
    def has_checkpoint(self) -> bool:
        return self.checkpoint is not None and self.checkpoint > 0

    @classmethod
    def from_push_data(cls, data: str) -> MailboxNotification:
        """Decode the base64 JSON carried in a Pub/Sub push message.

        Accepts both the standard and the URL-safe alphabet, with or without
        padding. Raises InvalidNotificationError when the data is not a
        base64-encoded JSON object.
        """
        if not isinstance(data, str) or not data.strip():
            raise InvalidNotificationError("Push message carries no data")

        raw = data.strip().replace("+", "-").replace("/", "_")
        raw += "=" * (-len(raw) % 4)
        try:
            decoded = base64.urlsafe_b64decode(raw.encode("ascii"))
            payload = json.loads(decoded.decode("utf-8"))
        except (binascii.Error, UnicodeError, ValueError) as e:
            raise InvalidNotificationError(f"Undecodable push data: {e}") from e

        if not isinstance(payload, dict):
            raise InvalidNotificationError("Push data is not a JSON object")

        return cls(
            checkpoint=parse_checkpoint(payload.get("historyId")),
            email_address=payload.get("emailAddress"),
        )
