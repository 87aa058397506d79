from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class WatchSubscription:
    # Push subscription returned by users.watch
    history_id: int
    expiration: Optional[datetime]
    topic: str
    label_ids: tuple[str, ...]
