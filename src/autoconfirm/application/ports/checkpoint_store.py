from __future__ import annotations
from typing import Optional, Protocol


class CheckpointStore(Protocol):
    def load(self) -> Optional[int]: ...
    def save(self, checkpoint: int) -> None: ...
