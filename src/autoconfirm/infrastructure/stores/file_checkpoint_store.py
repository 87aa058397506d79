"""JSON file checkpoint store for the mailbox history id."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from loguru import logger

from autoconfirm.application.ports.checkpoint_store import CheckpointStore
from autoconfirm.domain.entities.notification import parse_checkpoint


class FileCheckpointStore(CheckpointStore):
    """Persist the last checkpoint as ``{"historyId": <int>}``."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> Optional[int]:
        """Load the saved checkpoint, or None when absent or unreadable."""
        if not self.path.exists():
            logger.debug(f"No checkpoint file at {self.path}")
            return None

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read checkpoint file {self.path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed checkpoint file {self.path}")
            return None

        checkpoint = parse_checkpoint(data.get("historyId"))
        logger.debug(f"Loaded checkpoint from {self.path}: {checkpoint}")
        return checkpoint

    def save(self, checkpoint: int) -> None:
        """Write the checkpoint atomically (temp file + rename)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps({"historyId": checkpoint}), encoding="utf-8")
        os.replace(tmp, self.path)
        logger.debug(f"Saved checkpoint {checkpoint} to {self.path}")
