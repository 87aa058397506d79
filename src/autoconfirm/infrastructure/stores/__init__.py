"""Store implementations."""

from autoconfirm.infrastructure.stores.file_checkpoint_store import FileCheckpointStore

__all__ = [
    "FileCheckpointStore",
]
