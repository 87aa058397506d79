"""Browser automation flows."""

from autoconfirm.application.automation.confirmation_traversal import (
    MAX_DEPTH_CEILING,
    ConfirmationTraversal,
    TraversalConfig,
    TraversalReport,
)

__all__ = [
    "MAX_DEPTH_CEILING",
    "ConfirmationTraversal",
    "TraversalConfig",
    "TraversalReport",
]
