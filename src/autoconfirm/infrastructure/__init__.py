# src/autoconfirm/infrastructure/__init__.py
"""Infrastructure layer - Gmail, browser, storage and configuration."""

from autoconfirm.infrastructure.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
