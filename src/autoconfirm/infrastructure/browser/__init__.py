"""Headless browser adapters."""

from autoconfirm.infrastructure.browser.playwright_launcher import (
    PlaywrightBrowserLauncher,
    PlaywrightSession,
)

__all__ = [
    "PlaywrightBrowserLauncher",
    "PlaywrightSession",
]
