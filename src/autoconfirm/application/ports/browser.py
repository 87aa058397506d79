from __future__ import annotations
from contextlib import AbstractAsyncContextManager
from typing import Protocol, Sequence


class BrowserSession(Protocol):
    """One isolated page. All waits are in milliseconds."""

    async def goto(self, url: str, timeout_ms: int) -> None: ...

    async def wait(self, ms: int) -> None: ...

    # Click the first visible control whose text contains one of the
    # keywords, trying keywords in order. Returns False when nothing matched.
    async def click_text(self, keywords: Sequence[str]) -> bool: ...

    async def click_selector(self, selector: str) -> bool: ...

    async def collect_links(self) -> list[str]: ...


class BrowserLauncher(Protocol):
    def session(self) -> AbstractAsyncContextManager[BrowserSession]: ...
