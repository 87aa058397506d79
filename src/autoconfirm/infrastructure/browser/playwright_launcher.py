"""Playwright (chromium) implementation of the browser ports."""

from __future__ import annotations

import re
from contextlib import asynccontextmanager
from typing import AsyncIterator, Sequence

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, async_playwright

from autoconfirm.application.ports.browser import BrowserLauncher, BrowserSession

CLICKABLE_SELECTOR = "a, button, [role='button']"
CLICK_TIMEOUT_MS = 5_000
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class PlaywrightSession(BrowserSession):
    """A single page inside its own browser."""

    def __init__(self, page: Page):
        self.page = page

    async def goto(self, url: str, timeout_ms: int) -> None:
        await self.page.goto(url, wait_until="networkidle", timeout=timeout_ms)

    async def wait(self, ms: int) -> None:
        await self.page.wait_for_timeout(ms)

    async def click_text(self, keywords: Sequence[str]) -> bool:
        for keyword in keywords:
            pattern = re.compile(re.escape(keyword), re.IGNORECASE)
            candidates = self.page.locator(CLICKABLE_SELECTOR).filter(has_text=pattern)
            for i in range(await candidates.count()):
                if await self._try_click(candidates.nth(i), keyword):
                    return True
        return False

    async def click_selector(self, selector: str) -> bool:
        candidates = self.page.locator(selector)
        for i in range(await candidates.count()):
            if await self._try_click(candidates.nth(i), selector):
                return True
        return False

    async def collect_links(self) -> list[str]:
        return await self.page.eval_on_selector_all("a[href]", "els => els.map(a => a.href)")

    async def _try_click(self, locator, description: str) -> bool:
        try:
            if not await locator.is_visible():
                return False
            await locator.click(timeout=CLICK_TIMEOUT_MS)
        except PlaywrightError as e:
            logger.warning(f"Click on '{description}' failed: {e}")
            return False
        return True


class PlaywrightBrowserLauncher(BrowserLauncher):
    """Launch a fresh chromium per session; closed on every exit path."""

    def __init__(self, headless: bool = True, user_agent: str = DEFAULT_USER_AGENT):
        self.headless = headless
        self.user_agent = user_agent

    @asynccontextmanager
    async def session(self) -> AsyncIterator[PlaywrightSession]:
        async with async_playwright() as pw:
            browser = await pw.chromium.launch(headless=self.headless)
            try:
                context = await browser.new_context(user_agent=self.user_agent)
                page = await context.new_page()
                yield PlaywrightSession(page)
            finally:
                await browser.close()
