"""Bounded recursive walk through a confirmation flow in a headless browser."""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urlparse

from loguru import logger

from autoconfirm.application.ports.browser import BrowserLauncher

MAX_DEPTH_CEILING = 4
LOGOUT_MARKER = "logout"


@dataclass
class TraversalConfig:
    """Timing and matching knobs for a traversal."""

    domain: str = "netflix.com"
    navigation_timeout_ms: int = 30_000
    settle_delay_ms: int = 3_000
    click_delay_ms: int = 2_000
    max_links_per_page: int = 2
    primary_keywords: list[str] = field(default_factory=lambda: ["yes", "this was me", "continue"])
    secondary_keywords: list[str] = field(default_factory=lambda: ["confirm update", "confirm", "continue"])
    confirm_selector: str | None = '[data-uia="set-primary-location-action"]'


@dataclass
class TraversalReport:
    """Counters for one traversal tree."""

    pages_visited: int = 0
    clicks: int = 0
    failures: list[str] = field(default_factory=list)

    def merge(self, other: TraversalReport) -> None:
        self.pages_visited += other.pages_visited
        self.clicks += other.clicks
        self.failures.extend(other.failures)


class ConfirmationTraversal:
    """
    Visit a confirmation URL and click through the flow.

    At each page: load, let dynamic content settle, click the primary control
    ("Yes, this was me"), then the secondary one ("Confirm update"). Below
    ``max_depth`` the first few same-domain links (never logout) are followed
    one level deeper. Every page gets its own browser session, so the worst
    case is ``max_links_per_page ** (max_depth - 1)`` sessions per leaf level.

    Failures are logged and recorded in the report; ``run`` never raises for
    navigation or element errors.
    """

    def __init__(self, launcher: BrowserLauncher, config: TraversalConfig | None = None) -> None:
        self.launcher = launcher
        self.config = config or TraversalConfig()

    async def run(self, url: str, max_depth: int = 2) -> TraversalReport:
        depth_bound = max(1, min(max_depth, MAX_DEPTH_CEILING))
        if depth_bound != max_depth:
            logger.warning(f"Traversal depth {max_depth} clamped to {depth_bound}")
        return await self._visit(url, depth=1, max_depth=depth_bound)

    async def _visit(self, url: str, depth: int, max_depth: int) -> TraversalReport:
        report = TraversalReport()
        cfg = self.config
        next_links: list[str] = []

        logger.info(f"Navigating (depth {depth}): {url}")
        try:
            async with self.launcher.session() as page:
                await page.goto(url, timeout_ms=cfg.navigation_timeout_ms)
                report.pages_visited += 1
                logger.info(f"Page loaded: {url}")
                await page.wait(cfg.settle_delay_ms)

                if await page.click_text(cfg.primary_keywords):
                    report.clicks += 1
                    logger.info("Clicked primary confirmation control")
                    await page.wait(cfg.click_delay_ms)
                else:
                    logger.info("No primary confirmation control on this page")

                if await self._click_secondary(page):
                    report.clicks += 1
                    logger.info("Clicked secondary confirmation control")
                    await page.wait(cfg.click_delay_ms)

                if depth < max_depth:
                    next_links = self._qualifying_links(await page.collect_links())
        except Exception as e:
            logger.error(f"Browser navigation error at {url}: {e}")
            report.failures.append(url)
            return report

        if next_links:
            logger.info(f"Following {len(next_links)} nested link(s) to depth {depth + 1}")
        for next_url in next_links:
            report.merge(await self._visit(next_url, depth + 1, max_depth))
        return report

    async def _click_secondary(self, page) -> bool:
        selector = self.config.confirm_selector
        if selector and await page.click_selector(selector):
            return True
        return await page.click_text(self.config.secondary_keywords)

    def _qualifying_links(self, hrefs: list[str]) -> list[str]:
        domain = self.config.domain.lower()
        picked: list[str] = []
        for href in hrefs:
            lowered = href.lower()
            host = (urlparse(href).hostname or "").lower()
            if not (host == domain or host.endswith("." + domain)):
                continue
            if LOGOUT_MARKER in lowered or href in picked:
                continue
            picked.append(href)
            if len(picked) >= self.config.max_links_per_page:
                break
        return picked
