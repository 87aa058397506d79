from __future__ import annotations

import asyncio
import base64
import json
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Sequence

from autoconfirm.domain.entities.mail_message import MailMessage, MessagePart
from autoconfirm.domain.entities.watch import WatchSubscription

NETFLIX_SENDER = "Netflix <info@account.netflix.com>"

VERIFICATION_HTML = """
<html><body>
<table>
  <tr><td>Did you request to update your Netflix Household?</td></tr>
  <tr><td><a href="https://www.netflix.com/account/update-primary-location?nftoken=abc">Yes, This Was Me</a></td></tr>
  <tr><td><a href="https://www.netflix.com/help">Get help</a></td></tr>
  <tr><td><a href="https://example.org/unsubscribe">Unsubscribe</a></td></tr>
</table>
</body></html>
"""


def make_message(
    message_id: str = "m1",
    *,
    sender: str = NETFLIX_SENDER,
    subject: str = "Important: How to update your Netflix Household",
    html: str | None = VERIFICATION_HTML,
    text: str = "plain text version",
) -> MailMessage:
    parts = [MessagePart(mime_type="text/plain", body=text)]
    if html is not None:
        parts.append(MessagePart(mime_type="text/html", body=html))
    payload = MessagePart(
        mime_type="multipart/mixed",
        parts=(MessagePart(mime_type="multipart/alternative", parts=tuple(parts)),),
    )
    return MailMessage(
        message_id=message_id,
        thread_id=f"t-{message_id}",
        headers={"From": sender, "Subject": subject, "Date": "Mon, 19 Oct 2026 08:00:00 +0000"},
        payload=payload,
        snippet=text[:40],
        label_ids=("INBOX",),
    )


def push_data(payload: dict) -> str:
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


class FakeMailboxProvider:
    """In-memory mailbox recording every call."""

    def __init__(
        self,
        messages: dict[str, MailMessage] | None = None,
        newest: list[str] | None = None,
        added: list[str] | None = None,
    ) -> None:
        self.messages = messages or {}
        self.newest = newest or []
        self.added = added or []
        self.calls: list[tuple] = []
        self.sent: list[bytes] = []
        self.failing_ids: set[str] = set()
        self.history_error: Exception | None = None
        self.watch_history_id = 9000
        self.in_flight = 0
        self.max_in_flight = 0

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]

    async def _round_trip(self) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
        finally:
            self.in_flight -= 1

    async def list_newest(self, label_id: str, max_results: int = 1) -> list[str]:
        self.calls.append(("list_newest", label_id, max_results))
        return self.newest[:max_results]

    async def get_message(self, message_id: str) -> MailMessage:
        self.calls.append(("get_message", message_id))
        await self._round_trip()
        if message_id in self.failing_ids:
            raise RuntimeError(f"fetch failed for {message_id}")
        return self.messages[message_id]

    async def list_added_since(self, checkpoint: int) -> list[str]:
        self.calls.append(("list_added_since", checkpoint))
        await self._round_trip()
        if self.history_error is not None:
            raise self.history_error
        return list(self.added)

    async def send_message(self, raw: bytes) -> str:
        self.calls.append(("send_message",))
        self.sent.append(raw)
        return f"sent-{len(self.sent)}"

    async def watch(self, topic: str, label_ids: list[str]) -> WatchSubscription:
        self.calls.append(("watch", topic, tuple(label_ids)))
        return WatchSubscription(
            history_id=self.watch_history_id,
            expiration=datetime(2026, 10, 26, tzinfo=timezone.utc),
            topic=topic,
            label_ids=tuple(label_ids),
        )


class RecordingDispatcher:
    """Stands in for VerificationDispatcher in engine tests."""

    def __init__(self, failing_ids: set[str] | None = None) -> None:
        self.dispatched: list[str] = []
        self.failing_ids = failing_ids or set()

    async def classify_and_dispatch(self, message: MailMessage):
        if message.message_id in self.failing_ids:
            raise RuntimeError(f"dispatch failed for {message.message_id}")
        self.dispatched.append(message.message_id)


class MemoryCheckpointStore:
    def __init__(self, checkpoint: int | None = None) -> None:
        self.checkpoint = checkpoint
        self.saves: list[int] = []

    def load(self) -> int | None:
        return self.checkpoint

    def save(self, checkpoint: int) -> None:
        self.checkpoint = checkpoint
        self.saves.append(checkpoint)


@dataclass
class FakePage:
    primary: bool = True
    secondary: bool = True
    selector: bool = False
    links: list[str] = field(default_factory=list)
    fail: bool = False


class FakeBrowserSession:
    def __init__(self, launcher: FakeBrowserLauncher) -> None:
        self.launcher = launcher
        self.page: FakePage | None = None

    async def goto(self, url: str, timeout_ms: int) -> None:
        self.launcher.visited.append(url)
        page = self.launcher.pages.get(url, FakePage(primary=False, secondary=False))
        if page.fail:
            raise RuntimeError(f"navigation timeout: {url}")
        self.page = page

    async def wait(self, ms: int) -> None:
        self.launcher.waits.append(ms)

    async def click_text(self, keywords: Sequence[str]) -> bool:
        self.launcher.text_clicks.append(tuple(keywords))
        if self.page is None:
            return False
        if tuple(keywords) == tuple(self.launcher.primary_keywords):
            return self.page.primary
        return self.page.secondary

    async def click_selector(self, selector: str) -> bool:
        self.launcher.selector_clicks.append(selector)
        return bool(self.page and self.page.selector)

    async def collect_links(self) -> list[str]:
        return list(self.page.links) if self.page else []


class FakeBrowserLauncher:
    def __init__(self, pages: dict[str, FakePage] | None = None) -> None:
        self.pages = pages or {}
        self.visited: list[str] = []
        self.waits: list[int] = []
        self.text_clicks: list[tuple] = []
        self.selector_clicks: list[str] = []
        self.opened = 0
        self.closed = 0
        self.primary_keywords = ["yes", "this was me", "continue"]

    @asynccontextmanager
    async def session(self):
        self.opened += 1
        try:
            yield FakeBrowserSession(self)
        finally:
            self.closed += 1
