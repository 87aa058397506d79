from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from typing import Iterator, Mapping, Optional


@dataclass(frozen=True)
class MessagePart:
    mime_type: str
    body: Optional[str] = None  # decoded inline payload, if any
    parts: tuple[MessagePart, ...] = ()

    def walk_breadth_first(self) -> Iterator[MessagePart]:
        """Yield this part and every descendant, level by level."""
        queue: deque[MessagePart] = deque([self])
        while queue:
            part = queue.popleft()
            yield part
            queue.extend(part.parts)


@dataclass(frozen=True)
class MailMessage:
    message_id: str
    thread_id: Optional[str]
    headers: Mapping[str, str]
    payload: MessagePart
    snippet: str = ""
    label_ids: tuple[str, ...] = field(default_factory=tuple)

    def header(self, name: str, default: str = "") -> str:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default

    @property
    def sender(self) -> str:
        return self.header("From", "(Unknown Sender)")

    @property
    def subject(self) -> str:
        return self.header("Subject", "(No Subject)")

    @property
    def date(self) -> str:
        return self.header("Date", "(No Date)")

    def first_html_body(self) -> Optional[str]:
        for part in self.payload.walk_breadth_first():
            if part.mime_type.lower() == "text/html" and part.body:
                return part.body
        return None
