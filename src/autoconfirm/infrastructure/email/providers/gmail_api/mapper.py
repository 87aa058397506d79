from __future__ import annotations
import base64
import binascii
import re
from typing import Any, Mapping

from autoconfirm.domain.entities.mail_message import MailMessage, MessagePart

CHARSET_RE = re.compile(r"charset\s*=\s*\"?([A-Za-z0-9._:-]+)", re.IGNORECASE)


def decode_body_data(data: str, charset: str = "utf-8") -> str:
    """Gmail bodies are base64url without guaranteed padding."""
    padded = data + "=" * (-len(data) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, ValueError):
        return ""
    try:
        return raw.decode(charset, errors="replace")
    except LookupError:
        return raw.decode("utf-8", errors="replace")


def _header_map(headers: Any) -> dict[str, str]:
    out: dict[str, str] = {}
    for h in headers or []:
        name = h.get("name")
        if name and name not in out:
            out[name] = h.get("value", "")
    return out


def _charset(headers: Mapping[str, str]) -> str:
    for key, value in headers.items():
        if key.lower() == "content-type":
            match = CHARSET_RE.search(value)
            if match:
                return match.group(1)
    return "utf-8"


def _to_part(payload: Mapping[str, Any]) -> MessagePart:
    body = payload.get("body") or {}
    data = body.get("data")
    text = decode_body_data(data, _charset(_header_map(payload.get("headers")))) if data else None
    return MessagePart(
        mime_type=payload.get("mimeType") or "",
        body=text,
        parts=tuple(_to_part(p) for p in payload.get("parts") or []),
    )


def gmail_to_mail_message(resource: Mapping[str, Any]) -> MailMessage:
    """Map a users.messages.get(format=full) resource to a MailMessage."""
    payload = resource.get("payload") or {}
    return MailMessage(
        message_id=resource["id"],
        thread_id=resource.get("threadId"),
        headers=_header_map(payload.get("headers")),
        payload=_to_part(payload),
        snippet=resource.get("snippet", ""),
        label_ids=tuple(resource.get("labelIds") or ()),
    )
