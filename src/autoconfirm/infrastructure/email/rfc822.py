from __future__ import annotations
from email.message import EmailMessage
from html import escape
from typing import Optional, Sequence

FORWARD_PREFIX = "Fwd: "


def forward_subject(subject: str) -> str:
    if subject.lower().startswith(FORWARD_PREFIX.lower()):
        return subject
    return f"{FORWARD_PREFIX}{subject}"


def build_forward_message(
    *,
    original_sender: str,
    subject: str,
    html_body: str,
    recipients: Sequence[str],
    from_address: Optional[str] = None,
) -> bytes:
    """RFC822 bytes for an HTML forward of a received message."""
    if not recipients:
        raise ValueError("At least one forward recipient is required")

    em = EmailMessage()
    # Gmail fills From with the authenticated mailbox when omitted
    if from_address:
        em["From"] = from_address
    em["To"] = ", ".join(recipients)
    em["Subject"] = forward_subject(subject)

    body = (
        f"<p><b>Forwarded message from:</b> {escape(original_sender)}</p><hr/>"
        f"{html_body}"
    )
    em.set_content(body, subtype="html", charset="utf-8")
    return em.as_bytes()
