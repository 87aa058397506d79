"""Classify a mailbox message and act on Netflix verification emails."""

from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger

from autoconfirm.application.automation.confirmation_traversal import ConfirmationTraversal
from autoconfirm.application.extraction import extract_code_with_strategy, extract_links, filter_actionable
from autoconfirm.application.ports.mailbox_provider import MailboxProvider
from autoconfirm.domain.entities.link import ExtractedLink
from autoconfirm.domain.entities.mail_message import MailMessage
from autoconfirm.domain.models import DispatchAction, DispatchResult, DispatchStatus, LinkModel
from autoconfirm.infrastructure.email.rfc822 import build_forward_message


@dataclass
class DispatchConfig:
    """Which mails qualify, which links count, and what to do with them."""

    sender_patterns: list[str] = field(default_factory=lambda: ["netflix.com"])
    verification_domain: str = "netflix.com"
    link_keywords: list[str] = field(default_factory=lambda: ["yes", "confirm", "continue"])
    path_markers: list[str] = field(
        default_factory=lambda: ["update-primary-location", "set-primary-location", "account/travel/verify"]
    )
    actions: list[DispatchAction] = field(default_factory=lambda: [DispatchAction.AUTO_CONFIRM])
    forward_recipients: list[str] = field(default_factory=list)
    max_depth: int = 2


class VerificationDispatcher:
    """Stateless per message.

    Flow:
    1. Ignore senders that match none of the configured patterns
    2. Locate the first HTML body part
    3. Log the sign-in code, if any
    4. Filter the body's links down to actionable confirmation links
    5. Run the configured actions (forward and/or auto-confirm)
    """

    def __init__(
        self,
        traversal: ConfirmationTraversal,
        provider: MailboxProvider | None = None,
        config: DispatchConfig | None = None,
    ) -> None:
        self.traversal = traversal
        self.provider = provider
        self.config = config or DispatchConfig()

        if DispatchAction.FORWARD in self.config.actions:
            if provider is None:
                raise ValueError("Forward action requires a mailbox provider")
            if not self.config.forward_recipients:
                raise ValueError("Forward action requires at least one recipient")

    def matches_sender(self, sender: str) -> bool:
        lowered = sender.lower()
        return any(pattern.lower() in lowered for pattern in self.config.sender_patterns)

    async def classify_and_dispatch(self, message: MailMessage) -> DispatchResult:
        sender = message.sender
        if not self.matches_sender(sender):
            logger.info(f"Ignoring mail from {sender}")
            return DispatchResult(message_id=message.message_id, status=DispatchStatus.IGNORED_SENDER)

        logger.info(f"Verification mail detected: {message.subject} (from {sender})")

        html = message.first_html_body()
        if not html:
            logger.warning(f"No HTML body in message {message.message_id}")
            return DispatchResult(message_id=message.message_id, status=DispatchStatus.NO_HTML)

        code, strategy = extract_code_with_strategy(html)
        if code:
            logger.info(f"Sign-in code detected: {code} (via {strategy})")
        else:
            logger.info("No sign-in code found in this email")

        links = extract_links(html)
        actionable = filter_actionable(
            links,
            domain=self.config.verification_domain,
            keywords=self.config.link_keywords,
            path_markers=self.config.path_markers,
        )
        logger.info(f"Found {len(links)} links, {len(actionable)} actionable")

        performed: list[DispatchAction] = []
        for action in self.config.actions:
            if action == DispatchAction.FORWARD:
                await self._forward(message, html)
                performed.append(action)
            elif action == DispatchAction.AUTO_CONFIRM and actionable:
                await self._auto_confirm(actionable)
                performed.append(action)

        if not performed:
            logger.info("No verification links found, nothing to do")
            status = DispatchStatus.NO_LINKS
        else:
            status = DispatchStatus.DISPATCHED
            logger.info(f"Finished processing {message.message_id}: {[a.value for a in performed]}")

        return DispatchResult(
            message_id=message.message_id,
            status=status,
            code=code,
            code_strategy=strategy,
            links=[LinkModel(target=l.target, label=l.label) for l in actionable],
            actions=performed,
        )

    async def _forward(self, message: MailMessage, html: str) -> None:
        recipients = self.config.forward_recipients
        logger.info(f"Forwarding {message.message_id} to {', '.join(recipients)}")
        raw = build_forward_message(
            original_sender=message.sender,
            subject=message.subject,
            html_body=html,
            recipients=recipients,
        )
        sent_id = await self.provider.send_message(raw)
        logger.info(f"Forwarded as {sent_id}")

    async def _auto_confirm(self, links: list[ExtractedLink]) -> None:
        for link in links:
            logger.info(f"Following verification link: {link.target}")
            report = await self.traversal.run(link.target, max_depth=self.config.max_depth)
            logger.info(
                f"Traversal done: pages={report.pages_visited}, clicks={report.clicks}, "
                f"failures={len(report.failures)}"
            )
