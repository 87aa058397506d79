"""Process-wide construction of the sync engine and its collaborators."""

from __future__ import annotations

from functools import lru_cache

from loguru import logger

from autoconfirm.application.automation import ConfirmationTraversal, TraversalConfig
from autoconfirm.application.use_cases.dispatch_verification import DispatchConfig, VerificationDispatcher
from autoconfirm.application.use_cases.sync_mailbox import MailboxSyncEngine
from autoconfirm.infrastructure.browser import PlaywrightBrowserLauncher
from autoconfirm.infrastructure.email.providers.gmail_api.auth import GmailOAuthCredentials
from autoconfirm.infrastructure.email.providers.gmail_api.client import GmailMailboxProvider
from autoconfirm.infrastructure.settings import Settings, get_settings
from autoconfirm.infrastructure.stores import FileCheckpointStore


def build_mailbox_provider(settings: Settings) -> GmailMailboxProvider:
    creds = GmailOAuthCredentials(
        client_id=settings.gmail_client_id,
        client_secret=settings.gmail_client_secret.get_secret_value(),
        refresh_token=settings.gmail_refresh_token.get_secret_value(),
        token_uri=settings.gmail_token_uri,
    )
    return GmailMailboxProvider.from_credentials(
        creds,
        user_id=settings.gmail_user_id,
        history_label_id=settings.inbox_label,
    )


def build_traversal(settings: Settings) -> ConfirmationTraversal:
    config = TraversalConfig(
        domain=settings.verification_domain,
        navigation_timeout_ms=settings.navigation_timeout_ms,
        settle_delay_ms=settings.settle_delay_ms,
        click_delay_ms=settings.click_delay_ms,
        max_links_per_page=settings.max_links_per_page,
        primary_keywords=list(settings.primary_keywords),
        secondary_keywords=list(settings.secondary_keywords),
        confirm_selector=settings.confirm_button_selector,
    )
    return ConfirmationTraversal(PlaywrightBrowserLauncher(headless=settings.browser_headless), config)


def build_sync_engine(settings: Settings, provider: GmailMailboxProvider | None = None) -> MailboxSyncEngine:
    """Assemble provider, dispatcher and store from settings."""
    provider = provider or build_mailbox_provider(settings)
    dispatcher = VerificationDispatcher(
        traversal=build_traversal(settings),
        provider=provider,
        config=DispatchConfig(
            sender_patterns=list(settings.sender_patterns),
            verification_domain=settings.verification_domain,
            link_keywords=list(settings.link_keywords),
            path_markers=list(settings.path_markers),
            actions=list(settings.dispatch_actions),
            forward_recipients=list(settings.forward_recipients),
            max_depth=settings.max_traversal_depth,
        ),
    )

    store = FileCheckpointStore(settings.checkpoint_file) if settings.checkpoint_file else None
    logger.info(
        f"Sync engine: actions={[a.value for a in settings.dispatch_actions]}, "
        f"checkpoint_policy={settings.checkpoint_policy.value}, "
        f"mark_policy={settings.processed_mark_policy.value}, "
        f"checkpoint_file={settings.checkpoint_file or '-'}"
    )
    return MailboxSyncEngine(
        provider,
        dispatcher,
        label_id=settings.inbox_label,
        checkpoint_policy=settings.checkpoint_policy,
        mark_policy=settings.processed_mark_policy,
        store=store,
    )


@lru_cache
def get_sync_engine() -> MailboxSyncEngine:
    """Get the process-wide sync engine."""
    return build_sync_engine(get_settings())
