"""Application settings using Pydantic Settings for configuration management."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from autoconfirm.domain.models import CheckpointPolicy, DispatchAction, MarkPolicy


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    List values are given as JSON in the environment, e.g.
    ``FORWARD_RECIPIENTS='["a@example.com", "b@example.com"]'``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Household Autoconfirm"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 3000

    # Gmail OAuth (refresh-token flow)
    gmail_client_id: str = ""
    gmail_client_secret: SecretStr = Field(default=SecretStr(""))
    gmail_refresh_token: SecretStr = Field(default=SecretStr(""))
    gmail_token_uri: str = "https://oauth2.googleapis.com/token"
    gmail_user_id: str = "me"

    # Gmail push subscription
    gcp_project_id: str = ""
    gmail_topic_name: str = "gmail-notifications"
    gmail_watch_labels: list[str] = Field(default_factory=lambda: ["INBOX"])

    # Sync engine
    inbox_label: str = "INBOX"
    checkpoint_file: str | None = None
    checkpoint_policy: CheckpointPolicy = CheckpointPolicy.ADVANCE_ALWAYS
    processed_mark_policy: MarkPolicy = MarkPolicy.BEFORE_DISPATCH

    # Dispatch
    sender_patterns: list[str] = Field(default_factory=lambda: ["netflix.com"])
    verification_domain: str = "netflix.com"
    link_keywords: list[str] = Field(default_factory=lambda: ["yes", "confirm", "continue"])
    path_markers: list[str] = Field(
        default_factory=lambda: ["update-primary-location", "set-primary-location", "account/travel/verify"]
    )
    dispatch_actions: list[DispatchAction] = Field(default_factory=lambda: [DispatchAction.AUTO_CONFIRM])
    forward_recipients: list[str] = Field(default_factory=list)

    # Browser automation
    browser_headless: bool = True
    navigation_timeout_ms: int = 30_000
    settle_delay_ms: int = 3_000
    click_delay_ms: int = 2_000
    max_traversal_depth: int = Field(default=2, ge=1, le=4)
    max_links_per_page: int = Field(default=2, ge=0)
    primary_keywords: list[str] = Field(default_factory=lambda: ["yes", "this was me", "continue"])
    secondary_keywords: list[str] = Field(default_factory=lambda: ["confirm update", "confirm", "continue"])
    confirm_button_selector: str | None = '[data-uia="set-primary-location-action"]'

    @computed_field
    @property
    def gmail_topic_path(self) -> str:
        """Fully qualified Pub/Sub topic for users.watch."""
        return f"projects/{self.gcp_project_id}/topics/{self.gmail_topic_name}"

    def require_topic_path(self) -> str:
        """Topic path for users.watch; raises when the GCP project is not configured."""
        if not self.gcp_project_id:
            raise ValueError("GCP_PROJECT_ID is required to start a Gmail watch")
        return self.gmail_topic_path

    @model_validator(mode="after")
    def _check_sync_policies(self) -> "Settings":
        if (
            self.checkpoint_policy == CheckpointPolicy.HOLD_ON_FAILURE
            and self.processed_mark_policy != MarkPolicy.AFTER_DISPATCH
        ):
            raise ValueError("CHECKPOINT_POLICY=hold_on_failure requires PROCESSED_MARK_POLICY=after_dispatch")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
