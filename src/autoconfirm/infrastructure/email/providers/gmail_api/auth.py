from __future__ import annotations
from dataclasses import dataclass

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


@dataclass(frozen=True)
class GmailOAuthCredentials:
    """
    OAuth client + long-lived refresh token for a single Gmail mailbox.
    """
    client_id: str
    client_secret: str
    refresh_token: str
    token_uri: str = GOOGLE_TOKEN_URI


class GmailServiceFactory:
    """
    Responsible ONLY for building an authorized Gmail API service.
    Access tokens are minted from the refresh token on first use and
    refreshed by google-auth when they expire.
    """

    def __init__(self, creds: GmailOAuthCredentials) -> None:
        if not creds.refresh_token:
            raise ValueError("Gmail refresh token is required")
        self.creds = creds

    def credentials(self) -> Credentials:
        return Credentials(
            token=None,
            refresh_token=self.creds.refresh_token,
            token_uri=self.creds.token_uri,
            client_id=self.creds.client_id,
            client_secret=self.creds.client_secret,
        )

    def build(self):
        return build("gmail", "v1", credentials=self.credentials(), cache_discovery=False)
