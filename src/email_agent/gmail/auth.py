"""OAuth2 credentials for Gmail API access."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import urlparse

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from email_agent.exceptions import GmailAuthError

logger = logging.getLogger(__name__)

SCOPES = [
    'https://www.googleapis.com/auth/gmail.readonly',
    'https://www.googleapis.com/auth/gmail.send',
    'https://www.googleapis.com/auth/gmail.modify',
]


class GmailAuth:
    """Loads, refreshes and (interactively) creates the agent's Gmail token.

    Args:
        client_id: OAuth client id from Google Cloud Console.
        client_secret: OAuth client secret.
        token_path: Where the authorized-user JSON is persisted.
        redirect_uri: Loopback redirect registered for the client; its port
            is used for the local authorization server.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        token_path: Path,
        redirect_uri: str = 'http://localhost:3000/callback',
        scopes: list[str] | None = None,
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self.token_path = Path(token_path)
        self.redirect_uri = redirect_uri
        self.scopes = scopes or list(SCOPES)

    def _client_config(self) -> dict:
        return {
            "installed": {
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": "https://oauth2.googleapis.com/token",
                "redirect_uris": [self.redirect_uri],
            }
        }

    def authorize(self) -> Credentials:
        """Run the interactive OAuth2 flow. Opens a browser."""
        if not self._client_id or not self._client_secret:
            raise GmailAuthError(
                "GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET are required to authorize."
            )

        flow = InstalledAppFlow.from_client_config(self._client_config(), self.scopes)
        port = urlparse(self.redirect_uri).port or 0
        creds = flow.run_local_server(port=port, access_type='offline', prompt='consent')

        self._save(creds)
        logger.info(f"Saved Gmail token to {self.token_path}")
        return creds

    def get_credentials(self) -> Credentials:
        """Load and auto-refresh the stored token.

        Raises:
            GmailAuthError: if no token exists, or it cannot be refreshed.
        """
        if not self.token_path.exists():
            raise GmailAuthError(
                f"No Gmail token found at {self.token_path}. "
                "Run 'email-agent setup-oauth' first."
            )

        try:
            creds = Credentials.from_authorized_user_file(
                str(self.token_path), self.scopes,
            )
        except (ValueError, OSError) as e:
            raise GmailAuthError(f"Gmail token at {self.token_path} is malformed: {e}") from e

        if creds.expired and creds.refresh_token:
            try:
                creds.refresh(Request())
            except RefreshError as e:
                raise GmailAuthError(f"Failed to refresh Gmail token: {e}") from e
            self._save(creds)
            logger.debug("Refreshed Gmail access token")

        if not creds.valid:
            raise GmailAuthError(
                "Gmail token is invalid. Run 'email-agent setup-oauth' again."
            )

        return creds

    def has_token(self) -> bool:
        return self.token_path.exists()

    def _save(self, creds: Credentials) -> None:
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        self.token_path.write_text(creds.to_json())
