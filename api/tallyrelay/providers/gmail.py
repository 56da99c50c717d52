"""Gmail email provider using OAuth2 credentials."""

import asyncio
import base64
import logging
from functools import partial
from pathlib import Path
from typing import Optional

from tallyrelay.providers.base import EmailProvider, build_mime_message

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/gmail.send"]


class GmailProvider(EmailProvider):
    """
    Gmail provider that uses Google API client with file-based OAuth2 tokens.
    Run scripts/gmail_auth.py once to create the token file.
    """

    @property
    def provider_type(self) -> str:
        return "gmail"

    def __init__(
        self,
        credentials_path: str,
        token_path: str,
        sender_email: str,
    ):
        self.credentials_path = credentials_path
        self.token_path = token_path
        self.sender_email = sender_email

    @classmethod
    def from_settings(cls, settings) -> "GmailProvider":
        if not settings.sender_email:
            raise ValueError("Gmail provider requires SENDER_EMAIL")
        token_path = Path(settings.gmail_token_path)
        if not token_path.exists():
            logger.warning("Gmail token not found at %s", token_path)
        return cls(
            credentials_path=settings.gmail_credentials_path,
            token_path=settings.gmail_token_path,
            sender_email=settings.sender_email,
        )

    def _get_credentials(self):
        """Get and refresh Google OAuth2 credentials (synchronous)."""
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials

        token_path = Path(self.token_path)

        if not token_path.exists():
            raise RuntimeError(
                f"Gmail token not found at {token_path}. "
                "Run 'python scripts/gmail_auth.py' to authorize."
            )

        creds = Credentials.from_authorized_user_file(str(token_path), SCOPES)

        if creds.expired and creds.refresh_token:
            logger.info("Refreshing expired Gmail token")
            creds.refresh(Request())
            token_path.write_text(creds.to_json())

        if not creds.valid:
            raise RuntimeError("Gmail credentials are invalid. Re-run gmail_auth.py.")

        return creds

    def _send_sync(
        self,
        to: list[str],
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        sender_name: Optional[str] = None,
    ) -> None:
        """Synchronous send via Google API client."""
        from googleapiclient.discovery import build

        creds = self._get_credentials()
        service = build("gmail", "v1", credentials=creds, cache_discovery=False)

        display_name = sender_name or "TallyRelay"
        msg = build_mime_message(
            to, f"{display_name} <{self.sender_email}>", subject, html_body, text_body, headers
        )

        raw = base64.urlsafe_b64encode(msg.as_bytes()).decode()
        result = (
            service.users()
            .messages()
            .send(userId="me", body={"raw": raw})
            .execute()
        )
        logger.info("Email sent: id=%s to=%s subject=%s", result.get("id"), ", ".join(to), subject)

    async def send_email(
        self,
        to: list[str],
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        sender_name: Optional[str] = None,
    ) -> None:
        """Send email asynchronously by running sync Gmail API in executor."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None,
            partial(self._send_sync, to, subject, html_body, text_body, headers, sender_name),
        )
