"""SMTP email provider (generic, works with any SMTP server)."""

import asyncio
import logging
import smtplib
from functools import partial
from typing import Optional

from tallyrelay.providers.base import EmailProvider, build_mime_message

logger = logging.getLogger(__name__)


class SmtpProvider(EmailProvider):
    """Send email via a standard SMTP server."""

    @property
    def provider_type(self) -> str:
        return "smtp"

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        use_tls: bool,
        from_email: str,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_email = from_email

    @classmethod
    def from_settings(cls, settings) -> "SmtpProvider":
        if not settings.smtp_host or not settings.sender_email:
            raise ValueError("SMTP provider requires SMTP_HOST and SENDER_EMAIL")
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            from_email=settings.sender_email,
        )

    def _send_sync(
        self,
        to: list[str],
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        sender_name: Optional[str] = None,
    ) -> None:
        """Synchronous SMTP send."""
        display_name = sender_name or "TallyRelay"
        msg = build_mime_message(
            to, f"{display_name} <{self.from_email}>", subject, html_body, text_body, headers
        )

        with smtplib.SMTP(self.host, self.port) as server:
            if self.use_tls:
                server.starttls()
            if self.username:
                server.login(self.username, self.password)
            server.send_message(msg)

        logger.info("Email sent via SMTP to=%s subject=%s", ", ".join(to), subject)

    async def send_email(
        self,
        to: list[str],
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        sender_name: Optional[str] = None,
    ) -> None:
        """Send email asynchronously by running sync SMTP in executor."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None,
            partial(self._send_sync, to, subject, html_body, text_body, headers, sender_name),
        )
