"""Resend email provider (https://resend.com)."""

import logging
from typing import Optional

import httpx

from tallyrelay.providers.base import EmailProvider, split_reply_to

logger = logging.getLogger(__name__)


class ResendProvider(EmailProvider):
    """Send transactional email via the Resend REST API."""

    API_URL = "https://api.resend.com/emails"

    @property
    def provider_type(self) -> str:
        return "resend"

    def __init__(self, api_key: str, from_email: str):
        self.api_key = api_key
        self.from_email = from_email

    @classmethod
    def from_settings(cls, settings) -> "ResendProvider":
        if not settings.resend_api_key or not settings.sender_email:
            raise ValueError("Resend provider requires RESEND_API_KEY and SENDER_EMAIL")
        return cls(api_key=settings.resend_api_key, from_email=settings.sender_email)

    async def send_email(
        self,
        to: list[str],
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        sender_name: Optional[str] = None,
    ) -> None:
        display_name = sender_name or "TallyRelay"
        body = {
            "from": f"{display_name} <{self.from_email}>",
            "to": list(to),
            "subject": subject,
            "html": html_body,
        }
        if text_body:
            body["text"] = text_body
        reply_to, extra_headers = split_reply_to(headers)
        if reply_to:
            body["reply_to"] = reply_to
        if extra_headers:
            body["headers"] = extra_headers

        async with httpx.AsyncClient(timeout=15) as client:
            resp = await client.post(
                self.API_URL,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=body,
            )

            if resp.status_code >= 400:
                raise RuntimeError(f"Resend send failed: {resp.status_code} {resp.text}")

        logger.info("Email sent via Resend to=%s subject=%s", ", ".join(to), subject)
