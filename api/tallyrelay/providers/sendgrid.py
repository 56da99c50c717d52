"""SendGrid email provider (https://sendgrid.com)."""

import logging
from typing import Optional

import httpx

from tallyrelay.providers.base import EmailProvider, split_reply_to

logger = logging.getLogger(__name__)


class SendGridProvider(EmailProvider):
    """Send transactional email via the SendGrid v3 Mail Send API."""

    API_URL = "https://api.sendgrid.com/v3/mail/send"

    @property
    def provider_type(self) -> str:
        return "sendgrid"

    def __init__(self, api_key: str, from_email: str):
        self.api_key = api_key
        self.from_email = from_email

    @classmethod
    def from_settings(cls, settings) -> "SendGridProvider":
        if not settings.sendgrid_api_key or not settings.sender_email:
            raise ValueError("SendGrid provider requires SENDGRID_API_KEY and SENDER_EMAIL")
        return cls(api_key=settings.sendgrid_api_key, from_email=settings.sender_email)

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

        # text/plain must come before text/html
        content = []
        if text_body:
            content.append({"type": "text/plain", "value": text_body})
        content.append({"type": "text/html", "value": html_body})

        body = {
            "personalizations": [{"to": [{"email": addr} for addr in to]}],
            "from": {"email": self.from_email, "name": display_name},
            "subject": subject,
            "content": content,
        }
        # To/From/Subject/Reply-To are reserved in SendGrid's "headers" object
        reply_to, extra_headers = split_reply_to(headers)
        if reply_to:
            body["reply_to"] = {"email": reply_to}
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

            # SendGrid returns 202 on success
            if resp.status_code >= 400:
                raise RuntimeError(f"SendGrid send failed: {resp.status_code} {resp.text}")

        logger.info("Email sent via SendGrid to=%s subject=%s", ", ".join(to), subject)
