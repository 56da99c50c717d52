"""Base email provider interface."""

from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional


class EmailProvider(ABC):
    """
    Common interface for all email providers.
    Each provider implements send_email() using its own API/protocol and
    raises on delivery failure; nothing here retries.
    """

    @property
    @abstractmethod
    def provider_type(self) -> str:
        ...

    @abstractmethod
    async def send_email(
        self,
        to: list[str],
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        sender_name: Optional[str] = None,
    ) -> None:
        """Send one HTML email (with optional plain-text alternative) to all recipients."""
        ...


def split_reply_to(headers: Optional[dict[str, str]]) -> tuple[Optional[str], dict[str, str]]:
    """
    Separate Reply-To from the other extra headers.

    REST APIs such as Resend and SendGrid take the reply address as its own
    field and reject it inside their custom ``headers`` object.
    """
    reply_to = None
    rest = {}
    for name, value in (headers or {}).items():
        if name.lower() == "reply-to":
            reply_to = value
        else:
            rest[name] = value
    return reply_to, rest


def build_mime_message(
    to: list[str],
    from_addr: str,
    subject: str,
    html_body: str,
    text_body: Optional[str] = None,
    headers: Optional[dict[str, str]] = None,
):
    """MIME message shared by the SMTP and Gmail providers."""
    if text_body:
        msg = MIMEMultipart("alternative")
        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))
    else:
        msg = MIMEText(html_body, "html", "utf-8")

    msg["To"] = ", ".join(to)
    msg["From"] = from_addr
    msg["Subject"] = subject
    for name, value in (headers or {}).items():
        if name.lower() in ("to", "from", "subject", "content-type"):
            continue
        msg[name] = value
    return msg
