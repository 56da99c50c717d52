"""Email provider abstraction layer."""

from tallyrelay.providers.base import EmailProvider
from tallyrelay.providers.gmail import GmailProvider
from tallyrelay.providers.resend import ResendProvider
from tallyrelay.providers.sendgrid import SendGridProvider
from tallyrelay.providers.smtp import SmtpProvider
from tallyrelay.providers.resolver import resolve_email_provider

__all__ = [
    "EmailProvider",
    "GmailProvider",
    "ResendProvider",
    "SendGridProvider",
    "SmtpProvider",
    "resolve_email_provider",
]
