"""Resolve the configured email provider."""

import logging
from typing import Optional

from tallyrelay.config import Settings
from tallyrelay.providers.base import EmailProvider
from tallyrelay.providers.gmail import GmailProvider
from tallyrelay.providers.resend import ResendProvider
from tallyrelay.providers.sendgrid import SendGridProvider
from tallyrelay.providers.smtp import SmtpProvider

logger = logging.getLogger(__name__)

VALID_PROVIDER_TYPES = {"gmail", "resend", "sendgrid", "smtp"}


def resolve_email_provider(settings: Settings) -> Optional[EmailProvider]:
    """
    Build the email provider named by ``EMAIL_PROVIDER``.

    Returns None when no provider is configured. Raises ValueError for an
    unknown provider type or missing provider settings.
    """
    provider_type = (settings.email_provider or "").strip().lower()
    if not provider_type:
        return None
    if provider_type not in VALID_PROVIDER_TYPES:
        raise ValueError(
            f"Unknown email provider type: {provider_type}. "
            f"Must be one of: {', '.join(sorted(VALID_PROVIDER_TYPES))}"
        )

    if provider_type == "gmail":
        return GmailProvider.from_settings(settings)
    elif provider_type == "resend":
        return ResendProvider.from_settings(settings)
    elif provider_type == "sendgrid":
        return SendGridProvider.from_settings(settings)
    return SmtpProvider.from_settings(settings)
