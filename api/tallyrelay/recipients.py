"""Recipient list parsing and validation."""

import re
from typing import Optional

_SEPARATORS = re.compile(r"[,;\s]+")
_EMAIL = re.compile(r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)+$")


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL.match(value))


def parse_recipients(raw: Optional[str]) -> list[str]:
    """
    Split a comma / semicolon / whitespace / newline separated list of addresses.

    Invalid entries are dropped and duplicates removed, keeping first-seen order.
    """
    emails: list[str] = []
    for part in _SEPARATORS.split(raw or ""):
        if part and is_valid_email(part) and part not in emails:
            emails.append(part)
    return emails


def effective_recipients(admin_emails: str, site_admin_email: str = "") -> list[str]:
    """Configured recipients, falling back to the site admin address when none are set."""
    if admin_emails and admin_emails.strip():
        return parse_recipients(admin_emails)
    return parse_recipients(site_admin_email)
