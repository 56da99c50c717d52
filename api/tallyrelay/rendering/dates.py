"""Display formatting for submission timestamps."""

import logging
from datetime import datetime, timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=32)
def resolve_timezone(name: str) -> tzinfo:
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, falling back to UTC", name)
        return timezone.utc


def format_submitted_at(
    iso: str,
    tz_name: str = "UTC",
    date_format: str = "%B %d, %Y",
    time_format: str = "%I:%M %p",
) -> str:
    """
    Convert an ISO-8601 timestamp (UTC when no offset is given) to local display text.

    Returns an empty string for empty input and the input unchanged when it
    cannot be parsed or formatted.
    """
    if not iso:
        return ""

    try:
        value = iso.strip()
        if value.endswith(("Z", "z")):
            value = value[:-1] + "+00:00"
        dt = datetime.fromisoformat(value)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        local = dt.astimezone(resolve_timezone(tz_name))
        return local.strftime(f"{date_format} {time_format}".strip())
    except (ValueError, OverflowError):
        return iso
