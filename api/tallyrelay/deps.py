"""Shared FastAPI dependencies. Tests override these via ``app.dependency_overrides``."""

import logging
from typing import Optional

from fastapi import Depends

from tallyrelay.config import Settings, get_settings
from tallyrelay.logsink import FileLogSink, LogSink, log_sink_from_settings
from tallyrelay.providers.base import EmailProvider
from tallyrelay.providers.resolver import resolve_email_provider

logger = logging.getLogger(__name__)


def get_email_provider(settings: Settings = Depends(get_settings)) -> Optional[EmailProvider]:
    """Configured provider, or None when missing or misconfigured (reported by the caller)."""
    try:
        return resolve_email_provider(settings)
    except ValueError as exc:
        logger.error("Email provider misconfigured: %s", exc)
        return None


def get_log_sink(settings: Settings = Depends(get_settings)) -> LogSink:
    return log_sink_from_settings(settings)


def get_log_files(settings: Settings = Depends(get_settings)) -> FileLogSink:
    """Debug log files regardless of whether debug logging is currently on."""
    return FileLogSink(settings.log_dir)
