"""
Debug log sinks for raw webhook payloads and outgoing email summaries.

These logs may contain personal data, so they are only written when
``debug_logging`` is enabled. Writes are best-effort: a failing sink logs a
warning and never interrupts the webhook.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

INCOMING = "incoming"
OUTGOING = "outgoing"
CHANNELS = (INCOMING, OUTGOING)

TAIL_BYTES = 60000


class LogSink(ABC):
    """Append-only log keyed by channel name ("incoming" / "outgoing")."""

    @abstractmethod
    def write(self, channel: str, message: str, client_ip: str = "") -> None:
        ...

    def tail(self, channel: str, max_bytes: int = TAIL_BYTES) -> str:
        return ""

    def clear(self) -> None:
        return None


class NullLogSink(LogSink):
    """Discards everything. Used when debug logging is off."""

    def write(self, channel: str, message: str, client_ip: str = "") -> None:
        return None


class FileLogSink(LogSink):
    """Writes ``incoming.log`` / ``outgoing.log`` under a directory."""

    def __init__(self, directory: str):
        self.directory = Path(directory)

    def path_for(self, channel: str) -> Path:
        name = OUTGOING if channel == OUTGOING else INCOMING
        return self.directory / f"{name}.log"

    def write(self, channel: str, message: str, client_ip: str = "") -> None:
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S+00:00")
        entry = f"---- {stamp} UTC | IP: {client_ip} ----\n{message}\n\n"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with self.path_for(channel).open("a", encoding="utf-8") as fh:
                fh.write(entry)
        except OSError as exc:
            logger.warning("Could not write %s log in %s: %s", channel, self.directory, exc)

    def tail(self, channel: str, max_bytes: int = TAIL_BYTES) -> str:
        path = self.path_for(channel)
        try:
            size = path.stat().st_size
            if size <= 0:
                return ""
            with path.open("rb") as fh:
                fh.seek(max(0, size - max_bytes))
                return fh.read().decode("utf-8", errors="replace")
        except FileNotFoundError:
            return ""
        except OSError as exc:
            logger.warning("Could not read %s log: %s", channel, exc)
            return ""

    def clear(self) -> None:
        for channel in CHANNELS:
            path = self.path_for(channel)
            if path.exists():
                path.write_text("", encoding="utf-8")


def log_sink_from_settings(settings) -> LogSink:
    if settings.debug_logging:
        return FileLogSink(settings.log_dir)
    return NullLogSink()
