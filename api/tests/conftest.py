"""
TallyRelay test suite shared fixtures.

Run:  pytest -v
"""

from __future__ import annotations

import copy
import json
from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from tallyrelay.config import Settings, get_settings
from tallyrelay.deps import get_email_provider, get_log_files, get_log_sink
from tallyrelay.logsink import FileLogSink, LogSink
from tallyrelay.main import app
from tallyrelay.providers.base import EmailProvider
from tallyrelay.security import compute_tally_signature

SECRET = "test-secret"
ADMIN_KEY = "admin-test-key"


class FakeEmailProvider(EmailProvider):
    """Records sends instead of delivering them."""

    provider_type = "fake"

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[dict[str, Any]] = []

    async def send_email(
        self,
        to: list[str],
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        sender_name: Optional[str] = None,
    ) -> None:
        if self.fail:
            raise RuntimeError("SMTP connection refused")
        self.sent.append(
            {
                "to": list(to),
                "subject": subject,
                "html": html_body,
                "text": text_body,
                "headers": headers,
                "sender_name": sender_name,
            }
        )


class RecordingLogSink(LogSink):
    def __init__(self):
        self.entries: list[tuple[str, str]] = []

    def write(self, channel: str, message: str, client_ip: str = "") -> None:
        self.entries.append((channel, message))


class BrokenLogSink(LogSink):
    def write(self, channel: str, message: str, client_ip: str = "") -> None:
        raise PermissionError("read-only filesystem")


SAMPLE_PAYLOAD = {
    "eventId": "a4cb511e-d513-4fa5-baee-b815d718dfd1",
    "eventType": "FORM_RESPONSE",
    "createdAt": "2024-03-14T10:15:31.000Z",
    "data": {
        "responseId": "2wgx4n",
        "submissionId": "2wgx4n",
        "respondentId": "dwQKYm",
        "formId": "VwbNEw",
        "formName": "Guest Feedback",
        "createdAt": "2024-03-14T10:15:30.000Z",
        "fields": [
            {
                "key": "question_3EKz4n",
                "label": "Your name",
                "type": "INPUT_TEXT",
                "value": "Alice <Admin>",
            },
            {
                "key": "question_w4Q4Xn",
                "label": "Email",
                "type": "INPUT_EMAIL",
                "value": "alice@example.com",
            },
            {
                "key": "question_mRqPbZ",
                "label": "How was your stay?",
                "type": "RATING",
                "value": 5,
            },
            {
                "key": "question_nPk8Ra",
                "label": "Favourite colour",
                "type": "MULTIPLE_CHOICE",
                "value": ["opt2"],
                "options": [
                    {"id": "opt1", "text": "Red"},
                    {"id": "opt2", "text": "Blue"},
                ],
            },
            {
                "key": "question_3jZRDL",
                "label": "Activities",
                "type": "CHECKBOXES",
                "value": ["a1", "a3"],
                "options": [
                    {"id": "a1", "text": "Spa"},
                    {"id": "a2", "text": "Pool"},
                    {"id": "a3", "text": "Dining"},
                ],
            },
            {
                "key": "question_3jZRDL_a1",
                "label": "Activities (Spa)",
                "type": "CHECKBOXES",
                "value": True,
            },
            {
                "key": "question_3jZRDL_a2",
                "label": "Activities (Pool)",
                "type": "CHECKBOXES",
                "value": False,
            },
        ],
    },
}


@pytest.fixture
def sample_payload() -> dict:
    return copy.deepcopy(SAMPLE_PAYLOAD)


@pytest.fixture
def relay_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        tally_signing_secret=SECRET,
        require_signature=True,
        admin_emails="ops@example.com, team@example.com",
        site_admin_email="",
        admin_api_key=ADMIN_KEY,
        email_provider="smtp",
        sender_email="relay@example.com",
        sender_name="Guest Desk",
        debug_logging=False,
        log_dir=str(tmp_path / "logs"),
    )


@pytest.fixture
def provider() -> FakeEmailProvider:
    return FakeEmailProvider()


@pytest.fixture
def log_sink() -> RecordingLogSink:
    return RecordingLogSink()


@pytest.fixture
def client(relay_settings, provider, log_sink):
    app.dependency_overrides[get_settings] = lambda: relay_settings
    app.dependency_overrides[get_email_provider] = lambda: provider
    app.dependency_overrides[get_log_sink] = lambda: log_sink
    app.dependency_overrides[get_log_files] = lambda: FileLogSink(relay_settings.log_dir)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def encode(payload: Any) -> bytes:
    return json.dumps(payload).encode("utf-8")


def signed_headers(body: bytes, secret: str = SECRET) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Tally-Signature": compute_tally_signature(body, secret),
    }
