"""Tests for the email providers and provider resolution."""

import asyncio
import json
from email import message_from_string

import httpx
import pytest

from tallyrelay.config import Settings
from tallyrelay.providers import (
    GmailProvider,
    ResendProvider,
    SendGridProvider,
    SmtpProvider,
    resolve_email_provider,
)
from tallyrelay.providers import smtp as smtp_module
from tallyrelay.providers.base import build_mime_message, split_reply_to


def make_settings(**overrides) -> Settings:
    values = {
        "sender_email": "relay@example.com",
        "resend_api_key": "re_test",
        "sendgrid_api_key": "SG.test",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestResolver:
    def test_no_provider(self):
        assert resolve_email_provider(make_settings(email_provider="")) is None

    @pytest.mark.parametrize(
        "name, cls",
        [
            ("smtp", SmtpProvider),
            ("resend", ResendProvider),
            ("sendgrid", SendGridProvider),
            ("gmail", GmailProvider),
            (" Resend ", ResendProvider),
        ],
    )
    def test_known_providers(self, name, cls, tmp_path):
        settings = make_settings(email_provider=name, gmail_token_path=str(tmp_path / "token.json"))
        assert isinstance(resolve_email_provider(settings), cls)

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown email provider"):
            resolve_email_provider(make_settings(email_provider="pigeon"))

    def test_missing_api_key(self):
        with pytest.raises(ValueError, match="RESEND_API_KEY"):
            resolve_email_provider(make_settings(email_provider="resend", resend_api_key=""))

    def test_missing_sender(self):
        with pytest.raises(ValueError, match="SENDER_EMAIL"):
            resolve_email_provider(make_settings(email_provider="smtp", sender_email=""))


class TestMimeMessage:
    def test_alternative_with_text(self):
        msg = build_mime_message(
            ["a@example.com", "b@example.com"],
            "Relay <relay@example.com>",
            "Subject line",
            "<p>Hi</p>",
            "Hi",
            {"Reply-To": "owner@example.com", "Subject": "ignored"},
        )
        parsed = message_from_string(msg.as_string())

        assert parsed.get_content_type() == "multipart/alternative"
        assert parsed["To"] == "a@example.com, b@example.com"
        assert parsed["Reply-To"] == "owner@example.com"
        assert parsed.get_all("Subject") == ["Subject line"]
        assert [p.get_content_type() for p in parsed.get_payload()] == ["text/plain", "text/html"]

    def test_html_only(self):
        msg = build_mime_message(["a@example.com"], "relay@example.com", "S", "<p>Hi</p>")
        assert msg.get_content_type() == "text/html"


@pytest.fixture
def captured(monkeypatch):
    """Route every httpx.AsyncClient through a mock transport and record requests."""
    requests = []
    status = {"code": 202}

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status["code"], text="upstream says no" if status["code"] >= 400 else "")

    real_client = httpx.AsyncClient

    def client_factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", client_factory)
    return requests, status


class TestResend:
    def test_payload(self, captured):
        requests, _ = captured
        provider = ResendProvider(api_key="re_test", from_email="relay@example.com")

        asyncio.run(
            provider.send_email(
                ["ops@example.com"],
                "New submission",
                "<p>x</p>",
                text_body="x",
                headers={"Reply-To": "owner@example.com"},
                sender_name="Guest Desk",
            )
        )

        (request,) = requests
        assert str(request.url) == ResendProvider.API_URL
        assert request.headers["Authorization"] == "Bearer re_test"
        body = json.loads(request.content)
        assert body == {
            "from": "Guest Desk <relay@example.com>",
            "to": ["ops@example.com"],
            "subject": "New submission",
            "html": "<p>x</p>",
            "text": "x",
            "reply_to": "owner@example.com",
        }

    def test_other_headers_kept_beside_reply_to(self, captured):
        requests, _ = captured
        provider = ResendProvider(api_key="re_test", from_email="relay@example.com")

        asyncio.run(
            provider.send_email(
                ["ops@example.com"],
                "S",
                "<p>x</p>",
                headers={"reply-to": "owner@example.com", "X-Entity-Ref-ID": "2wgx4n"},
            )
        )

        body = json.loads(requests[0].content)
        assert body["reply_to"] == "owner@example.com"
        assert body["headers"] == {"X-Entity-Ref-ID": "2wgx4n"}

    def test_error_status_raises(self, captured):
        _, status = captured
        status["code"] = 422
        provider = ResendProvider(api_key="re_test", from_email="relay@example.com")

        with pytest.raises(RuntimeError, match="422"):
            asyncio.run(provider.send_email(["ops@example.com"], "S", "<p>x</p>"))


class TestSendGrid:
    def test_payload(self, captured):
        requests, _ = captured
        provider = SendGridProvider(api_key="SG.test", from_email="relay@example.com")

        asyncio.run(
            provider.send_email(
                ["ops@example.com", "team@example.com"], "S", "<p>x</p>", text_body="x"
            )
        )

        body = json.loads(requests[0].content)
        assert body["personalizations"] == [
            {"to": [{"email": "ops@example.com"}, {"email": "team@example.com"}]}
        ]
        assert body["from"] == {"email": "relay@example.com", "name": "TallyRelay"}
        assert [c["type"] for c in body["content"]] == ["text/plain", "text/html"]
        assert "headers" not in body
        assert "reply_to" not in body

    def test_reply_to_uses_dedicated_field(self, captured):
        requests, _ = captured
        provider = SendGridProvider(api_key="SG.test", from_email="relay@example.com")

        asyncio.run(
            provider.send_email(
                ["ops@example.com"],
                "S",
                "<p>x</p>",
                headers={"Reply-To": "owner@example.com"},
            )
        )

        body = json.loads(requests[0].content)
        assert body["reply_to"] == {"email": "owner@example.com"}
        assert "headers" not in body

    def test_custom_headers_without_reserved_names(self, captured):
        requests, _ = captured
        provider = SendGridProvider(api_key="SG.test", from_email="relay@example.com")

        asyncio.run(
            provider.send_email(
                ["ops@example.com"],
                "S",
                "<p>x</p>",
                headers={"Reply-To": "owner@example.com", "X-Entity-Ref-ID": "2wgx4n"},
            )
        )

        body = json.loads(requests[0].content)
        assert body["headers"] == {"X-Entity-Ref-ID": "2wgx4n"}
        assert "Reply-To" not in body["headers"]

    def test_error_status_raises(self, captured):
        _, status = captured
        status["code"] = 401
        provider = SendGridProvider(api_key="bad", from_email="relay@example.com")

        with pytest.raises(RuntimeError, match="SendGrid send failed: 401"):
            asyncio.run(provider.send_email(["ops@example.com"], "S", "<p>x</p>"))


class FakeSMTP:
    instances = []

    def __init__(self, host, port):
        self.host = host
        self.port = port
        self.calls = []
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, username, password):
        self.calls.append(("login", username, password))

    def send_message(self, msg):
        self.messages.append(msg)


class TestSmtp:
    def test_sends_one_message_to_all_recipients(self, monkeypatch):
        FakeSMTP.instances = []
        monkeypatch.setattr(smtp_module.smtplib, "SMTP", FakeSMTP)
        provider = SmtpProvider(
            host="mail.example.com",
            port=587,
            username="relay",
            password="pw",
            use_tls=True,
            from_email="relay@example.com",
        )

        asyncio.run(
            provider.send_email(["ops@example.com", "team@example.com"], "S", "<p>x</p>", text_body="x")
        )

        (server,) = FakeSMTP.instances
        assert (server.host, server.port) == ("mail.example.com", 587)
        assert server.calls == ["starttls", ("login", "relay", "pw")]
        (msg,) = server.messages
        assert msg["To"] == "ops@example.com, team@example.com"
        assert msg["From"] == "TallyRelay <relay@example.com>"

    def test_no_login_without_username(self, monkeypatch):
        FakeSMTP.instances = []
        monkeypatch.setattr(smtp_module.smtplib, "SMTP", FakeSMTP)
        provider = SmtpProvider("localhost", 25, "", "", False, "relay@example.com")

        asyncio.run(provider.send_email(["ops@example.com"], "S", "<p>x</p>"))

        assert FakeSMTP.instances[0].calls == []


def test_split_reply_to():
    assert split_reply_to(None) == (None, {})
    assert split_reply_to({"REPLY-TO": "a@example.com", "X-Tag": "t"}) == ("a@example.com", {"X-Tag": "t"})
