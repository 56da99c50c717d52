import json
import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, Request

from tallyrelay import errors
from tallyrelay.auth import get_client_ip
from tallyrelay.config import Settings, get_settings
from tallyrelay.deps import get_email_provider, get_log_sink
from tallyrelay.logsink import INCOMING, OUTGOING, LogSink
from tallyrelay.providers.base import EmailProvider
from tallyrelay.recipients import effective_recipients
from tallyrelay.rendering import DocumentOptions, RenderedDocument
from tallyrelay.rendering.document import build_document
from tallyrelay.response import ok_response
from tallyrelay.schemas.webhook import ErrorBody, WebhookAck
from tallyrelay.security import SIGNATURE_HEADER, verify_tally_signature

wh_logger = logging.getLogger("webhooks")

WEBHOOK_PATH = "/tally/v1/webhook"
FORM_RESPONSE_EVENT = "FORM_RESPONSE"
PREVIEW_CHARS = 2000

_TAGS = re.compile(r"<[^>]+>")
_BLANK_RUNS = re.compile(r"\n\s*\n+")

router = APIRouter(tags=["webhooks"])


def outgoing_summary(recipients: list[str], document: RenderedDocument) -> str:
    """Short, size-capped description of the email for the outgoing debug log."""
    html_text = _BLANK_RUNS.sub("\n", _TAGS.sub("", document.html)).strip()
    summary = {
        "to": recipients,
        "subject": document.subject,
        "html_preview": html_text[:PREVIEW_CHARS],
        "text_preview": document.text[:PREVIEW_CHARS],
    }
    return "EMAIL SUMMARY:\n" + json.dumps(summary, indent=4, ensure_ascii=False)


def write_debug_log(log_sink: LogSink, channel: str, message: str, client_ip: str) -> None:
    try:
        log_sink.write(channel, message, client_ip)
    except Exception:
        wh_logger.warning("Debug log write to %s failed", channel, exc_info=True)


def mail_headers(settings: Settings) -> dict[str, str]:
    headers = {}
    if settings.site_admin_email:
        headers["Reply-To"] = settings.site_admin_email
    return headers


def check_signature(raw: bytes, signature: Optional[str], settings: Settings, client_ip: str) -> None:
    if not settings.require_signature:
        return
    if not settings.tally_signing_secret:
        wh_logger.error("Signature required but TALLY_SIGNING_SECRET is not set")
        raise errors.missing_signing_secret()
    if not verify_tally_signature(raw, settings.tally_signing_secret, signature):
        wh_logger.warning("Rejected Tally webhook with bad signature from %s", client_ip)
        raise errors.invalid_signature()


@router.post(
    WEBHOOK_PATH,
    response_model=WebhookAck,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorBody},
        401: {"model": ErrorBody},
        500: {"model": ErrorBody},
    },
    summary="Receive a Tally form webhook",
)
async def receive_tally_webhook(
    request: Request,
    settings: Settings = Depends(get_settings),
    log_sink: LogSink = Depends(get_log_sink),
    email_provider: Optional[EmailProvider] = Depends(get_email_provider),
):
    raw = await request.body()
    client_ip = get_client_ip(request)

    write_debug_log(log_sink, INCOMING, "RAW BODY:\n" + raw.decode("utf-8", errors="replace"), client_ip)
    wh_logger.info("Tally webhook received: %d bytes from %s", len(raw), client_ip)

    if not raw:
        raise errors.empty_body()

    check_signature(raw, request.headers.get(SIGNATURE_HEADER), settings, client_ip)

    try:
        payload = json.loads(raw)
    except (ValueError, RecursionError):
        raise errors.invalid_json()
    if not isinstance(payload, dict):
        raise errors.invalid_json()

    event_type = payload.get("eventType")
    event_type = "" if event_type is None else str(event_type)
    if event_type and event_type != FORM_RESPONSE_EVENT:
        wh_logger.info("Ignoring Tally event %s", event_type)
        return ok_response(ignored=True, eventType=event_type)

    document = build_document(payload, DocumentOptions.from_settings(settings))
    recipients = effective_recipients(settings.admin_emails, settings.site_admin_email)

    write_debug_log(log_sink, OUTGOING, outgoing_summary(recipients, document), client_ip)

    if not recipients:
        wh_logger.error("No recipients configured, dropping submission email")
        raise errors.no_recipients()
    if email_provider is None:
        wh_logger.error("No email provider configured, dropping submission email")
        raise errors.mail_not_configured()

    try:
        await email_provider.send_email(
            recipients,
            document.subject,
            document.html,
            text_body=document.text,
            headers=mail_headers(settings),
            sender_name=settings.sender_name or settings.app_name,
        )
    except Exception:
        wh_logger.error(
            "Email notification failed via %s", email_provider.provider_type, exc_info=True
        )
        raise errors.send_failed()

    wh_logger.info(
        "Submission email sent via %s to %d recipient(s)",
        email_provider.provider_type,
        len(recipients),
    )
    return ok_response()
