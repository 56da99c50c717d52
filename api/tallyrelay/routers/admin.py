"""Operator tools: configuration summary, test email and debug log access."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from tallyrelay.auth import require_admin_key
from tallyrelay.config import Settings, get_settings
from tallyrelay.deps import get_email_provider, get_log_files
from tallyrelay.logsink import INCOMING, OUTGOING, FileLogSink
from tallyrelay.providers.base import EmailProvider
from tallyrelay.recipients import effective_recipients
from tallyrelay.routers.webhooks import WEBHOOK_PATH
from tallyrelay.schemas.admin import LogsResponse, MessageResponse, SettingsSummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin_key)])

TEST_SUBJECT = "[Tally Webhook] Test email"
TEST_HTML = (
    "<p>This is a test email from <strong>TallyRelay</strong>.</p>"
    "<p>If you received this, outgoing mail is working.</p>"
)
TEST_TEXT = "This is a test email from TallyRelay.\nIf you received this, outgoing mail is working.\n"


@router.get("/settings", response_model=SettingsSummary, summary="Show the relay configuration")
async def show_settings(settings: Settings = Depends(get_settings)):
    return SettingsSummary(
        endpoint=WEBHOOK_PATH,
        recipients=effective_recipients(settings.admin_emails, settings.site_admin_email),
        has_signing_secret=bool(settings.tally_signing_secret),
        require_signature=settings.require_signature,
        debug_logging=settings.debug_logging,
        log_dir=settings.log_dir,
        email_provider=settings.email_provider,
        subject_prefix=settings.subject_prefix,
        timezone=settings.timezone,
    )


@router.post("/test-email", response_model=MessageResponse, summary="Send a test email")
async def send_test_email(
    settings: Settings = Depends(get_settings),
    email_provider: Optional[EmailProvider] = Depends(get_email_provider),
):
    recipients = effective_recipients(settings.admin_emails, settings.site_admin_email)
    if not recipients:
        raise HTTPException(status_code=400, detail="No admin emails configured")
    if email_provider is None:
        raise HTTPException(status_code=500, detail="No email provider configured")

    try:
        await email_provider.send_email(
            recipients,
            TEST_SUBJECT,
            TEST_HTML,
            text_body=TEST_TEXT,
            sender_name=settings.sender_name or settings.app_name,
        )
    except Exception:
        logger.error("Test email failed via %s", email_provider.provider_type, exc_info=True)
        raise HTTPException(
            status_code=500, detail="Sending failed. Check the email provider settings."
        )

    return MessageResponse(message="Test email sent to: " + ", ".join(recipients))


@router.get("/logs", response_model=LogsResponse, summary="Tail the debug logs")
async def tail_logs(log_files: FileLogSink = Depends(get_log_files)):
    return LogsResponse(incoming=log_files.tail(INCOMING), outgoing=log_files.tail(OUTGOING))


@router.delete("/logs", response_model=MessageResponse, summary="Clear the debug logs")
async def clear_logs(log_files: FileLogSink = Depends(get_log_files)):
    try:
        log_files.clear()
    except OSError as exc:
        logger.error("Could not clear debug logs: %s", exc)
        raise HTTPException(status_code=500, detail="Could not clear logs")
    return MessageResponse(message="Logs cleared")
