"""Pydantic schemas for the admin API."""

from pydantic import BaseModel, Field


class SettingsSummary(BaseModel):
    endpoint: str = Field(..., description="Path Tally should post webhooks to")
    recipients: list[str]
    has_signing_secret: bool = Field(..., description="Whether a signing secret is configured")
    require_signature: bool
    debug_logging: bool
    log_dir: str
    email_provider: str
    subject_prefix: str
    timezone: str


class MessageResponse(BaseModel):
    ok: bool = True
    message: str


class LogsResponse(BaseModel):
    incoming: str = Field("", description="Tail of the incoming payload log")
    outgoing: str = Field("", description="Tail of the outgoing email log")
