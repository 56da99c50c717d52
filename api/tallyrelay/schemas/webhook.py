from typing import Optional

from pydantic import BaseModel, Field


class WebhookAck(BaseModel):
    ok: bool = True
    ignored: Optional[bool] = Field(None, description="Set when the event type is not a form response")
    eventType: Optional[str] = Field(None, description="The ignored event type")


class ErrorBody(BaseModel):
    ok: bool = False
    error: str = Field(..., description="Machine-readable error code")
    message: str
