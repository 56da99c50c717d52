"""Errors raised by the webhook and admin routes."""

from fastapi import HTTPException


class RelayError(HTTPException):
    """HTTPException with a machine-readable error code for the response envelope."""

    def __init__(self, status_code: int, error: str, message: str):
        super().__init__(status_code=status_code, detail=message)
        self.error = error


def empty_body() -> RelayError:
    return RelayError(400, "empty_body", "Empty body")


def invalid_json() -> RelayError:
    return RelayError(400, "invalid_json", "Invalid JSON")


def invalid_signature() -> RelayError:
    return RelayError(401, "invalid_signature", "Invalid signature")


def missing_signing_secret() -> RelayError:
    return RelayError(500, "missing_signing_secret", "Server missing signing secret")


def no_recipients() -> RelayError:
    return RelayError(500, "no_recipients", "No admin emails configured")


def mail_not_configured() -> RelayError:
    return RelayError(500, "mail_not_configured", "No email provider configured")


def send_failed() -> RelayError:
    return RelayError(500, "send_failed", "Failed to send email")
