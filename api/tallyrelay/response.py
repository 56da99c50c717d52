"""Standard response envelope for the TallyRelay API."""

from typing import Any

_DEFAULT_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    413: "payload_too_large",
    422: "validation_error",
    500: "internal_error",
}


def ok_response(**extra: Any) -> dict:
    return {"ok": True, **extra}


def error_response(status_code: int, message: str, error: str = "", **extra: Any) -> dict:
    code = error or _DEFAULT_CODES.get(status_code, "error")
    return {"ok": False, "error": code, "message": message, **extra}
