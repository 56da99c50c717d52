"""Request size limit + security headers middleware."""

import logging

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from tallyrelay.response import error_response

logger = logging.getLogger(__name__)


_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to every response."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        for header, value in _SECURITY_HEADERS.items():
            response.headers[header] = value
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests with bodies larger than 2 MB."""

    MAX_BODY_SIZE = 2 * 1024 * 1024

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path == "/health":
            return await call_next(request)

        content_length = request.headers.get("content-length")
        try:
            too_large = bool(content_length) and int(content_length) > self.MAX_BODY_SIZE
        except ValueError:
            too_large = False
        if too_large:
            logger.warning("Rejected %s bytes request to %s", content_length, request.url.path)
            return JSONResponse(
                status_code=413,
                content=error_response(
                    413,
                    f"Request body too large. Max size is {self.MAX_BODY_SIZE // (1024 * 1024)} MB.",
                ),
                headers=_SECURITY_HEADERS,
            )

        return await call_next(request)
