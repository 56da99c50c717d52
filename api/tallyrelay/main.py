import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from tallyrelay import __version__
from tallyrelay.config import Settings, get_settings, settings
from tallyrelay.errors import RelayError
from tallyrelay.middleware import RequestSizeLimitMiddleware, SecurityHeadersMiddleware
from tallyrelay.recipients import effective_recipients
from tallyrelay.response import error_response
from tallyrelay.routers import admin, webhooks

API_VERSION = __version__

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Receive Tally form webhooks and forward them as email notifications.",
    version=API_VERSION,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)


# --- Exception Handlers ---


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    error = exc.error if isinstance(exc, RelayError) else ""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.status_code, str(exc.detail), error),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        clean = {k: v for k, v in err.items() if k != "ctx"}
        if "msg" in clean:
            clean["msg"] = str(clean["msg"])
        errors.append(clean)
    return JSONResponse(
        status_code=422,
        content=error_response(422, "Validation error", details=errors),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_response(500, "Internal server error"),
    )


# --- Routes ---

api_v1 = APIRouter(prefix="/v1")
api_v1.include_router(admin.router)
app.include_router(api_v1)

# Public webhook receiver
app.include_router(webhooks.router)


@app.get("/", summary="API root")
async def root(settings: Settings = Depends(get_settings)):
    return {"name": settings.app_name, "status": "ok", "version": API_VERSION}


@app.get("/health", summary="Health check")
async def health_ping(settings: Settings = Depends(get_settings)):
    status = "healthy"
    checks = {}

    if settings.require_signature and not settings.tally_signing_secret:
        checks["signing_secret"] = "missing"
        status = "degraded"
    else:
        checks["signing_secret"] = "ok"

    if effective_recipients(settings.admin_emails, settings.site_admin_email):
        checks["recipients"] = "ok"
    else:
        checks["recipients"] = "missing"
        status = "degraded"

    checks["email_provider"] = settings.email_provider or "missing"
    if not settings.email_provider:
        status = "degraded"

    return {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": API_VERSION,
        "checks": checks,
    }
