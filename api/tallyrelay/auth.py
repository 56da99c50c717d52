import logging
import secrets

from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import APIKeyHeader

from tallyrelay.config import Settings, get_settings

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def get_client_ip(request: Request) -> str:
    cf_ip = request.headers.get("CF-Connecting-IP")
    if cf_ip:
        return cf_ip
    xff = request.headers.get("X-Forwarded-For")
    if xff:
        return xff.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def require_admin_key(
    request: Request,
    api_key: str = Security(api_key_header),
    settings: Settings = Depends(get_settings),
) -> None:
    if not settings.admin_api_key:
        raise HTTPException(status_code=403, detail="Admin API is disabled")
    if not api_key:
        raise HTTPException(status_code=401, detail="Missing API key")

    # Constant-time comparison
    if not secrets.compare_digest(api_key.encode("utf-8"), settings.admin_api_key.encode("utf-8")):
        logger.warning("Failed admin auth attempt from %s", get_client_ip(request))
        raise HTTPException(status_code=401, detail="Invalid API key")
