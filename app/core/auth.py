"""Admin authentication for back office maintenance endpoints (X-Admin-Key header)."""
import logging
import secrets
from typing import Optional

from fastapi import HTTPException, Request, Security
from fastapi.security import APIKeyHeader

from app.core.config import settings

logger = logging.getLogger(__name__)

_admin_key_header = APIKeyHeader(name="X-Admin-Key", auto_error=False)


async def require_admin_key(
    request: Request,
    api_key: Optional[str] = Security(_admin_key_header),
) -> str:
    """
    Dependency guarding the legacy import endpoints.

    With ADMIN_API_KEY unset the endpoints stay open (local development);
    otherwise a missing key is 401 and a wrong one 403.
    """
    configured_key = settings.admin_api_key
    if not configured_key:
        logger.warning("ADMIN_API_KEY not set: admin endpoints are unprotected")
        return "dev-mode"

    if not api_key:
        raise HTTPException(
            status_code=401,
            detail="Missing X-Admin-Key header",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if not secrets.compare_digest(api_key.encode(), configured_key.encode()):
        client = request.client.host if request.client else "unknown"
        logger.warning("Rejected admin key from %s on %s", client, request.url.path)
        raise HTTPException(status_code=403, detail="Invalid admin API key")

    return api_key
