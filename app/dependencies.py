"""FastAPI dependencies shared by the routers."""
import logging
from typing import Optional

from fastapi import Header, Request
from fastapi.responses import JSONResponse

from app.auth.admin import verify_admin_password, verify_admin_token
from app.middleware.rate_limit import SubmissionCooldown, get_client_ip
from app.services.errors import DirectoryError, Misconfigured, RateLimited, Unauthorized, ValidationFailed
from app.settings import settings

logger = logging.getLogger("app.auth")


def client_ip(request: Request) -> str:
    """Client identifier from proxy headers ("unknown" if absent)."""
    return get_client_ip(request)


def get_submission_limiter(request: Request) -> SubmissionCooldown:
    """The application's submission cooldown store."""
    return request.app.state.submission_limiter


async def require_moderator(
    request: Request,
    x_admin_password: Optional[str] = Header(None),
    authorization: Optional[str] = Header(None),
) -> None:
    """
    Require the moderator credential.

    Accepts either the shared secret in X-Admin-Password or a token from
    POST /api/admin/session as "Authorization: Bearer <token>".

    Raises:
        Misconfigured (500) if no moderator secret is configured
        Unauthorized (401) if the credential is missing or wrong
    """
    if not settings.admin_secret_configured:
        logger.error("Admin request rejected: no moderator secret configured")
        raise Misconfigured("Admin access is not configured")

    if authorization and authorization.lower().startswith("bearer "):
        if verify_admin_token(authorization[len("bearer "):].strip()):
            return

    if x_admin_password and verify_admin_password(x_admin_password):
        return

    logger.warning(
        f"Unauthorized admin request to {request.url.path}",
        extra={
            'request_id': getattr(request.state, 'request_id', None),
            'extra_fields': {'client_ip': get_client_ip(request)}
        }
    )
    raise Unauthorized()


def error_response(exc: DirectoryError) -> JSONResponse:
    """Render a service error as a JSON response."""
    content = {"success": False, "error": exc.message}
    headers = None

    if isinstance(exc, ValidationFailed):
        content["errors"] = exc.errors
    elif isinstance(exc, RateLimited):
        headers = {"Retry-After": str(exc.retry_after)}

    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def directory_error_handler(request: Request, exc: DirectoryError) -> JSONResponse:
    """Render service errors raised outside a route body, e.g. by require_moderator."""
    return error_response(exc)
