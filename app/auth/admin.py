"""Moderator credential checks and short-lived session tokens."""
import hashlib
import hmac
import logging
import time
from typing import Optional

from app.auth.password import verify_password
from app.services.errors import Misconfigured
from app.settings import settings

logger = logging.getLogger("app.auth")


def verify_admin_password(candidate: Optional[str]) -> bool:
    """
    Check a candidate against the configured moderator secret.

    Uses Argon2 verification when ADMIN_PASSWORD_HASH is set, otherwise a
    constant-time comparison with ADMIN_PASSWORD.

    Raises:
        Misconfigured: no moderator secret is configured
    """
    if settings.ADMIN_PASSWORD_HASH:
        if not candidate:
            return False
        return verify_password(candidate, settings.ADMIN_PASSWORD_HASH)

    if settings.ADMIN_PASSWORD:
        if not candidate:
            return False
        return hmac.compare_digest(
            candidate.encode("utf-8"),
            settings.ADMIN_PASSWORD.encode("utf-8")
        )

    raise Misconfigured("Admin access is not configured")


def _sign(expires_at: int) -> str:
    return hmac.new(
        settings.SECRET_KEY.encode("utf-8"),
        f"admin:{expires_at}".encode("utf-8"),
        hashlib.sha256
    ).hexdigest()


def issue_admin_token(now: Optional[float] = None) -> str:
    """Create a signed moderator token valid for ADMIN_TOKEN_MAX_AGE seconds."""
    issued = int(now if now is not None else time.time())
    expires_at = issued + settings.ADMIN_TOKEN_MAX_AGE
    return f"{expires_at}.{_sign(expires_at)}"


def verify_admin_token(token: Optional[str], now: Optional[float] = None) -> bool:
    """Check a token's signature and expiry."""
    if not token or "." not in token:
        return False

    expires_part, signature = token.split(".", 1)
    try:
        expires_at = int(expires_part)
    except ValueError:
        return False

    if not hmac.compare_digest(signature.encode("utf-8"), _sign(expires_at).encode("utf-8")):
        logger.warning("Rejected admin token with bad signature")
        return False

    current = now if now is not None else time.time()
    return current < expires_at
