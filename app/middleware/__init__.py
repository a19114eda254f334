"""Middleware for production hardening."""
from .logging import RequestLoggingMiddleware, setup_logging
from .rate_limit import RateLimitMiddleware, SubmissionCooldown, get_client_ip

__all__ = [
    "RequestLoggingMiddleware",
    "setup_logging",
    "RateLimitMiddleware",
    "SubmissionCooldown",
    "get_client_ip",
]
