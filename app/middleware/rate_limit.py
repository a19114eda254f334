"""Rate limiting: submission cooldown store and endpoint throttling middleware."""
import math
import time
import logging
import threading
from typing import Callable, Dict, Optional, Tuple
from collections import OrderedDict, defaultdict
from dataclasses import dataclass, field

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.settings import settings


UNKNOWN_CLIENT = "unknown"


def get_client_ip(request: Request) -> str:
    """
    Derive the client identifier for a request.

    Uses the first X-Forwarded-For entry, then X-Real-IP. Requests with
    neither header share the single "unknown" bucket.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    return UNKNOWN_CLIENT


class SubmissionCooldown:
    """Per-client cooldown between accepted submissions.

    Remembers the time of each client's last accepted submission. The map is
    bounded: expired entries are purged lazily and the oldest entries are
    evicted once ``max_clients`` is exceeded. Safe to share across threads.
    """

    def __init__(
        self,
        cooldown_seconds: float = 300,
        max_clients: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.cooldown_seconds = cooldown_seconds
        self.max_clients = max_clients
        self._clock = clock
        # client_id -> timestamp of last accepted submission, oldest first
        self._last_accepted: "OrderedDict[str, float]" = OrderedDict()
        self._lock = threading.Lock()
        self.logger = logging.getLogger("app.ratelimit")

    def allow(self, client_id: str) -> bool:
        """
        Record a submission attempt for client_id.

        Returns:
            True (and stores the current time) if the client has no prior
            accepted submission or the cooldown has elapsed; False otherwise,
            leaving the stored time untouched.
        """
        with self._lock:
            now = self._clock()
            self._purge_expired(now)

            last = self._last_accepted.get(client_id)
            if last is not None and now - last < self.cooldown_seconds:
                return False

            self._last_accepted[client_id] = now
            self._last_accepted.move_to_end(client_id)

            while len(self._last_accepted) > self.max_clients:
                evicted, _ = self._last_accepted.popitem(last=False)
                self.logger.debug(f"Evicted cooldown entry for {evicted}")

            return True

    def retry_after(self, client_id: str) -> int:
        """Seconds until client_id may submit again (0 if allowed now)."""
        with self._lock:
            last = self._last_accepted.get(client_id)
            if last is None:
                return 0
            remaining = self.cooldown_seconds - (self._clock() - last)
            return max(0, math.ceil(remaining))

    def _purge_expired(self, now: float) -> None:
        # Entries are kept in acceptance order, so expired ones are at the front
        while self._last_accepted:
            client_id, ts = next(iter(self._last_accepted.items()))
            if now - ts < self.cooldown_seconds:
                break
            del self._last_accepted[client_id]

    def __len__(self) -> int:
        return len(self._last_accepted)

    def reset(self):
        """Forget all clients (for testing)."""
        with self._lock:
            self._last_accepted.clear()


@dataclass
class RateLimitBucket:
    """Request timestamps for one client on one endpoint."""
    requests: list = field(default_factory=list)


class RateLimiter:
    """In-memory rate limiter using sliding window."""

    def __init__(self):
        # Store: {endpoint: {client_ip: RateLimitBucket}}
        self.buckets: Dict[str, Dict[str, RateLimitBucket]] = defaultdict(
            lambda: defaultdict(RateLimitBucket)
        )
        self._lock = threading.Lock()
        self.logger = logging.getLogger("app.ratelimit")

    def is_allowed(
        self,
        client_ip: str,
        endpoint: str,
        max_requests: int,
        window_seconds: int
    ) -> Tuple[bool, int]:
        """
        Check if request is allowed under rate limit.

        Args:
            client_ip: Client IP address
            endpoint: API endpoint identifier
            max_requests: Maximum requests allowed in window
            window_seconds: Time window in seconds

        Returns:
            Tuple of (is_allowed, retry_after_seconds)
        """
        with self._lock:
            now = time.time()
            bucket = self.buckets[endpoint][client_ip]

            # Remove expired timestamps
            bucket.requests = [
                ts for ts in bucket.requests
                if now - ts < window_seconds
            ]

            # Check if under limit
            if len(bucket.requests) < max_requests:
                bucket.requests.append(now)
                return True, 0

            # Calculate retry after
            oldest_request = min(bucket.requests)
            retry_after = int(window_seconds - (now - oldest_request)) + 1

            return False, retry_after

    def reset(self):
        """Reset all rate limit buckets (for testing)."""
        with self._lock:
            self.buckets.clear()


# Global rate limiter instance for endpoint throttling
rate_limiter = RateLimiter()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware to apply rate limiting to specific endpoints."""

    def __init__(self, app: ASGIApp, limiter: Optional[RateLimiter] = None):
        super().__init__(app)
        self.logger = logging.getLogger("app.ratelimit")
        self.limiter = limiter or rate_limiter

        # Define rate limit rules (POST only)
        self.rate_limits = {
            "/api/admin/session": (
                settings.RATE_LIMIT_LOGIN_REQUESTS,
                settings.RATE_LIMIT_LOGIN_WINDOW
            ),
        }

    async def dispatch(self, request: Request, call_next):
        """Check rate limits before processing request."""
        # Skip if rate limiting disabled
        if not settings.RATE_LIMIT_ENABLED:
            return await call_next(request)

        path = request.url.path
        if request.method == "POST" and path in self.rate_limits:
            client_ip = get_client_ip(request)
            max_requests, window_seconds = self.rate_limits[path]

            # Check rate limit
            allowed, retry_after = self.limiter.is_allowed(
                client_ip=client_ip,
                endpoint=path,
                max_requests=max_requests,
                window_seconds=window_seconds
            )

            if not allowed:
                self.logger.warning(
                    f"Rate limit exceeded for {client_ip} on {path}",
                    extra={
                        'request_id': getattr(request.state, 'request_id', None),
                        'extra_fields': {
                            'client_ip': client_ip,
                            'endpoint': path,
                            'retry_after': retry_after
                        }
                    }
                )

                # Return 429 Too Many Requests
                return Response(
                    content=f"Rate limit exceeded. Try again in {retry_after} seconds.",
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    headers={"Retry-After": str(retry_after)}
                )

        # Process request
        return await call_next(request)
