"""Structured request logging for the directory API."""
import logging
import json
import time
import uuid
from typing import Any, Callable, Dict
from datetime import datetime, timezone

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.middleware.rate_limit import get_client_ip
from app.settings import settings

REQUEST_ID_HEADER = "X-Request-ID"

# Probe endpoints are logged at DEBUG to keep request logs readable
QUIET_PATHS = {"/health", "/ready"}

# Request lines come from RequestLoggingMiddleware instead
QUIET_LOGGERS = ("uvicorn.access",)


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if getattr(record, 'request_id', None):
            log_data['request_id'] = record.request_id

        # Structured context passed as extra={'extra_fields': {...}}
        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        # UUIDs and datetimes in extra_fields
        return json.dumps(log_data, default=str)


def _route_template(request: Request) -> str:
    """Path template of the matched route, e.g. /api/tools/{tool_id}."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with a request id, client, route and duration."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.logger = logging.getLogger("app.requests")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Keep an upstream proxy's id so log lines can be correlated
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        level = logging.DEBUG if request.url.path in QUIET_PATHS else logging.INFO
        fields: Dict[str, Any] = {
            'method': request.method,
            'path': request.url.path,
            'query_params': str(request.query_params),
            'client_ip': get_client_ip(request),
        }
        extra = {'request_id': request_id, 'extra_fields': fields}

        self.logger.log(level, f"{request.method} {request.url.path} started", extra=extra)
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            fields['duration_ms'] = round((time.perf_counter() - start_time) * 1000, 2)
            fields['error'] = str(e)
            self.logger.error(
                f"{request.method} {request.url.path} failed: {e}",
                extra=extra,
                exc_info=True
            )
            raise

        fields['route'] = _route_template(request)
        fields['status_code'] = response.status_code
        fields['duration_ms'] = round((time.perf_counter() - start_time) * 1000, 2)

        # Client errors are routine (validation, cooldown); server errors are not
        if response.status_code >= 500:
            level = logging.ERROR
        self.logger.log(
            level,
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra=extra
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def setup_logging():
    """Configure the root logger from LOG_LEVEL, LOG_FORMAT and LOG_FILE."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    if settings.LOG_FORMAT == "json":
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(
            logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        )
    root_logger.addHandler(console_handler)

    # File output is always JSON
    if settings.LOG_FILE:
        file_handler = logging.FileHandler(settings.LOG_FILE)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info(f"Logging configured: level={settings.LOG_LEVEL}, format={settings.LOG_FORMAT}")
