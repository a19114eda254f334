"""FastAPI application entrypoint with production hardening."""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from app.dependencies import directory_error_handler
from app.routers import health, admin, submissions, tools
from app.services.errors import DirectoryError
from app.settings import settings
from app.startup import run_startup_validation
from app.middleware import (
    RequestLoggingMiddleware,
    RateLimitMiddleware,
    SubmissionCooldown,
    setup_logging
)

# Configure logging before anything else
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan with startup validation.

    Validates settings and database connection before accepting traffic.
    Fails fast with clear error messages if configuration is invalid.
    """
    logger.info(f"Starting application in {settings.ENV} environment")

    try:
        run_startup_validation()
    except Exception as e:
        logger.error(f"Startup validation failed: {e}")
        logger.error("Application will not start")
        raise

    yield

    logger.info("Shutting down application")


app = FastAPI(
    title="Wellness Tool Directory",
    description="Community-submitted wellness tools with moderated publishing and ratings",
    version="0.1.0",
    lifespan=lifespan
)

# Service errors from dependencies use the same envelope as route bodies
app.add_exception_handler(DirectoryError, directory_error_handler)

# Submission cooldown store, scoped to this application instance
app.state.submission_limiter = SubmissionCooldown(
    cooldown_seconds=settings.SUBMISSION_COOLDOWN_SECONDS,
    max_clients=settings.SUBMISSION_LIMITER_MAX_CLIENTS,
)

# Add middleware (order matters - last added is executed first)
# 1. Rate Limiting
app.add_middleware(RateLimitMiddleware)

# 2. Logging (outermost - logs everything, including throttled requests)
app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(health.router)
app.include_router(submissions.router)
app.include_router(tools.router)
app.include_router(admin.router)
