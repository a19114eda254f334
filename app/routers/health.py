"""Health check endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, status, Response
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db import get_db

router = APIRouter(tags=["health"])

REQUIRED_TABLES = ("tools", "submissions", "ratings")


@router.get("/health")
async def health():
    """
    Basic health check - process is alive.

    Returns 200 if the application is running.
    Used by load balancers and monitoring systems.
    """
    return {"status": "healthy"}


@router.get("/ready")
async def ready(response: Response, db: Optional[Session] = Depends(get_db)):
    """
    Readiness check - verifies database connectivity and required tables.

    Returns 200 if ready to accept traffic, 503 if not ready. With no
    database configured the service runs soft-disabled and reports ready.
    """
    if db is None:
        return {
            "status": "ready",
            "persistence": "disabled",
            "message": "DATABASE_URL not configured; listings are empty and writes fail"
        }

    try:
        db.execute(text("SELECT 1"))
        existing_tables = set(inspect(db.get_bind()).get_table_names())
    except SQLAlchemyError as e:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {
            "status": "not_ready",
            "database": "disconnected",
            "error": str(e),
            "message": "Database connection failed"
        }

    missing_tables = sorted(set(REQUIRED_TABLES) - existing_tables)

    if missing_tables:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {
            "status": "not_ready",
            "database": "connected",
            "tables": "missing",
            "missing_tables": missing_tables,
            "message": "Run migrations: alembic upgrade head"
        }

    return {
        "status": "ready",
        "database": "connected",
        "tables": "present"
    }
