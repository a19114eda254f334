"""Database engine, session factory and declarative base."""
import logging
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.settings import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(database_url: Optional[str]) -> Optional[Engine]:
    """
    Create the SQLAlchemy engine for the configured database.

    Returns None when no database is configured, which puts the directory
    into its soft-disabled mode.
    """
    if not database_url:
        return None

    connect_args = {}
    if database_url.startswith("postgresql"):
        connect_args["connect_timeout"] = settings.DATABASE_CONNECT_TIMEOUT
    elif database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    return create_engine(
        database_url,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine) if engine else None

if engine is None:
    logger.warning("DATABASE_URL not configured; directory store is disabled")


def get_db() -> Generator[Optional[Session], None, None]:
    """
    Yield a database session for the request.

    Yields None when persistence is not configured so that services can
    degrade to empty results instead of failing.
    """
    if SessionLocal is None:
        yield None
        return

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
