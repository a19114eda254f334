"""Application startup validation and initialization."""
import logging
from sqlalchemy import inspect, text

from app.settings import settings
from app import db as database

logger = logging.getLogger(__name__)

REQUIRED_TABLES = ['tools', 'submissions', 'ratings']


def validate_settings() -> None:
    """
    Validate all required settings at startup.

    Raises:
        ValueError: If required settings are missing or invalid
    """
    logger.info(f"Validating settings for ENV={settings.ENV}")

    settings.validate_required_for_env()

    if not settings.admin_secret_configured:
        logger.warning(
            "No ADMIN_PASSWORD or ADMIN_PASSWORD_HASH configured; "
            "admin endpoints will return 500"
        )

    logger.info("✓ Settings validation passed")


def validate_database() -> None:
    """
    Validate database connection and required tables.

    A missing DATABASE_URL is not an error: the directory runs soft-disabled.

    Raises:
        Exception: If database is unreachable or tables are missing
    """
    if database.engine is None:
        logger.warning("DATABASE_URL not configured; running with directory store disabled")
        return

    logger.info("Validating database connection...")

    try:
        # Test connection
        with database.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        logger.info("✓ Database connection successful")

        existing_tables = set(inspect(database.engine).get_table_names())
        missing_tables = set(REQUIRED_TABLES) - existing_tables

        if missing_tables:
            raise ValueError(
                f"Missing required database tables: {', '.join(sorted(missing_tables))}. "
                "Run migrations with: alembic upgrade head"
            )

        logger.info(f"✓ All required tables present: {', '.join(REQUIRED_TABLES)}")

    except Exception as e:
        logger.error(f"✗ Database validation failed: {e}")
        raise


def run_startup_validation() -> None:
    """
    Run all startup validations.

    This is called during application startup and will fail fast
    with clear error messages if any validation fails.

    Raises:
        Exception: If any validation fails
    """
    logger.info("=" * 60)
    logger.info("Starting application startup validation")
    logger.info("=" * 60)

    try:
        validate_settings()
        validate_database()

        logger.info("=" * 60)
        logger.info("✓ All startup validations passed")
        logger.info("=" * 60)

    except Exception as e:
        logger.error("=" * 60)
        logger.error("✗ Startup validation failed")
        logger.error("=" * 60)
        logger.error(f"Error: {e}")
        logger.error("")
        logger.error("Application will not start until this is resolved.")
        raise
