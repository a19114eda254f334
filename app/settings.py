"""Application settings with production hardening."""
from pydantic_settings import BaseSettings
from pydantic import field_validator, model_validator
from typing import Literal, Optional
import secrets

# Generated once per process; in prod an explicit SECRET_KEY is required
_DEV_SECRET_KEY = secrets.token_urlsafe(32)


class Settings(BaseSettings):
    """Application configuration from environment variables."""

    # Environment
    ENV: Literal["dev", "staging", "prod"] = "dev"

    # Database (optional: unset means the directory store is soft-disabled)
    DATABASE_URL: Optional[str] = None
    DATABASE_CONNECT_TIMEOUT: int = 10  # seconds

    # Security
    SECRET_KEY: str = _DEV_SECRET_KEY
    ADMIN_TOKEN_MAX_AGE: int = 60 * 60  # 1 hour

    # Moderator credential (plain shared secret, or an Argon2 hash of it)
    ADMIN_PASSWORD: Optional[str] = None
    ADMIN_PASSWORD_HASH: Optional[str] = None

    # Submission cooldown
    SUBMISSION_COOLDOWN_SECONDS: int = 5 * 60
    SUBMISSION_LIMITER_MAX_CLIENTS: int = 10000

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_LOGIN_REQUESTS: int = 5  # requests per window
    RATE_LIMIT_LOGIN_WINDOW: int = 60  # seconds

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"  # JSON for production
    LOG_FILE: Optional[str] = None  # Optional file logging

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    @model_validator(mode='after')
    def validate_production_settings(self):
        """Validate production-specific requirements."""
        # In production, require explicit SECRET_KEY
        if self.ENV == "prod":
            if self.SECRET_KEY == _DEV_SECRET_KEY or len(self.SECRET_KEY) < 32:
                raise ValueError(
                    "SECRET_KEY must be explicitly set in production (min 32 characters). "
                    "Generate with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
                )

        return self

    @field_validator('DATABASE_URL')
    @classmethod
    def normalize_database_url(cls, v: Optional[str]) -> Optional[str]:
        """Treat a blank DATABASE_URL as not configured."""
        if v is None or not v.strip():
            return None
        v = v.strip()
        # Hosted Postgres providers still hand out the legacy scheme
        if v.startswith("postgres://"):
            v = "postgresql://" + v[len("postgres://"):]
        return v

    @field_validator('SUBMISSION_COOLDOWN_SECONDS', 'SUBMISSION_LIMITER_MAX_CLIENTS')
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @property
    def persistence_enabled(self) -> bool:
        """True when a database is configured."""
        return self.DATABASE_URL is not None

    @property
    def admin_secret_configured(self) -> bool:
        """True when a moderator credential is configured."""
        return bool(self.ADMIN_PASSWORD or self.ADMIN_PASSWORD_HASH)

    def validate_required_for_env(self) -> None:
        """
        Validate all required settings for the current environment.

        Raises:
            ValueError: If required settings are missing
        """
        errors = []

        # Production requirements
        if self.ENV == "prod":
            if not self.SECRET_KEY or len(self.SECRET_KEY) < 32:
                errors.append("SECRET_KEY must be set with min 32 characters in production")

        if self.ADMIN_PASSWORD and self.ADMIN_PASSWORD_HASH:
            errors.append("Set only one of ADMIN_PASSWORD and ADMIN_PASSWORD_HASH")

        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton settings instance
settings = Settings()
