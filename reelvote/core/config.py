"""Application configuration."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Optional, Union

from reelvote.core.constants import ACCESS_TOKEN_EXPIRE_MINUTES as DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES

DEFAULT_SECRET_KEY = "change-me-reelvote-secret"
DEFAULT_ADMIN_PASSWORD = "adminpass"
DEV_DATABASE_URL = "sqlite:///./reelvote.db"


class Settings(BaseSettings):
    """Settings for the backing service and the client core, read from env and ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # Database: a full URL wins over the POSTGRES_* parts
    DATABASE_URL: Optional[str] = None
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_HOST: Optional[str] = None
    POSTGRES_PORT: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    DB_POOL_SIZE: int = 15
    DB_MAX_OVERFLOW: int = 25

    # Organizer session
    SECRET_KEY: str = DEFAULT_SECRET_KEY
    ADMIN_PASSWORD: str = DEFAULT_ADMIN_PASSWORD
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES

    # Comma-separated string or list
    CORS_ORIGINS: Union[list, str] = ["*"]

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    APP_TITLE: str = "Reel Vote"
    APP_DESCRIPTION: str = "Live audience and judge voting for reel screenings"
    APP_VERSION: str = "1.0.0"

    ENVIRONMENT: str = "development"  # development, staging, production
    LOG_LEVEL: str = "INFO"

    # Results stream (SSE) refresh interval in seconds
    SSE_RESULTS_INTERVAL: int = 3

    # Final score policy applied when an aggregate is refreshed: balanced, judge_weighted
    SCORING_POLICY: str = "balanced"

    @field_validator('SCORING_POLICY')
    @classmethod
    def validate_scoring_policy(cls, v: str) -> str:
        from reelvote.core.scoring import SCORING_POLICIES

        if v not in SCORING_POLICIES:
            raise ValueError(
                f"Unknown SCORING_POLICY '{v}' (expected one of: {', '.join(sorted(SCORING_POLICIES))})"
            )
        return v

    # Client core
    API_BASE_URL: str = "http://localhost:8000/api/v1"
    REALTIME_URL: str = "ws://localhost:8000/api/v1/realtime"
    CLIENT_STORAGE_PATH: str = "./.reelvote/storage.json"
    TOKEN_LOOKUP_TIMEOUT: float = 8.0  # Seconds before a token lookup fails closed
    STATE_REQUEST_DELAY: float = 0.5  # Lets the control panel finish subscribing first
    RECONNECT_DELAY: float = 1.0

    def get_database_url(self) -> str:
        """
        Resolve the database URL.

        ``DATABASE_URL`` first (``postgres://`` is rewritten for SQLAlchemy), then
        the ``POSTGRES_*`` parts. Development falls back to a local SQLite file;
        any other environment without a database is a configuration error.
        """
        if self.DATABASE_URL:
            if self.DATABASE_URL.startswith("postgres://"):
                return "postgresql://" + self.DATABASE_URL[len("postgres://"):]
            return self.DATABASE_URL

        parts = (self.POSTGRES_USER, self.POSTGRES_PASSWORD, self.POSTGRES_HOST, self.POSTGRES_DB)
        if all(parts):
            return (
                f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
                f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT or '5432'}/{self.POSTGRES_DB}"
            )

        if self.ENVIRONMENT == "development":
            return DEV_DATABASE_URL

        raise ValueError(
            "No database configured: set DATABASE_URL or "
            "POSTGRES_USER, POSTGRES_PASSWORD, POSTGRES_HOST and POSTGRES_DB"
        )

    def validate_production_config(self) -> List[str]:
        """
        Check production-critical settings.

        Returns:
            Advisory warnings for the caller to log

        Raises:
            ValueError: one or more settings are unsafe for production
        """
        if self.ENVIRONMENT != "production":
            return []

        errors = []
        if self.SECRET_KEY == DEFAULT_SECRET_KEY:
            errors.append("SECRET_KEY still has its default value")
        if self.ADMIN_PASSWORD == DEFAULT_ADMIN_PASSWORD:
            errors.append("ADMIN_PASSWORD still has its default value")
        if self.CORS_ORIGINS == ["*"]:
            errors.append("CORS_ORIGINS must list the allowed origins")
        if errors:
            raise ValueError("Invalid production configuration: " + "; ".join(errors))

        warnings = []
        if not self.ADMIN_PASSWORD.startswith("$argon2"):
            warnings.append("ADMIN_PASSWORD is plaintext; store an argon2 hash from get_password_hash()")
        return warnings


settings = Settings()
