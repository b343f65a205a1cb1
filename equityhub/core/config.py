"""
Application configuration module.

Loads settings from environment variables (or .env file) using pydantic-settings.
Secrets (DB credentials, JWT signing key) come from the environment — never
hardcoded in production.
"""

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Signing key for local SQLite runs only; rejected in PostgreSQL mode.
DEV_JWT_SECRET_KEY = "equityhub-dev-only-secret"


class Settings(BaseSettings):
    """
    Central configuration for the EquityHub cap-table API.

    Environment variables are loaded automatically from .env if present.
    """

    PROJECT_NAME: str = "EquityHub Cap Table API"
    API_PREFIX: str = "/api"

    # ── SQLite mode (no external DB required) ──
    USE_SQLITE: bool = False

    # ── PostgreSQL connection parameters ──
    # Empty defaults so USE_SQLITE=true works without dummy PG variables;
    # the validator below restores fail-fast behaviour in PostgreSQL mode.
    POSTGRES_USER: str = ""
    POSTGRES_PASSWORD: str = ""
    POSTGRES_SERVER: str = ""
    POSTGRES_DB: str = ""
    POSTGRES_PORT: int = 5432

    @model_validator(mode="after")
    def _require_secrets_unless_sqlite(self) -> "Settings":
        """Fail fast if PostgreSQL credentials or the JWT key are missing in production mode."""
        if not self.USE_SQLITE:
            missing = [
                name
                for name in (
                    "POSTGRES_USER",
                    "POSTGRES_PASSWORD",
                    "POSTGRES_SERVER",
                    "POSTGRES_DB",
                )
                if not getattr(self, name)
            ]
            if self.JWT_SECRET_KEY in ("", DEV_JWT_SECRET_KEY):
                missing.append("JWT_SECRET_KEY")
            if missing:
                raise ValueError(
                    f"Production (PostgreSQL) mode requires these environment variables: "
                    f"{', '.join(missing)}. Set them in .env or the environment, "
                    f"or run with USE_SQLITE=true for an in-memory database."
                )
        return self

    # ── Connection pool tuning ──
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30  # seconds to wait for a pooled connection
    DB_POOL_RECYCLE: int = 1800  # seconds before a connection is recycled
    DB_CONNECT_RETRIES: int = 5

    # ── Circuit breaker ──
    CB_FAILURE_THRESHOLD: int = 5
    CB_RECOVERY_TIMEOUT: float = 30.0

    # ── Authentication ──
    JWT_SECRET_KEY: str = DEV_JWT_SECRET_KEY
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    PASSWORD_MIN_LENGTH: int = 8

    # ── Company search ──
    SEARCH_DEFAULT_PAGE_SIZE: int = 10
    SEARCH_MAX_PAGE_SIZE: int = 100

    # ── Logging ──
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True
    LOG_FILE_MAX_BYTES: int = 10 * 1024 * 1024
    LOG_FILE_BACKUP_COUNT: int = 5

    # ── CORS ──
    # Comma-separated list of allowed origins. "*" in dev, restrict in prod.
    CORS_ORIGINS: str = "*"

    # ── Misc ──
    DEBUG: bool = False

    @property
    def DATABASE_URL(self) -> str:
        """Construct the async database DSN.

        Returns an in-memory SQLite URL when ``USE_SQLITE`` is enabled,
        otherwise a PostgreSQL DSN for asyncpg.
        """
        if self.USE_SQLITE:
            return "sqlite+aiosqlite://"
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
