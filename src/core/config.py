"""Configuration management for the Salón Sandra Fajardo backend.

All configuration is loaded from environment variables and/or .env file.
Variable names follow the deployment environment (DB_HOST, JWT_SECRET,
NODE_ENV, ...), so the same .env works for every service of the stack.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

# Project root detection
PROJECT_ROOT = Path(__file__).resolve().parents[2]
ENV_FILE = PROJECT_ROOT / ".env"

DEFAULT_UPLOADS_DIR = PROJECT_ROOT / "uploads"

# Known weak fallback, kept so existing deployments keep validating tokens.
DEFAULT_JWT_SECRET = "salon_sandra_secret_key"

MAX_BODY_BYTES = 10 * 1024 * 1024


class Settings(BaseSettings):
    """
    Runtime configuration powered by environment variables and .env overrides.

    All settings can be configured via:
    1. Environment variables (highest priority)
    2. .env file in project root (loaded automatically)
    3. Default values (lowest priority)
    """

    model_config = SettingsConfigDict(
        env_file=ENV_FILE if ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    # -------------------------------------------------------------------------
    # Database
    # -------------------------------------------------------------------------
    db_host: str = Field(default="localhost", alias="DB_HOST")
    db_port: int = Field(default=3306, alias="DB_PORT", ge=1, le=65535)
    db_user: str = Field(default="root", alias="DB_USER")
    db_password: str = Field(default="", alias="DB_PASSWORD")
    db_name: str = Field(default="salon_sandra", alias="DB_NAME")
    database_url: Optional[str] = Field(
        default=None,
        alias="DATABASE_URL",
        description="Full SQLAlchemy URL. Overrides the DB_* parts when set.",
    )
    db_pool_size: int = Field(default=10, alias="DB_POOL_SIZE", ge=1)
    db_pool_timeout: int = Field(
        default=30,
        alias="DB_POOL_TIMEOUT",
        ge=1,
        description="Seconds a request waits for a free pooled connection.",
    )

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------
    jwt_secret: Optional[str] = Field(default=None, alias="JWT_SECRET")
    jwt_expire_hours: int = Field(default=24, alias="JWT_EXPIRE_HOURS", ge=1)
    admin_email: str = Field(default="admin@nuevatienda.com", alias="ADMIN_EMAIL")
    admin_password: str = Field(default="password", alias="ADMIN_PASSWORD")

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=4000, alias="PORT", ge=1, le=65535)
    allowed_origins: str = Field(default="*", alias="ALLOWED_ORIGINS")
    max_body_bytes: int = Field(default=MAX_BODY_BYTES, alias="MAX_BODY_BYTES", ge=1)
    uploads_dir: Path = Field(default=DEFAULT_UPLOADS_DIR, alias="UPLOADS_DIR")

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------
    environment: str = Field(default="development", alias="NODE_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="text", alias="LOG_FORMAT")  # "text" or "json"
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Ensure log format is valid."""
        lower = v.lower()
        if lower not in {"text", "json"}:
            raise ValueError("log_format must be 'text' or 'json'")
        return lower

    @field_validator("environment")
    @classmethod
    def default_empty_environment(cls, v: str) -> str:
        return v or "development"

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def sqlalchemy_url(self) -> URL:
        """
        Build the SQLAlchemy URL for the pool.

        DATABASE_URL wins when present; otherwise the MySQL URL is assembled
        from the DB_* variables.
        """
        if self.database_url:
            return make_url(self.database_url)
        return URL.create(
            "mysql+pymysql",
            username=self.db_user,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )

    def get_jwt_secret(self) -> str:
        """Signing secret, falling back to the legacy default when unset."""
        return self.jwt_secret or DEFAULT_JWT_SECRET

    def is_default_jwt_secret(self) -> bool:
        return not self.jwt_secret

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS into a list for the CORS middleware."""
        origins = [o.strip() for o in self.allowed_origins.split(",") if o.strip()]
        return origins or ["*"]

    def describe(self) -> dict:
        """Non-secret view of the configuration, used by `cli info`."""
        url = self.sqlalchemy_url()
        return {
            "environment": self.environment,
            "host": self.host,
            "port": self.port,
            "database": url.render_as_string(hide_password=True),
            "db_pool_size": self.db_pool_size,
            "db_pool_timeout": self.db_pool_timeout,
            "jwt_expire_hours": self.jwt_expire_hours,
            "jwt_default_secret": self.is_default_jwt_secret(),
            "allowed_origins": self.get_allowed_origins(),
            "max_body_bytes": self.max_body_bytes,
            "uploads_dir": str(self.uploads_dir),
            "log_level": self.log_level,
            "log_format": self.log_format,
            "log_file": self.log_file,
        }


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once and cached. To reload settings,
    call `get_settings.cache_clear()` first.
    """
    return Settings()


def reload_settings() -> Settings:
    """
    Clear settings cache and reload from environment.

    Useful for testing or after modifying .env file.
    """
    get_settings.cache_clear()
    return get_settings()
