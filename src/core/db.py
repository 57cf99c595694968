"""Database connection pool and startup probe."""
from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError, NoSuchModuleError, SQLAlchemyError
from sqlalchemy.pool import NullPool

from .config import Settings
from .exceptions import ConfigurationError
from .logging_config import get_logger

LOGGER = get_logger(__name__)


def create_pool(settings: Settings) -> Engine:
    """
    Create the shared connection pool.

    MySQL pools hold at most ``db_pool_size`` connections with no overflow;
    callers beyond the limit wait up to ``db_pool_timeout`` seconds for a
    connection to be returned. No connection is opened here.

    Raises:
        ConfigurationError: If the database URL or driver is unusable.
    """
    url = settings.sqlalchemy_url()

    try:
        if url.get_backend_name() == "sqlite":
            # SQLite (tests, local tooling) - no pooling
            return create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=NullPool,
            )

        return create_engine(
            url,
            pool_size=settings.db_pool_size,
            max_overflow=0,
            pool_timeout=settings.db_pool_timeout,
            pool_pre_ping=True,  # Verify connection before usage
        )
    except (ArgumentError, NoSuchModuleError) as e:
        raise ConfigurationError(f"Invalid database configuration: {e}") from e


def probe_database(engine: Engine) -> Dict[str, Any]:
    """
    Check out one connection, run ``SELECT 1`` and return it to the pool.

    Never raises: the result dict carries the outcome so startup can go on
    without a database.

    Returns:
        Dict with ``status`` ("ok" or "error"), the password-less URL and
        the error message when the probe failed.
    """
    result: Dict[str, Any] = {
        "status": "ok",
        "database_url": engine.url.render_as_string(hide_password=True),
        "error": None,
    }

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        result["status"] = "error"
        result["error"] = str(e)

    return result


def dispose_pool(engine: Optional[Engine]) -> None:
    """Close every pooled connection."""
    if engine is not None:
        engine.dispose()


__all__ = ["create_pool", "probe_database", "dispose_pool"]
