"""Request-scoped dependencies: settings, database connection and parsed body."""
from __future__ import annotations

from typing import Any, Generator

from fastapi import Request
from sqlalchemy.engine import Connection, Engine

from core.config import Settings


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was created with."""
    return request.app.state.settings


def get_pool(request: Request) -> Engine:
    return request.app.state.db


def get_db(request: Request) -> Generator[Connection, None, None]:
    """
    FastAPI dependency that checks a connection out of the shared pool.

    The connection goes back to the pool when the request finishes; any
    open transaction is rolled back.

    Yields:
        SQLAlchemy Connection instance.
    """
    with get_pool(request).connect() as conn:
        yield conn


def get_body(request: Request) -> Any:
    """Parsed and sanitized request body set by BodyParserMiddleware."""
    return getattr(request.state, "body", {})


def get_raw_body(request: Request) -> Any:
    """Parsed body exactly as the client sent it; used where values must match byte for byte."""
    return getattr(request.state, "raw_body", {})


__all__ = ["get_app_settings", "get_pool", "get_db", "get_body", "get_raw_body"]
