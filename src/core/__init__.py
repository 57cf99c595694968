"""Core module exports."""
from __future__ import annotations

from core.config import Settings, get_settings, reload_settings
from core.db import create_pool, dispose_pool, probe_database
from core.exceptions import (
    # Base
    SalonApiError,
    # Configuration
    ConfigurationError,
    # Requests
    ValidationError,
    PayloadTooLargeError,
    NotFoundError,
    UploadError,
    StorageError,
    # Auth
    AuthenticationError,
    TokenError,
    AuthorizationError,
    # Database
    DatabaseError,
    DatabaseUnavailableError,
)
from core.logging_config import setup_logging, get_logger, JSONFormatter

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "reload_settings",
    # Database
    "create_pool",
    "dispose_pool",
    "probe_database",
    # Exceptions
    "SalonApiError",
    "ConfigurationError",
    "ValidationError",
    "PayloadTooLargeError",
    "NotFoundError",
    "UploadError",
    "StorageError",
    "AuthenticationError",
    "TokenError",
    "AuthorizationError",
    "DatabaseError",
    "DatabaseUnavailableError",
    # Logging
    "setup_logging",
    "get_logger",
    "JSONFormatter",
]
