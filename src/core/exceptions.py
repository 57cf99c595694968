"""Custom exceptions for the salon backend.

Every error carries the Spanish message sent to clients in the
``{"success": false, "mensaje": ...}`` envelope.
"""
from __future__ import annotations


class SalonApiError(Exception):
    """Base exception for all application errors."""

    status_code = 500
    default_message = "Error interno del servidor"

    def __init__(self, mensaje: str | None = None) -> None:
        self.mensaje = mensaje or self.default_message
        super().__init__(self.mensaje)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(SalonApiError):
    """Raised when required configuration is missing or invalid."""

    pass


# =============================================================================
# Request Errors
# =============================================================================


class ValidationError(SalonApiError):
    """Raised when request data is missing or malformed."""

    status_code = 400
    default_message = "Datos de la solicitud inválidos"


class PayloadTooLargeError(ValidationError):
    """Raised when a request body exceeds the configured ceiling."""

    status_code = 413
    default_message = "La solicitud excede el tamaño máximo permitido"


class NotFoundError(SalonApiError):
    """Raised when a requested record does not exist."""

    status_code = 404
    default_message = "Recurso no encontrado"


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthenticationError(SalonApiError):
    """Raised when credentials or tokens are rejected."""

    status_code = 401
    default_message = "Credenciales incorrectas"


class TokenError(AuthenticationError):
    """Raised when a bearer token is missing, malformed or expired."""

    default_message = "Token inválido o expirado"


class AuthorizationError(SalonApiError):
    """Raised when an authenticated identity lacks the required role."""

    status_code = 403
    default_message = "Acceso restringido a administradores"


# =============================================================================
# Database Errors
# =============================================================================


class DatabaseError(SalonApiError):
    """Base exception for database-related errors."""

    pass


class DatabaseUnavailableError(DatabaseError):
    """Raised when the database cannot be reached."""

    status_code = 503
    default_message = "Base de datos no disponible"


# =============================================================================
# Upload Errors
# =============================================================================


class UploadError(ValidationError):
    """Raised when an uploaded file is rejected."""

    default_message = "Archivo no permitido"


class StorageError(SalonApiError):
    """Raised when an accepted upload cannot be written to disk."""

    default_message = "No se pudo guardar el archivo"


__all__ = [
    "SalonApiError",
    "ConfigurationError",
    "ValidationError",
    "PayloadTooLargeError",
    "NotFoundError",
    "AuthenticationError",
    "TokenError",
    "AuthorizationError",
    "DatabaseError",
    "DatabaseUnavailableError",
    "UploadError",
    "StorageError",
]
