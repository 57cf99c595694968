"""Authentication dependencies for FastAPI routes."""
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.deps import get_app_settings
from core.auth import ADMIN_ROLE, decode_access_token
from core.config import Settings
from core.exceptions import AuthorizationError, TokenError

security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_app_settings),
) -> Dict[str, Any]:
    """
    Validate the bearer token and return its claims.

    Raises TokenError (401) if the token is missing, invalid or expired.
    """
    if credentials is None:
        raise TokenError("Token de autenticación requerido")

    payload = decode_access_token(settings, credentials.credentials)
    if payload is None:
        raise TokenError()

    return payload


def get_current_admin(claims: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    """Require the token to carry the admin role."""
    if claims.get("rol") != ADMIN_ROLE:
        raise AuthorizationError()
    return claims


__all__ = ["security", "get_current_user", "get_current_admin"]
