"""Admin authentication routes: login and token verification."""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.auth_deps import get_current_user
from api.deps import get_app_settings, get_raw_body
from core.auth import admin_profile, check_admin_credentials, create_admin_token
from core.config import Settings
from core.logging_config import get_logger

router = APIRouter()
LOGGER = get_logger(__name__)

MISSING_FIELDS_MESSAGE = "Email y contraseña son requeridos"
BAD_CREDENTIALS_MESSAGE = "Credenciales incorrectas"
INTERNAL_ERROR_MESSAGE = "Error interno del servidor"
LOGIN_OK_MESSAGE = "Login exitoso"


def _failure(status_code: int, mensaje: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "mensaje": mensaje})


def _field(body: Any, name: str) -> str:
    value = body.get(name) if isinstance(body, dict) else None
    return value if isinstance(value, str) else ""


@router.post("/admin-login", response_model=None)
async def admin_login(
    body: Any = Depends(get_raw_body),
    settings: Settings = Depends(get_app_settings),
) -> Dict[str, Any] | JSONResponse:
    """
    Authenticate the administrator against the configured credentials.

    Accepts JSON or URL-encoded ``email`` and ``password``, compared as sent
    (before sanitization). Returns a signed
    token valid for ``JWT_EXPIRE_HOURS`` hours.
    """
    try:
        email = _field(body, "email")
        password = _field(body, "password")
        if not email or not password:
            return _failure(400, MISSING_FIELDS_MESSAGE)

        if not check_admin_credentials(settings, email, password):
            LOGGER.warning(f"Failed admin login attempt for: {email!r}")
            return _failure(401, BAD_CREDENTIALS_MESSAGE)

        token = create_admin_token(settings, settings.admin_email)
        LOGGER.info(f"Admin logged in: {email!r}")

        return {
            "success": True,
            "mensaje": LOGIN_OK_MESSAGE,
            "token": token,
            "usuario": admin_profile(settings.admin_email),
        }
    except Exception:
        LOGGER.exception("Admin login failed")
        return _failure(500, INTERNAL_ERROR_MESSAGE)


@router.get("/verify")
async def verify_token(claims: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    """Return the identity carried by a valid bearer token."""
    return {
        "success": True,
        "usuario": {
            "id": claims.get("id"),
            "email": claims.get("email"),
            "rol": claims.get("rol"),
        },
        "expira": claims.get("exp"),
    }
